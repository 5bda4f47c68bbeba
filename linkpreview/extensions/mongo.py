from pymongo import MongoClient
from pymongo.errors import ConfigurationError

DEFAULT_DB = "linkpreview"


def get_cache_collection(uri: str, collection: str = "meta_cache", client_factory=MongoClient):
    """Open the cache collection on the database named in ``uri``.

    Falls back to the ``linkpreview`` database when the URI names none.
    """
    client = client_factory(uri)  # SRV or standard URI
    try:
        db = client.get_default_database()
    except ConfigurationError:
        db = None
    if db is None:
        db = client[DEFAULT_DB]
    return db[collection]
