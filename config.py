import os


def _optional_float(name):
    value = os.getenv(name)
    return float(value) if value else None


class Config:
    # Cache: "file" keeps one <md5>.json per URL, "mongo" one document per URL
    CACHE_BACKEND = os.getenv("CACHE_BACKEND", "file")
    CACHE_DIR = os.getenv("CACHE_DIR") or os.getenv("alfred_workflow_cache") or "~/.cache/linkpreview"
    CACHE_MAX_AGE_DAYS = float(os.getenv("CACHE_MAX_AGE_DAYS", 90))
    MONGO_URI = os.getenv("MONGO_URI", "")
    MONGO_CACHE_COLLECTION = os.getenv("MONGO_CACHE_COLLECTION", "meta_cache")

    # Fetching. Certificate checks are off unless asked for.
    VERIFY_TLS = os.getenv("VERIFY_TLS", "false").lower() == "true"
    FETCH_TIMEOUT = _optional_float("FETCH_TIMEOUT")
    USER_AGENT = os.getenv("USER_AGENT", "")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

    # HTTP surface (main.py --serve)
    HOST = os.getenv("HOST", "127.0.0.1")
    PORT = int(os.getenv("PORT", "5050"))
    FLASK_DEBUG = bool(int(os.getenv("FLASK_DEBUG", "0")))
