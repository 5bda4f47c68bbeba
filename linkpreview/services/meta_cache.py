from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from pymongo.errors import PyMongoError

from ..metadata import HTMLMeta

logger = logging.getLogger(__name__)

MAX_CACHE_AGE = timedelta(days=90)


def cache_key(url: str) -> str:
    """md5 hex digest of the URL plus ``.json``; the same URL always maps to the same entry."""
    return hashlib.md5(url.encode("utf-8")).hexdigest() + ".json"


class FileStore:
    """One JSON file per key under ``directory``; age is taken from the file mtime."""

    def __init__(self, directory: str | os.PathLike) -> None:
        self.directory = Path(directory).expanduser()

    def _path(self, key: str) -> Path:
        return self.directory / key

    def exists(self, key: str) -> bool:
        return self._path(key).is_file()

    def read(self, key: str) -> bytes:
        return self._path(key).read_bytes()

    def write(self, key: str, data: bytes) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        # one temp file per writer, then an atomic rename
        with tempfile.NamedTemporaryFile(dir=self.directory, prefix=key, suffix=".tmp", delete=False) as tmp:
            tmp.write(data)
        try:
            os.replace(tmp.name, self._path(key))
        except OSError:
            os.unlink(tmp.name)
            raise

    def age(self, key: str) -> Optional[timedelta]:
        try:
            mtime = self._path(key).stat().st_mtime
        except FileNotFoundError:
            return None
        return datetime.now(timezone.utc) - datetime.fromtimestamp(mtime, timezone.utc)


class MongoStore:
    """Documents shaped ``{_id: key, value: <json>, updated_at: <utc datetime>}``."""

    def __init__(self, collection) -> None:
        self.collection = collection

    def exists(self, key: str) -> bool:
        return self.collection.count_documents({"_id": key}, limit=1) > 0

    def read(self, key: str) -> bytes:
        doc = self.collection.find_one({"_id": key}, {"value": 1})
        if doc is None:
            raise KeyError(key)
        return (doc.get("value") or "").encode("utf-8")

    def write(self, key: str, data: bytes) -> None:
        self.collection.update_one(
            {"_id": key},
            {"$set": {"value": data.decode("utf-8"), "updated_at": datetime.now(timezone.utc)}},
            upsert=True,
        )

    def age(self, key: str) -> Optional[timedelta]:
        doc = self.collection.find_one({"_id": key}, {"updated_at": 1})
        if not doc or not doc.get("updated_at"):
            return None
        updated = doc["updated_at"]
        # pymongo returns naive UTC datetimes unless tz_aware is set
        if updated.tzinfo is None:
            updated = updated.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc) - updated


# Failures of either backend; the cache degrades to a miss instead of failing a lookup
STORE_ERRORS = (OSError, PyMongoError)


class MetaCache:
    def __init__(self, backend, max_age: timedelta = MAX_CACHE_AGE) -> None:
        self.backend = backend
        self.max_age = max_age

    def exists(self, key: str) -> bool:
        try:
            return self.backend.exists(key)
        except STORE_ERRORS as e:
            logger.warning("cache lookup failed for %s: %s", key, e)
            return False

    def load(self, key: str) -> Optional[HTMLMeta]:
        if not self.exists(key):
            return None
        try:
            data: Dict[str, Any] = json.loads(self.backend.read(key))
        except (*STORE_ERRORS, KeyError, ValueError) as e:
            logger.warning("unreadable cache entry %s: %s", key, e)
            return None
        if not isinstance(data, dict):
            logger.warning("unexpected cache entry %s: %r", key, type(data))
            return None
        return HTMLMeta.from_dict(data)

    def store(self, key: str, meta: HTMLMeta) -> bool:
        """Write ``meta`` under ``key``; returns False when the backend refused it."""
        try:
            self.backend.write(key, json.dumps(meta.to_dict(), ensure_ascii=False).encode("utf-8"))
        except STORE_ERRORS as e:
            logger.warning("could not store cache entry %s: %s", key, e)
            return False
        logger.debug("stored %s", key)
        return True

    def is_expired(self, key: str, max_age: Optional[timedelta] = None) -> bool:
        """True when the entry is missing, unreadable or older than ``max_age``."""
        try:
            age = self.backend.age(key)
        except STORE_ERRORS as e:
            logger.warning("cache age check failed for %s: %s", key, e)
            return True
        if age is None:
            return True
        return age > (max_age if max_age is not None else self.max_age)
