from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, Mapping, Optional

import requests
import urllib3
from urllib3.exceptions import InsecureRequestWarning

from ..extensions.mongo import get_cache_collection
from ..metadata import (
    USER_AGENT,
    HTMLMeta,
    MetaError,
    ValidationError,
    fetch_and_extract_metadata,
    normalize_url,
    validate,
)
from ..utils.text import clean_break, pure_title
from .feedback import Feedback
from .meta_cache import MAX_CACHE_AGE, FileStore, MetaCache, MongoStore, cache_key

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = "~/.cache/linkpreview"

HELP_ITEMS = (
    ("url help", "Query help"),
    ("url {url}", "Share the current URL"),
)
BAD_FORMAT = ("Invalid format", "Please try again")


@dataclass
class Workflow:
    """Per-invocation context: the cache plus how pages are fetched.

    Lookups of the same cache key are serialized, so a URL requested by
    several threads at once is fetched a single time.
    """

    cache: MetaCache
    verify_tls: bool = False
    timeout: Optional[float] = None
    user_agent: str = USER_AGENT
    session: Optional[requests.Session] = None
    _key_locks: Dict[str, threading.Lock] = field(default_factory=dict, init=False, repr=False)
    _locks_guard: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.verify_tls:
            urllib3.disable_warnings(InsecureRequestWarning)

    def key_lock(self, key: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = self._key_locks[key] = threading.Lock()
            return lock

    def fetch_meta(self, url: str) -> HTMLMeta:
        return fetch_and_extract_metadata(
            url,
            verify=self.verify_tls,
            timeout=self.timeout,
            user_agent=self.user_agent,
            session=self.session,
        )


def workflow_from_config(config: Mapping[str, Any]) -> Workflow:
    backend = (config.get("CACHE_BACKEND") or "file").lower()
    if backend == "mongo":
        if not config.get("MONGO_URI"):
            raise ValueError("CACHE_BACKEND=mongo requires MONGO_URI")
        collection = get_cache_collection(
            config["MONGO_URI"], config.get("MONGO_CACHE_COLLECTION") or "meta_cache"
        )
        store = MongoStore(collection)
    elif backend == "file":
        store = FileStore(config.get("CACHE_DIR") or DEFAULT_CACHE_DIR)
    else:
        raise ValueError(f"unknown CACHE_BACKEND {backend!r}")

    days = config.get("CACHE_MAX_AGE_DAYS")
    max_age = timedelta(days=float(days)) if days is not None else MAX_CACHE_AGE
    return Workflow(
        cache=MetaCache(store, max_age),
        verify_tls=bool(config.get("VERIFY_TLS", False)),
        timeout=config.get("FETCH_TIMEOUT"),
        user_agent=config.get("USER_AGENT") or USER_AGENT,
    )


def help_feedback() -> Feedback:
    fb = Feedback()
    for title, subtitle in HELP_ITEMS:
        fb.new_item(title, subtitle)
    return fb


def error_feedback(title: str, subtitle: str) -> Feedback:
    fb = Feedback()
    fb.new_item(title, subtitle)
    return fb


def lookup(wf: Workflow, link: str) -> HTMLMeta:
    """Cached metadata for ``link``, refetched once the entry is missing or expired.

    Raises ValidationError or TransportError; nothing is cached on failure.
    """
    url, err = normalize_url(link)
    if err:
        raise ValidationError(link, err)

    key = cache_key(url)
    with wf.key_lock(key):
        meta = wf.cache.load(key)
        if meta is not None and not wf.cache.is_expired(key):
            logger.debug("cache hit %s (%s)", key, url)
            return meta

        logger.debug("cache miss or expired %s (%s)", key, url)
        meta = wf.fetch_meta(url)
        # Written only after a fetch: the expiry window counts from the last
        # extraction, not the last lookup. A failed write still returns meta.
        wf.cache.store(key, meta)
        return meta


def parse(wf: Workflow, link: str) -> Feedback:
    try:
        meta = lookup(wf, link)
    except MetaError as e:
        logger.warning("lookup failed for %s: %s", link, e)
        return error_feedback("error", str(e))

    title = clean_break(pure_title(meta.title))
    description = clean_break(meta.description)

    fb = Feedback()
    item = fb.new_item(
        f"{title} [{meta.site_name}]",
        description,
        valid=True,
        arg=link,
        quicklookurl=link,
    )
    (
        item.var("url", link)
        .var("title", title)
        .var("description", description)
        .var("image", meta.image)
        .var("siteName", meta.site_name)
    )
    item.mod("ctrl", "Copy as Markdown")
    return fb


def run(wf: Workflow, query: Optional[str]) -> Feedback:
    query = query or ""
    if not query or query == "help":
        return help_feedback()
    try:
        validate(query)
    except ValidationError as e:
        logger.info("%s", e)
        return error_feedback(*BAD_FORMAT)
    return parse(wf, query)
