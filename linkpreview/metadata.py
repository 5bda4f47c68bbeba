from __future__ import annotations

import codecs
import logging
import re
from collections import deque
from dataclasses import dataclass, asdict, fields
from html.parser import HTMLParser
from typing import Any, Dict, Iterable, Iterator, List, Mapping, NamedTuple, Optional, Tuple, Union
from urllib.parse import urlparse

import requests

from .utils.text import parse_site_name_from_title

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 11_2_1) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/89.0.4389.128 Safari/537.36"
)
HEADERS = {"User-Agent": USER_AGENT}
CHUNK_SIZE = 8192

URL_PATTERN = re.compile(
    r"^(((ht|f)tps?)://)?[\w-]+(\.[\w-]+)+([\w.,@?^=%&:/~+#-]*[\w@?^=%&/~+#-])?$",
    re.ASCII,
)

# (meta key, HTMLMeta field); a later match overwrites an earlier one
META_FIELDS = (
    ("description", "description"),
    ("og:title", "title"),
    ("og:description", "description"),
    ("og:image", "image"),
    ("og:site_name", "site_name"),
)


class MetaError(Exception):
    """Base class for link metadata lookup failures."""


class ValidationError(MetaError):
    def __init__(self, query: str, reason: str = "not a valid URL"):
        super().__init__(f"{reason}: {query!r}")
        self.query = query
        self.reason = reason


class TransportError(MetaError):
    def __init__(self, url: str, message: str):
        super().__init__(message)
        self.url = url


@dataclass
class HTMLMeta:
    title: str = ""
    description: str = ""
    image: str = ""
    site_name: str = ""

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "HTMLMeta":
        data = data or {}
        return cls(**{f.name: str(data.get(f.name) or "") for f in fields(cls)})


def is_url(query: str) -> bool:
    return bool(query) and URL_PATTERN.fullmatch(query) is not None


def validate(query: str) -> str:
    if not is_url(query):
        raise ValidationError(query)
    return query


def normalize_url(raw: str) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(url, None)`` with a scheme guaranteed, or ``(None, reason)``."""
    raw = (raw or "").strip()
    if not raw:
        return None, "empty URL"
    if not re.match(r"^[a-zA-Z][a-zA-Z0-9+.-]*://", raw):
        raw = "https://" + raw
    try:
        p = urlparse(raw)
    except ValueError:
        return None, "not a valid URL"
    if not p.scheme or not p.netloc:
        return None, "not a valid URL"
    return raw, None


def fetch(
    url: str,
    *,
    verify: bool = False,
    timeout: Optional[float] = None,
    user_agent: str = USER_AGENT,
    session: Optional[requests.Session] = None,
) -> requests.Response:
    """Issue a single streaming GET. The caller must close the response."""
    headers = {**HEADERS, "User-Agent": user_agent}
    client = session if session is not None else requests
    try:
        resp = client.get(url, headers=headers, verify=verify, timeout=timeout, stream=True)
    except requests.RequestException as e:
        raise TransportError(url, str(e)) from e
    logger.info("GET %s -> %s", url, resp.status_code)
    return resp


class HtmlEvent(NamedTuple):
    kind: str  # "start" | "end" | "text"
    tag: str = ""
    attrs: Tuple[Tuple[str, str], ...] = ()
    data: str = ""
    raw: str = ""  # source text of a tag


class _EventParser(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.events: deque = deque()
        self._text: list = []

    def flush_text(self) -> None:
        # adjacent data callbacks form one text token
        if self._text:
            self.events.append(HtmlEvent("text", data="".join(self._text)))
            self._text = []

    def handle_starttag(self, tag, attrs):
        self.flush_text()
        attrs = tuple((k, v or "") for k, v in attrs)
        self.events.append(HtmlEvent("start", tag, attrs, raw=self.get_starttag_text() or ""))

    def handle_startendtag(self, tag, attrs):
        self.handle_starttag(tag, attrs)

    def handle_endtag(self, tag):
        self.flush_text()
        self.events.append(HtmlEvent("end", tag, raw=f"</{tag}>"))

    def handle_comment(self, data):
        self.flush_text()

    def handle_data(self, data):
        self._text.append(data)


def iter_html_events(chunks: Iterable[Union[bytes, str]]) -> Iterator[HtmlEvent]:
    """Tokenize markup lazily, holding at most one chunk's worth of events.

    Bytes are decoded as UTF-8 with replacement characters.
    """
    parser = _EventParser()
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    for chunk in chunks:
        if not chunk:
            continue
        parser.feed(decoder.decode(chunk) if isinstance(chunk, bytes) else chunk)
        while parser.events:
            yield parser.events.popleft()
    parser.feed(decoder.decode(b"", final=True))
    parser.close()
    parser.flush_text()
    while parser.events:
        yield parser.events.popleft()


def meta_property(attrs: Iterable[Tuple[str, str]], prop: str) -> Tuple[str, bool]:
    """Return ``(content, matched)`` for a meta tag keyed by property or name."""
    content, ok = "", False
    for key, value in attrs:
        if key == "property" and value == prop:
            ok = True
        if key == "name" and value.lower() == prop:
            ok = True
        if key == "content":
            content = value
    return content, ok


def extract(chunks: Iterable[Union[bytes, str]]) -> HTMLMeta:
    """Scan the document head for title and description/Open Graph tags.

    Stops at ``<body>`` or end of input; truncated markup just yields a
    partially filled record. Everything up to ``</title>`` is title text,
    markup included. A missing site name is derived from the title once
    the scan is over.
    """
    meta = HTMLMeta()
    title_pending = False
    in_title = False
    title_parts: List[str] = []
    for event in iter_html_events(chunks):
        if in_title:
            if event.kind == "end" and event.tag == "title":
                in_title = False
                if title_parts:
                    meta.title = "".join(title_parts)
                    title_pending = False
            else:
                title_parts.append(event.data if event.kind == "text" else event.raw)
            continue

        if event.kind == "start":
            if event.tag == "body":
                break
            if event.tag == "title":
                title_pending = True
                in_title = True
                title_parts = []
            elif event.tag == "meta":
                for prop, name in META_FIELDS:
                    content, ok = meta_property(event.attrs, prop)
                    if ok:
                        logger.debug("meta %s=%r", prop, content)
                        setattr(meta, name, content)
        elif event.kind == "text" and title_pending:
            # <title></title>: the next text run stands in
            meta.title = event.data
            title_pending = False

    if in_title and title_parts:
        meta.title = "".join(title_parts)
    if not meta.site_name:
        meta.site_name = parse_site_name_from_title(meta.title)
    return meta


def fetch_and_extract_metadata(url: str, **fetch_opts: Any) -> HTMLMeta:
    resp = fetch(url, **fetch_opts)
    with resp:
        try:
            return extract(resp.iter_content(chunk_size=CHUNK_SIZE))
        except requests.RequestException as e:
            raise TransportError(url, str(e)) from e
