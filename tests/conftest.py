import pytest

from linkpreview import create_app
from linkpreview.services.meta_cache import FileStore, MetaCache
from linkpreview.services.workflow import Workflow


class FakeResponse:
    """Stands in for a streamed ``requests.Response``."""

    def __init__(self, body, status_code=200, chunk=7, error=None):
        self.body = body.encode("utf-8") if isinstance(body, str) else body
        self.status_code = status_code
        self.chunk = chunk
        self.error = error
        self.closed = False

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self.body), self.chunk):
            yield self.body[i:i + self.chunk]
        if self.error is not None:
            raise self.error

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


@pytest.fixture
def cache_dir(tmp_path):
    return tmp_path / "cache"


@pytest.fixture
def cache(cache_dir):
    return MetaCache(FileStore(cache_dir))


@pytest.fixture
def wf(cache):
    return Workflow(cache=cache)


@pytest.fixture
def app(cache_dir):
    return create_app(
        "config.Config",
        TESTING=True,
        CACHE_BACKEND="file",
        CACHE_DIR=str(cache_dir),
        CACHE_MAX_AGE_DAYS=90,
    )


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def fake_response():
    return FakeResponse
