from unittest.mock import patch

import requests

from linkpreview.services.workflow import Workflow


def test_health(client) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"ok": True}


def test_app_holds_workflow_context(app, cache_dir) -> None:
    wf = app.extensions["linkpreview"]
    assert isinstance(wf, Workflow)
    assert wf.cache.backend.directory == cache_dir


def test_help_listing(client) -> None:
    resp = client.get("/api/preview-url?q=help")
    assert resp.status_code == 200
    assert [i["title"] for i in resp.get_json()["items"]] == ["url help", "url {url}"]
    assert resp.headers["Cache-Control"].startswith("no-store")


def test_missing_query_shows_help(client) -> None:
    assert len(client.get("/api/preview-url").get_json()["items"]) == 2


def test_bad_format(client) -> None:
    items = client.get("/api/preview-url", query_string={"q": "not a url"}).get_json()["items"]
    assert items[0]["title"] == "Invalid format"


def test_preview(client, fake_response) -> None:
    html = '<head><title>Docs - Project</title><meta name="description" content="About it"></head>'
    with patch("linkpreview.metadata.requests.get", return_value=fake_response(html)):
        resp = client.get("/api/preview-url", query_string={"url": "docs.example.com"})

    (item,) = resp.get_json()["items"]
    assert item["title"] == "Docs [Project]"
    assert item["subtitle"] == "About it"
    assert item["variables"]["url"] == "docs.example.com"


def test_transport_error_is_an_item(client) -> None:
    with patch("linkpreview.metadata.requests.get", side_effect=requests.ConnectionError("refused")):
        resp = client.get("/api/preview-url", query_string={"q": "down.example.com"})
    assert resp.status_code == 200
    item = resp.get_json()["items"][0]
    assert item["title"] == "error"
    assert item["subtitle"] == "refused"
