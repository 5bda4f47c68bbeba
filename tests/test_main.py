import io
import json
from unittest.mock import patch

import main
from linkpreview.services.feedback import Feedback, Item


def test_cli_help(capsys) -> None:
    assert main.run(["help"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert [i["title"] for i in out["items"]] == ["url help", "url {url}"]


def test_cli_without_query_shows_help(capsys) -> None:
    main.run([])
    assert len(json.loads(capsys.readouterr().out)["items"]) == 2


def test_cli_bad_format(capsys) -> None:
    main.run(["no spaces allowed"])
    out = json.loads(capsys.readouterr().out)
    assert out == {"items": [{"title": "Invalid format", "subtitle": "Please try again", "valid": False}]}


def test_cli_serve_starts_flask() -> None:
    with patch("linkpreview.create_app") as create_app:
        assert main.run(["--serve"]) == 0
    create_app.assert_called_once_with("config.Config")
    _, kwargs = create_app.return_value.run.call_args
    assert set(kwargs) == {"host", "port", "debug"}


def test_feedback_send_writes_script_filter_json() -> None:
    fb = Feedback()
    fb.new_item("t", "s", valid=True, arg="a").var("k", "v").mod("ctrl", "Copy")
    buf = io.StringIO()
    fb.send(buf)
    assert json.loads(buf.getvalue()) == {
        "items": [
            {
                "title": "t",
                "subtitle": "s",
                "valid": True,
                "arg": "a",
                "variables": {"k": "v"},
                "mods": {"ctrl": {"subtitle": "Copy"}},
            }
        ]
    }


def test_item_omits_empty_optional_fields() -> None:
    assert Item("only").to_dict() == {"title": "only", "subtitle": "", "valid": False}
