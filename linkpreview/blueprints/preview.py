from flask import Blueprint, current_app, jsonify, request

from ..services.workflow import run

bp = Blueprint("preview", __name__)


@bp.get("/api/preview-url")
def api_preview_url():
    """Run one lookup and return the Script Filter feedback as JSON.

    Failures come back as items with status 200, same as the CLI.
    """
    query = request.args.get("q", request.args.get("url", "")).strip()
    wf = current_app.extensions["linkpreview"]
    return jsonify(run(wf, query).to_dict())


@bp.get("/health")
def health():
    return jsonify({"ok": True})
