from flask import Flask

from .blueprints.preview import bp as preview_bp
from .services.workflow import workflow_from_config
from .utils.log import configure_logging


def create_app(config_object="config.Config", **overrides) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.config.update(overrides)

    configure_logging(app.config.get("LOG_LEVEL", "WARNING"))

    # One workflow context per app; tests build their own apps
    app.extensions["linkpreview"] = workflow_from_config(app.config)

    app.register_blueprint(preview_bp)

    @app.after_request
    def add_no_cache_headers(resp):
        resp.headers["Cache-Control"] = "no-store, max-age=0"
        return resp

    return app
