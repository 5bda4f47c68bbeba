import argparse
import os
import sys

from dotenv import load_dotenv
from flask import Config


def load_config(config_object: str = "config.Config") -> Config:
    cfg = Config(os.path.dirname(os.path.abspath(__file__)))
    cfg.from_object(config_object)
    return cfg


def serve(cfg: Config) -> None:
    from linkpreview import create_app

    app = create_app("config.Config")
    app.run(host=cfg["HOST"], port=cfg["PORT"], debug=cfg["FLASK_DEBUG"])


def run(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Preview a web page's title, description and image.")
    parser.add_argument("query", nargs="?", default="", help='URL to look up, or "help"')
    parser.add_argument("--serve", action="store_true", help="run the HTTP preview endpoint instead")
    args = parser.parse_args(argv)

    # Load environment from .env before config reads it
    load_dotenv()
    cfg = load_config()

    if args.serve:
        serve(cfg)
        return 0

    from linkpreview.services.workflow import run as run_query, workflow_from_config
    from linkpreview.utils.log import configure_logging

    configure_logging(cfg["LOG_LEVEL"])
    wf = workflow_from_config(cfg)
    run_query(wf, args.query).send(sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(run())
