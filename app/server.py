"""Flask app factory exposing an inspector over a live simulation."""

from typing import Any, Dict

from flask import Flask

from app.routes import bp
from app.routes.api import init_state


def create_app(config: Dict[str, Any] | None = None) -> Flask:
    """Create the Flask application and initialize simulation state."""
    cfg = config or {}
    init_state(seed=int(cfg.get("seed", 1337)), scenario=str(cfg.get("scenario", "chem_decay")))
    flask_app = Flask(__name__)
    flask_app.config.update(cfg)
    flask_app.register_blueprint(bp)
    return flask_app


if __name__ == "__main__":
    app = create_app()
    app.run(host="127.0.0.1", port=5000)
