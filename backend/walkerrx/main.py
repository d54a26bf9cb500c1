"""
WalkerRx – Flask Application Factory
Serves the JSON pricing API in front of America's Pharmacy.
"""

import logging
import time

from flask import Flask, current_app, jsonify
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.exceptions import HTTPException

from walkerrx.config import Config
from walkerrx.errors import PricingError
from walkerrx.routes.drugs import drugs_bp
from walkerrx.routes.pricing import pricing_bp
from walkerrx.routes.comparison import comparison_bp
from walkerrx.routes.pharmacies import pharmacies_bp
from walkerrx.routes.debug import debug_bp
from walkerrx.middleware.debug_key_middleware import debug_key_middleware
from walkerrx.middleware.request_logger import start_timer, log_after_request
from walkerrx.services.medication_service import build_medication_service

logger = logging.getLogger("walkerrx")


def _default_rate_limit() -> str:
    return current_app.config["RATELIMIT_DEFAULT"]


limiter = Limiter(key_func=get_remote_address, default_limits=[_default_rate_limit])


def _configure_logging(level: str) -> None:
    """Attach one stream handler to the ``walkerrx`` logger tree."""
    root = logging.getLogger("walkerrx")
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    if not any(getattr(h, "_walkerrx", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
        handler._walkerrx = True
        root.addHandler(handler)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(PricingError)
    def handle_pricing_error(exc):
        if exc.status_code >= 500:
            logger.error("Request failed: %s", exc)
        return jsonify({"error": str(exc)}), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        return jsonify({"error": exc.description}), exc.code


def create_app(config=Config, session=None, clock=time.time) -> Flask:
    config.validate()
    _configure_logging(config.LOG_LEVEL)

    app = Flask(__name__)
    app.config["DEBUG"] = config.APP_ENV == "development"
    app.config["API_DEBUG_KEY"] = config.API_DEBUG_KEY
    app.config["RATELIMIT_ENABLED"] = config.RATELIMIT_ENABLED
    app.config["RATELIMIT_DEFAULT"] = config.RATE_LIMIT_DEFAULT

    # Extensions
    CORS(app, resources={r"/api/*": {"origins": "*"}}, send_wildcard=True)
    limiter.init_app(app)
    app.extensions["walkerrx"] = build_medication_service(config, session=session, clock=clock)

    # Middleware
    app.before_request(start_timer)
    app.before_request(debug_key_middleware)
    app.after_request(log_after_request)

    _register_error_handlers(app)

    # Blueprints
    app.register_blueprint(drugs_bp, url_prefix="/api/drugs")
    app.register_blueprint(pricing_bp, url_prefix="/api/drugs")
    app.register_blueprint(comparison_bp, url_prefix="/api/drugs")
    app.register_blueprint(pharmacies_bp, url_prefix="/api/pharmacies")
    app.register_blueprint(debug_bp, url_prefix="/api/debug")

    # Status check
    @app.route("/api/public/status")
    @limiter.exempt
    def status():
        service = app.extensions["walkerrx"]
        return {"status": "ok", "service": "walkerrx", "mockData": service.mock_status()}

    logger.info("WalkerRx API ready (env=%s, upstream=%s)", config.APP_ENV, config.API_BASE_URL)
    return app
