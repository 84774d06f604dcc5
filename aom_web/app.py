"""Flask web app for the Art Of Men catalog.

Serves the admin JSON API under /api (products, bulk actions, QR codes,
scraper) and the public storefront pages.
"""

import base64
import binascii
import logging
import os
from pathlib import Path
from typing import Optional, Tuple, Union

from dotenv import load_dotenv
from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import HTTPException

# Load environment variables from .env file (explicitly specify path)
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

from aom_scrape.logging_config import setup_logging  # noqa: E402

from .api import api  # noqa: E402
from .config import (  # noqa: E402
    APP_URL,
    CORS_ALLOW_HEADERS,
    CORS_ALLOW_METHODS,
    DB_PATH,
    FLASK_DEBUG,
    FLASK_HOST,
    FLASK_PORT,
)
from .error_logging import log_unexpected_error  # noqa: E402
from .qr_api import qr_api  # noqa: E402
from .scraper_api import scraper_api  # noqa: E402
from .storefront import storefront  # noqa: E402

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["DB_PATH"] = DB_PATH
app.config["APP_URL"] = APP_URL
app.json.ensure_ascii = False

app.register_blueprint(api)
app.register_blueprint(qr_api)
app.register_blueprint(scraper_api)
app.register_blueprint(storefront)


# ---------- BASIC AUTH ----------


def _basic_auth_creds() -> Tuple[Optional[str], Optional[str]]:
    """Get admin credentials from environment."""
    return os.getenv("ADMIN_USER"), os.getenv("ADMIN_PASS")


def _unauthorized() -> Response:
    return Response(
        "Authentication required",
        401,
        {"WWW-Authenticate": 'Basic realm="Login Required"'},
    )


def _requires_auth() -> bool:
    """Mutating admin API calls and everything under /api/scraper."""
    if request.method == "OPTIONS" or not request.path.startswith("/api/"):
        return False
    if request.path.startswith("/api/scraper"):
        return True
    return request.method not in ("GET", "HEAD")


@app.before_request
def require_basic_auth() -> Optional[Response]:
    """
    Enforce HTTP Basic Auth on admin routes.
    Skips enforcement if credentials are not configured (ADMIN_USER/ADMIN_PASS unset).
    """
    user, password = _basic_auth_creds()
    if not user or not password:
        return None  # auth disabled

    if not _requires_auth():
        return None

    header = request.headers.get("Authorization", "")
    if not header.startswith("Basic "):
        return _unauthorized()

    try:
        decoded = base64.b64decode(header.split(" ", 1)[1]).decode("utf-8")
        username, passwd = decoded.split(":", 1)
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return _unauthorized()

    if username == user and passwd == password:
        return None
    return _unauthorized()


# ---------- CORS ----------


@app.after_request
def add_cors_headers(response: Response) -> Response:
    if request.path.startswith("/api/"):
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Methods"] = CORS_ALLOW_METHODS
        response.headers["Access-Control-Allow-Headers"] = CORS_ALLOW_HEADERS
    return response


# ---------- ERROR HANDLERS ----------


@app.errorhandler(HTTPException)
def handle_http_error(e: HTTPException) -> Union[HTTPException, Tuple[Response, int]]:
    """JSON errors for the API; default HTML pages elsewhere."""
    if request.path.startswith("/api/"):
        return jsonify({"error": e.description}), e.code
    return e


@app.errorhandler(Exception)
def handle_unexpected_error(e: Exception) -> Tuple[Response, int]:
    """Log the full traceback server side; never leak it to the client."""
    logger.exception(f"Unhandled error on {request.method} {request.path}")
    log_unexpected_error(
        e,
        db_path=app.config["DB_PATH"],
        operation=request.endpoint,
        request_path=request.path,
        context={"method": request.method},
    )
    return jsonify({"error": "Internal Server Error"}), 500


def main() -> None:
    setup_logging(level=logging.DEBUG if FLASK_DEBUG else logging.INFO)
    app.run(host=FLASK_HOST, port=FLASK_PORT, debug=FLASK_DEBUG)


if __name__ == "__main__":
    main()
