"""Centralized configuration for the Art Of Men web app."""

import os

from aom_scrape.config import DB_PATH

# Public base URL used in QR codes; falls back to the request host when unset
APP_URL = os.getenv("APP_URL", "").rstrip("/") or None

# Flask app settings (allow env overrides; default debug off for safety)
# Render sets PORT dynamically; fall back to FLASK_PORT or 5000 for local.
FLASK_HOST = os.getenv("FLASK_HOST", "0.0.0.0")
FLASK_PORT = int(os.getenv("FLASK_PORT", os.getenv("PORT", "5000")))
FLASK_DEBUG = os.getenv("FLASK_DEBUG", "False").lower() == "true"

# Product listing
DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 200

# QR codes
QR_FORMATS = ("png", "svg")
QR_DEFAULT_FORMAT = "png"
QR_DEFAULT_SIZE = 300
QR_MIN_SIZE = 64
QR_MAX_SIZE = 2048
QR_DEFAULT_ECL = "M"
QR_BORDER = 4
QR_CACHE_CONTROL = "public, max-age=31536000"

# CORS for the admin API
CORS_ALLOW_METHODS = "GET, POST, PUT, DELETE, OPTIONS"
CORS_ALLOW_HEADERS = "Content-Type, Authorization"

__all__ = [
    "DB_PATH",
    "APP_URL",
    "FLASK_HOST",
    "FLASK_PORT",
    "FLASK_DEBUG",
    "DEFAULT_PAGE_LIMIT",
    "MAX_PAGE_LIMIT",
    "QR_FORMATS",
    "QR_DEFAULT_FORMAT",
    "QR_DEFAULT_SIZE",
    "QR_MIN_SIZE",
    "QR_MAX_SIZE",
    "QR_DEFAULT_ECL",
    "QR_BORDER",
    "QR_CACHE_CONTROL",
    "CORS_ALLOW_METHODS",
    "CORS_ALLOW_HEADERS",
]
