"""QR code endpoint linking printed tags to storefront product pages."""

import io
import logging
from typing import Tuple, Union

import qrcode
import qrcode.image.svg
from flask import Blueprint, Response, current_app, jsonify, request

from aom_scrape.db import get_product

from .api import get_db_path
from .config import (
    QR_BORDER,
    QR_CACHE_CONTROL,
    QR_DEFAULT_ECL,
    QR_DEFAULT_FORMAT,
    QR_DEFAULT_SIZE,
    QR_FORMATS,
    QR_MAX_SIZE,
    QR_MIN_SIZE,
)

__all__ = ["qr_api", "build_qr_code", "product_url"]

logger = logging.getLogger(__name__)

qr_api = Blueprint("qr_api", __name__, url_prefix="/api")

ERROR_CORRECTION_LEVELS = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}

MIME_TYPES = {"png": "image/png", "svg": "image/svg+xml"}


def product_url(slug: str) -> str:
    """Public storefront URL for a product."""
    base = current_app.config.get("APP_URL") or request.url_root.rstrip("/")
    return f"{base}/product/{slug}"


def build_qr_code(data: str, size: int = QR_DEFAULT_SIZE, ecl: str = QR_DEFAULT_ECL,
                  fmt: str = QR_DEFAULT_FORMAT) -> bytes:
    """Encode data as a PNG or SVG QR code roughly size pixels wide."""
    qr = qrcode.QRCode(
        error_correction=ERROR_CORRECTION_LEVELS[ecl],
        box_size=10,
        border=QR_BORDER,
    )
    qr.add_data(data)
    qr.make(fit=True)

    # Scale modules so the image (including the quiet zone) fits size
    qr.box_size = max(1, size // (qr.modules_count + 2 * QR_BORDER))

    if fmt == "svg":
        img = qr.make_image(image_factory=qrcode.image.svg.SvgPathImage)
    else:
        img = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    img.save(buffer)
    return buffer.getvalue()


@qr_api.route("/qrcode/<id_or_slug>", methods=["GET"])
def qrcode_route(id_or_slug: str) -> Union[Response, Tuple[Response, int]]:
    """QR code for a product's storefront page.

    Query params:
        format: png (default) or svg
        size: pixel width, QR_MIN_SIZE..QR_MAX_SIZE
        ecl: error correction level L, M (default), Q or H
    """
    fmt = request.args.get("format", QR_DEFAULT_FORMAT).lower()
    if fmt not in QR_FORMATS:
        return jsonify({"error": f"format must be one of: {', '.join(QR_FORMATS)}"}), 400

    ecl = request.args.get("ecl", QR_DEFAULT_ECL).upper()
    if ecl not in ERROR_CORRECTION_LEVELS:
        return jsonify({"error": "ecl must be one of: L, M, Q, H"}), 400

    try:
        size = int(request.args.get("size", QR_DEFAULT_SIZE))
    except ValueError:
        return jsonify({"error": "size must be an integer"}), 400
    if not QR_MIN_SIZE <= size <= QR_MAX_SIZE:
        return jsonify({"error": f"size must be between {QR_MIN_SIZE} and {QR_MAX_SIZE}"}), 400

    product = get_product(get_db_path(), id_or_slug)
    if product is None:
        return jsonify({"error": "Product not found"}), 404

    url = product_url(product["slug"])
    logger.debug(f"QR code for {url} ({fmt}, {size}px, ecl {ecl})")

    response = Response(build_qr_code(url, size=size, ecl=ecl, fmt=fmt), mimetype=MIME_TYPES[fmt])
    response.headers["Cache-Control"] = QR_CACHE_CONTROL
    return response
