"""JSON API used by the panel forms: image upload and store notifications."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import RequestEntityTooLarge

from services.image_storage import TOO_LARGE

from .auth import current_user


api_bp = Blueprint("api", __name__, url_prefix="/api")
logger = logging.getLogger(__name__)


def _components() -> dict:
    return current_app.extensions["market_components"]


@api_bp.errorhandler(RequestEntityTooLarge)
def upload_too_large(_exc):
    return jsonify({"status": "error", "message": TOO_LARGE}), 413


@api_bp.post("/upload-image")
def upload_image():
    user = current_user()
    if not user:
        return jsonify({"status": "error", "message": "login required"}), 401

    folder = request.form.get("folder", "products")
    user_id = request.form.get("user_id") or None
    storage = _components()["images"]
    try:
        url = storage.upload(request.files.get("file"), folder, user_id=user_id)
    except ValueError as exc:
        return jsonify({"status": "error", "message": str(exc)}), 400
    return jsonify({"status": "ok", "url": url})


@api_bp.post("/notify-stores")
def notify_stores():
    payload = request.get_json(silent=True) or {}
    order_id = payload.get("orderId")
    if not order_id:
        return jsonify({"status": "error", "message": "orderId required"}), 400
    try:
        sent = _components()["notifier"].notify_order(order_id)
    except ValueError as exc:
        return jsonify({"status": "error", "message": str(exc)}), 404
    except SQLAlchemyError as exc:
        logger.error("Error notifying stores about order %s: %s", order_id, exc)
        return jsonify({"status": "error", "message": str(exc)}), 500
    return jsonify({"status": "ok", "sent": sent})
