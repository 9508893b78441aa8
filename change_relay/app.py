# change_relay/app.py
import logging
from flask import Blueprint, current_app, request, jsonify
from pydantic import AnyHttpUrl, BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

bp = Blueprint("main", __name__)


class HookRegistration(BaseModel):
    event: str = Field(min_length=1)
    url: AnyHttpUrl


@bp.route("/health", methods=["GET"])
def health():
    return jsonify({"ok": True}), 200


@bp.route("/hooks/register", methods=["POST"])
def register_hook():
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return jsonify({"error": "Invalid request body"}), 400

    try:
        hook = HookRegistration.model_validate(body)
    except ValidationError as e:
        logger.warning("Rejected hook registration: %s", e.errors())
        return jsonify({"error": "Invalid request body"}), 400

    relay = current_app.extensions["change_relay"]
    # store the URL as sent; pydantic only validates it
    relay.store.set_hook(hook.event, body["url"])
    return jsonify({"ok": True}), 200


if __name__ == "__main__":
    from . import create_app
    from .config import get_port

    app = create_app()
    logger.info("Middleware running on port %s", get_port())
    app.run(host="0.0.0.0", port=get_port(), use_reloader=False)
