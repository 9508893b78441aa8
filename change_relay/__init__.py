# change_relay/__init__.py
import logging
from flask import Flask
from .config import Config
from .extensions import db, migrate


def create_app(test_config=None):
    # Logging
    logging.basicConfig(level=logging.INFO)

    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    # Initialize database
    db.init_app(app)
    migrate.init_app(app, db)

    with app.app_context():
        from . import models  # noqa: F401
        db.create_all()

    from .relay import DeliveryEngine, Relay
    from .store import StateStore
    from .utils.current import CurrentRMSClient
    from .utils.webhooks import WebhookSink

    store = StateStore(db)
    poller = CurrentRMSClient(
        app.config["CURRENT_SUBDOMAIN"],
        app.config["CURRENT_API_KEY"],
        base_url=app.config["CURRENT_BASE_URL"],
        timeout=app.config["HTTP_TIMEOUT_SECONDS"],
        page_size=app.config["POLL_PAGE_SIZE"],
        max_pages=app.config["POLL_MAX_PAGES"],
    )
    sink = WebhookSink(store, timeout=app.config["HTTP_TIMEOUT_SECONDS"])
    engine = DeliveryEngine(store, sink)
    relay = Relay(store, poller, engine, fallback_minutes=app.config["CURSOR_FALLBACK_MINUTES"])
    app.extensions["change_relay"] = relay

    from .app import bp as main_bp
    app.register_blueprint(main_bp)

    if app.config.get("SCHEDULER_ENABLED"):
        from .scheduler import start_scheduler
        app.extensions["change_relay_scheduler"] = start_scheduler(
            app, relay, app.config["POLL_INTERVAL_SECONDS"]
        )

    return app
