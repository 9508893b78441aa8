# change_relay/utils/webhooks.py
import json
import logging
from typing import Optional

import requests

from ..exceptions import DeliveryError

logger = logging.getLogger(__name__)


class WebhookSink:
    """Posts change events to the hook registered for their event name."""

    def __init__(self, store, *, timeout: int = 30, session: Optional[requests.Session] = None):
        self.store = store
        self.timeout = timeout
        self._session = session or requests.Session()

    def deliver(self, event) -> bool:
        """
        POST ``event`` to its registered URL. Returns False when nobody is
        registered for the event (dropped, not an error).
        """
        url = self.store.get_hook(event.event_name)
        if not url:
            logger.info("No hook registered for %s, dropping %s", event.event_name, event.idempotency_key)
            return False

        payload = event.to_payload()
        logger.debug("POST %s payload=%s", url, json.dumps(payload, default=str)[:1000])

        try:
            resp = self._session.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise DeliveryError(f"Webhook delivery to {url} failed: {e}") from e

        if not 200 <= resp.status_code < 300:
            logger.error("Webhook delivery failed: %s %s", resp.status_code, resp.text[:500])
            raise DeliveryError(f"Webhook returned {resp.status_code} for {event.idempotency_key}")

        logger.info("Delivered %s", event.idempotency_key)
        return True
