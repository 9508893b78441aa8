# change_relay/utils/current.py
import logging
from typing import Any, List, Optional

import requests

from ..exceptions import ConfigurationError, UpstreamError
from ..config import DEFAULT_CURRENT_BASE_URL

logger = logging.getLogger(__name__)


def build_updated_since_params(updated_since: str, page_size: int, page: int = 1) -> dict:
    """Query params for "records changed at or after ``updated_since``"."""
    return {
        "updated_since": updated_since,
        "per_page": page_size,
        "page": page,
    }


def extract_records(body: Any, resource: str) -> List[dict]:
    """
    Pull the record list out of a Current RMS response. The list may sit under
    the resource name, under ``data``, or be the body itself. A null or empty
    body is an empty batch.
    """
    if body is None or body == "":
        return []
    if isinstance(body, list):
        return body
    if isinstance(body, dict):
        for key in (resource, "data"):
            value = body.get(key)
            if isinstance(value, list):
                return value
    raise UpstreamError(f"Unexpected Current RMS response shape for {resource}")


class CurrentRMSClient:
    """Read-only Current RMS client used by the poller."""

    def __init__(
        self,
        subdomain: str,
        api_key: str,
        *,
        base_url: str = DEFAULT_CURRENT_BASE_URL,
        timeout: int = 30,
        page_size: int = 100,
        max_pages: int = 10,
        session: Optional[requests.Session] = None,
    ):
        self.subdomain = subdomain
        self.api_key = api_key
        self.base_url = (base_url or DEFAULT_CURRENT_BASE_URL).rstrip("/")
        self.timeout = timeout
        self.page_size = page_size
        self.max_pages = max(1, max_pages)
        self._session = session or requests.Session()

    def _headers(self) -> dict:
        if not (self.subdomain and self.api_key):
            logger.error("Current RMS credentials missing (CURRENT_SUBDOMAIN or CURRENT_API_KEY).")
            raise ConfigurationError("Missing CURRENT_SUBDOMAIN or CURRENT_API_KEY")
        return {
            "X-SUBDOMAIN": self.subdomain,
            "X-AUTH-TOKEN": self.api_key,
            "Accept": "application/json",
        }

    def _get_page(self, url: str, headers: dict, params: dict) -> Any:
        try:
            resp = self._session.get(url, headers=headers, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise UpstreamError(f"Current RMS request failed: {e}") from e

        if resp.status_code != 200:
            logger.error("Current RMS fetch failed: %s %s", resp.status_code, resp.text[:500])
            raise UpstreamError(f"Current RMS API error {resp.status_code}")

        if not resp.text.strip():
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamError("Current RMS returned a non-JSON body") from e

    def fetch_updated_since(self, resource: str, since: str) -> List[dict]:
        """
        Fetch every record of ``resource`` changed at or after ``since``.

        Pages are requested until one comes back short or ``max_pages`` is hit.
        """
        headers = self._headers()
        url = f"{self.base_url}/{resource}"
        records: List[dict] = []

        for page in range(1, self.max_pages + 1):
            params = build_updated_since_params(since, self.page_size, page)
            logger.debug("GET %s params=%s", url, params)
            batch = extract_records(self._get_page(url, headers, params), resource)
            records.extend(batch)
            if len(batch) < self.page_size:
                break
        else:
            logger.warning("Stopped paging %s after %d pages", resource, self.max_pages)

        logger.info("Fetched %d %s updated since %s", len(records), resource, since)
        return records
