"""Name server address lookup for the managed cloud variant, where an HTTP
endpoint hands out the current name server list."""

from __future__ import annotations

import logging
from typing import Optional

import requests

from ..base import NetworkFailure


logger = logging.getLogger(__name__)


def is_lookup_url(server: Optional[str]) -> bool:
    return bool(server) and server.lower().startswith("http")


def name_server_address(url: str, timeout: float = 5.0, session: Optional[requests.Session] = None) -> Optional[str]:
    """Fetch the name server address list from *url*. Returns None if the
    response is blank."""

    getter = session if session is not None else requests

    try:
        response = getter.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise NetworkFailure(f"name server lookup via {url} failed: {exc}") from exc

    text = response.text.strip()
    if not text:
        return None

    logger.info("name server address from %s: %s", url, text)
    return text
