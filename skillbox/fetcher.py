"""HTTP fetching.

Thin wrappers around ``requests`` that turn network failures and non-2xx
responses into ``FetchError``. No retries are attempted.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any
from urllib.parse import urlsplit

import requests

from skillbox import __version__
from skillbox.errors import FetchError

logger = logging.getLogger(__name__)

# (connect_timeout, read_timeout)
DEFAULT_TIMEOUT = (5, 30)


def _headers_for(url: str) -> dict[str, str]:
    headers = {"User-Agent": f"skillbox/{__version__}"}
    if urlsplit(url).hostname == "api.github.com":
        headers["Accept"] = "application/vnd.github+json"
        token = os.environ.get("GITHUB_TOKEN")
        if token:
            headers["Authorization"] = f"Bearer {token}"
    return headers


def fetch_bytes(url: str) -> bytes:
    """GET a URL and return the raw body.

    Raises:
        FetchError: On connection problems, timeouts or a non-2xx status.
    """
    logger.debug(f"GET {url}")
    try:
        response = requests.get(url, headers=_headers_for(url), timeout=DEFAULT_TIMEOUT)
    except requests.exceptions.RequestException as e:
        raise FetchError(url, str(e)) from e

    if not response.ok:
        raise FetchError(url, f"{response.status_code} {response.reason}")

    return response.content


def fetch_text(url: str) -> str:
    """GET a URL and return its body as text.

    Raises:
        FetchError: On connection problems, timeouts or a non-2xx status.
    """
    # Skill documents are UTF-8 regardless of the declared charset
    return fetch_bytes(url).decode("utf-8", errors="replace")


def fetch_json(url: str) -> Any:
    """GET a URL and decode the JSON body.

    Raises:
        FetchError: If the request fails or the body is not JSON.
    """
    text = fetch_text(url)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise FetchError(url, f"invalid JSON: {e}") from e
