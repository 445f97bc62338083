"""
Download helpers for the documentation page and the currencies list.

URLs default to the public documentation; TG_API_URL and TG_CURRENCIES_URL
override them (the CLI loads a .env file first).
"""

import os
from pathlib import Path
from typing import Optional, Union

import requests

from .exceptions import FetchError
from .logger import get_module_logger

logger = get_module_logger("fetcher")

DEFAULT_API_URL = "https://core.telegram.org/bots/api"
DEFAULT_CURRENCIES_URL = "https://core.telegram.org/bots/payments/currencies.json"

REQUEST_TIMEOUT = 30
USER_AGENT = "tg-api-schema/0.1"


def api_url() -> str:
    return os.getenv("TG_API_URL") or DEFAULT_API_URL


def currencies_url() -> str:
    return os.getenv("TG_CURRENCIES_URL") or DEFAULT_CURRENCIES_URL


def _get(url: str) -> requests.Response:
    response = requests.get(url, timeout=REQUEST_TIMEOUT, headers={"User-Agent": USER_AGENT})
    response.raise_for_status()
    return response


def fetch_api_page(url: Optional[str] = None) -> str:
    """
    Download the Bot API documentation page.

    Raises:
        FetchError: on connection errors, timeouts and non-2xx responses
    """
    url = url or api_url()
    logger.info(f"Fetching {url}")

    try:
        response = _get(url)
    except requests.exceptions.Timeout:
        raise FetchError("Timed out fetching the documentation page", url=url,
                         details={"timeout": REQUEST_TIMEOUT})
    except requests.exceptions.HTTPError as e:
        raise FetchError(f"HTTP {e.response.status_code} fetching the documentation page",
                         url=url, details={"status_code": e.response.status_code})
    except requests.exceptions.RequestException as e:
        raise FetchError(f"Could not fetch the documentation page: {e}", url=url)

    logger.info(f"Fetched {len(response.text)} characters")
    return response.text


def read_api_page(path: Union[str, Path]) -> str:
    """Read a saved copy of the documentation page."""
    path = Path(path)
    logger.info(f"Reading {path}")
    return path.read_text(encoding="utf-8", errors="replace")


def fetch_currencies(url: Optional[str] = None) -> list[str]:
    """
    Currency codes from the payments currencies.json (its top-level keys).

    The list only feeds the Currencies enum, so a failed download is logged
    and yields an empty list.
    """
    url = url or currencies_url()

    try:
        data = _get(url).json()
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.warning(f"Could not fetch currencies from {url}: {e}")
        return []

    if not isinstance(data, dict):
        logger.warning(f"Unexpected currencies payload from {url}: {type(data).__name__}")
        return []

    logger.info(f"Fetched {len(data)} currencies")
    return list(data.keys())
