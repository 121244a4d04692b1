"""
Fetching GPX text over HTTP with retry on transient failures
"""

import requests
from loguru import logger
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

MAX_ATTEMPTS = 4
DEFAULT_TIMEOUT_SECONDS = 30.0


class GPXFetchError(RuntimeError):
    """Raised when a GPX file cannot be retrieved"""


def _is_transient_error(error: BaseException) -> bool:
    """Return True for connection problems, timeouts and HTTP 5xx responses."""

    if isinstance(
        error, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)
    ):
        return True

    if isinstance(error, requests.exceptions.HTTPError):
        response = getattr(error, "response", None)
        return response is not None and response.status_code >= 500

    return False


def _log_retry(retry_state) -> None:
    """Log retry attempts triggered by transient failures."""

    sleep_seconds = getattr(getattr(retry_state, "next_action", None), "sleep", 0)
    attempt_number = getattr(retry_state, "attempt_number", 1)
    outcome = getattr(retry_state, "outcome", None)
    error = outcome.exception() if outcome is not None else None

    logger.info(
        "GPX fetch failed ({}). Waiting {:.0f}s before retry {}/{}...",
        error,
        sleep_seconds,
        attempt_number,
        MAX_ATTEMPTS - 1,
    )


@retry(
    stop=stop_after_attempt(MAX_ATTEMPTS),
    wait=wait_exponential(multiplier=2, min=2, max=16),  # 2s, 4s, 8s, capped at 16s
    retry=retry_if_exception(_is_transient_error),
    before_sleep=_log_retry,
    reraise=True,
)
def _get_with_retry(url: str, timeout: float) -> requests.Response:
    logger.debug("GET {}", url)
    response = requests.get(url, timeout=timeout)
    logger.debug("Response {} {} for GET {}", response.status_code, response.reason, url)
    response.raise_for_status()
    return response


def fetch_gpx_text(url: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> str:
    """Download a GPX document and return its text"""
    try:
        response = _get_with_retry(url, timeout)
    except requests.exceptions.RequestException as e:
        raise GPXFetchError(f"Failed to fetch GPX from {url}: {e}") from e

    # Servers often omit the charset for .gpx files; GPX is UTF-8 by default
    if response.encoding is None or response.encoding.lower() == "iso-8859-1":
        response.encoding = "utf-8"
    return response.text


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))
