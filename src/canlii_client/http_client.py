"""HTTP transport and error classification for the CanLII API."""

import logging
import re

import requests
from requests import Response

from canlii_client.errors import ProviderError, QuotaExceeded, TransportError

logger = logging.getLogger(__name__)

USER_AGENT = "canlii-client/0.1.0 (+https://github.com/canlii/API_documentation)"

_QUOTA_STATUS_CODE = 429

_API_KEY_RE = re.compile(r"(api_key=)[^&]*")


def redact(url: str) -> str:
    """Mask the ``api_key`` query parameter so URLs are safe to log."""
    return _API_KEY_RE.sub(r"\1***", url)


def _decode_error_body(resp: Response) -> tuple[str, str] | None:
    """Extract ``(error, message)`` from a provider error body, if present.

    The API answers failures with ``{"error": ..., "message": ...}``,
    sometimes wrapped in a one-element list.
    """
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, list) and body:
        body = body[0]
    if not isinstance(body, dict) or "error" not in body:
        return None
    return str(body["error"]), str(body.get("message", ""))


def classify_error(resp: Response) -> Exception:
    """Map a non-2xx response to the matching client exception."""
    status = resp.status_code
    if status == _QUOTA_STATUS_CODE:
        return QuotaExceeded(status)
    decoded = _decode_error_body(resp)
    if decoded is not None:
        return ProviderError(status, *decoded)
    return TransportError(status, getattr(resp, "reason", "") or "")


class HttpBaseClient:
    """Single-shot JSON GET client.

    Manages one requests.Session. Each call issues exactly one GET with the
    session's default timeout and redirect handling; there is no retry.
    Non-2xx responses are turned into :class:`QuotaExceeded`,
    :class:`ProviderError` or :class:`TransportError` before the body is
    handed back to the caller.
    """

    def __init__(self):
        self.session = requests.Session()
        self.session.headers["User-Agent"] = USER_AGENT
        self.session.headers["Accept"] = "application/json"

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _get(self, url: str) -> Response:
        logger.debug("GET %s", redact(url))
        try:
            resp = self.session.get(url)
        except requests.RequestException as e:
            logger.warning("Request to %s failed: %s", redact(url), redact(str(e)))
            raise TransportError(None, redact(str(e))) from e

        if not 200 <= resp.status_code < 300:
            error = classify_error(resp)
            logger.warning("GET %s -> %s", redact(url), error)
            raise error
        return resp

    def _get_json(self, url: str):
        """GET *url* and return its decoded JSON body."""
        resp = self._get(url)
        try:
            return resp.json()
        except ValueError as e:
            raise TransportError(resp.status_code, "response body is not JSON") from e
