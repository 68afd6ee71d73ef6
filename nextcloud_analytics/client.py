"""Clients for the Nextcloud Analytics "adddata" API.

Only collections of type "internal database" accept data this way. Both
clients post the same body and read the same response envelope::

    {"success": true}
    {"success": false, "error": {"message": "..."}}

``SyncClient`` blocks on ``requests``; ``AsyncClient`` awaits ``aiohttp``.
Neither retries: a failed send raises and the caller decides what to do.
"""
import base64
import json
import logging
from datetime import datetime

import aiohttp
import requests

from .errors import ApiError, ContractError, DomainError, MalformedResponseError, StatusError
from .settings import get_settings
from .transform import build_url, now_dt, render_body, to_analytics_payload, to_rfc2822

log = logging.getLogger("nextcloud_analytics")

JSON_HEADERS = {"Content-Type": "application/json"}
DEFAULT_TIMEOUT_S = 10.0

def check_response(status: int, text: str) -> dict:
    """Return the parsed envelope of a successful call, raise ApiError otherwise."""
    if status != 200:
        raise StatusError(status, text)
    try:
        envelope = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(text) from e
    if not isinstance(envelope, dict):
        raise ContractError("response is not a JSON object", envelope)
    success = envelope.get("success")
    if not isinstance(success, bool):
        raise ContractError("missing boolean 'success' field", envelope)
    if success:
        return envelope
    error = envelope.get("error")
    message = error.get("message") if isinstance(error, dict) else None
    if not isinstance(message, str):
        raise ContractError("'success' is false without 'error.message'", envelope)
    raise DomainError(message)


class _ClientBase:
    def __init__(self, base_url: str, collection: int, user: str, passwd: str,
                 timeout: float | None = None):
        self._url = build_url(base_url, collection)
        self._user = user
        self._passwd = passwd
        self._timeout = DEFAULT_TIMEOUT_S if timeout is None else timeout

    @classmethod
    def from_settings(cls, **kwargs):
        s = get_settings()
        missing = [name for name in ("NEXTCLOUD_URL", "ANALYTICS_COLLECTION",
                                     "NEXTCLOUD_USER", "NEXTCLOUD_APP_PASSWORD")
                   if getattr(s, name) is None]
        if missing:
            raise ValueError(f"missing settings: {', '.join(missing)}")
        kwargs.setdefault("timeout", s.ANALYTICS_TIMEOUT_S)
        return cls(s.NEXTCLOUD_URL, s.ANALYTICS_COLLECTION,
                   s.NEXTCLOUD_USER, s.NEXTCLOUD_APP_PASSWORD, **kwargs)

    @property
    def url(self) -> str:
        return self._url

    @property
    def user(self) -> str:
        return self._user

    @property
    def timeout(self) -> float:
        return self._timeout

    def __repr__(self):
        return f"{type(self).__name__}(url={self._url!r}, user={self._user!r})"

    def _prepare(self, dimension1, dimension2, dimension3) -> bytes:
        body = render_body(to_analytics_payload(dimension1, dimension2, dimension3))
        log.debug("POST %s dimension1=%s dimension2=%s", self._url, dimension1, dimension2)
        return body

    def _check(self, status: int, text: str) -> dict:
        try:
            return check_response(status, text)
        except ApiError as e:
            log.warning("analytics send to %s failed: %s", self._url, e)
            raise


class SyncClient(_ClientBase):
    """Blocking client; one ``requests.Session`` reused across calls."""

    def __init__(self, base_url: str, collection: int, user: str, passwd: str,
                 timeout: float | None = None, session: requests.Session | None = None):
        super().__init__(base_url, collection, user, passwd, timeout)
        self._owns_session = session is None
        if session is None:
            session = requests.Session()
            session.headers.update(JSON_HEADERS)
        self.session = session

    def send_data(self, dimension1, dimension2, dimension3) -> None:
        """Send one data point. dimension1/2 are text, dimension3 a number.

        For timeline data, dimension2 must be an RFC 2822 date.
        """
        body = self._prepare(dimension1, dimension2, dimension3)
        # headers repeated per request for injected sessions
        r = self.session.post(self._url, data=body, headers=JSON_HEADERS,
                              auth=(self._user, self._passwd), timeout=self._timeout)
        self._check(r.status_code, r.text)

    def send_timeline_data(self, key, time: datetime, value) -> None:
        self.send_data(key, to_rfc2822(time), value)

    def send_timeline_now_data(self, key, value) -> None:
        self.send_timeline_data(key, now_dt(), value)

    def close(self):
        if self._owns_session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class AsyncClient(_ClientBase):
    """Awaitable client; the ``aiohttp.ClientSession`` is opened on first send."""

    def __init__(self, base_url: str, collection: int, user: str, passwd: str,
                 timeout: float | None = None, session: aiohttp.ClientSession | None = None):
        super().__init__(base_url, collection, user, passwd, timeout)
        self._owns_session = session is None
        self._session = session
        # latin-1 like requests' basic auth
        token = base64.b64encode(f"{user}:{passwd}".encode("latin1")).decode("ascii")
        self._headers = {**JSON_HEADERS, "Authorization": f"Basic {token}"}

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers=JSON_HEADERS,
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            )
            self._owns_session = True
        return self._session

    async def send_data(self, dimension1, dimension2, dimension3) -> None:
        body = self._prepare(dimension1, dimension2, dimension3)
        s = self._get_session()
        async with s.post(self._url, data=body, headers=self._headers,
                          timeout=aiohttp.ClientTimeout(total=self._timeout)) as r:
            text = await r.text()
            self._check(r.status, text)

    async def send_timeline_data(self, key, time: datetime, value) -> None:
        await self.send_data(key, to_rfc2822(time), value)

    async def send_timeline_now_data(self, key, value) -> None:
        await self.send_timeline_data(key, now_dt(), value)

    async def close(self):
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()
