from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import logging
from http.cookiejar import CookieJar
from typing import Any, List

import requests

from ..models.travel import ELIGIBLE_PRODUCT_TYPE, CustomerInfo, Travel
from .errors import ApiRequestError, AuthExpiredError, RefreshFailedError

LOGGER = logging.getLogger(__name__)

BASE_URL = "https://www.maxjeune-tgvinoui.sncf/api/public"
CUSTOMER_ENDPOINT = "/customer/read-customer"
TRAVELS_ENDPOINT = "/reservation/travel-consultation"
CONFIRM_ENDPOINT = "/reservation/travel-confirm"
REFRESH_ENDPOINT = "/auth/refresh"

AUTH_COOKIE = "auth"
DATADOME_COOKIE = "datadome"
AUTH_FAILURE_STATUSES = (401, 403)

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
    "X-Client-App": "MAX_JEUNE",
    "X-Client-App-Version": "2.42.1",
    "X-Distribution-Channel": "OUI",
    "Referer": "https://www.maxjeune-tgvinoui.sncf/sncf-connect/mes-voyages",
}


def format_start_date(value: datetime) -> str:
    """Render ``value`` as UTC ISO-8601 with millisecond precision (``...T12:00:00.000Z``)."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    utc_value = value.astimezone(timezone.utc)
    return f"{utc_value.strftime('%Y-%m-%dT%H:%M:%S')}.{utc_value.microsecond // 1000:03d}Z"


def _cookie_value(jar: CookieJar, name: str) -> str | None:
    value = None
    for cookie in jar:
        if cookie.name == name and cookie.value:
            value = cookie.value
    return value


def _decode_json(response: requests.Response, endpoint: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise ApiRequestError(
            f"API response from {endpoint} is not valid JSON",
            endpoint=endpoint,
            status=response.status_code,
            body=response.text,
        ) from exc


class MaxJeuneClient:
    """Authenticated client for the Max Jeune booking API.

    The service rotates the ``auth`` cookie on its own schedule, so every
    response is checked for a new value and the client always sends the most
    recent one. A 401/403 triggers one refresh and exactly one retry.

    When ``proactive_refresh`` is enabled, each successful call schedules a
    background refresh. The next request waits for it before sending, so
    requests never race a refresh.
    """

    def __init__(
        self,
        access_token: str,
        *,
        datadome_cookie: str | None = None,
        base_url: str = BASE_URL,
        timeout: float = 10.0,
        proactive_refresh: bool = False,
        session: requests.Session | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if not access_token:
            raise ValueError("access_token is required")
        self._access_token = access_token
        self._datadome_cookie = datadome_cookie
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._proactive_refresh = proactive_refresh
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._logger = logger or LOGGER
        self._pending_refresh: asyncio.Task[None] | None = None

    async def __aenter__(self) -> "MaxJeuneClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    @property
    def access_token(self) -> str:
        return self._access_token

    @property
    def datadome_cookie(self) -> str | None:
        return self._datadome_cookie

    async def get_customer_info(self) -> CustomerInfo:
        response = await self._request(CUSTOMER_ENDPOINT, {"productTypes": [ELIGIBLE_PRODUCT_TYPE]})
        data = _decode_json(response, CUSTOMER_ENDPOINT)
        if not isinstance(data, dict) or not isinstance(data.get("cards") or [], list):
            raise ApiRequestError(
                "Cannot read customer info from Max Jeune",
                endpoint=CUSTOMER_ENDPOINT,
                status=response.status_code,
                body=response.text,
            )
        return CustomerInfo.from_dict(data)

    async def get_travels(self, card_number: str, since: datetime) -> List[Travel]:
        payload = {"cardNumber": card_number, "startDate": format_start_date(since)}
        response = await self._request(TRAVELS_ENDPOINT, payload)
        data = _decode_json(response, TRAVELS_ENDPOINT)
        if not isinstance(data, list):
            raise ApiRequestError(
                "Cannot get travels from Max Jeune",
                endpoint=TRAVELS_ENDPOINT,
                status=response.status_code,
                body=response.text,
            )
        return [Travel.from_dict(item) for item in data if isinstance(item, dict)]

    async def confirm_travel(self, travel: Travel) -> None:
        await self._request(CONFIRM_ENDPOINT, travel.confirmation_payload())

    async def refresh_token(self) -> None:
        """Force a token rotation. Raises ``RefreshFailedError`` if none happens."""

        await self._wait_for_pending_refresh()
        await self._refresh()

    async def aclose(self) -> None:
        await self._wait_for_pending_refresh()
        if self._owns_session:
            self._session.close()

    async def _request(self, endpoint: str, payload: dict[str, Any]) -> requests.Response:
        await self._wait_for_pending_refresh()
        response = await self._send(endpoint, payload)

        if response.status_code in AUTH_FAILURE_STATUSES:
            original_status, original_body = response.status_code, response.text
            self._logger.info("%s rejected the token (%s); refreshing and retrying once", endpoint, original_status)
            try:
                await self._refresh()
            except RefreshFailedError as exc:
                raise AuthExpiredError(
                    f"API request to {endpoint} failed due to expired token, and refresh failed: {exc}. "
                    f"Original error ({original_status}): {original_body}",
                    endpoint=endpoint,
                    status=original_status,
                    body=original_body,
                    refresh_error=exc,
                ) from exc
            response = await self._send(endpoint, payload)

        if not response.ok:
            if response.status_code in AUTH_FAILURE_STATUSES:
                raise AuthExpiredError(
                    f"API request to {endpoint} still rejected after token refresh ({response.status_code}): "
                    f"{response.text}",
                    endpoint=endpoint,
                    status=response.status_code,
                    body=response.text,
                )
            raise ApiRequestError.from_response(endpoint, response.status_code, response.text)

        if self._proactive_refresh:
            self._pending_refresh = asyncio.create_task(self._refresh_quietly())
        return response

    async def _send(self, endpoint: str, payload: dict[str, Any] | None) -> requests.Response:
        url = f"{self._base_url}{endpoint}"
        self._logger.debug("POST %s", url)
        try:
            response = await asyncio.to_thread(
                self._session.post,
                url,
                json=payload,
                headers=self._headers(),
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise ApiRequestError(f"API request to {endpoint} failed: {exc}", endpoint=endpoint) from exc
        self._adopt_rotated_tokens(response, endpoint)
        return response

    async def _refresh(self) -> None:
        previous_token = self._access_token
        try:
            response = await self._send(REFRESH_ENDPOINT, None)
        except ApiRequestError as exc:
            raise RefreshFailedError(f"Token refresh failed: {exc}", endpoint=REFRESH_ENDPOINT) from exc

        if not response.ok:
            raise RefreshFailedError(
                f"Token refresh failed ({response.status_code}): {response.text}",
                endpoint=REFRESH_ENDPOINT,
                status=response.status_code,
                body=response.text,
            )
        if self._access_token == previous_token:
            raise RefreshFailedError(
                "Token refresh did not return a new auth cookie",
                endpoint=REFRESH_ENDPOINT,
                status=response.status_code,
                body=response.text,
            )
        self._logger.debug("Auth cookie refreshed")

    async def _refresh_quietly(self) -> None:
        try:
            await self._refresh()
        except Exception as exc:  # noqa: BLE001
            self._logger.warning("Proactive token refresh failed: %s", exc)

    async def _wait_for_pending_refresh(self) -> None:
        task, self._pending_refresh = self._pending_refresh, None
        if task is not None:
            await task

    def _headers(self) -> dict[str, str]:
        cookie = f"{AUTH_COOKIE}={self._access_token}"
        if self._datadome_cookie:
            cookie = f"{cookie}; {DATADOME_COOKIE}={self._datadome_cookie}"
        return {**DEFAULT_HEADERS, "Cookie": cookie}

    def _adopt_rotated_tokens(self, response: requests.Response, endpoint: str) -> None:
        rotated = _cookie_value(response.cookies, AUTH_COOKIE)
        if rotated and rotated != self._access_token:
            self._logger.debug("Adopting rotated auth cookie from %s", endpoint)
            self._access_token = rotated
        datadome = _cookie_value(response.cookies, DATADOME_COOKIE)
        if datadome and datadome != self._datadome_cookie:
            self._datadome_cookie = datadome
