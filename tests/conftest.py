"""
Shared fixtures for the max-confirmator test suite.

HTTP is never performed: the booking client gets a mocked ``requests.Session``
whose ``post`` returns real ``requests.Response`` objects built here.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import Mock

import pytest
import requests
from requests.cookies import cookiejar_from_dict

# Add project root to path to allow imports without installing
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


def make_response(
    status: int = 200,
    json_body: Any = None,
    *,
    text: Optional[str] = None,
    cookies: Optional[Dict[str, str]] = None,
) -> requests.Response:
    """Build a ``requests.Response`` as the transport adapter would."""
    response = requests.Response()
    response.status_code = status
    if json_body is not None:
        response._content = json.dumps(json_body).encode("utf-8")
    else:
        response._content = (text or "").encode("utf-8")
    response.encoding = "utf-8"
    response.headers["Content-Type"] = "application/json"
    if cookies:
        response.cookies = cookiejar_from_dict(cookies)
    return response


def make_session(*responses: Any) -> Mock:
    """Session mock whose ``post`` returns ``responses`` in order."""
    session = Mock(spec=requests.Session)
    session.post.side_effect = list(responses)
    return session


def sent_cookie(session: Mock, call_index: int) -> str:
    return session.post.call_args_list[call_index].kwargs["headers"]["Cookie"]


def sent_urls(session: Mock) -> List[str]:
    return [call.args[0] for call in session.post.call_args_list]


class RoutedSession:
    """Session stand-in that answers by endpoint and records the cookies sent."""

    def __init__(self, routes: Dict[str, Callable[[Dict[str, Any], str], requests.Response]]) -> None:
        self.routes = routes
        self.calls: List[tuple[str, str]] = []

    def post(self, url: str, json: Any = None, headers: Optional[Dict[str, str]] = None, timeout: Any = None):
        cookie = (headers or {}).get("Cookie", "")
        for endpoint, handler in self.routes.items():
            if url.endswith(endpoint):
                self.calls.append((endpoint, cookie))
                return handler(json, cookie)
        raise AssertionError(f"Unexpected URL {url}")

    def close(self) -> None:
        pass


class MemoryStore:
    """In-memory parameter store recording every write."""

    def __init__(self, values: Optional[Dict[str, Optional[str]]] = None) -> None:
        self.values: Dict[str, Optional[str]] = dict(values or {})
        self.puts: List[tuple[str, str]] = []

    async def get(self, name: str) -> Optional[str]:
        return self.values.get(name)

    async def put(self, name: str, value: str) -> None:
        self.puts.append((name, value))
        self.values[name] = value


def customer_payload(*cards: Dict[str, str], first_name: str = "Camille", last_name: str = "Martin") -> Dict[str, Any]:
    return {"firstName": first_name, "lastName": last_name, "cards": list(cards)}


def card_payload(number: str, *, product: str = "TGV_MAX_JEUNE", status: str = "VALIDE") -> Dict[str, str]:
    return {"cardNumber": number, "productType": product, "contractStatus": status}


def travel_payload(order_id: str, status: str = "TO_BE_CONFIRMED") -> Dict[str, str]:
    return {
        "orderId": order_id,
        "dvNumber": f"DV{order_id}",
        "departureDateTime": "2026-10-17T08:04:00",
        "trainNumber": "6603",
        "travelConfirmed": status,
    }


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()
