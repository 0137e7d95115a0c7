from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

_KNOWN_KEYS = ("name", "accessToken", "datadomeCookie")


@dataclass(slots=True)
class Credential:
    """Stored access for one end user.

    Mutated in place while a run rotates the user's tokens. Keys this project
    does not know about are kept in ``extra`` so a write never drops them.
    """

    access_token: str
    name: Optional[str] = None
    datadome_cookie: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Credential":
        return cls(
            access_token=str(payload["accessToken"]),
            name=payload.get("name") or None,
            datadome_cookie=payload.get("datadomeCookie") or None,
            extra={key: value for key, value in payload.items() if key not in _KNOWN_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.name:
            payload["name"] = self.name
        payload["accessToken"] = self.access_token
        if self.datadome_cookie:
            payload["datadomeCookie"] = self.datadome_cookie
        payload.update(self.extra)
        return payload

    @property
    def label(self) -> str:
        return self.name or "<unnamed user>"

    def masked_token(self) -> str:
        if len(self.access_token) <= 8:
            return "****"
        return f"{self.access_token[:4]}…{self.access_token[-4:]}"
