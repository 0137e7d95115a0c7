from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List

ELIGIBLE_PRODUCT_TYPE = "TGV_MAX_JEUNE"
VALID_CONTRACT_STATUS = "VALIDE"


class TravelStatus(str, Enum):
    """Confirmation state reported by the booking API for a travel."""

    TOO_EARLY_TO_CONFIRM = "TOO_EARLY_TO_CONFIRM"
    TOO_LATE_TO_CONFIRM = "TOO_LATE_TO_CONFIRM"
    TO_BE_CONFIRMED = "TO_BE_CONFIRMED"
    WILL_BE_CANCELED = "WILL_BE_CANCELED"
    CONFIRMED = "CONFIRMED"


def _parse_status(value: Any) -> TravelStatus | str:
    try:
        return TravelStatus(value)
    except ValueError:
        return str(value)


@dataclass(slots=True, frozen=True)
class Travel:
    """A booked travel as returned by the travel consultation endpoint."""

    order_id: str
    dv_number: str
    departure_date_time: str
    train_number: str
    travel_confirmed: TravelStatus | str

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Travel":
        return cls(
            order_id=str(payload.get("orderId", "")),
            dv_number=str(payload.get("dvNumber", "")),
            departure_date_time=str(payload.get("departureDateTime", "")),
            train_number=str(payload.get("trainNumber", "")),
            travel_confirmed=_parse_status(payload.get("travelConfirmed")),
        )

    @property
    def needs_confirmation(self) -> bool:
        return self.travel_confirmed == TravelStatus.TO_BE_CONFIRMED

    def confirmation_payload(self) -> dict[str, str]:
        return {
            "marketingCarrierRef": self.dv_number,
            "trainNumber": self.train_number,
            "departureDateTime": self.departure_date_time,
        }


@dataclass(slots=True, frozen=True)
class Card:
    card_number: str
    product_type: str
    contract_status: str

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Card":
        return cls(
            card_number=str(payload.get("cardNumber", "")),
            product_type=str(payload.get("productType", "")),
            contract_status=str(payload.get("contractStatus", "")),
        )

    @property
    def is_eligible(self) -> bool:
        return self.contract_status == VALID_CONTRACT_STATUS and self.product_type == ELIGIBLE_PRODUCT_TYPE


@dataclass(slots=True)
class CustomerInfo:
    """Customer profile with the cards attached to the account."""

    first_name: str
    last_name: str
    cards: List[Card] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "CustomerInfo":
        raw_cards = payload.get("cards") or []
        return cls(
            first_name=str(payload.get("firstName", "")),
            last_name=str(payload.get("lastName", "")),
            cards=[Card.from_dict(item) for item in raw_cards if isinstance(item, dict)],
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def eligible_cards(self) -> List[Card]:
        return [card for card in self.cards if card.is_eligible]
