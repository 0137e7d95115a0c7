"""Data models."""

from .credential import Credential
from .travel import Card, CustomerInfo, Travel, TravelStatus

__all__ = ["Card", "Credential", "CustomerInfo", "Travel", "TravelStatus"]
