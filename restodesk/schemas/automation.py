"""Schemas for the call-automation platform webhook and relay"""

import re
from datetime import date, time
from typing import Any, Dict, List, Literal, Optional
from uuid import UUID
from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

# Older scenarios send the tenant as user_id, newer ones as restaurant_id
TENANT_ID_FIELDS = ("restaurant_id", "user_id", "tenant_id")

# "19h30" / "19h" as spoken times come out of the voice agent
_SPOKEN_TIME = re.compile(r"^\s*(\d{1,2})\s*[hH]\s*(\d{0,2})\s*$")


def extract_tenant_id(payload: Dict[str, Any]) -> Optional[str]:
    """Return the tenant id whichever historical field carries it"""
    for field in TENANT_ID_FIELDS:
        value = payload.get(field)
        if value:
            return str(value).strip()
    return None


class AutomationEvent(BaseModel):
    """
    Reservation or order captured by the voice agent.

    Field names from the older French scenarios (Nom, Telephone, Date,
    Heure, Nombre_personnes, Choix_menu) are accepted beside the English
    ones, and the tenant id is normalised to tenant_id before validation.
    A legacy event may flag a reservation or an order, not both.
    """
    type: Literal["reservation", "order"]
    tenant_id: UUID
    client_name: str = Field(
        min_length=1,
        validation_alias=AliasChoices("client_name", "name", "Nom"),
    )
    client_phone: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("client_phone", "phone", "Telephone"),
    )
    booking_date: Optional[date] = Field(
        None,
        validation_alias=AliasChoices("date", "Date"),
    )
    requested_time: Optional[time] = Field(
        None,
        validation_alias=AliasChoices("time", "Heure"),
    )
    party_size: int = Field(
        1,
        ge=1,
        validation_alias=AliasChoices("party_size", "Nombre_personnes"),
    )
    items: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("items", "Choix_menu"),
    )

    @model_validator(mode="before")
    @classmethod
    def normalize_legacy_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        data = dict(data)
        data["tenant_id"] = extract_tenant_id(data)

        if not data.get("type"):
            wants_reservation = data.get("type_demande1") == "reservation"
            wants_order = data.get("type_demande2") in ("commande", "order")
            if wants_reservation and wants_order:
                # One event records one entity; the scenario must send two calls
                raise ValueError("type_demande1 and type_demande2 cannot both be set")
            if wants_reservation:
                data["type"] = "reservation"
            elif wants_order:
                data["type"] = "order"

        return data

    @field_validator("client_phone", mode="before")
    @classmethod
    def phone_as_text(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        return str(value)

    @field_validator("requested_time", mode="before")
    @classmethod
    def parse_spoken_time(cls, value: Any) -> Any:
        if value == "":
            return None
        if isinstance(value, str):
            match = _SPOKEN_TIME.match(value)
            if match:
                return time(int(match.group(1)), int(match.group(2) or 0))
        return value

    @field_validator("booking_date", mode="before")
    @classmethod
    def empty_date(cls, value: Any) -> Any:
        return None if value == "" else value

    @field_validator("party_size", mode="before")
    @classmethod
    def default_party_size(cls, value: Any) -> Any:
        if value is None or value == "":
            return 1
        return value

    @field_validator("items", mode="before")
    @classmethod
    def items_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    @model_validator(mode="after")
    def reservation_needs_slot(self) -> "AutomationEvent":
        if self.type == "reservation" and (self.booking_date is None or self.requested_time is None):
            raise ValueError("reservation requires date and time")
        return self


class AutomationEventResponse(BaseModel):
    success: bool = True
    type: str
    client_name: str
    id: UUID


class RelayRequest(BaseModel):
    """Dashboard event forwarded to the automation platform"""
    type: Literal["reservation", "order", "user_activity", "subscription", "minutes_usage"]
    data: Dict[str, Any] = {}


class RelayResponse(BaseModel):
    success: bool
    type: str
    upstream_status: int
