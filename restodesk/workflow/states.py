"""Status domains and transition tables for reservations and orders"""

import enum
from typing import Dict, FrozenSet, Optional, Union


class EntityType(str, enum.Enum):
    """Records that carry a workflow status"""
    RESERVATION = "reservation"
    ORDER = "order"


class ReservationStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    ARRIVED = "arrived"
    CANCELLED = "cancelled"


class OrderStatus(str, enum.Enum):
    RECEIVED = "received"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"


Status = Union[ReservationStatus, OrderStatus]

STATUS_TYPES = {
    EntityType.RESERVATION: ReservationStatus,
    EntityType.ORDER: OrderStatus,
}

INITIAL_STATUS: Dict[EntityType, Status] = {
    EntityType.RESERVATION: ReservationStatus.CONFIRMED,
    EntityType.ORDER: OrderStatus.RECEIVED,
}

# Every legal move. Orders are a strict chain; a confirmed reservation
# branches to exactly one of two terminal states.
TRANSITIONS: Dict[Status, FrozenSet[Status]] = {
    ReservationStatus.CONFIRMED: frozenset(
        {ReservationStatus.ARRIVED, ReservationStatus.CANCELLED}
    ),
    ReservationStatus.ARRIVED: frozenset(),
    ReservationStatus.CANCELLED: frozenset(),
    OrderStatus.RECEIVED: frozenset({OrderStatus.PREPARING}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY}),
    OrderStatus.READY: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
}

# Column stamped when a record enters the status
STATUS_TIMESTAMPS: Dict[Status, str] = {
    ReservationStatus.ARRIVED: "arrived_at",
    ReservationStatus.CANCELLED: "cancelled_at",
    OrderStatus.PREPARING: "preparing_at",
    OrderStatus.READY: "ready_at",
    OrderStatus.DELIVERED: "delivered_at",
}

STATUS_LABELS: Dict[Status, str] = {
    ReservationStatus.CONFIRMED: "Confirmed",
    ReservationStatus.ARRIVED: "Arrived",
    ReservationStatus.CANCELLED: "Cancelled",
    OrderStatus.RECEIVED: "Received",
    OrderStatus.PREPARING: "Preparing",
    OrderStatus.READY: "Ready",
    OrderStatus.DELIVERED: "Delivered",
}


def parse_status(entity_type: EntityType, value: Union[str, Status]) -> Optional[Status]:
    """Coerce a raw string into the entity's status enum, or None if unknown"""
    try:
        return STATUS_TYPES[EntityType(entity_type)](value)
    except ValueError:
        return None


def is_terminal(status: Status) -> bool:
    return not TRANSITIONS[status]


def next_state(entity_type: EntityType, current: Union[str, Status]) -> Optional[Status]:
    """
    Canonical "advance" target of a status.
    
    Returns None for terminal states and for a confirmed reservation, where
    the caller has to choose between arrived and cancelled explicitly.
    """
    status = parse_status(entity_type, current)
    if status is None:
        return None
    
    targets = TRANSITIONS[status]
    if len(targets) != 1:
        return None
    return next(iter(targets))


def is_valid_transition(
    entity_type: EntityType,
    current: Union[str, Status],
    requested: Union[str, Status],
) -> bool:
    """Whether moving from current to requested is a legal single step"""
    source = parse_status(entity_type, current)
    target = parse_status(entity_type, requested)
    if source is None or target is None:
        return False
    return target in TRANSITIONS[source]


def status_label(entity_type: EntityType, value: Union[str, Status]) -> str:
    status = parse_status(entity_type, value)
    if status is None:
        return str(value)
    return STATUS_LABELS[status]
