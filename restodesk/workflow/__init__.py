"""Reservation and order status workflow"""

from restodesk.workflow.states import (
    EntityType,
    ReservationStatus,
    OrderStatus,
    INITIAL_STATUS,
    is_terminal,
    is_valid_transition,
    next_state,
    parse_status,
    status_label,
)
from restodesk.workflow.engine import apply_transition

__all__ = [
    "EntityType",
    "ReservationStatus",
    "OrderStatus",
    "INITIAL_STATUS",
    "is_terminal",
    "is_valid_transition",
    "next_state",
    "parse_status",
    "status_label",
    "apply_transition",
]
