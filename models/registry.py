"""Catalog change events and introspection stats."""

from typing import Literal, Optional

from pydantic import BaseModel

RegistryEventType = Literal[
    "registered",
    "unregistered",
    "enabled",
    "disabled",
    "priorityChanged",
    "cleared",
]


class RegistryEvent(BaseModel):
    """Notification delivered synchronously to catalog listeners."""

    type: RegistryEventType
    detector_name: Optional[str] = None
    timestamp: float


class RegistryStats(BaseModel):
    """Counts and priority-ordered names, for debugging and UIs."""

    total: int
    enabled: int
    disabled: int
    by_priority: list[str]
