from enum import Enum


class DeskStatus(str, Enum):
    """Desk occupancy state."""

    ACTIVE = "active"
    VACANT = "vacant"
