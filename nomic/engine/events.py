"""
Engine events for logging and API responses.
Events describe what happened to each village during a hunger cycle.
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class GameEvent:
    """Base event class. All events have a type and payload."""
    type: str
    payload: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameEvent":
        return cls(type=data["type"], payload=data["payload"])


# ===== Event Type Constants =====

# Famine events
STARVATION = "starvation"
VILLAGE_WIPED_OUT = "village_wiped_out"
FARM_PRODUCTION = "farm_production"
FAMINE = "famine"
FAMINE_RESOLVED = "famine_resolved"

# Proposal events
POINTS_AWARDED = "points_awarded"


# ===== Event Factory Functions =====

def starvation(login: str, village: str, death_count: int, unremoved: int = 0) -> GameEvent:
    return GameEvent(STARVATION, {
        "login": login,
        "village": village,
        "death_count": death_count,
        "unremoved": unremoved,  # should always be 0; death_count is capped at the population
    })


def village_wiped_out(login: str, village: str) -> GameEvent:
    return GameEvent(VILLAGE_WIPED_OUT, {
        "login": login,
        "village": village,
    })


def farm_production(login: str, active_farms: int, production: int) -> GameEvent:
    return GameEvent(FARM_PRODUCTION, {
        "login": login,
        "active_farms": active_farms,
        "production": production,
    })


def famine(
    login: str,
    village: str,
    active_farms: int,
    production: int,
    hunger: int,
    notice_created: bool,
) -> GameEvent:
    """Emitted when a village ends the week with unfed people."""
    return GameEvent(FAMINE, {
        "login": login,
        "village": village,
        "active_farms": active_farms,
        "production": production,
        "hunger": hunger,
        "notice_created": notice_created,
    })


def famine_resolved(login: str, issue_number: int) -> GameEvent:
    return GameEvent(FAMINE_RESOLVED, {
        "login": login,
        "issue_number": issue_number,
    })


def points_awarded(login: str, value: int, ordinal: int, issue_number: int) -> GameEvent:
    return GameEvent(POINTS_AWARDED, {
        "login": login,
        "value": value,
        "ordinal": ordinal,
        "issue_number": issue_number,
    })
