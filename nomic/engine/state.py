"""
Player data representation.
Mirrors the JSON player file kept in the game repository. Unknown keys are
carried through untouched so a round trip never loses data.
Legacy population counts are normalised here, on ingestion.
"""

from dataclasses import dataclass, field
from typing import Any

from nomic.engine import FARMING, GENERAL
from nomic.engine.population import total_population

VILLAGE_KEYS = ("name", "farms", "hunger", "population")
PLAYER_KEYS = ("name", "points", "village")


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def normalize_population(value: Any) -> dict[str, int] | None:
    """
    Canonical population pool from whatever the player file holds.

    Legacy: a bare number n becomes {"general": n}; 0 or missing means the
    village has no population at all (None).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        count = max(0, int(value))
        return {GENERAL: count} if count else None
    if isinstance(value, dict):
        return {str(k): max(0, _int(v)) for k, v in value.items()}
    return None


@dataclass
class Village:
    """A player's settlement."""
    name: str
    farms: int = 0
    hunger: int = 0  # positive = unfed people carried into next week
    population: dict[str, int] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def total_population(self) -> int:
        return total_population(self.population)

    @property
    def farmers(self) -> int:
        return (self.population or {}).get(FARMING, 0)

    def to_dict(self) -> dict[str, Any]:
        out = dict(self.extra)
        out.update({
            "name": self.name,
            "farms": self.farms,
            "hunger": self.hunger,
        })
        if self.population is not None:
            out["population"] = dict(self.population)
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Village":
        if not isinstance(data, dict):
            data = {}
        population = normalize_population(data.get("population"))
        extra = {k: v for k, v in data.items() if k not in VILLAGE_KEYS}
        if population is None and data.get("population") is not None:
            # Legacy "no population" value (e.g. 0) is written back as read
            extra["population"] = data["population"]
        return cls(
            name=str(data.get("name") or ""),
            farms=max(0, _int(data.get("farms"))),
            hunger=_int(data.get("hunger")),
            population=population,
            extra=extra,
        )


@dataclass
class Player:
    """An active player, keyed by GitHub login."""
    name: str
    points: int = 0
    village: Village | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        out = dict(self.extra)
        out.update({"name": self.name, "points": self.points})
        if self.village is not None:
            out["village"] = self.village.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Player":
        if not isinstance(data, dict):
            data = {}
        village_data = data.get("village")
        extra = {k: v for k, v in data.items() if k not in PLAYER_KEYS}
        if village_data is not None and not isinstance(village_data, dict):
            extra["village"] = village_data
        return cls(
            name=str(data.get("name") or ""),
            points=_int(data.get("points")),
            # An empty object is still a village
            village=Village.from_dict(village_data) if isinstance(village_data, dict) else None,
            extra=extra,
        )


@dataclass
class PlayerData:
    """Snapshot of the player file. Mutated in place by the engine."""
    active_players: list[Player] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def find_player(self, login: str) -> Player | None:
        for player in self.active_players:
            if player.name == login:
                return player
        return None

    def to_dict(self) -> dict[str, Any]:
        out = dict(self.extra)
        out["activePlayers"] = [p.to_dict() for p in self.active_players]
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PlayerData":
        if not isinstance(data, dict):
            data = {}
        players = data.get("activePlayers") or []
        return cls(
            active_players=[Player.from_dict(p) for p in players if isinstance(p, dict)],
            extra={k: v for k, v in data.items() if k != "activePlayers"},
        )


@dataclass
class FamineNotice:
    """An open Hunger issue on the game repository."""
    number: int
    url: str
    comments_url: str
    assignee: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "url": self.url,
            "comments_url": self.comments_url,
            "assignee": self.assignee,
        }

    @classmethod
    def from_issue(cls, issue: dict[str, Any]) -> "FamineNotice":
        """Build from a GitHub issue JSON object."""
        assignee = issue.get("assignee") or {}
        return cls(
            number=_int(issue.get("number")),
            url=str(issue.get("url") or ""),
            comments_url=str(issue.get("comments_url") or ""),
            assignee=assignee.get("login") if isinstance(assignee, dict) else None,
        )
