"""
Repository interface used by the engine to read/write game data on GitHub.
Implementations live in nomic.api (GitHub REST, in-memory).

Engine code never lets a RepositoryError escape a single player's step:
calls are made through attempt(), which turns the failure into an Outcome.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable

from nomic.engine.state import FamineNotice, PlayerData

logger = logging.getLogger(__name__)

HUNGER_LABEL = "Hunger"


class RepositoryError(Exception):
    """Any failure talking to the game repository (transport, HTTP status, bad payload)."""


@dataclass
class Outcome:
    """Result of a repository call: either a value or the error that stopped it."""
    ok: bool
    value: Any = None
    error: RepositoryError | None = None


def attempt(call: Callable[..., Any], *args: Any, **kwargs: Any) -> Outcome:
    """Run a repository call, logging and capturing a RepositoryError instead of raising."""
    try:
        return Outcome(ok=True, value=call(*args, **kwargs))
    except RepositoryError as e:
        name = getattr(call, "__name__", repr(call))
        logger.error("Repository call %s failed: %s", name, e)
        return Outcome(ok=False, error=e)


class PlayerRepository(ABC):
    """Where player data lives and where issues/comments are written."""

    @abstractmethod
    def get_player_data(self) -> PlayerData:
        """Load the current player file."""

    @abstractmethod
    def update_player_file(self, player_data: PlayerData, message: str) -> None:
        """Write the player file back, using `message` as the commit message."""

    @abstractmethod
    def post_comment(self, comments_url: str, body: str) -> None:
        """Comment on an issue."""

    @abstractmethod
    def close_issue(self, issue_url: str, labels: list[str] | None = None) -> None:
        """Close an issue, optionally replacing its labels."""

    @abstractmethod
    def create_famine_notice(self, login: str, title: str, body: str) -> FamineNotice:
        """Open a Hunger issue assigned to `login`."""

    @abstractmethod
    def list_open_famine_notices(self) -> list[FamineNotice]:
        """All open Hunger issues."""

    @abstractmethod
    def merge_pull_request(self, pull_request_url: str, commit_title: str, commit_message: str) -> None:
        """Merge the pull request behind a proposal."""

    def resolve_famine_notice(self, notice: FamineNotice, message: str) -> None:
        """Comment on a famine notice, then close it."""
        self.post_comment(notice.comments_url, message)
        self.close_issue(notice.url)
