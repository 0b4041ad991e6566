"""
In-memory PlayerRepository.
Keeps the player file as a dict and records everything the engine writes.
Optionally mirrors the player file to a JSON file on disk (offline runs).
"""

import json
from copy import deepcopy
from pathlib import Path
from typing import Any

from nomic.engine.repository import PlayerRepository
from nomic.engine.state import FamineNotice, PlayerData


class InMemoryRepository(PlayerRepository):
    def __init__(self, player_file: dict[str, Any] | None = None, path: Path | str | None = None):
        self.path = Path(path) if path else None
        if player_file is None and self.path and self.path.exists():
            with open(self.path, "r") as f:
                player_file = json.load(f)
        self.player_file: dict[str, Any] = deepcopy(player_file) if player_file else {"activePlayers": []}

        self.commits: list[str] = []  # commit messages, in order
        self.comments: list[tuple[str, str]] = []  # (comments_url, body)
        self.closed: list[tuple[str, list[str] | None]] = []  # (issue_url, labels)
        self.merged: list[str] = []  # pull request urls
        self.notices: list[FamineNotice] = []  # open famine notices
        self.notice_bodies: dict[int, tuple[str, str]] = {}  # number -> (title, body)
        self._next_issue = 1

    @classmethod
    def from_file(cls, path: Path | str) -> "InMemoryRepository":
        return cls(path=path)

    def get_player_data(self) -> PlayerData:
        return PlayerData.from_dict(deepcopy(self.player_file))

    def update_player_file(self, player_data: PlayerData, message: str) -> None:
        self.player_file = player_data.to_dict()
        self.commits.append(message)
        if self.path:
            with open(self.path, "w") as f:
                json.dump(self.player_file, f, indent=2)
                f.write("\n")

    def post_comment(self, comments_url: str, body: str) -> None:
        self.comments.append((comments_url, body))

    def close_issue(self, issue_url: str, labels: list[str] | None = None) -> None:
        self.closed.append((issue_url, labels))
        self.notices = [n for n in self.notices if n.url != issue_url]

    def create_famine_notice(self, login: str, title: str, body: str) -> FamineNotice:
        number = self._next_issue
        self._next_issue += 1
        notice = FamineNotice(
            number=number,
            url=f"memory://issues/{number}",
            comments_url=f"memory://issues/{number}/comments",
            assignee=login,
        )
        self.notices.append(notice)
        self.notice_bodies[number] = (title, body)
        return notice

    def list_open_famine_notices(self) -> list[FamineNotice]:
        return list(self.notices)

    def merge_pull_request(self, pull_request_url: str, commit_title: str, commit_message: str) -> None:
        self.merged.append(pull_request_url)
