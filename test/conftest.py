"""
Shared fixtures: seeded randomness and repositories that record (or refuse) writes.
"""

import os

# Before any nomic import: no background timers, no signature checks
os.environ["NOMIC_ENABLE_SCHEDULER"] = "false"
os.environ["WEBHOOK_SECRET"] = ""

import random

import pytest

from nomic.api.memory import InMemoryRepository
from nomic.engine.repository import RepositoryError


class FlakyRepository(InMemoryRepository):
    """InMemoryRepository whose listed methods raise RepositoryError."""

    def __init__(self, player_file=None, fail=()):
        super().__init__(player_file)
        self.fail = set(fail)
        self.calls: list[str] = []

    def _check(self, name):
        self.calls.append(name)
        if name in self.fail:
            raise RepositoryError(f"{name} unavailable")

    def get_player_data(self):
        self._check("get_player_data")
        return super().get_player_data()

    def update_player_file(self, player_data, message):
        self._check("update_player_file")
        return super().update_player_file(player_data, message)

    def post_comment(self, comments_url, body):
        self._check("post_comment")
        return super().post_comment(comments_url, body)

    def close_issue(self, issue_url, labels=None):
        self._check("close_issue")
        return super().close_issue(issue_url, labels)

    def create_famine_notice(self, login, title, body):
        self._check("create_famine_notice")
        return super().create_famine_notice(login, title, body)

    def list_open_famine_notices(self):
        self._check("list_open_famine_notices")
        return super().list_open_famine_notices()

    def merge_pull_request(self, pull_request_url, commit_title, commit_message):
        self._check("merge_pull_request")
        return super().merge_pull_request(pull_request_url, commit_title, commit_message)


class NoDraws:
    """Stands in for random.Random where no randomness may be consumed."""

    def randint(self, a, b):
        raise AssertionError("unexpected random draw")

    def choice(self, seq):
        raise AssertionError("unexpected random draw")


def make_village(name="Greenhollow", farms=0, hunger=0, population=None):
    village = {"name": name, "farms": farms, "hunger": hunger}
    if population is not None:
        village["population"] = population
    return village


def make_player(name, points=0, village=None):
    player = {"name": name, "points": points}
    if village is not None:
        player["village"] = village
    return player


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def repository():
    return InMemoryRepository()
