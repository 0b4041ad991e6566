"""
Proposal resolution and closing (/resolve and /close on a proposal's pull request).
Voting itself is tracked by labels on the issue; this module only reads them.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from nomic.engine.events import GameEvent, points_awarded
from nomic.engine.repository import PlayerRepository, RepositoryError, attempt
from nomic.engine.state import Player, PlayerData

logger = logging.getLogger(__name__)

LABEL_TITLES = {
    "open": "Open",
    "quorum": "Quorum",
    "passing": "Passing",
    "failing": "Failing",
    "tied": "Tied",
}

# Proposal titles lead with their ordinal, e.g. "301 - Farms need farmers"
ORDINAL_EXPRESSION = re.compile(r"([0-9]+)")
# Points for a passed proposal are its ordinal minus this offset
POINTS_OFFSET = 291

MESSAGES = {
    "not_owner_close": "@{login}, you cannot close a proposal which you did not create.",
    "not_active_close": "@{login}, you cannot close the proposal because you are not an active player.",
    "not_owner": "@{login}, you cannot resolve a proposal which you did not create.",
    "not_active": "@{login}, you cannot resolve the proposal because you are not an active player.",
    "no_quorum": (
        "@{login}, the proposal does not currently have a quorum and cannot be resolved. "
        "To force the proposal to close, use the **/close** command."
    ),
    "tied_vote": (
        "@{login}, the proposal is currently tied and cannot be accepted or rejected. "
        "If you wish to close the proposal, use the **/close** command."
    ),
    "merge_problem": (
        "@{login}, there was a problem performing the PR merge. Good luck on your journey. \n\n"
        "The error message was: {message}"
    ),
    "point_value": "@{login} has earned {value} points for the passing of {ordinal} (PR #{issue_number})",
}


@dataclass
class ProposalIssue:
    """The parts of a GitHub issue/PR payload the processors need."""
    number: int
    url: str
    title: str
    comments_url: str
    author: str
    labels: list[str] = field(default_factory=list)
    pull_request_url: str | None = None

    def has_label(self, key: str) -> bool:
        return LABEL_TITLES[key] in self.labels

    def labels_without_open(self) -> list[str]:
        return [label for label in self.labels if label != LABEL_TITLES["open"]]

    @property
    def ordinal(self) -> int | None:
        match = ORDINAL_EXPRESSION.search(self.title)
        return int(match.group(1)) if match else None

    @classmethod
    def from_dict(cls, issue: dict[str, Any]) -> "ProposalIssue":
        user = issue.get("user") or {}
        pull_request = issue.get("pull_request") or {}
        return cls(
            number=int(issue.get("number") or 0),
            url=str(issue.get("url") or ""),
            title=str(issue.get("title") or ""),
            comments_url=str(issue.get("comments_url") or ""),
            author=str(user.get("login") or ""),
            labels=[str(label.get("name")) for label in issue.get("labels") or [] if isinstance(label, dict)],
            pull_request_url=pull_request.get("url"),
        )


def _reply(repository: PlayerRepository, comments_url: str, key: str, **kwargs: Any) -> None:
    attempt(repository.post_comment, comments_url, MESSAGES[key].format(**kwargs))


def process_close(
    repository: PlayerRepository,
    comments_url: str,
    user_login: str,
    issue: ProposalIssue,
) -> None:
    """Close a proposal without resolving it. Only its author, an active player, may."""
    if issue.author != user_login:
        _reply(repository, comments_url, "not_owner_close", login=user_login)
        return

    player_data = repository.get_player_data()
    if player_data.find_player(user_login) is None:
        _reply(repository, comments_url, "not_active_close", login=user_login)
        return

    logger.info("  - Closing proposal #%d", issue.number)
    attempt(repository.close_issue, issue.url, issue.labels_without_open())


def process_reject(repository: PlayerRepository, issue: ProposalIssue) -> None:
    logger.info("  - Closing PR #%d", issue.number)
    attempt(repository.close_issue, issue.url, issue.labels_without_open())


def process_accept(repository: PlayerRepository, issue: ProposalIssue, user_login: str) -> None:
    """Close the proposal and merge its pull request. Raises RepositoryError on failure."""
    logger.info('  - Removing "%s" label', LABEL_TITLES["open"])
    repository.close_issue(issue.url, issue.labels_without_open())

    if not issue.pull_request_url:
        raise RepositoryError(f"Issue #{issue.number} has no pull request to merge")

    logger.info("  - Attempting to merge PR")
    repository.merge_pull_request(
        issue.pull_request_url,
        "Resolving Proposal",
        f"Resolving Proposal for @{user_login}",
    )


def process_points(
    repository: PlayerRepository,
    player_data: PlayerData,
    player: Player,
    issue: ProposalIssue,
) -> GameEvent:
    """Award points for a passed proposal. Raises RepositoryError on failure."""
    ordinal = issue.ordinal
    if ordinal is None:
        raise RepositoryError(f"Cannot read a proposal number from title {issue.title!r}")
    value = ordinal - POINTS_OFFSET
    message = MESSAGES["point_value"].format(
        login=player.name, value=value, ordinal=ordinal, issue_number=issue.number,
    )

    logger.info("  - %s has earned %d points", player.name, value)
    player.points += value

    repository.update_player_file(player_data, message)
    repository.post_comment(issue.comments_url, message)
    return points_awarded(player.name, value, ordinal, issue.number)


def process_resolve(
    repository: PlayerRepository,
    comments_url: str,
    user_login: str,
    issue: ProposalIssue,
) -> GameEvent | None:
    """
    Resolve a proposal that has reached quorum.

    Passing proposals are merged and their author earns points; failing ones are
    closed. Tied proposals and proposals without quorum are left open.
    """
    if issue.author != user_login:
        _reply(repository, comments_url, "not_owner", login=user_login)
        return None

    if not issue.has_label("quorum"):
        _reply(repository, comments_url, "no_quorum", login=user_login)
        return None

    player_data = repository.get_player_data()
    logger.info("Processing Resolution")

    player = player_data.find_player(user_login)
    if player is None:
        logger.info("  - Not an active player")
        _reply(repository, comments_url, "not_active", login=user_login)
        return None

    if issue.has_label("tied"):
        logger.info("  - Issue is tied")
        _reply(repository, comments_url, "tied_vote", login=user_login)
        return None

    if issue.has_label("passing"):
        logger.info("  - Issue is passing")
        try:
            process_accept(repository, issue, user_login)
            return process_points(repository, player_data, player, issue)
        except RepositoryError as e:
            logger.error("Resolving proposal #%d failed: %s", issue.number, e)
            _reply(repository, issue.comments_url, "merge_problem", login=user_login, message=str(e))
            return None

    logger.info("  - Issue is failing")
    process_reject(repository, issue)
    return None
