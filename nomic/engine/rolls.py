"""
/roll command processing.
Builds the reply for a dice request and keeps track of players who keep asking
for absurd numbers of dice.
"""

import logging
import random

from nomic.engine.dice import EXPRESSIONS, RollResponse, match_expression
from nomic.engine.repository import Outcome, PlayerRepository, attempt

logger = logging.getLogger(__name__)

MAX_DICE = 100

ABUSE_WARNINGS = {
    1: "I'm sorry @{login}, you seem to be trying to overload my circuits. "
       "Please don't do that, or I may have to hurt you.",
    2: "I have warned you @{login}. Don't mistake me for a docile weakling.",
}


class AbuseTracker:
    """Oversized roll requests per login. Lives as long as the processor that owns it."""

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}

    def count(self, login: str) -> int:
        return self._counts.get(login, 0)

    def record(self, login: str) -> int:
        """Register one more oversized request and return the new count."""
        self._counts[login] = self.count(login) + 1
        return self._counts[login]

    def reset(self, login: str) -> None:
        self._counts.pop(login, None)


def invalid_command_message(login: str) -> str:
    message = (
        f"I'm sorry @{login}, the request entered did not match any of my logic circuits. "
        "Please try something which matches one of the following:\n\n```\n"
    )
    for expression in EXPRESSIONS.values():
        message += expression.pattern.pattern + "\n\n"
    message += "```"
    return message


def format_results(result: int | list[int]) -> str:
    if isinstance(result, list):
        return "`" + "".join(f"| {value} " for value in result) + "|`"
    return f"`| {result} |`"


class RollProcessor:
    """Answers /roll comments."""

    def __init__(
        self,
        abuse_tracker: AbuseTracker | None = None,
        rng: random.Random | None = None,
        max_dice: int = MAX_DICE,
    ) -> None:
        self.abuse_tracker = abuse_tracker or AbuseTracker()
        self.rng = rng
        self.max_dice = max_dice

    def _abuse_reply(self, login: str) -> str | None:
        strikes = self.abuse_tracker.record(login)
        logger.info("  - %s requested too many dice (strike %d)", login, strikes)
        warning = ABUSE_WARNINGS.get(strikes)
        return warning.format(login=login) if warning else None

    def build_reply(self, user_login: str, comment: str) -> str | None:
        """
        The comment to post in answer to a roll request.

        Returns None when the request is ignored (repeated oversized requests).
        """
        found = match_expression(comment)
        if found is None:
            return invalid_command_message(user_login)

        # Limits apply to the term that will actually be rolled
        expression, instruction = found
        if int(instruction.group(2)) < 1:
            return invalid_command_message(user_login)

        if int(instruction.group(1)) > self.max_dice:
            return self._abuse_reply(user_login)

        response = RollResponse(message=f"@{user_login} requested I roll ")
        result = expression.evaluate(comment, response, self.rng)

        self.abuse_tracker.reset(user_login)
        return response.message + "\n\nBelow are the results:\n\n" + format_results(result)

    def process_roll(
        self,
        repository: PlayerRepository,
        comments_url: str,
        user_login: str,
        comment: str,
    ) -> Outcome | None:
        """Roll and post the reply. Returns None when nothing was posted."""
        reply = self.build_reply(user_login, comment)
        if reply is None:
            return None
        return attempt(repository.post_comment, comments_url, reply)
