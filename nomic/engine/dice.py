"""
Dice expression evaluator.
Recognises three notations: simple (NdM), sum (NdM+K) and subtraction (NdM-K).
Used by the /roll command and by farm production.
"""

import random
import re
from dataclasses import dataclass
from typing import Callable


@dataclass
class RollResponse:
    """Accumulates the human-readable description of what was rolled."""
    message: str = ""


def roll(sides: int, rng: random.Random | None = None) -> int:
    """Roll a single die, uniform in [1, sides]."""
    return (rng or random).randint(1, sides)


def _roll_many(count: int, sides: int, rng: random.Random | None) -> list[int]:
    return [roll(sides, rng) for _ in range(count)]


def _constant(text: str) -> int:
    # "2d6+" is accepted with an empty constant
    return int(text) if text else 0


def roll_simple(comment: str, response: RollResponse, rng: random.Random | None = None) -> list[int] | None:
    """NdM -> list of N individual results."""
    match = EXPRESSIONS["simple"].match(comment)
    if not match:
        return None
    die_count = int(match.group(1))
    sides = int(match.group(2))

    response.message += f"{die_count}d{sides}."

    return _roll_many(die_count, sides, rng)


def roll_sum(comment: str, response: RollResponse, rng: random.Random | None = None) -> int | None:
    """NdM+K -> total of N dice plus K."""
    match = EXPRESSIONS["sum"].match(comment)
    if not match:
        return None
    die_count = int(match.group(1))
    sides = int(match.group(2))
    add = _constant(match.group(3))

    response.message += f"{die_count}d{sides} and add {add} to the total."

    return sum(_roll_many(die_count, sides, rng)) + add


def roll_subtraction(comment: str, response: RollResponse, rng: random.Random | None = None) -> int | None:
    """NdM-K -> total of N dice minus K."""
    match = EXPRESSIONS["subtraction"].match(comment)
    if not match:
        return None
    die_count = int(match.group(1))
    sides = int(match.group(2))
    sub = _constant(match.group(3))

    response.message += f"{die_count}d{sides} and subtract {sub} from the total."

    return sum(_roll_many(die_count, sides, rng)) - sub


@dataclass(frozen=True)
class DiceExpression:
    """A named dice notation: the anchored pattern and the function that rolls it."""
    name: str
    pattern: re.Pattern
    fn: Callable[..., int | list[int] | None]

    def match(self, comment: str) -> re.Match | None:
        return self.pattern.search(comment)

    def evaluate(self, comment: str, response: RollResponse, rng: random.Random | None = None):
        return self.fn(comment, response, rng)


# Declaration order matters: the first expression that matches wins.
# All patterns are anchored at the end so "2d8+5" is never read as "2d8".
EXPRESSIONS: dict[str, DiceExpression] = {
    "simple": DiceExpression(
        "simple",
        re.compile(r"([0-9]+)\s*[dD]\s*([0-9]+)\s*\Z"),
        roll_simple,
    ),
    "sum": DiceExpression(
        "sum",
        re.compile(r"([0-9]+)\s*[dD]\s*([0-9]+)\s*\+\s*([0-9]*)\s*\Z"),
        roll_sum,
    ),
    "subtraction": DiceExpression(
        "subtraction",
        re.compile(r"([0-9]+)\s*[dD]\s*([0-9]+)\s*-\s*([0-9]*)\s*\Z"),
        roll_subtraction,
    ),
}


def match_expression(comment: str) -> tuple[DiceExpression, re.Match] | None:
    """Return the first expression that matches the comment, with the match it will roll."""
    for expression in EXPRESSIONS.values():
        match = expression.match(comment)
        if match:
            return expression, match
    return None


def find_expression(comment: str) -> DiceExpression | None:
    """Return the first expression whose pattern matches the comment."""
    found = match_expression(comment)
    return found[0] if found else None


def evaluate(comment: str, response: RollResponse, rng: random.Random | None = None) -> int | list[int] | None:
    """
    Evaluate a dice instruction.

    Returns a list of results for the simple form, a single total for the
    sum/subtraction forms, or None when no expression matches.
    """
    expression = find_expression(comment)
    if expression is None:
        return None
    return expression.evaluate(comment, response, rng)
