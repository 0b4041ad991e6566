"""
Population pool: category name -> head count.
Starvation removes people from "general" first, then at random from the
remaining categories.
"""

import random

from nomic.engine import GENERAL


def total_population(pool: dict[str, int] | None) -> int:
    """Sum of all categories (0 for a missing or empty pool)."""
    if not pool:
        return 0
    return sum(pool.values())


def reduce_population(
    pool: dict[str, int] | None,
    amount: int,
    rng: random.Random | None = None,
) -> int:
    """
    Remove `amount` people from the pool in place.

    The general category is drained first. Any remainder is taken one person at
    a time from a category chosen uniformly among those still populated.

    Returns:
        The number of people that could not be removed (0 if fully satisfied)
    """
    if amount < 0:
        raise ValueError(f"Cannot reduce population by a negative amount: {amount}")
    if not pool or amount == 0:
        return amount

    general = pool.get(GENERAL, 0)
    if amount <= general:
        pool[GENERAL] = general - amount
        return 0

    remaining = amount
    if GENERAL in pool:
        remaining -= general
        pool[GENERAL] = 0

    rng = rng or random
    eligible = [key for key, count in pool.items() if count > 0]

    while remaining > 0 and eligible:
        key = rng.choice(eligible)
        pool[key] -= 1
        remaining -= 1
        if pool[key] <= 0:
            eligible = [k for k in eligible if k != key]

    return remaining
