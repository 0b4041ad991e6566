"""
Farm production model.
Only staffed farms produce; each active farm rolls FARM_PRODUCTION once.
"""

import math
import random
from fractions import Fraction

from nomic.engine import FARM_PRODUCTION, FARMERS_REQUIRED
from nomic.engine.dice import RollResponse, roll_sum


def get_active_farms(farm_count: int, farmer_count: int, farmers_required: int = FARMERS_REQUIRED) -> int:
    """
    Number of farms with enough farmers to work them.

    floor(max(0, farms - max(0, farms * R - farmers) / R)). Exact rational
    arithmetic, so large counts never suffer float rounding.
    """
    shortfall = Fraction(max(0, farm_count * farmers_required - farmer_count), farmers_required)
    return math.floor(max(0, farm_count - shortfall))


def roll_production(active_farms: int, rng: random.Random | None = None) -> int:
    """Total food produced this week: one FARM_PRODUCTION roll per active farm."""
    return sum(roll_sum(FARM_PRODUCTION, RollResponse(), rng) for _ in range(active_farms))
