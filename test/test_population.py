"""
Population pool depletion: general first, then random categories.
"""

import random

import pytest

from nomic.engine.population import reduce_population, total_population

from conftest import NoDraws


def test_total_population():
    assert total_population(None) == 0
    assert total_population({}) == 0
    assert total_population({"general": 2, "farming": 3}) == 5


def test_general_is_drained_first_without_randomness():
    pool = {"general": 5, "farming": 3}
    assert reduce_population(pool, 4, NoDraws()) == 0
    assert pool == {"general": 1, "farming": 3}


def test_exactly_general_needs_no_randomness():
    pool = {"general": 4, "farming": 3}
    assert reduce_population(pool, 4, NoDraws()) == 0
    assert pool == {"general": 0, "farming": 3}


@pytest.mark.parametrize("seed", range(30))
def test_amount_within_population_is_fully_removed(seed):
    pool = {"general": 2, "farming": 5, "soldiers": 3}
    assert reduce_population(pool, 7, random.Random(seed)) == 0
    assert total_population(pool) == 3
    assert pool["general"] == 0
    assert all(count >= 0 for count in pool.values())


@pytest.mark.parametrize("seed", range(10))
def test_amount_beyond_population_returns_the_rest(seed):
    pool = {"general": 1, "farming": 2, "miners": 4}
    assert reduce_population(pool, 12, random.Random(seed)) == 5
    assert total_population(pool) == 0
    assert all(count == 0 for count in pool.values())


def test_never_goes_negative():
    rng = random.Random(7)
    for _ in range(200):
        pool = {"general": rng.randint(0, 5), "farming": rng.randint(0, 5), "miners": rng.randint(0, 5)}
        before = total_population(pool)
        amount = rng.randint(0, 20)
        left = reduce_population(pool, amount, rng)
        assert all(count >= 0 for count in pool.values())
        assert left == max(0, amount - before)
        assert total_population(pool) == max(0, before - amount)


def test_empty_categories_are_never_chosen():
    pool = {"general": 0, "farming": 0, "miners": 4}
    assert reduce_population(pool, 3, random.Random(2)) == 0
    assert pool == {"general": 0, "farming": 0, "miners": 1}


def test_missing_general_is_not_added():
    pool = {"farming": 2}
    assert reduce_population(pool, 1, random.Random(0)) == 0
    assert pool == {"farming": 1}


def test_seeded_reduction_is_deterministic():
    pools = []
    for _ in range(2):
        pool = {"general": 1, "farming": 10, "miners": 10, "soldiers": 10}
        reduce_population(pool, 15, random.Random(42))
        pools.append(pool)
    assert pools[0] == pools[1]


def test_missing_pool_removes_nobody():
    assert reduce_population(None, 3) == 3
    assert reduce_population({}, 3) == 3


def test_negative_amount_is_rejected():
    with pytest.raises(ValueError):
        reduce_population({"general": 3}, -1)
