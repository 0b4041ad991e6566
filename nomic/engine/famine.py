"""
Weekly hunger process.

For every active player with a village:
1. Last week's unfed people starve
2. A village with nobody left is removed and its owner's points reset
3. Active farms roll this week's food, which offsets hunger
4. Everyone alive needs one unit of food
5. A remaining deficit opens a famine notice; a surplus resolves old ones

Starvation is applied before this week's harvest, so a village can lose people
in the same week its farms would have fed them.
"""

import logging
import random
from typing import Callable

from nomic.engine.events import (
    GameEvent,
    starvation,
    village_wiped_out,
    farm_production,
    famine,
    famine_resolved,
)
from nomic.engine.farming import get_active_farms, roll_production
from nomic.engine.population import reduce_population, total_population
from nomic.engine.repository import PlayerRepository, attempt
from nomic.engine.state import Player, PlayerData

logger = logging.getLogger(__name__)

FEEDING_MESSAGE = "Feeding the population."

MESSAGES = {
    "famine_title": "@{login} feed your population!",
    "famine": (
        "@{login}'s village of {village_name} has famine in their population! \n\n"
        "There are {farm_count} active farms, which produced enough to feed {production} people this week. "
        "An additional {hunger_count} people need food."
    ),
    "starvation": "@{login}'s village, {village_name} had {death_count} people starve to death.",
    "wipe_out": (
        "@{login}'s village has all starved to death. "
        "Their village has been removed, and their points have been reduced to 0."
    ),
    "resolved": "@{login} has resolved their villages hungry population.",
}


def process_starvation(
    player_data: PlayerData,
    player: Player,
    repository: PlayerRepository,
    rng: random.Random | None = None,
) -> GameEvent:
    """Kill off last week's unfed people and clear the hunger balance."""
    village = player.village
    death_count = min(village.total_population, village.hunger)

    message = MESSAGES["starvation"].format(
        login=player.name,
        village_name=village.name,
        death_count=death_count,
    )
    logger.info("  - %s", message)

    unremoved = reduce_population(village.population, death_count, rng)
    village.hunger = 0

    attempt(repository.update_player_file, player_data, message)

    return starvation(player.name, village.name, death_count, unremoved)


def process_wipe_out(player_data: PlayerData, player: Player, repository: PlayerRepository) -> GameEvent:
    """Remove a village whose whole population is gone."""
    village_name = player.village.name
    player.village = None
    player.points = 0

    message = MESSAGES["wipe_out"].format(login=player.name)
    logger.info("  - %s", message)

    attempt(repository.update_player_file, player_data, message)

    return village_wiped_out(player.name, village_name)


def process_farm_production(player: Player, rng: random.Random | None = None) -> tuple[int, int]:
    """
    Roll this week's harvest and subtract it from the hunger balance.

    Returns:
        (active_farms, production)
    """
    village = player.village
    active_farms = get_active_farms(village.farms, village.farmers)
    production = roll_production(active_farms, rng)

    logger.info("  - Processing Farm Production for %s: %d - %d", player.name, active_farms, production)

    village.hunger -= production
    return active_farms, production


def create_hunger_issue(
    player: Player,
    active_farms: int,
    production: int,
    repository: PlayerRepository,
) -> bool:
    """Open a famine notice for the player. Returns whether the issue was created."""
    village = player.village
    message = MESSAGES["famine"].format(
        login=player.name,
        village_name=village.name,
        farm_count=active_farms,
        production=production,
        hunger_count=village.hunger,
    )
    logger.info("  - %s", message)

    title = MESSAGES["famine_title"].format(login=player.name)
    outcome = attempt(repository.create_famine_notice, player.name, title, message)
    return outcome.ok


def close_hunger_issues(player: Player, repository: PlayerRepository) -> list[GameEvent]:
    """Resolve every open famine notice assigned to a player who is now fed."""
    if player.village is None or player.village.hunger > 0:
        return []

    outcome = attempt(repository.list_open_famine_notices)
    if not outcome.ok:
        return []

    events = []
    message = MESSAGES["resolved"].format(login=player.name)
    for notice in outcome.value or []:
        if notice.assignee != player.name:
            continue
        resolved = attempt(repository.resolve_famine_notice, notice, message)
        if resolved.ok:
            logger.info("  - Closed famine notice #%d for %s", notice.number, player.name)
            events.append(famine_resolved(player.name, notice.number))
    return events


def process_player_hunger(
    player_data: PlayerData,
    player: Player,
    repository: PlayerRepository,
    rng: random.Random | None = None,
) -> list[GameEvent]:
    """Run one week of hunger for a single player. Mutates the player in place."""
    if player.village is None:
        logger.info("  - %s: NO VILLAGE", player.name)
        return []

    if player.village.population is None:
        logger.info("  - %s: NO POPULATION", player.name)
        return []

    events: list[GameEvent] = []

    if player.village.hunger > 0:
        events.append(process_starvation(player_data, player, repository, rng))

    if total_population(player.village.population) == 0:
        events.append(process_wipe_out(player_data, player, repository))
        return events

    active_farms, production = process_farm_production(player, rng)
    events.append(farm_production(player.name, active_farms, production))

    village = player.village
    population_count = village.total_population
    village.hunger += population_count

    logger.info("  - %s: population - %d | hunger: %d", player.name, population_count, village.hunger)

    if village.hunger > 0:
        created = create_hunger_issue(player, active_farms, production, repository)
        events.append(famine(player.name, village.name, active_farms, production, village.hunger, created))
    else:
        events.extend(close_hunger_issues(player, repository))

    return events


def process_hunger(
    repository: PlayerRepository,
    rng: random.Random | None = None,
    next_run: Callable[[], str] | None = None,
) -> list[GameEvent]:
    """
    Run the weekly hunger process for every active player.

    Loading the player file is the one failure that propagates. After all
    players are processed the snapshot is written back once; the next
    scheduled run is logged whether or not that write succeeded.
    """
    logger.info("Performing Hunger Process...")

    player_data = repository.get_player_data()
    if not player_data.active_players:
        logger.warning("No active players found!")
        return []

    logger.info(" :: %d active players :: ", len(player_data.active_players))

    events: list[GameEvent] = []
    try:
        for player in player_data.active_players:
            events.extend(process_player_hunger(player_data, player, repository, rng))
        attempt(repository.update_player_file, player_data, FEEDING_MESSAGE)
    finally:
        logger.info(
            "Finished Hunger Process. Next Hunger Job Scheduled to run at %s",
            next_run() if next_run else "NONE",
        )
    return events
