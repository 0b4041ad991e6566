"""
Main entry point for offline runs of the Nomic bot engine.
Simulates a few weeks of hunger against a local player file (or a built-in
sample) without touching GitHub.
"""

import argparse
import logging
import random

from nomic import config
from nomic.api.memory import InMemoryRepository
from nomic.engine.famine import process_hunger
from nomic.engine.rolls import RollProcessor

SAMPLE_PLAYERS = {
    "activePlayers": [
        {
            "name": "alice",
            "points": 12,
            "village": {
                "name": "Greenhollow",
                "farms": 3,
                "hunger": 0,
                "population": {"general": 30, "farming": 6},
            },
        },
        {
            "name": "bob",
            "points": 7,
            "village": {"name": "Dustmere", "farms": 1, "hunger": 25, "population": 20},
        },
        {"name": "carol", "points": 3},
    ]
}


def print_villages(repository: InMemoryRepository) -> None:
    for player in repository.get_player_data().active_players:
        village = player.village
        if village is None:
            print(f"  {player.name}: no village (points={player.points})")
            continue
        print(
            f"  {player.name}: {village.name} farms={village.farms} hunger={village.hunger} "
            f"population={village.population} points={player.points}"
        )


def main():
    parser = argparse.ArgumentParser(description="Simulate weekly village hunger offline")
    parser.add_argument("players", nargs="?", help="Player file (JSON); updated in place")
    parser.add_argument("--weeks", type=int, default=3)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()

    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
    rng = random.Random(args.seed)

    if args.players:
        repository = InMemoryRepository.from_file(args.players)
    else:
        repository = InMemoryRepository(SAMPLE_PLAYERS)

    print("Nomic Bot - Village Hunger Simulation")
    print("=" * 60)
    print("\n[INITIAL STATE]")
    print_villages(repository)

    for week in range(1, args.weeks + 1):
        print(f"\n[WEEK {week}]")
        events = process_hunger(repository, rng=rng)
        for e in events:
            print(f"  - {e.type}: {e.payload}")
        print_villages(repository)

    if repository.notices:
        print("\n[OPEN FAMINE NOTICES]")
        for notice in repository.notices:
            title, _ = repository.notice_bodies[notice.number]
            print(f"  #{notice.number}: {title}")

    print("\n[DICE]")
    roller = RollProcessor(rng=rng)
    for instruction in ("/roll 3d6", "/roll 2d8+5", "/roll 2d8-5", "/roll banana"):
        print(f"{instruction}:\n{roller.build_reply('alice', instruction)}\n")


if __name__ == "__main__":
    main()
