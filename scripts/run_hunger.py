#!/usr/bin/env python3
"""
Run the hunger process once, right now, against the configured GitHub repository.
Usage: python scripts/run_hunger.py
From repo root with PYTHONPATH=. (needs GITHUB_TOKEN and GITHUB_REPOSITORY).
"""
import logging
import sys
import os
from datetime import datetime

# Allow running from repo root
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from nomic import config
from nomic.api.github import GitHubRepository
from nomic.api.scheduler import format_run_time, hunger_rule
from nomic.engine.famine import process_hunger
from nomic.engine.repository import RepositoryError


def main() -> None:
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
    if not config.GITHUB_TOKEN:
        print("Error: set GITHUB_TOKEN.", file=sys.stderr)
        sys.exit(1)

    rule = hunger_rule()
    try:
        events = process_hunger(
            GitHubRepository(),
            next_run=lambda: format_run_time(rule.next_fire(datetime.now(rule.tz))),
        )
    except RepositoryError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    for event in events:
        print(f"  - {event.type}: {event.payload}")


if __name__ == "__main__":
    main()
