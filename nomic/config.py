"""
Single place for bot configuration.
Everything can be overridden with environment variables; defaults suit local runs.
"""

import os


def _bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# GitHub repository the game is played on ("owner/name")
GITHUB_REPOSITORY = os.environ.get("GITHUB_REPOSITORY", "nomic-game/nomic")
GITHUB_TOKEN = os.environ.get("GITHUB_TOKEN", "")
GITHUB_API_URL = os.environ.get("GITHUB_API_URL", "https://api.github.com")

# Player file inside the game repository
PLAYER_FILE_PATH = os.environ.get("PLAYER_FILE_PATH", "players.json")
PLAYER_FILE_BRANCH = os.environ.get("PLAYER_FILE_BRANCH", "master")

# Shared secret for X-Hub-Signature-256; empty disables verification
WEBHOOK_SECRET = os.environ.get("WEBHOOK_SECRET", "")

# Hunger job: every Wednesday at 15:00 (cron "0 0 15 * * 3")
TIMEZONE = os.environ.get("NOMIC_TIMEZONE", "America/Chicago")
HUNGER_WEEKDAY = int(os.environ.get("HUNGER_WEEKDAY", "2"))  # Monday == 0
HUNGER_HOUR = int(os.environ.get("HUNGER_HOUR", "15"))
HUNGER_MINUTE = int(os.environ.get("HUNGER_MINUTE", "0"))
ENABLE_SCHEDULER = _bool("NOMIC_ENABLE_SCHEDULER", True)

# Largest die count a /roll may request before it counts as abuse
ROLL_MAX_DICE = int(os.environ.get("ROLL_MAX_DICE", "100"))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
