"""
Nomic Bot - GitHub-issue-driven Nomic game backend.
Weekly village famine simulation, dice rolls and proposal resolution.
"""

__version__ = "1.0.0"
