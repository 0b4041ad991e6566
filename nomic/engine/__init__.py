"""
Village famine simulation engine.
Pure game logic - GitHub access goes through nomic.api.repository.
"""

# Population categories
GENERAL = "general"
FARMING = "farming"

# Each farm needs this many farmers to be fully active
FARMERS_REQUIRED = 2

# Food rolled per active farm each week (sum expression)
FARM_PRODUCTION = "1d12+12"
