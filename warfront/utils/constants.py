"""Game configuration constants."""

# Region capacity and combat divisor
TILE_CAPACITY = 36  # Max units a region holds before culling
UNIT_COEFFICIENT = 2  # Divides attackers into damage and excess into culls

# Player placement
STARTING_UNITS = 12

# Turn clock
TURN_TIME_SECONDS = 30.0
COMMAND_GRACE_SECONDS = 1.0  # Wait after requestCommands before resolving anyway

# Map generation
MAP_WIDTH = 16
MAP_HEIGHT = 16
WATER_LEVEL = 0.0  # Terrain below this is impassable

# Testing
RNG_SEED_DEFAULT = 42  # Default seed for testing
