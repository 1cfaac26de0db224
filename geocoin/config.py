"""
Geocoin Configuration

Loads configuration from environment variables with sensible defaults.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


class Config:
    """Game configuration loaded from environment variables."""

    # Map origin (the OAKES classroom at UC Santa Cruz)
    ORIGIN_LAT: float = float(os.getenv("GEOCOIN_ORIGIN_LAT", "36.98949379578401"))
    ORIGIN_LNG: float = float(os.getenv("GEOCOIN_ORIGIN_LNG", "-122.06277128548504"))

    # Grid geometry
    # Angular size of one cell, in degrees of latitude/longitude
    TILE_DEGREES: float = float(os.getenv("GEOCOIN_TILE_DEGREES", "1e-4"))
    # Cells considered on each side of the visibility window
    NEIGHBORHOOD_SIZE: int = int(os.getenv("GEOCOIN_NEIGHBORHOOD_SIZE", "8"))
    # Cells the window slides per player step
    MAP_UPDATE_DISTANCE: int = int(os.getenv("GEOCOIN_MAP_UPDATE_DISTANCE", "1"))

    # Cache generation
    SPAWN_PROBABILITY: float = float(os.getenv("GEOCOIN_SPAWN_PROBABILITY", "0.1"))
    MAX_COINS: int = int(os.getenv("GEOCOIN_MAX_COINS", "5"))

    # Storage
    STORAGE_PATH: Path = Path(os.getenv("GEOCOIN_STORAGE_PATH", "geocoin_save.json"))
    STORAGE_RETRIES: int = int(os.getenv("GEOCOIN_STORAGE_RETRIES", "3"))

    # Logging verbosity and color are read per call by logging_utils
    # (GEOCOIN_VERBOSE, GEOCOIN_NO_COLOR) so tests can toggle them.

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors for impossible values."""
        if not 0.0 <= cls.SPAWN_PROBABILITY <= 1.0:
            raise ValueError(
                f"GEOCOIN_SPAWN_PROBABILITY must be within [0, 1], got {cls.SPAWN_PROBABILITY}"
            )

        if cls.TILE_DEGREES <= 0:
            raise ValueError(
                f"GEOCOIN_TILE_DEGREES must be positive, got {cls.TILE_DEGREES}"
            )

        if cls.NEIGHBORHOOD_SIZE < 0:
            raise ValueError(
                f"GEOCOIN_NEIGHBORHOOD_SIZE cannot be negative, got {cls.NEIGHBORHOOD_SIZE}"
            )

        if cls.MAX_COINS <= 0:
            raise ValueError(f"GEOCOIN_MAX_COINS must be positive, got {cls.MAX_COINS}")

        if cls.MAP_UPDATE_DISTANCE <= 0:
            raise ValueError(
                f"GEOCOIN_MAP_UPDATE_DISTANCE must be positive, got {cls.MAP_UPDATE_DISTANCE}"
            )

        if cls.STORAGE_RETRIES <= 0:
            raise ValueError(
                f"GEOCOIN_STORAGE_RETRIES must be positive, got {cls.STORAGE_RETRIES}"
            )

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "Geocoin Configuration:",
            f"  Origin: ({cls.ORIGIN_LAT}, {cls.ORIGIN_LNG})",
            f"  Tile Size: {cls.TILE_DEGREES}°",
            f"  Neighborhood: {cls.NEIGHBORHOOD_SIZE} cells",
            f"  Spawn Probability: {cls.SPAWN_PROBABILITY}",
            f"  Max Coins: {cls.MAX_COINS}",
            f"  Storage: {cls.STORAGE_PATH}",
        ]
        return "\n".join(lines)
