"""Application configuration loaded from environment variables and .env file."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Values are loaded from environment variables first,
    then from a .env file in the project root as fallback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    DATABASE_URL: str = "sqlite:///./dev.db"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Content data
    CATALOG_PATH: str = "src/data/seed_scannables.json"
    GATES_PATH: str = "src/data/biome_gates.json"
    STARTING_BIOME: str = "starter"

    # Scan state machine
    SCAN_GRACE_PERIOD: float = 2.0  # seconds
    SCAN_DECAY_RATE: float = 0.25  # progress per second
    MIN_SCAN_TIME: float = 0.1  # seconds

    # Loot spawn
    LEGENDARY_BASE_CHANCE: float = 0.05
    PITY_INCREMENT: float = 0.05
    PITY_CAP: float = 1.0
    RARE_FILL_CHANCE: float = 0.30
    UNCOMMON_FILL_CHANCE: float = 0.50
    LOOT_BUDGET_MIN: int = 8
    LOOT_BUDGET_MAX: int = 16
    LOOT_FIXED_BUDGET: Optional[int] = None
    RNG_SEED: Optional[int] = None


settings = Settings()
