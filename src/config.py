"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Pool Size
    # ==========================================================================
    min_pool_size: int = 1  # A roll is never smaller than this
    max_pool_size: int | None = None  # Table rule ceiling (e.g. 9); None = no cap

    # ==========================================================================
    # Resources
    # ==========================================================================
    # Resource spent to buy the pre-roll bonus die and to pay for a normal
    # reroll. Characters without it fall back to "luck".
    spend_resource: str = "adrenaline"
    bonus_die_cost: int = 1
    paid_reroll_cost: int = 1

    # Resource lost for every 1 in the final pool of a Gamble
    gamble_resource: str = "grit"

    # ==========================================================================
    # Table Rules
    # ==========================================================================
    # Count three lesser successes as one greater when checking difficulty
    three_for_one: bool = False

    # Seed for the dice; None = unseeded
    rng_seed: int | None = None

    # Debug
    debug: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
