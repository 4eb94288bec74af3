"""Settings for the Construct combat engine.

Values come from ``CONSTRUCT_COMBAT_*`` environment variables or a local
``.env`` file, validated by pydantic-settings.

Example:
    >>> from construct_combat.core.config import get_settings
    >>> get_settings().encounter.condition_policy
    'stack'

Environment Variables:
    CONSTRUCT_COMBAT_DEBUG: Debug mode
    CONSTRUCT_COMBAT_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL
    CONSTRUCT_COMBAT_JSON_LOGS: Emit JSON log lines
    CONSTRUCT_COMBAT_ENCOUNTER_DEFAULT_ARMOR_CLASS: AC for targets without one
    CONSTRUCT_COMBAT_ENCOUNTER_DEFAULT_WEAPON_DAMAGE: Damage dice for unarmed attacks
    CONSTRUCT_COMBAT_ENCOUNTER_CONDITION_POLICY: stack, refresh or reject
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from construct_combat.core.constants import (
    DEFAULT_ARMOR_CLASS,
    DEFAULT_WEAPON_DAMAGE,
    DICE_NOTATION_PATTERN,
)
from construct_combat.core.exceptions import ConfigurationError


_ENV_PREFIX = "CONSTRUCT_COMBAT_"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
ConditionPolicyName = Literal["stack", "refresh", "reject"]


class EncounterSettings(BaseSettings):
    """Rules applied to every encounter a manager runs.

    Attributes:
        default_armor_class: Armor class used for targets that declare none.
        default_weapon_damage: Damage dice used when no weapon is equipped.
        condition_policy: What re-applying an already-present condition does.
    """

    model_config = SettingsConfigDict(
        env_prefix=f"{_ENV_PREFIX}ENCOUNTER_",
        env_file=".env",
        extra="ignore",
    )

    default_armor_class: int = Field(default=DEFAULT_ARMOR_CLASS, ge=1, le=30)
    default_weapon_damage: str = DEFAULT_WEAPON_DAMAGE
    condition_policy: ConditionPolicyName = "stack"

    @model_validator(mode="after")
    def check_weapon_damage(self) -> "EncounterSettings":
        if not DICE_NOTATION_PATTERN.match(self.default_weapon_damage):
            raise ConfigurationError(
                f"default_weapon_damage is not dice notation: {self.default_weapon_damage!r}",
                config_key="default_weapon_damage",
            )
        return self


class Settings(BaseSettings):
    """Application-wide settings.

    Attributes:
        app_name: Display name of the engine.
        app_version: Engine version string.
        debug: Debug mode.
        log_level: Minimum level for log output.
        json_logs: Render log lines as JSON.
        encounter: Encounter rules.
    """

    model_config = SettingsConfigDict(
        env_prefix=_ENV_PREFIX,
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    app_name: str = "The Construct Combat Engine"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: LogLevel = "INFO"
    json_logs: bool = False
    encounter: EncounterSettings = Field(default_factory=EncounterSettings)

    @property
    def is_production(self) -> bool:
        return not self.debug


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once and cache them.

    Raises:
        ConfigurationError: If any value is missing or invalid.
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except ValueError as exc:
        raise ConfigurationError(
            "Invalid engine settings",
            details={"errors": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Drop the cached settings so the next access reloads them."""
    get_settings.cache_clear()


__all__ = [
    "EncounterSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
