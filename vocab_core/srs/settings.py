"""
Scheduler settings model.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from vocab_core.srs import constants


class SRSSettings(BaseModel):
    """
    Tunable constants of the SM-2 scheduler.

    Defaults match the values in `vocab_core.srs.constants`.
    """
    model_config = ConfigDict(frozen=True)

    initial_ease_factor: float = Field(default=constants.INITIAL_EASE_FACTOR, gt=0)
    min_ease_factor: float = Field(default=constants.MIN_EASE_FACTOR, gt=0)
    max_ease_factor: float = Field(default=constants.MAX_EASE_FACTOR, gt=0)
    initial_interval: int = Field(default=constants.INITIAL_INTERVAL, ge=1)
    max_interval: int = Field(default=constants.MAX_INTERVAL, ge=1)

    @model_validator(mode="after")
    def _check_bounds(self) -> "SRSSettings":
        if self.min_ease_factor > self.max_ease_factor:
            raise ValueError("min_ease_factor must not exceed max_ease_factor")
        if not self.min_ease_factor <= self.initial_ease_factor <= self.max_ease_factor:
            raise ValueError("initial_ease_factor must lie within [min_ease_factor, max_ease_factor]")
        if self.max_interval < self.initial_interval:
            raise ValueError("max_interval must be at least initial_interval")
        return self


DEFAULT_SETTINGS = SRSSettings()
