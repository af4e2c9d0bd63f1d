"""Retry configuration models."""

from typing import Any

from pydantic import BaseModel, Field, field_validator


class RetryConfig(BaseModel):
    """Retry policy for a remote operation."""

    max_attempts: int = Field(
        default=3, ge=1, le=10, description="Maximum attempts, first call included"
    )
    base_delay: float = Field(
        default=1.0, ge=0.0, le=60.0, description="Delay before the second attempt"
    )
    multiplier: float = Field(
        default=2.0, ge=1.0, le=5.0, description="Exponential backoff base"
    )
    max_delay: float = Field(
        default=60.0, ge=0.0, le=300.0, description="Maximum delay in seconds"
    )

    @field_validator("max_delay")
    @classmethod
    def validate_max_delay(cls, v: float, info: Any) -> float:
        """Ensure max_delay is not smaller than base_delay."""
        if info.data.get("base_delay") and v < info.data["base_delay"]:
            raise ValueError("max_delay must not be smaller than base_delay")
        return v

    def delay_for(self, attempt: int) -> float:
        """Delay after the given failed attempt (1-based)."""
        return min(self.base_delay * self.multiplier ** (attempt - 1), self.max_delay)
