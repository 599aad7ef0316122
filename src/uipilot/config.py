"""Runtime settings for the automation core, loaded from environment variables.

Every timeout and retry budget used by the executor, the waiter and the login
flow is read from here and passed to their constructors.
"""

from __future__ import annotations

from typing import Optional, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AutomationConfig(BaseSettings):
    """Retry, wait and pacing settings. All durations are in seconds."""

    # Command executor
    retry_attempts: int = Field(default=2, ge=0)
    retry_delay: float = Field(default=0.5, ge=0)

    # Wait primitives
    poll_interval: float = Field(default=0.25, gt=0)
    default_timeout: float = Field(default=30.0, ge=0)
    page_settle_timeout: float = Field(default=30.0, ge=0)

    # Login flow
    username_timeout: float = Field(default=30.0, ge=0)
    landing_timeout: float = Field(default=60.0, ge=0)
    stay_signed_in_timeout: float = Field(default=5.0, ge=0)
    redirect_pause: float = Field(default=3.0, ge=0)
    mfa_retry_attempts: int = Field(default=2, ge=0)

    # Human pacing between UI steps, scaled by time_factor
    think_time: float = Field(default=1.0, ge=0)
    time_factor: float = Field(default=1.0, gt=0)

    # Hosts served by the online identity platform; empty means every host
    online_domains: Tuple[str, ...] = ()

    # Client modes appended to the application URL after login
    test_mode: bool = False
    performance_mode: bool = False

    model_config = SettingsConfigDict(
        env_prefix="UIPILOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    def scaled_think_time(self, seconds: Optional[float] = None) -> float:
        base = self.think_time if seconds is None else seconds
        return base * self.time_factor
