"""Engine settings loaded from the environment (``DRILLFLOW_*``) or ``.env``."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    default_rest_sec: float = 45.0
    min_rest_sec: float = 15.0
    max_rest_sec: float = 300.0
    rest_step_sec: float = 15.0
    get_ready_sec: float = 10.0
    default_set_rest_sec: float = 30.0
    tick_interval_sec: float = 1.0
    countdown_cue_window_sec: int = 5
    audio_enabled: bool = True
    # phase kind ("getReady", "exerciseActive", "rest", "completed") -> voice id
    voice_profiles: dict[str, str] = Field(default_factory=dict)
    log_level: str = "INFO"
    log_json: bool = False

    model_config = SettingsConfigDict(
        env_prefix="DRILLFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def clamp_rest(self, seconds: float) -> float:
        return max(self.min_rest_sec, min(self.max_rest_sec, float(seconds)))


@lru_cache()
def get_settings() -> EngineSettings:
    return EngineSettings()
