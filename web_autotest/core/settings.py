"""
集中式配置（环境变量/ .env），保障可测性与可控性。
"""
# @file purpose: Centralized settings using Pydantic Settings.

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="WA_", env_file=".env", extra="ignore")

    headless: bool = True
    slow_mo_ms: int = 0
    default_timeout_ms: int = 15_000
    artifacts_root: Path | None = None
    log_level: str = "INFO"
    suite_name: str = "web-autotest"


settings = Settings()
