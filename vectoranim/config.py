"""Compiler configuration."""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Compiler settings."""

    # Output transform
    SCALE: float = 1.0  # Global scale applied to every span matrix
    USE_ROOT_TRANSFORM: bool = False  # Flatten the root clip placement into top-level spans

    # Sub-animation resolver
    WORKERS: int = 1  # Threads used to build sprites, 1 = sequential

    # Output
    JSON_INDENT: Optional[int] = None  # None writes compact JSON
    LOG_LEVEL: str = "INFO"

    model_config = {"env_prefix": "VECTORANIM_"}


settings = Settings()
