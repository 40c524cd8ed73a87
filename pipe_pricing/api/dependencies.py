"""Shared FastAPI dependencies."""

from __future__ import annotations

from functools import lru_cache

from pipe_pricing.container import Engine, build_engine


@lru_cache()
def get_engine() -> Engine:
    """Engine over the configured storage, built once per process."""
    return build_engine()
