"""Shared helpers: seeded RNG construction and logging setup."""

from .random import create_rng
from .logging import configure_logging

__all__ = ["create_rng", "configure_logging"]
