"""
Configuration modules for field synthesis and extraction.
"""

from .config import Settings, settings

__all__ = ["Settings", "settings"]
