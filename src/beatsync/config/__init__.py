"""
Configuration management system.
"""

from .settings import Settings
from . import constants

__all__ = [
    "Settings",
    "constants",
]
