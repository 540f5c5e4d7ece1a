"""
A6Cutter - Utils Package

Utility modules for the application.
"""

from a6cutter.utils.config_manager import ConfigManager, get_config_manager
from a6cutter.utils.i18n import _

__all__ = [
    "_",
    "ConfigManager",
    "get_config_manager",
]
