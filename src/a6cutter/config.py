#!/usr/bin/env python3
"""
A6Cutter - Configuration Module

This module contains all configuration constants and paths used by the application.
"""

import logging
from typing import Final

from a6cutter.utils.i18n import _

# ============================================================================
# Application Constants
# ============================================================================

APP_NAME: Final[str] = "A6 Cutter"
APP_ID: Final[str] = "a6cutter"
APP_VERSION: Final[str] = "1.0.0"
APP_DESCRIPTION: Final[str] = _("Cut PDF pages into A6 tiles for label printing")


# ============================================================================
# Logging Configuration
# ============================================================================

LOG_LEVEL: int = logging.INFO
LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT: Final[str] = "%H:%M:%S"
