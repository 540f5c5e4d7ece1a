"""
A6Cutter - Numeric Constants

Simple numeric constants with ZERO internal imports to avoid circular dependencies.
For application-level constants (strings, paths), use config.py.
"""

from typing import Final

# ============================================================================
# Parameter Defaults
# ============================================================================

DEFAULT_HORIZONTAL_SHIFT_PT: Final[float] = 0.0
DEFAULT_VERTICAL_SHIFT_PT: Final[float] = 0.0
PARAMETERS_VERSION: Final[int] = 1

# Overhang below this fraction of a tile does not open another row or column
GRID_OVERHANG_TOLERANCE: Final[float] = 0.01

# ============================================================================
# Preview
# ============================================================================

DEFAULT_THUMBNAIL_WIDTH_PX: Final[int] = 200
DEFAULT_PREVIEW_COLUMNS: Final[int] = 4
PREVIEW_SPACING_PX: Final[int] = 12
PREVIEW_CAPTION_HEIGHT_PX: Final[int] = 18
PREVIEW_RENDER_DPI: Final[int] = 150
SKIPPED_OVERLAY_ALPHA: Final[int] = 153  # 60% black

# ============================================================================
# Subprocess Timeouts (seconds)
# ============================================================================

PDFTOPPM_TIMEOUT_SECS: Final[int] = 120
