"""Immutable configuration of one cutting run."""

from dataclasses import dataclass, field, replace
from typing import Any

from a6cutter.constants import (
    DEFAULT_HORIZONTAL_SHIFT_PT,
    DEFAULT_VERTICAL_SHIFT_PT,
    PARAMETERS_VERSION,
)
from a6cutter.utils.exceptions import ConfigurationError


@dataclass(frozen=True)
class CutParameters:
    """Full configuration for one run of the assembler.

    Attributes:
        horizontal_shift: Offset added to every crop's x origin, in points
        vertical_shift: Offset added to every crop's y origin, in points
        skip_pages: 1-based positions removed from the final tiled sequence
        rotate_to_portrait: Turn pages wider than tall before tiling
        rotate_clockwise: Direction of that turn
        disable_cutting: Pass pages through as a single output page each
        version: Schema version of the serialized form
    """

    horizontal_shift: float = DEFAULT_HORIZONTAL_SHIFT_PT
    vertical_shift: float = DEFAULT_VERTICAL_SHIFT_PT
    skip_pages: frozenset[int] = field(default_factory=frozenset)
    rotate_to_portrait: bool = False
    rotate_clockwise: bool = True
    disable_cutting: bool = False
    version: int = PARAMETERS_VERSION

    def __post_init__(self) -> None:
        # Accept any iterable of page numbers but store a frozenset
        if not isinstance(self.skip_pages, frozenset):
            object.__setattr__(self, "skip_pages", frozenset(int(p) for p in self.skip_pages))

    def without_skips(self) -> "CutParameters":
        """Copy of these parameters with an empty skip list (preview mode)."""
        if not self.skip_pages:
            return self
        return replace(self, skip_pages=frozenset())

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "horizontal_shift": self.horizontal_shift,
            "vertical_shift": self.vertical_shift,
            "skip_pages": sorted(self.skip_pages),
            "rotate_to_portrait": self.rotate_to_portrait,
            "rotate_clockwise": self.rotate_clockwise,
            "disable_cutting": self.disable_cutting,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CutParameters":
        """Build parameters from a dict produced by :meth:`to_dict`.

        Raises:
            ConfigurationError: If a value has the wrong type.
        """
        try:
            return cls(
                horizontal_shift=float(data.get("horizontal_shift", DEFAULT_HORIZONTAL_SHIFT_PT)),
                vertical_shift=float(data.get("vertical_shift", DEFAULT_VERTICAL_SHIFT_PT)),
                skip_pages=frozenset(int(p) for p in data.get("skip_pages", ())),
                rotate_to_portrait=bool(data.get("rotate_to_portrait", False)),
                rotate_clockwise=bool(data.get("rotate_clockwise", True)),
                disable_cutting=bool(data.get("disable_cutting", False)),
                version=int(data.get("version", PARAMETERS_VERSION)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError("parameters", str(e)) from e
