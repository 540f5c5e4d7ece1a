"""
A6Cutter - Page Transformer

Applies the optional quarter turn that brings a landscape page to portrait
before it is planned and rendered. The source page is never modified: the
rotation only exists as effective bounds plus an affine matrix that maps the
page's content space into the rotated, origin-anchored effective space.
"""

import logging
from dataclasses import dataclass

from a6cutter.services.document import SourcePage
from a6cutter.services.geometry import Rect

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Affine:
    """2-D affine transform in PDF ``cm`` order ``[a b c d e f]``.

    Points are row vectors: ``(x, y) -> (a*x + c*y + e, b*x + d*y + f)``.
    """

    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    @classmethod
    def translation(cls, tx: float, ty: float) -> "Affine":
        return cls(1.0, 0.0, 0.0, 1.0, tx, ty)

    @classmethod
    def scaling(cls, sx: float, sy: float) -> "Affine":
        return cls(sx, 0.0, 0.0, sy, 0.0, 0.0)

    def then(self, other: "Affine") -> "Affine":
        """Return the transform that applies ``self`` first and ``other`` second."""
        return Affine(
            a=self.a * other.a + self.b * other.c,
            b=self.a * other.b + self.b * other.d,
            c=self.c * other.a + self.d * other.c,
            d=self.c * other.b + self.d * other.d,
            e=self.e * other.a + self.f * other.c + other.e,
            f=self.e * other.b + self.f * other.d + other.f,
        )

    def apply(self, x: float, y: float) -> tuple[float, float]:
        return (self.a * x + self.c * y + self.e, self.b * x + self.d * y + self.f)

    @property
    def values(self) -> tuple[float, float, float, float, float, float]:
        return (self.a, self.b, self.c, self.d, self.e, self.f)


def rotation_matrix(width: float, height: float, rotation: int) -> Affine:
    """Clockwise quarter-turn rotation of a ``width x height`` box anchored at 0,0.

    The rotated box stays in the positive quadrant, so a 90 or 270 degree
    turn yields a ``height x width`` box that also starts at the origin.

    Args:
        width: Unrotated box width
        height: Unrotated box height
        rotation: Clockwise angle in degrees (0, 90, 180 or 270)
    """
    rotation %= 360
    if rotation == 90:
        return Affine(0.0, -1.0, 1.0, 0.0, 0.0, width)
    if rotation == 180:
        return Affine(-1.0, 0.0, 0.0, -1.0, width, height)
    if rotation == 270:
        return Affine(0.0, 1.0, -1.0, 0.0, height, 0.0)
    if rotation != 0:
        raise ValueError(f"Rotation must be a multiple of 90 degrees, got {rotation}")
    return Affine()


def content_matrix(mediabox: tuple[float, float, float, float], rotation: int) -> Affine:
    """Map page content coordinates into the rotated display box at the origin."""
    x0, y0, x1, y1 = mediabox
    return Affine.translation(-x0, -y0).then(rotation_matrix(x1 - x0, y1 - y0, rotation))


@dataclass(frozen=True)
class EffectivePage:
    """A source page as seen after the optional rotation step.

    Attributes:
        source: The untouched source page
        bounds: Display rectangle after rotation, anchored at the origin
        rotation: Total clockwise rotation (page /Rotate plus applied step)
        applied_rotation: Step applied by the transformer (0, 90 or -90)
        matrix: Maps source content space into ``bounds`` space
    """

    source: SourcePage
    bounds: Rect
    rotation: int
    applied_rotation: int
    matrix: Affine


def transform_page(
    page: SourcePage,
    rotate_to_portrait: bool,
    rotate_clockwise: bool = True,
) -> EffectivePage:
    """Rotate a landscape page to portrait when requested.

    Pages that are already portrait (or square), and every page when
    *rotate_to_portrait* is false, keep their bounds. Otherwise exactly one
    quarter turn is applied, clockwise or counter-clockwise.

    Args:
        page: Source page
        rotate_to_portrait: Turn pages wider than tall
        rotate_clockwise: Direction of the turn

    Returns:
        The effective page geometry.
    """
    bounds = page.bounds
    step = 0
    if rotate_to_portrait and bounds.width > bounds.height:
        step = 90 if rotate_clockwise else -90

    rotation = (page.rotation + step) % 360
    x0, y0, x1, y1 = page.mediabox
    width, height = x1 - x0, y1 - y0
    if rotation in (90, 270):
        width, height = height, width

    if step:
        logger.debug(
            "Page %d: rotated %+d° to %.1f x %.1f pt",
            page.index + 1,
            step,
            width,
            height,
        )

    return EffectivePage(
        source=page,
        bounds=Rect(0.0, 0.0, width, height),
        rotation=rotation,
        applied_rotation=step,
        matrix=content_matrix(page.mediabox, rotation),
    )
