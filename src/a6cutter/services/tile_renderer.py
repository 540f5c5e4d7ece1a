"""
A6Cutter - Tile Renderer

Renders one crop rectangle of one effective page into a new output page.
The page content is placed as a Form XObject under a ``cm`` transform that
rotates it, moves the crop origin to 0,0 and scales the crop to the output
size; the output MediaBox (plus an explicit clip) cuts away the rest.
"""

import logging
from dataclasses import dataclass

import pikepdf

from a6cutter.services.document import OutputDocument
from a6cutter.services.geometry import Rect
from a6cutter.services.page_transform import Affine, EffectivePage
from a6cutter.services.results import ErrorCode, classify_error

logger = logging.getLogger(__name__)

# Resource name of the placed source page inside each tile
XOBJECT_NAME = "/A6Src"


@dataclass
class RenderedPage:
    """A finished tile, not yet part of any page sequence.

    Attributes:
        page: Page object owned by the output document
        source_index: 0-based index of the source page
        crop: Crop rectangle in effective page space
        width: Output page width in points
        height: Output page height in points
    """

    page: pikepdf.Page
    source_index: int
    crop: Rect
    width: float
    height: float


@dataclass
class RenderResult:
    """Outcome of rendering a single tile."""

    success: bool
    page: RenderedPage | None = None
    message: str = ""
    error_code: ErrorCode = ErrorCode.NONE


def _fmt(value: float) -> str:
    """Format a number for a content stream operand."""
    text = f"{value:.6f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def tile_matrix(page: EffectivePage, crop: Rect, output_size: tuple[float, float]) -> Affine:
    """Transform from source content space to output tile space."""
    out_w, out_h = output_size
    return (
        page.matrix.then(Affine.translation(-crop.x, -crop.y))
        .then(Affine.scaling(out_w / crop.width, out_h / crop.height))
    )


def _tile_content(matrix: Affine, output_size: tuple[float, float]) -> bytes:
    out_w, out_h = output_size
    operands = " ".join(_fmt(v) for v in matrix.values)
    return (
        f"q\n0 0 {_fmt(out_w)} {_fmt(out_h)} re W n\n{operands} cm\n{XOBJECT_NAME} Do\nQ\n"
    ).encode("ascii")


def render_tile(
    output: OutputDocument,
    page: EffectivePage,
    crop: Rect,
    output_size: tuple[float, float],
) -> RenderResult:
    """Render *crop* of *page* into a new page of *output_size*.

    The returned page belongs to *output* but is not appended to it;
    the caller decides which tiles make it into the final sequence.

    Args:
        output: Document that will own the tile
        page: Effective (possibly rotated) source page
        crop: Region to sample, in effective page space; may extend past the page
        output_size: (width, height) of the output page in points

    Returns:
        RenderResult with the page on success, or an error code on failure.
    """
    out_w, out_h = output_size
    if crop.width <= 0 or crop.height <= 0 or out_w <= 0 or out_h <= 0:
        logger.warning(
            "Page %d: skipping degenerate tile %s → %.1f x %.1f",
            page.source.index + 1,
            crop,
            out_w,
            out_h,
        )
        return RenderResult(
            success=False,
            message=f"Degenerate crop {crop.width}x{crop.height} → {out_w}x{out_h}",
            error_code=ErrorCode.DEGENERATE_CROP,
        )

    try:
        form = output.form_xobject(page.source)
        content = _tile_content(tile_matrix(page, crop, output_size), output_size)
        tile = pikepdf.Page(
            pikepdf.Dictionary(
                Type=pikepdf.Name.Page,
                MediaBox=[0, 0, out_w, out_h],
                Resources=pikepdf.Dictionary(XObject=pikepdf.Dictionary({XOBJECT_NAME: form})),
                Contents=output.pdf.make_stream(content),
            )
        )
    except (pikepdf.PdfError, OSError, ValueError) as e:
        logger.warning("Page %d: tile render failed: %s", page.source.index + 1, e)
        return RenderResult(success=False, message=str(e), error_code=classify_error(e))

    return RenderResult(
        success=True,
        page=RenderedPage(
            page=tile,
            source_index=page.source.index,
            crop=crop,
            width=out_w,
            height=out_h,
        ),
    )
