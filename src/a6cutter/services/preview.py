"""
A6Cutter - Preview Rendering

Rasterizes the tiled document with pdftoppm (poppler-utils) and lays the
thumbnails out on a contact sheet. The preview always contains every tile;
positions that the export will skip are darkened and labelled instead.
"""

import logging
import os
import shutil
import subprocess
import tempfile
from collections.abc import Iterable, Sequence
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from a6cutter.constants import (
    DEFAULT_PREVIEW_COLUMNS,
    DEFAULT_THUMBNAIL_WIDTH_PX,
    PDFTOPPM_TIMEOUT_SECS,
    PREVIEW_CAPTION_HEIGHT_PX,
    PREVIEW_RENDER_DPI,
    PREVIEW_SPACING_PX,
    SKIPPED_OVERLAY_ALPHA,
)
from a6cutter.services.assembler import assemble_preview
from a6cutter.services.document import SourceDocument
from a6cutter.services.parameters import CutParameters
from a6cutter.utils.exceptions import ThumbnailError
from a6cutter.utils.i18n import _

logger = logging.getLogger(__name__)


def render_thumbnails(pdf_bytes: bytes, width: int = DEFAULT_THUMBNAIL_WIDTH_PX) -> list[Image.Image]:
    """Render every page of a PDF to an RGB thumbnail *width* pixels wide.

    Args:
        pdf_bytes: Serialized PDF document
        width: Thumbnail width in pixels; height follows the page aspect ratio

    Returns:
        One image per page, in page order.

    Raises:
        ThumbnailError: If pdftoppm is missing or fails.
    """
    if shutil.which("pdftoppm") is None:
        raise ThumbnailError("pdftoppm not found; install poppler-utils")

    with tempfile.TemporaryDirectory() as tmpdir:
        pdf_path = os.path.join(tmpdir, "preview.pdf")
        with open(pdf_path, "wb") as f:
            f.write(pdf_bytes)

        prefix = os.path.join(tmpdir, "p")
        try:
            result = subprocess.run(
                [
                    "pdftoppm",
                    "-png",
                    "-r",
                    str(PREVIEW_RENDER_DPI),
                    "-scale-to-x",
                    str(width),
                    "-scale-to-y",
                    "-1",
                    pdf_path,
                    prefix,
                ],
                capture_output=True,
                timeout=PDFTOPPM_TIMEOUT_SECS,
            )
        except subprocess.TimeoutExpired:
            raise ThumbnailError(f"pdftoppm timed out after {PDFTOPPM_TIMEOUT_SECS}s") from None

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise ThumbnailError(stderr or "pdftoppm failed", exit_code=result.returncode)

        # pdftoppm zero-pads page numbers, so name order is page order
        files = sorted(f for f in os.listdir(tmpdir) if f.startswith("p") and f.endswith(".png"))
        thumbnails = []
        for fname in files:
            with Image.open(os.path.join(tmpdir, fname)) as img:
                thumbnails.append(img.convert("RGB"))

    logger.debug("Rendered %d thumbnails at %dpx", len(thumbnails), width)
    return thumbnails


def build_contact_sheet(
    thumbnails: Sequence[Image.Image],
    skip_pages: Iterable[int] = (),
    columns: int = DEFAULT_PREVIEW_COLUMNS,
) -> Image.Image:
    """Arrange thumbnails in a grid with a caption under each one.

    Args:
        thumbnails: Page images in order
        skip_pages: 1-based positions to mark as skipped
        columns: Maximum number of thumbnails per row

    Returns:
        The contact sheet as an RGB image.
    """
    if not thumbnails:
        raise ValueError("No thumbnails to lay out")

    skip = set(skip_pages)
    columns = max(1, min(columns, len(thumbnails)))
    rows = -(-len(thumbnails) // columns)
    cell_w = max(img.width for img in thumbnails)
    cell_h = max(img.height for img in thumbnails) + PREVIEW_CAPTION_HEIGHT_PX
    spacing = PREVIEW_SPACING_PX

    sheet = Image.new(
        "RGB",
        (columns * cell_w + (columns + 1) * spacing, rows * cell_h + (rows + 1) * spacing),
        (236, 236, 236),
    )
    draw = ImageDraw.Draw(sheet)
    font = ImageFont.load_default()

    for index, thumb in enumerate(thumbnails):
        position = index + 1
        row, col = divmod(index, columns)
        x = spacing + col * (cell_w + spacing) + (cell_w - thumb.width) // 2
        y = spacing + row * (cell_h + spacing)
        skipped = position in skip

        tile = thumb
        if skipped:
            shade = Image.new("RGBA", thumb.size, (0, 0, 0, SKIPPED_OVERLAY_ALPHA))
            tile = Image.alpha_composite(thumb.convert("RGBA"), shade).convert("RGB")
            label = _("SKIPPED")
            tile_draw = ImageDraw.Draw(tile)
            left, top, right, bottom = tile_draw.textbbox((0, 0), label, font=font)
            lx = (tile.width - (right - left)) // 2
            ly = (tile.height - (bottom - top)) // 2
            tile_draw.rectangle((lx - 4, ly - 3, lx + right - left + 4, ly + bottom - top + 3), fill=(204, 0, 0))
            tile_draw.text((lx - left, ly - top), label, fill=(255, 255, 255), font=font)

        sheet.paste(tile, (x, y))

        caption = _("Page {number}").format(number=position)
        draw.text(
            (x, y + thumb.height + 3),
            caption,
            fill=(204, 0, 0) if skipped else (90, 90, 90),
            font=font,
        )

    return sheet


def write_preview(
    source: SourceDocument,
    params: CutParameters,
    output_path: str | Path,
    *,
    width: int = DEFAULT_THUMBNAIL_WIDTH_PX,
    columns: int = DEFAULT_PREVIEW_COLUMNS,
) -> int:
    """Render the preview contact sheet of a cutting run to a PNG file.

    Returns:
        Number of tiles shown.
    """
    output = assemble_preview(source, params)
    try:
        pdf_bytes = output.serialize()
    finally:
        output.close()

    thumbnails = render_thumbnails(pdf_bytes, width)
    sheet = build_contact_sheet(thumbnails, params.skip_pages, columns)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    sheet.save(str(output_path), format="PNG")
    logger.info("Preview with %d tiles → %s", len(thumbnails), output_path)
    return len(thumbnails)
