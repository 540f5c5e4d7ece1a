"""
A6Cutter - Document Assembler

Entry point of the cutting engine. For every source page, in order:

1. Page Transformer: optional quarter turn to portrait
2. Geometry Planner: crop rectangles (or the whole page when cutting is off)
3. Tile Renderer: one output page per crop

Successful tiles keep page order, then planner order. A final pass removes
the 1-based positions listed in ``skip_pages``. Every call starts from the
source document again; nothing is cached between runs.
"""

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import TypeVar

import pikepdf

from a6cutter.services.document import OutputDocument, SourceDocument
from a6cutter.services.geometry import plan_crops, tile_spec_for
from a6cutter.services.page_transform import transform_page
from a6cutter.services.parameters import CutParameters
from a6cutter.services.results import OperationResult, fail
from a6cutter.services.tile_renderer import RenderedPage, render_tile
from a6cutter.utils.exceptions import A6CutterError, EmptyResultError, InvalidTileSpecError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def filter_skipped(pages: Sequence[T], skip_pages: Iterable[int]) -> list[T]:
    """Drop the items whose 1-based position is listed in *skip_pages*.

    Positions beyond the end of *pages* are ignored.
    """
    skip = set(skip_pages)
    if not skip:
        return list(pages)
    return [page for position, page in enumerate(pages, 1) if position not in skip]


def _render_source(
    source: SourceDocument,
    params: CutParameters,
    output: OutputDocument,
) -> list[RenderedPage]:
    """Transform, plan and render every source page into a working sequence."""
    stats = output.stats
    stats.source_pages = source.page_count
    working: list[RenderedPage] = []

    for page in source:
        effective = transform_page(page, params.rotate_to_portrait, params.rotate_clockwise)
        crops = plan_crops(
            effective.bounds,
            params.horizontal_shift,
            params.vertical_shift,
            params.disable_cutting,
        )
        if params.disable_cutting:
            output_size = effective.bounds.size
        else:
            output_size = tile_spec_for(effective.bounds).size

        stats.planned_tiles += len(crops)
        for crop in crops:
            result = render_tile(output, effective, crop, output_size)
            if result.success and result.page is not None:
                working.append(result.page)
                stats.rendered_tiles += 1
            else:
                stats.failed_tiles += 1

        logger.debug(
            "Page %d: %d tiles planned (%.1f x %.1f pt)",
            page.index + 1,
            len(crops),
            effective.bounds.width,
            effective.bounds.height,
        )

    return working


def assemble(source: SourceDocument, params: CutParameters) -> OutputDocument:
    """Cut every page of *source* into tiles and apply the skip filter.

    Args:
        source: Decoded input document (left unchanged)
        params: Run configuration

    Returns:
        The output document with at least one page.

    Raises:
        EmptyResultError: If no pages remain (empty source, every tile
            failed, or every tile was skipped).
        InvalidTileSpecError: If a tile specification is degenerate.
    """
    output = OutputDocument()
    working = _render_source(source, params, output)

    final = filter_skipped(working, params.skip_pages)
    output.stats.skipped_tiles = len(working) - len(final)

    if not final:
        stats = output.stats
        output.close()
        raise EmptyResultError(
            source_pages=stats.source_pages,
            failed_tiles=stats.failed_tiles,
            skipped_tiles=stats.skipped_tiles,
        )

    for rendered in final:
        output.append(rendered.page)

    stats = output.stats
    logger.info(
        "Cut %d source pages into %d tiles (%d failed, %d skipped)",
        stats.source_pages,
        output.page_count,
        stats.failed_tiles,
        stats.skipped_tiles,
    )
    return output


def assemble_preview(source: SourceDocument, params: CutParameters) -> OutputDocument:
    """Assemble every tile, ignoring ``skip_pages``.

    The preview shows all tiles so skipped positions can be marked rather
    than hidden; see :func:`assemble_export` for the filtered result.
    """
    return assemble(source, params.without_skips())


def assemble_export(source: SourceDocument, params: CutParameters) -> OutputDocument:
    """Assemble the document that is saved or printed, with skips applied."""
    return assemble(source, params)


def cut_pdf(
    pdf_path: str | Path,
    output_path: str | Path,
    params: CutParameters,
) -> OperationResult:
    """Cut a PDF file into A6 tiles and save the export result.

    Args:
        pdf_path: Source PDF path.
        output_path: Output PDF path.
        params: Run configuration.

    Returns:
        OperationResult.
    """
    output_path = Path(output_path)

    try:
        with SourceDocument.open(pdf_path) as source:
            output = assemble_export(source, params)
            try:
                output.save(output_path)
                pages = output.page_count
                stats = output.stats
            finally:
                output.close()
    except InvalidTileSpecError:
        raise
    except (OSError, pikepdf.PdfError, A6CutterError) as e:
        logger.error("Cut failed: %s", e)
        return fail(e)

    message = f"Cut {stats.source_pages} pages into {pages} tiles"
    if stats.skipped_tiles:
        message += f" ({stats.skipped_tiles} skipped)"
    if stats.failed_tiles:
        message += f" ({stats.failed_tiles} failed)"

    return OperationResult(
        success=True,
        message=message,
        output_path=str(output_path),
        pages_affected=pages,
    )
