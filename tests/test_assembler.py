"""Tests for the document assembler."""

import io
import os
import tempfile
from unittest.mock import patch

import pikepdf
import pytest

from a6cutter.services import assembler
from a6cutter.services.assembler import (
    assemble,
    assemble_export,
    assemble_preview,
    cut_pdf,
    filter_skipped,
)
from a6cutter.services.document import SourceDocument
from a6cutter.services.geometry import A6_LANDSCAPE, A6_PORTRAIT
from a6cutter.services.parameters import CutParameters
from a6cutter.services.results import ErrorCode
from a6cutter.services.tile_renderer import RenderResult
from a6cutter.utils.exceptions import EmptyResultError

A4 = [0, 0, 595, 842]
A4_LANDSCAPE = [0, 0, 842, 595]


def _create_test_pdf(mediaboxes) -> bytes:
    """Create a PDF with one page per MediaBox."""
    pdf = pikepdf.Pdf.new()
    for i, mediabox in enumerate(mediaboxes):
        page = pikepdf.Page(
            pikepdf.Dictionary(
                Type=pikepdf.Name.Page,
                MediaBox=mediabox,
                Contents=pdf.make_stream(f"BT /F1 12 Tf 100 700 Td (Page {i + 1}) Tj ET".encode()),
            )
        )
        pdf.pages.append(page)
    buf = io.BytesIO()
    pdf.save(buf)
    return buf.getvalue()


def _source(mediaboxes) -> SourceDocument:
    return SourceDocument.from_bytes(_create_test_pdf(mediaboxes))


def _sizes(output):
    return [output.page_size(i) for i in range(output.page_count)]


class TestFilterSkipped:
    def test_removes_positions(self):
        assert filter_skipped(list(range(1, 9)), {2, 4}) == [1, 3, 5, 6, 7, 8]

    def test_out_of_range_ignored(self):
        assert filter_skipped(["a", "b"], {3, 10}) == ["a", "b"]

    def test_empty_skip_keeps_all(self):
        assert filter_skipped([1, 2, 3], ()) == [1, 2, 3]

    def test_skip_everything(self):
        assert filter_skipped([1, 2], {1, 2}) == []


class TestAssemble:
    def test_a4_page_gives_four_a6_tiles(self):
        with _source([A4]) as source:
            output = assemble(source, CutParameters())
            assert output.page_count == 4
            for w, h in _sizes(output):
                assert w == pytest.approx(A6_PORTRAIT.width, abs=1e-3)
                assert h == pytest.approx(A6_PORTRAIT.height, abs=1e-3)
            assert output.stats.source_pages == 1
            assert output.stats.planned_tiles == 4
            output.close()

    def test_tiles_follow_page_order(self):
        with _source([A4, A4_LANDSCAPE]) as source:
            output = assemble(source, CutParameters())
            sizes = _sizes(output)
            assert len(sizes) == 8
            assert sizes[3][0] == pytest.approx(A6_PORTRAIT.width, abs=1e-3)
            assert sizes[4][0] == pytest.approx(A6_LANDSCAPE.width, abs=1e-3)
            output.close()

    def test_skip_positions_across_pages(self):
        with _source([A4, A4]) as source:
            output = assemble(source, CutParameters(skip_pages={2, 4}))
            assert output.page_count == 6
            assert output.stats.skipped_tiles == 2
            assert output.stats.output_pages == 6
            output.close()

    def test_out_of_range_skip_is_ignored(self):
        with _source([A4]) as source:
            output = assemble(source, CutParameters(skip_pages={99}))
            assert output.page_count == 4
            assert output.stats.skipped_tiles == 0
            output.close()

    def test_disable_cutting_passes_pages_through(self):
        with _source([A4, A4_LANDSCAPE]) as source:
            output = assemble(source, CutParameters(disable_cutting=True))
            assert _sizes(output) == [(595, 842), (842, 595)]
            output.close()

    def test_rotate_then_pass_through(self):
        with _source([A4_LANDSCAPE]) as source:
            params = CutParameters(rotate_to_portrait=True, disable_cutting=True)
            output = assemble(source, params)
            assert _sizes(output) == [(595, 842)]
            output.close()

    def test_rotated_landscape_uses_portrait_tiles(self):
        with _source([A4_LANDSCAPE]) as source:
            output = assemble(source, CutParameters(rotate_to_portrait=True))
            assert output.page_count == 4
            w, h = output.page_size(0)
            assert w < h
            output.close()

    def test_unrotated_landscape_uses_landscape_tiles(self):
        with _source([A4_LANDSCAPE]) as source:
            output = assemble(source, CutParameters())
            w, h = output.page_size(0)
            assert w == pytest.approx(A6_LANDSCAPE.width, abs=1e-3)
            assert h == pytest.approx(A6_LANDSCAPE.height, abs=1e-3)
            output.close()

    def test_empty_source_raises(self):
        with _source([]) as source:
            with pytest.raises(EmptyResultError) as exc_info:
                assemble(source, CutParameters())
            assert exc_info.value.source_pages == 0

    def test_everything_skipped_raises(self):
        with _source([A4]) as source:
            with pytest.raises(EmptyResultError) as exc_info:
                assemble(source, CutParameters(skip_pages={1, 2, 3, 4}))
            assert exc_info.value.skipped_tiles == 4

    def test_source_is_not_modified(self):
        data = _create_test_pdf([A4_LANDSCAPE])
        with SourceDocument.from_bytes(data) as source:
            output = assemble(source, CutParameters(rotate_to_portrait=True))
            output.close()
            page = source.page_at(0)
            assert page.mediabox == (0, 0, 842, 595)
            assert page.rotation == 0
            assert source.page_count == 1

    def test_source_gains_no_objects(self):
        with _source([A4, A4_LANDSCAPE]) as source:
            before = len(source._pdf.objects)
            for _ in range(3):
                assemble(source, CutParameters(rotate_to_portrait=True)).close()
            assert len(source._pdf.objects) == before

    def test_reruns_are_byte_identical(self):
        params = CutParameters(horizontal_shift=-15, vertical_shift=30, skip_pages={2})
        with _source([A4, A4_LANDSCAPE]) as source:
            first = assemble(source, params)
            second = assemble(source, params)
            try:
                assert first.serialize() == second.serialize()
            finally:
                first.close()
                second.close()

    def test_failed_tiles_do_not_take_positions(self):
        calls = []
        real_render = assembler.render_tile

        def flaky_render(output, page, crop, size):
            calls.append(crop)
            if len(calls) == 1:
                return RenderResult(success=False, error_code=ErrorCode.UNKNOWN)
            return real_render(output, page, crop, size)

        with _source([A4]) as source:
            with patch.object(assembler, "render_tile", side_effect=flaky_render):
                output = assemble(source, CutParameters(skip_pages={1}))
            assert output.stats.failed_tiles == 1
            assert output.stats.rendered_tiles == 3
            assert output.page_count == 2
            output.close()


class TestPreviewAndExport:
    def test_preview_ignores_skips(self):
        with _source([A4]) as source:
            output = assemble_preview(source, CutParameters(skip_pages={1, 2, 3, 4}))
            assert output.page_count == 4
            output.close()

    def test_export_applies_skips(self):
        with _source([A4]) as source:
            output = assemble_export(source, CutParameters(skip_pages={1}))
            assert output.page_count == 3
            output.close()


class TestCutPdf:
    def test_cut_writes_output(self):
        with tempfile.TemporaryDirectory() as d:
            src = os.path.join(d, "in.pdf")
            dst = os.path.join(d, "out", "tiles.pdf")
            with open(src, "wb") as f:
                f.write(_create_test_pdf([A4, A4]))

            result = cut_pdf(src, dst, CutParameters(skip_pages={2}))
            assert result.success
            assert result.pages_affected == 7
            assert result.output_path == dst
            assert "1 skipped" in result.message
            with pikepdf.open(dst) as pdf:
                assert len(pdf.pages) == 7

    def test_missing_file(self):
        result = cut_pdf("/nonexistent/file.pdf", "/tmp/never.pdf", CutParameters())
        assert result.success is False
        assert result.error_code == ErrorCode.FILE_NOT_FOUND

    def test_corrupt_file(self):
        with tempfile.TemporaryDirectory() as d:
            src = os.path.join(d, "broken.pdf")
            with open(src, "wb") as f:
                f.write(b"this is not a pdf")
            result = cut_pdf(src, os.path.join(d, "out.pdf"), CutParameters())
            assert result.success is False
            assert result.error_code == ErrorCode.CORRUPT_PDF

    def test_empty_result_reported(self):
        with tempfile.TemporaryDirectory() as d:
            src = os.path.join(d, "in.pdf")
            dst = os.path.join(d, "out.pdf")
            with open(src, "wb") as f:
                f.write(_create_test_pdf([A4]))
            result = cut_pdf(src, dst, CutParameters(skip_pages={1, 2, 3, 4}))
            assert result.success is False
            assert result.error_code == ErrorCode.EMPTY_RESULT
            assert not os.path.exists(dst)
