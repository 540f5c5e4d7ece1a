"""Tests for the page transformer."""

import io

import pikepdf
import pytest

from a6cutter.services.document import SourceDocument
from a6cutter.services.page_transform import (
    Affine,
    content_matrix,
    rotation_matrix,
    transform_page,
)


def _create_source(pages, tree_rotate=None) -> SourceDocument:
    """Build an in-memory source document.

    Args:
        pages: List of MediaBox lists, optionally followed by a /Rotate value
        tree_rotate: /Rotate set on the page tree root (inherited)
    """
    pdf = pikepdf.Pdf.new()
    for entry in pages:
        mediabox, rotate = entry if isinstance(entry, tuple) else (entry, None)
        page = pikepdf.Dictionary(
            Type=pikepdf.Name.Page,
            MediaBox=mediabox,
            Contents=pdf.make_stream(b"0 0 m 10 10 l S"),
        )
        if rotate is not None:
            page.Rotate = rotate
        pdf.pages.append(pikepdf.Page(page))
    if tree_rotate is not None:
        pdf.Root.Pages.Rotate = tree_rotate
    buf = io.BytesIO()
    pdf.save(buf)
    return SourceDocument.from_bytes(buf.getvalue())


class TestAffine:
    def test_identity(self):
        assert Affine().apply(3, 4) == (3, 4)

    def test_then_applies_left_first(self):
        m = Affine.translation(10, 0).then(Affine.scaling(2, 2))
        assert m.apply(1, 1) == (22, 2)

    def test_values_order(self):
        assert Affine(1, 2, 3, 4, 5, 6).values == (1, 2, 3, 4, 5, 6)


class TestRotationMatrix:
    def test_clockwise_keeps_box_in_positive_quadrant(self):
        m = rotation_matrix(842, 595, 90)
        assert m.apply(0, 0) == (0, 842)
        assert m.apply(842, 595) == (595, 0)

    def test_half_turn(self):
        m = rotation_matrix(100, 50, 180)
        assert m.apply(0, 0) == (100, 50)

    def test_counter_clockwise(self):
        m = rotation_matrix(842, 595, 270)
        assert m.apply(0, 0) == (595, 0)
        assert m.apply(842, 595) == (0, 842)

    def test_negative_angle_normalized(self):
        assert rotation_matrix(10, 20, -90) == rotation_matrix(10, 20, 270)

    def test_non_quarter_turn_raises(self):
        with pytest.raises(ValueError):
            rotation_matrix(10, 20, 45)

    def test_content_matrix_moves_mediabox_origin(self):
        m = content_matrix((10, 20, 110, 220), 0)
        assert m.apply(10, 20) == (0, 0)


class TestTransformPage:
    def test_portrait_page_unchanged(self):
        with _create_source([[0, 0, 595, 842]]) as source:
            effective = transform_page(source.page_at(0), rotate_to_portrait=True)
            assert effective.applied_rotation == 0
            assert effective.bounds.size == (595, 842)
            assert effective.matrix == Affine()

    def test_rotation_disabled_keeps_landscape(self):
        with _create_source([[0, 0, 842, 595]]) as source:
            effective = transform_page(source.page_at(0), rotate_to_portrait=False)
            assert effective.applied_rotation == 0
            assert effective.bounds.size == (842, 595)

    def test_clockwise_turn(self):
        with _create_source([[0, 0, 842, 595]]) as source:
            effective = transform_page(source.page_at(0), True, rotate_clockwise=True)
            assert effective.applied_rotation == 90
            assert effective.rotation == 90
            assert effective.bounds.size == (595, 842)

    def test_counter_clockwise_turn(self):
        with _create_source([[0, 0, 842, 595]]) as source:
            effective = transform_page(source.page_at(0), True, rotate_clockwise=False)
            assert effective.applied_rotation == -90
            assert effective.rotation == 270
            assert effective.bounds.size == (595, 842)

    def test_square_page_not_rotated(self):
        with _create_source([[0, 0, 500, 500]]) as source:
            effective = transform_page(source.page_at(0), True)
            assert effective.applied_rotation == 0

    def test_existing_rotate_counts_towards_orientation(self):
        # Portrait MediaBox displayed as landscape through /Rotate 90
        with _create_source([([0, 0, 595, 842], 90)]) as source:
            page = source.page_at(0)
            assert page.bounds.size == (842, 595)
            effective = transform_page(page, True)
            assert effective.rotation == 180
            assert effective.bounds.size == (595, 842)

    def test_inherited_rotate(self):
        with _create_source([[0, 0, 595, 842]], tree_rotate=270) as source:
            page = source.page_at(0)
            assert page.rotation == 270
            assert page.bounds.size == (842, 595)

    def test_matrix_maps_page_onto_bounds(self):
        with _create_source([[0, 0, 842, 595]]) as source:
            effective = transform_page(source.page_at(0), True)
            corners = [effective.matrix.apply(x, y) for x, y in ((0, 0), (842, 0), (0, 595), (842, 595))]
            xs = [p[0] for p in corners]
            ys = [p[1] for p in corners]
            assert (min(xs), max(xs)) == (0, 595)
            assert (min(ys), max(ys)) == (0, 842)
