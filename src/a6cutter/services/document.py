"""
A6Cutter - Document Handles

Thin wrappers around pikepdf for the two ends of a cutting run:
a read-only source document and an append-only output document.
"""

import io
import logging
import os
from dataclasses import dataclass
from pathlib import Path

import pikepdf

from a6cutter.services.geometry import Rect
from a6cutter.utils.exceptions import InvalidPdfError

logger = logging.getLogger(__name__)


def _inherited(page: pikepdf.Page, key: str):
    """Look up *key* on a page, walking the page tree when it is inherited."""
    if key in page:
        return page[key]
    node = page.get("/Parent")
    while node is not None:
        if key in node:
            return node[key]
        node = node.get("/Parent")
    return None


def _inherited_rotation(page: pikepdf.Page) -> int:
    """Resolve a page's /Rotate, including values inherited from the page tree."""
    value = _inherited(page, "/Rotate")
    rotation = int(value) % 360 if value is not None else 0
    if rotation not in (0, 90, 180, 270):
        rotation = round(rotation / 90) * 90 % 360
    return rotation


def _content_bytes(page: pikepdf.Page) -> bytes:
    """Decoded page content, with content stream arrays joined."""
    contents = page.get("/Contents")
    if contents is None:
        return b""
    if isinstance(contents, pikepdf.Array):
        return b"\n".join(stream.read_bytes() for stream in contents)
    return contents.read_bytes()


class SourcePage:
    """Read-only view of one page of the input document.

    Attributes:
        index: 0-based page index in the source document
        mediabox: Normalized MediaBox as (x0, y0, x1, y1)
        rotation: Inherited /Rotate value (0, 90, 180, 270)
    """

    def __init__(self, page: pikepdf.Page, index: int) -> None:
        self._page = page
        self.index = index

        x0, y0, x1, y1 = (float(v) for v in page.mediabox)
        self.mediabox: tuple[float, float, float, float] = (
            min(x0, x1),
            min(y0, y1),
            max(x0, x1),
            max(y0, y1),
        )
        self.rotation = _inherited_rotation(page)

    @property
    def page(self) -> pikepdf.Page:
        return self._page

    @property
    def bounds(self) -> Rect:
        """Displayed page rectangle, anchored at the origin, with /Rotate applied."""
        x0, y0, x1, y1 = self.mediabox
        width, height = x1 - x0, y1 - y0
        if self.rotation in (90, 270):
            width, height = height, width
        return Rect(0.0, 0.0, width, height)

    def __repr__(self) -> str:
        b = self.bounds
        return f"SourcePage(index={self.index}, size={b.width:.1f}x{b.height:.1f}, rotation={self.rotation})"


class SourceDocument:
    """Decoded input document.

    The wrapped pikepdf document is treated as read-only; every run over it
    starts from the same pages.
    """

    def __init__(self, pdf: pikepdf.Pdf, name: str = "") -> None:
        self._pdf = pdf
        self.name = name or str(pdf.filename)

    @classmethod
    def open(cls, pdf_path: str | Path) -> "SourceDocument":
        """Open a PDF file.

        Raises:
            FileNotFoundError: If the file does not exist.
            InvalidPdfError: If the file is not a readable PDF.
        """
        pdf_path = str(pdf_path)
        if not os.path.isfile(pdf_path):
            raise FileNotFoundError(f"File not found: {pdf_path}")

        try:
            pdf = pikepdf.open(pdf_path)
        except pikepdf.PasswordError:
            raise InvalidPdfError(pdf_path, "password-protected") from None
        except pikepdf.PdfError as e:
            raise InvalidPdfError(pdf_path, str(e)) from e

        logger.info("Opened %s (%d pages)", os.path.basename(pdf_path), len(pdf.pages))
        return cls(pdf, name=pdf_path)

    @classmethod
    def from_bytes(cls, data: bytes, name: str = "<memory>") -> "SourceDocument":
        """Decode a PDF held in memory.

        Raises:
            InvalidPdfError: If the data is not a readable PDF.
        """
        try:
            pdf = pikepdf.open(io.BytesIO(data))
        except pikepdf.PdfError as e:
            raise InvalidPdfError(name, str(e)) from e
        return cls(pdf, name=name)

    @property
    def page_count(self) -> int:
        return len(self._pdf.pages)

    def page_at(self, index: int) -> SourcePage:
        if not 0 <= index < self.page_count:
            raise IndexError(f"Page index {index} out of range (document has {self.page_count} pages)")
        return SourcePage(self._pdf.pages[index], index)

    def __iter__(self):
        for index in range(self.page_count):
            yield self.page_at(index)

    def close(self) -> None:
        self._pdf.close()

    def __enter__(self) -> "SourceDocument":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


@dataclass
class AssemblyStats:
    """Tile counters for one assembly run."""

    source_pages: int = 0
    planned_tiles: int = 0
    rendered_tiles: int = 0
    failed_tiles: int = 0
    skipped_tiles: int = 0

    @property
    def output_pages(self) -> int:
        return self.rendered_tiles - self.skipped_tiles


class OutputDocument:
    """Append-only collection of rendered tiles, backed by a new pikepdf document.

    Source pages are placed as Form XObjects; each source page is imported
    once per document and shared by all of its tiles.
    """

    def __init__(self) -> None:
        self._pdf = pikepdf.Pdf.new()
        self._forms: dict[int, pikepdf.Object] = {}
        self.stats = AssemblyStats()

    @property
    def pdf(self) -> pikepdf.Pdf:
        return self._pdf

    @property
    def page_count(self) -> int:
        return len(self._pdf.pages)

    def _import(self, obj):
        """Copy a source object into this document without touching the source.

        Indirect objects go through copy_foreign; direct containers are
        rebuilt here so that their indirect members can be copied too.
        """
        if isinstance(obj, pikepdf.Object) and obj.is_indirect:
            return self._pdf.copy_foreign(obj)
        if isinstance(obj, pikepdf.Dictionary):
            return pikepdf.Dictionary({key: self._import(value) for key, value in obj.items()})
        if isinstance(obj, pikepdf.Array):
            return pikepdf.Array([self._import(item) for item in obj])
        return obj

    def form_xobject(self, page: SourcePage) -> pikepdf.Object:
        """Return the Form XObject holding *page*'s content, importing it on first use.

        The form is assembled in this document from the page's decoded
        content and copied resources; the source document gains no objects.
        """
        form = self._forms.get(page.index)
        if form is None:
            form = self._pdf.make_stream(_content_bytes(page.page))
            form.Type = pikepdf.Name.XObject
            form.Subtype = pikepdf.Name.Form
            form.BBox = pikepdf.Array(list(page.mediabox))
            resources = _inherited(page.page, "/Resources")
            form.Resources = (
                self._import(resources) if resources is not None else pikepdf.Dictionary()
            )
            self._forms[page.index] = form
        return form

    def append(self, page: pikepdf.Page) -> None:
        self._pdf.pages.append(page)

    def page_size(self, index: int) -> tuple[float, float]:
        x0, y0, x1, y1 = (float(v) for v in self._pdf.pages[index].mediabox)
        return (abs(x1 - x0), abs(y1 - y0))

    def serialize(self) -> bytes:
        """Serialize to PDF bytes. Identical documents give identical bytes."""
        buf = io.BytesIO()
        self._pdf.save(buf, deterministic_id=True)
        return buf.getvalue()

    def save(self, output_path: str | Path) -> None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self._pdf.save(str(output_path), deterministic_id=True)
        logger.info("Saved %d pages → %s", self.page_count, output_path)

    def close(self) -> None:
        self._pdf.close()
