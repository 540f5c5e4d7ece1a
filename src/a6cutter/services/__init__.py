"""
A6Cutter - Services Package

The page-tiling engine and the settings/preset layer around it.
"""

from a6cutter.services.assembler import assemble, assemble_export, assemble_preview, cut_pdf
from a6cutter.services.document import OutputDocument, SourceDocument
from a6cutter.services.parameters import CutParameters

__all__ = [
    "CutParameters",
    "OutputDocument",
    "SourceDocument",
    "assemble",
    "assemble_export",
    "assemble_preview",
    "cut_pdf",
]
