"""
ProjStoreLib - Pixel grid persistence

This module provides RLE JSON file storage and PNG export for the Pixel Gen
project.
"""

from PG_Libs.ProjStoreLib.pixel_store import (
    export_filename,
    load_rle_file,
    save_png_export,
    save_rle_file,
)

__all__ = [
    "export_filename",
    "load_rle_file",
    "save_png_export",
    "save_rle_file",
]
