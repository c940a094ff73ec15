"""
PG_Libs - Pixel Gen Library Modules

This package contains core functionality for the Pixel Gen project,
organized into specialized sub-packages:

- GridLib: Pixel grid model, quantizer, raster editor, RLE codec and renderers
- GenerationLib: Bitmap sources and generation prompt building
- SessionLib: Editing session state machine (tools, pointer drag, generations)
- ProjStoreLib: RLE JSON and PNG export persistence
- ImageEditingLib: PyQt5 pixel editor window
"""

__version__ = "0.1.0"
