"""
ImageEditingLib - Pixel editor window

This module provides the PyQt5 window that displays the session grid and
feeds mouse input into the editing session. It is imported on demand so the
core libraries stay usable without a display.
"""
