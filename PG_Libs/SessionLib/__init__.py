"""
SessionLib - Editing session

This module provides the editing session that owns the active grid and
turns pointer events into raster edits.
"""

from PG_Libs.SessionLib.editing_session import (
    DragState,
    EditingSession,
    PointerEvent,
    PointerKind,
)

__all__ = [
    "DragState",
    "EditingSession",
    "PointerEvent",
    "PointerKind",
]
