"""
Pixel Gen desktop editor.

Usage:
  python pixel_gen.py [IMAGE] [--size {32,64,128,256}] [--threshold T] [--debug]

Opens the pixel editor. When IMAGE is given it is quantized into the grid
straight away.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from PG_Libs.constants import DEFAULT_BACKGROUND_THRESHOLD, DEFAULT_RESOLUTION, SUPPORTED_RESOLUTIONS
from PG_Libs.GridLib.quantizer import QuantizerConfig
from PG_Libs.SessionLib.editing_session import EditingSession


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Pixel art grid editor")
    parser.add_argument("image", nargs="?", type=Path, help="Image to quantize on start")
    parser.add_argument(
        "--size",
        type=int,
        choices=SUPPORTED_RESOLUTIONS,
        default=DEFAULT_RESOLUTION,
        help="Grid resolution",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=DEFAULT_BACKGROUND_THRESHOLD,
        help="Background removal distance threshold",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from PyQt5.QtWidgets import QApplication
    from PG_Libs.ImageEditingLib.pixel_editor_window import PixelEditorWindow

    app = QApplication(sys.argv)
    session = EditingSession(
        resolution=args.size,
        quantizer_config=QuantizerConfig(background_threshold=args.threshold),
    )
    window = PixelEditorWindow(session)
    window.show()
    if args.image:
        window.load_image(args.image)
    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
