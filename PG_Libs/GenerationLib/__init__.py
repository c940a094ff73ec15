"""
GenerationLib - Bitmap sources and generation prompts

This module resolves bitmap references for the quantizer and builds the
prompts sent to the external image provider.
"""

from PG_Libs.GenerationLib.image_source import encode_data_url, load_bitmap
from PG_Libs.GenerationLib.prompt_builder import (
    STYLE_GUIDES,
    ImageProvider,
    build_generation_prompt,
    request_image,
)

__all__ = [
    "load_bitmap",
    "encode_data_url",
    "STYLE_GUIDES",
    "ImageProvider",
    "build_generation_prompt",
    "request_image",
]
