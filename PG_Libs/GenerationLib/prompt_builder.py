"""
Generation prompts and provider calls.

The image provider is an external black box: any callable taking
``(prompt, resolution)`` and returning a bitmap reference (or an awaitable
resolving to one). This module builds the prompt that steers the provider
toward the look of the chosen resolution and toward a solid black
background, which the quantizer then removes.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Union

from PG_Libs.constants import GENERATION_BACKGROUND_COLOR, GENERATION_OUTLINE_COLOR
from PG_Libs.errors import GenerationError
from PG_Libs.GridLib.grid_models import Resolution, validate_resolution

logger = logging.getLogger(__name__)

ImageProvider = Callable[[str, int], Union[Any, Awaitable[Any]]]

STYLE_GUIDES: Dict[Resolution, str] = {
    Resolution.XS: (
        "very minimalist, low-res pixel art, iconic style, NES era graphics, "
        "distinct large pixels, limited color palette."
    ),
    Resolution.S: "SNES era pixel art, 16-bit style, moderate detail, clean outlines.",
    Resolution.M: (
        "high quality pixel art, Playstation 1 era 2D sprite, detailed shading and lighting."
    ),
    Resolution.L: (
        "HD pixel art, very detailed, modern indie game aesthetic, complex textures."
    ),
}


def build_generation_prompt(subject: str, resolution: int) -> str:
    """
    Build the provider prompt for a subject at a given resolution.

    Raises:
        ValueError: If the subject is empty or the resolution unsupported
    """
    subject = (subject or "").strip()
    if not subject:
        raise ValueError("subject cannot be empty")
    style = STYLE_GUIDES[validate_resolution(resolution)]

    return (
        f"Create a single pixel art sprite of: {subject}.\n"
        "\n"
        "Critical Requirements:\n"
        f"1. Style: {style}\n"
        f"2. Background: Solid Black ({GENERATION_BACKGROUND_COLOR}). "
        "This is crucial for background removal.\n"
        f"3. Outlines: Use Dark Gray ({GENERATION_OUTLINE_COLOR}) or colored outlines "
        f"instead of pure black ({GENERATION_BACKGROUND_COLOR}) for the sprite itself, "
        "to distinguish it from the background.\n"
        "4. View: Full view, centered.\n"
        "5. Format: Pixel art style is mandatory. Sharp edges, no blur.\n"
    )


async def request_image(provider: ImageProvider, subject: str, resolution: int) -> Any:
    """
    Ask the provider for a single raw image.

    Returns:
        Whatever bitmap reference the provider produced

    Raises:
        GenerationError: If the provider fails or returns nothing
    """
    prompt = build_generation_prompt(subject, resolution)
    logger.info(f"Requesting {int(resolution)}x{int(resolution)} image for: {subject.strip()}")

    try:
        result = provider(prompt, int(resolution))
        if inspect.isawaitable(result):
            result = await result
    except GenerationError:
        raise
    except Exception as e:
        logger.error(f"Image provider failed: {e}")
        raise GenerationError(f"Image provider failed: {e}") from e

    if result is None or (isinstance(result, (str, bytes, bytearray)) and not result):
        raise GenerationError("No image generated.")
    return result
