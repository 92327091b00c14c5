"""Placeholder cover art for books without an image."""

from __future__ import annotations

from functools import lru_cache
from urllib.parse import quote

PLACEHOLDER_SVG = (
    "<svg xmlns='http://www.w3.org/2000/svg' width='400' height='600'>"
    "<rect fill='#2b2b2b' width='100%' height='100%'/>"
    "<text x='50%' y='50%' fill='#9aa' font-size='20' font-family='Arial' "
    "text-anchor='middle'>No Image</text></svg>"
)


@lru_cache(maxsize=1)
def placeholder_image_data_url() -> str:
    """Return the "No Image" cover as an inline SVG data URL."""
    return "data:image/svg+xml;utf8," + quote(PLACEHOLDER_SVG, safe="")


def cover_or_placeholder(image: str | None) -> str:
    if image and image.strip():
        return image
    return placeholder_image_data_url()
