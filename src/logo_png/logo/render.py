"""Logo renderer — turns a LogoDescription into a PNG.

Learn: The physical logo is seven characters built from 8x8 LED panels.
CHARACTER_PANELS maps (character, panel) to the panel's top-left corner on
a 152x32 canvas. Pixel i of a panel sits at (i % 8, i // 8) from that corner.

Rendering happens at scale 1 and is then blown up with nearest-neighbour
resampling, so every logical pixel becomes a crisp size x size block.
"""

import re
from functools import lru_cache
from io import BytesIO

from PIL import Image, ImageDraw, ImageFont

from logo_png.logo.models import DEFAULT_OPTIONS, LogoDescription, RenderOptions

PNG_MEDIA_TYPE = "image/png"

LOGO_WIDTH = 152
LOGO_HEIGHT = 32
PANEL_SIZE = 8

# Tokens that are not valid colors are drawn in this gray instead of failing.
FALLBACK_COLOR = (155, 155, 155)

_HEX_RE = re.compile(r"^[0-9a-fA-F]{6}$")

CHARACTER_PANELS: tuple[tuple[tuple[int, int], ...], ...] = (
    ((0, 0), (0, 16), (0, 24), (0, 32)),
    ((8, 0), (8, 8), (16, 8), (8, 16), (8, 24), (16, 24), (24, 24)),
    ((32, 8), (40, 8), (48, 8), (32, 16), (48, 16), (32, 24), (40, 24), (48, 24)),
    ((56, 8), (64, 8), (72, 8), (56, 16), (56, 24)),
    ((88, 8), (96, 8), (80, 16), (96, 16), (80, 24), (88, 24), (96, 24)),
    ((104, 0), (104, 8), (112, 8), (104, 16), (104, 24), (112, 24), (120, 24)),
    ((128, 8), (136, 8), (144, 8), (128, 16), (144, 16), (128, 24), (136, 24)),
)

CHARACTER_COUNT = len(CHARACTER_PANELS)


class RenderError(Exception):
    """The description does not fit the physical logo layout."""


def parse_color(token: str) -> tuple[int, int, int]:
    """Parse `#rrggbb` or `rrggbb`. Anything else maps to FALLBACK_COLOR."""
    digits = token[1:] if len(token) == 7 else token
    if not _HEX_RE.match(digits):
        return FALLBACK_COLOR
    return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


def _character_pixels(char_index: int, character):
    """Yield (x, y, rgb) for every pixel of one character cell."""
    if char_index >= CHARACTER_COUNT:
        raise RenderError(
            f"Character {char_index} out of range (logo has {CHARACTER_COUNT})"
        )
    origins = CHARACTER_PANELS[char_index]

    for panel_index, panel in enumerate(character):
        if panel_index >= len(origins):
            raise RenderError(
                f"Character {char_index} has no panel {panel_index} "
                f"(max {len(origins) - 1})"
            )
        if len(panel) > PANEL_SIZE * PANEL_SIZE:
            raise RenderError(
                f"Panel {char_index}/{panel_index} has {len(panel)} pixels, "
                f"max {PANEL_SIZE * PANEL_SIZE}"
            )
        origin_x, origin_y = origins[panel_index]
        for pixel_index, token in enumerate(panel):
            x = origin_x + pixel_index % PANEL_SIZE
            y = origin_y + pixel_index // PANEL_SIZE
            if x >= LOGO_WIDTH or y >= LOGO_HEIGHT:
                raise RenderError(
                    f"Pixel {char_index}/{panel_index}/{pixel_index} at ({x}, {y}) "
                    "falls outside the canvas"
                )
            yield x, y, parse_color(token)


def render_image(
    description: LogoDescription,
    options: RenderOptions = DEFAULT_OPTIONS,
) -> Image.Image:
    """Draw the description onto a transparent RGBA canvas."""
    if options.character is not None and options.character >= CHARACTER_COUNT:
        raise RenderError(f"Character {options.character} out of range")

    image = Image.new("RGBA", (LOGO_WIDTH, LOGO_HEIGHT), (0, 0, 0, 0))
    pix = image.load()

    for char_index, character in enumerate(description.logo):
        if options.character is not None and char_index != options.character:
            continue
        for x, y, (r, g, b) in _character_pixels(char_index, character):
            pix[x, y] = (r, g, b, 255)

    if options.size > 1:
        image = image.resize(
            (LOGO_WIDTH * options.size, LOGO_HEIGHT * options.size),
            Image.Resampling.NEAREST,
        )
    return image


def render(
    description: LogoDescription,
    options: RenderOptions = DEFAULT_OPTIONS,
) -> bytes:
    """Render to PNG bytes. Deterministic for identical inputs."""
    image = render_image(description, options)
    buf = BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


@lru_cache(maxsize=1)
def placeholder_png() -> bytes:
    """Fixed image served when an on-demand render fails."""
    image = Image.new("RGBA", (LOGO_WIDTH, LOGO_HEIGHT), FALLBACK_COLOR + (255,))
    draw = ImageDraw.Draw(image)
    draw.text((4, 10), "logo unavailable", fill=(40, 40, 40, 255), font=ImageFont.load_default())
    buf = BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()
