"""Logo description and render options.

Learn: The upstream API returns `{"logo": [[[str]]]}` — characters, each a
list of panels, each panel a list of color tokens. We parse it into a frozen
pydantic model built from tuples, so two descriptions compare equal exactly
when every nested token is equal. That equality is the only change signal
the update loop uses.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# A panel is a row-major run of color tokens, 8 per row.
Panel = tuple[str, ...]
Character = tuple[Panel, ...]


class LogoDescription(BaseModel):
    """One full logo state as served by the upstream API."""

    model_config = ConfigDict(frozen=True)

    logo: tuple[Character, ...]

    @property
    def is_empty(self) -> bool:
        return not self.logo


EMPTY_LOGO = LogoDescription(logo=())


class RenderOptions(BaseModel):
    """Per-request render configuration.

    size: pixel scale, each logical pixel becomes a size x size block.
    character: draw only this character cell (0-based), leave others blank.
    """

    model_config = ConfigDict(frozen=True)

    size: int = Field(1, ge=1)
    character: Optional[int] = Field(None, ge=0)


DEFAULT_OPTIONS = RenderOptions()
