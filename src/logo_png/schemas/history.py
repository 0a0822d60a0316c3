"""Pydantic schemas for the history API.

Learn: PNG bytes travel as standard base64 strings inside JSON, the same
encoding the history frontend feeds into `data:image/png;base64,` URLs.
"""

import base64
from datetime import datetime

from pydantic import BaseModel, Field, field_serializer


class LogoState(BaseModel):
    time: datetime = Field(validation_alias="created_at")
    logo: bytes = Field(validation_alias="image_png")

    model_config = {"from_attributes": True}

    @field_serializer("logo")
    def _logo_as_base64(self, logo: bytes) -> str:
        return base64.b64encode(logo).decode("ascii")


class HistoryIndexEntry(BaseModel):
    time: datetime
