"""Pydantic models that describe a channel's playable renditions."""

from pydantic import BaseModel, ConfigDict, Field


class PlaybackAccessToken(BaseModel):
    """Signed token returned by the Twitch GQL PlaybackAccessToken query."""

    value: str
    signature: str


class Variant(BaseModel):
    """One quality rendition listed in a master playlist."""

    model_config = ConfigDict(frozen=True)

    name: str
    url: str
    bandwidth: int = Field(default=0, ge=0)
