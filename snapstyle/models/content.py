"""
Payloads exchanged with Gemini: images, suggestions, social posts.

Suggestions and SocialPost double as the validation contract for the JSON
Gemini returns, so field aliases follow the remote (camelCase) names.
"""

import base64
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

SUGGESTIONS_PER_CATEGORY = 5

Label = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
LabelList = Annotated[
    list[Label],
    Field(min_length=SUGGESTIONS_PER_CATEGORY, max_length=SUGGESTIONS_PER_CATEGORY),
]


class ImagePayload(BaseModel):
    """A transferable encoded image: base64 data plus its mime type."""

    model_config = ConfigDict(frozen=True)

    data: str
    mime_type: str = "image/jpeg"

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.data)

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"

    @classmethod
    def from_bytes(cls, raw: bytes, mime_type: str) -> "ImagePayload":
        return cls(data=base64.b64encode(raw).decode("ascii"), mime_type=mime_type)


class GeneratedImage(BaseModel):
    """A rendered image and the prompt text that produced it."""

    model_config = ConfigDict(frozen=True)

    image: ImagePayload
    prompt: str


class Suggestions(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    original_description: Label = Field(alias="originalDescription")
    expressions: LabelList
    clothing: LabelList
    scenes: LabelList
    styles: LabelList


class SocialPost(BaseModel):
    model_config = ConfigDict(frozen=True)

    headline: str
    content: str
    hashtags: list[str] = Field(default_factory=list)
