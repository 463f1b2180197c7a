from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


Language = Literal["en", "zh"]

DEFAULT_LANGUAGE: Language = "en"


class Memory(BaseModel):
    """One answered question together with its generated painting.

    Stored documents use the camelCase field names, so models dump with
    ``by_alias=True`` whenever they leave the process.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    question: str
    answer: str
    painting_url: str = Field(..., alias="paintingUrl")
    title: Optional[str] = None
    timestamp: int


class Gallery(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    created_at: int = Field(..., alias="createdAt")
    memories: List[Memory] = Field(default_factory=list)
    client_marker: str = Field("", alias="deviceAgent")


class CuratorResponse(BaseModel):
    """Structured reply from the curator persona."""

    comment: str = Field(..., description="The cat curator's warm response.")
    title: str = Field(
        ...,
        description=(
            "A short, poetic title for the painting "
            "(e.g. 'The Quiet Morning', 'Dancing in Rain')."
        ),
    )

    @field_validator("comment", "title")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = (value or "").strip()
        if not value:
            raise ValueError("must not be blank")
        return value
