"""
Pydantic schemas for correction issues and provider payloads.
"""
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Issue(BaseModel):
    """
    A single flagged span with suggested replacements.

    ``offset`` is relative to the text snapshot that was checked and goes stale
    as soon as the document is edited. Identity for ignoring and de-duplication
    is ``(token, type)``.
    """

    model_config = ConfigDict(populate_by_name=True)

    offset: int = Field(description="Character offset in the checked plain text")
    token: str = Field(min_length=1, description="Flagged text as it appeared in the snapshot")
    type: str = Field(default="spelling", description="Issue category (spelling, grammar, ...)")
    suggestions: List[str] = Field(default_factory=list, description="Replacements ordered by relevance")
    edit_id: Optional[str] = Field(
        default=None,
        alias="editId",
        description="Provider edit id used for accept/reject feedback"
    )

    @field_validator("offset", mode="before")
    @classmethod
    def offset_must_be_numeric(cls, v):
        # Integral floats such as 5.0 pass; strings and booleans do not
        if isinstance(v, (str, bool)):
            raise ValueError("offset must be a number")
        return v

    @property
    def key(self) -> tuple[str, str]:
        """Identity used for ignore matching."""
        return (self.token, self.type)

    def same_instance(self, other: "Issue") -> bool:
        """True when both describe the same occurrence in the same snapshot."""
        return self.offset == other.offset and self.key == other.key


class SaplingEdit(BaseModel):
    """A single edit in a Sapling-style provider response."""

    id: str
    sentence: str = ""
    sentence_start: int = 0
    start: int
    end: int
    replacement: str
    error_type: str = ""
    general_error_type: str = ""


class ErrorsPayload(BaseModel):
    """Response shape that already carries normalized issues (our own API)."""

    errors: List[Any]


class EditsPayload(BaseModel):
    """Provider-native response shape (Sapling ``/edits``)."""

    edits: List[Any]


# Either response shape is accepted at the client boundary
ProviderPayload = Union[ErrorsPayload, EditsPayload]


class SpellcheckRequest(BaseModel):
    """Schema for a check request."""

    text: str = Field(..., min_length=1, description="Raw editor content (may contain markup)")


class SpellcheckResponse(BaseModel):
    """Schema for a check response."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    errors: List[Issue] = Field(default_factory=list)


class FeedbackResponse(BaseModel):
    """Schema for accept/reject feedback responses."""

    success: bool
