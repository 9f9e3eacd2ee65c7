"""
Blog API — Pydantic Request/Response Schemas
============================================

What:  Pydantic models defining the wire contract of the /posts endpoints.
How:   FastAPI parses request bodies into the request models and serializes
       handler results through the response models (by alias, so author
       names go out as firstName/lastName).

Request bodies are all-optional: field *presence* is read from
`model_fields_set`, which lets the router answer a missing field with the
API's own 400 message instead of a generic schema error.
"""

import uuid
from datetime import datetime
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, Field


class AuthorName(BaseModel):
    """One entry of a post's author list."""
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")

    model_config = {"populate_by_name": True}


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class BlogPostCreate(BaseModel):
    """Body of POST /posts."""

    REQUIRED_FIELDS: ClassVar[Tuple[str, ...]] = ("title", "content", "author")

    title: Optional[str] = None
    content: Optional[str] = None
    author: Optional[List[AuthorName]] = None

    def first_missing_field(self) -> Optional[str]:
        """Name of the first required field absent from the body, if any."""
        for field in self.REQUIRED_FIELDS:
            if field not in self.model_fields_set:
                return field
        return None

    def to_record_values(self) -> Dict[str, Any]:
        return self.model_dump(include=set(self.REQUIRED_FIELDS), by_alias=True)


class BlogPostUpdate(BaseModel):
    """
    Body of PUT /posts/{id}.

    `id` must repeat the path id. Only the updatable fields actually present
    in the body end up in the change set; an empty change set is valid.
    """

    UPDATABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset({"title", "content", "author"})

    id: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None
    author: Optional[List[AuthorName]] = None

    def changes(self) -> Dict[str, Any]:
        provided = self.UPDATABLE_FIELDS & self.model_fields_set
        return self.model_dump(include=set(provided), by_alias=True)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class BlogPostResponse(BaseModel):
    """Public representation of a stored blog post."""
    id: uuid.UUID = Field(description="Identifier assigned by storage on creation")
    title: str
    content: str
    author: List[AuthorName]
    created: datetime = Field(description="When the post was created (ISO 8601)")


class BlogPostListResponse(BaseModel):
    """Body of GET /posts."""
    posts: List[BlogPostResponse]


class ErrorResponse(BaseModel):
    """
    Error body shared by every failing response.

    Example:
        {"message": "Missing `title` in request body"}
    """
    message: str = Field(description="Human-readable error description")
