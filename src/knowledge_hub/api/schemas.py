"""
Request bodies for the HTTP API.

Required-field checks live in the service layer so that a missing title and
a blank title produce the same 400 response.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DocumentCreateRequest(BaseModel):
    title: str | None = None
    content: str | None = None
    tags: list[str] | None = None


class DocumentUpdateRequest(BaseModel):
    title: str | None = None
    content: str | None = None
    tags: list[str] | None = None


class SearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: str | None = None
    mode: str | None = "semantic"
    top_k: Any = Field(default=None, alias="topK")


class QuestionRequest(BaseModel):
    question: str | None = None
