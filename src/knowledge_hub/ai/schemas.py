"""
Expected response shapes for AI provider calls.

These Pydantic models are the contract between the provider and the rest of
the system. A response that does not validate is an AIClientError, never an
unhandled exception further down the pipeline.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CompletionText(BaseModel):
    """Free-text completion (summaries, answers)."""

    text: str = Field(min_length=1)

    @field_validator("text")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("completion text is blank")
        return value


class ExtractedTags(BaseModel):
    """JSON tag extraction response: {"tags": [...]}."""

    model_config = ConfigDict(extra="ignore")

    tags: list[str]


class EmbeddingVector(BaseModel):
    """A non-empty vector of finite floats."""

    values: list[float] = Field(min_length=1)

    @field_validator("values")
    @classmethod
    def finite(cls, values: list[float]) -> list[float]:
        if any(v != v or v in (float("inf"), float("-inf")) for v in values):
            raise ValueError("embedding contains non-finite values")
        return values
