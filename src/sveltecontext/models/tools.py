"""Input and output models for the MCP tool handlers."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from sveltecontext.models.registry import COMPONENT_NAME_RE


def _validate_component_name(v: str) -> str:
    v = v.strip().lower()
    if not v:
        raise ValueError("component_name must not be empty")
    if len(v) > 100:
        raise ValueError("component_name must be at most 100 characters")
    if not COMPONENT_NAME_RE.match(v):
        raise ValueError(f"Invalid component name: {v!r}")
    return v


class ComponentNameInput(BaseModel):
    component_name: str

    @field_validator("component_name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _validate_component_name(v)


class SearchComponentsInput(BaseModel):
    query: str = Field(max_length=100)

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("query must not be empty")
        return v


class DirectoryStructureInput(BaseModel):
    path: str = Field(max_length=1024)
    owner: str | None = Field(default=None, max_length=100)
    repo: str | None = Field(default=None, max_length=100)
    branch: str | None = Field(default=None, max_length=255)
    depth_limit: int = Field(ge=1)

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        v = v.strip().strip("/")
        if any(segment in {"..", "."} for segment in v.split("/")):
            raise ValueError("path must not contain '.' or '..' segments")
        return v


class ListComponentsOutput(BaseModel):
    components: list[str]
    total: int


class SearchComponentsOutput(BaseModel):
    query: str
    matches: list[str]
    total: int
