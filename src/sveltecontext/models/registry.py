from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

UI_COMPONENT_TYPE = "registry:ui"


def _unique(values: list[str] | tuple[str, ...]) -> tuple[str, ...]:
    """De-duplicate while keeping first-seen order."""
    return tuple(dict.fromkeys(v for v in values if v))


class RegistryItemFile(BaseModel):
    """File reference inside a manifest item. Manifests may also list bare paths."""

    path: str
    type: str | None = None
    target: str | None = None

    @model_validator(mode="before")
    @classmethod
    def accept_bare_path(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"path": data}
        return data


class RegistryItem(BaseModel):
    """Single item in the remote registry manifest."""

    name: str
    type: str
    description: str | None = None
    files: list[RegistryItemFile] = []
    dependencies: list[str] = []
    registry_dependencies: list[str] = Field(default=[], alias="registryDependencies")


class ComponentFile(BaseModel):
    """One physical file belonging to a component. ``content`` is None until fetched."""

    model_config = ConfigDict(frozen=True)

    path: str
    content: str | None = None
    role: str | None = None
    target: str | None = None


class ComponentMetadata(BaseModel):
    """Resolved component: metadata plus (possibly) file bodies.

    Built once per resolution, either from the registry index or from the
    static fallback list (``degraded=True``, single contentless file).
    """

    model_config = ConfigDict(frozen=True)

    name: str
    kind: str = UI_COMPONENT_TYPE
    files: tuple[ComponentFile, ...] = ()
    npm_dependencies: tuple[str, ...] = ()
    registry_dependencies: tuple[str, ...] = ()
    description: str | None = None
    degraded: bool = False

    @field_validator("npm_dependencies", "registry_dependencies", mode="before")
    @classmethod
    def dedupe(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return _unique(v)
        return v


class ComponentDependencies(BaseModel):
    npm: list[str] = []
    registry: list[str] = []


# component name → metadata. Empty means the authoritative source is unavailable.
RegistryIndex = dict[str, ComponentMetadata]

COMPONENT_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9-]*$")
