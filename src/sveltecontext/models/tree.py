from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class FileNode(BaseModel):
    type: Literal["file"] = "file"
    path: str
    name: str
    url: str | None = None  # raw download URL
    sha: str = ""


class DirectoryNode(BaseModel):
    """Directory in a fetched tree.

    ``error`` is set when this subtree could not be fetched; siblings are
    unaffected. ``degraded`` marks the hand-written skeleton returned when the
    request quota is exhausted.
    """

    type: Literal["directory"] = "directory"
    path: str
    children: dict[str, TreeNode] = {}
    error: str | None = None
    description: str | None = None
    note: str | None = None
    additional_info: str | None = None
    degraded: bool = False


TreeNode = Annotated[FileNode | DirectoryNode, Field(discriminator="type")]

DirectoryNode.model_rebuild()
