"""Plain-text renderings of resolved components.

Pure functions over ComponentMetadata; no I/O. The source document is the
payload of the ``get_component`` tool, the context summary backs
``get_component_demo``.
"""

from __future__ import annotations

import posixpath
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sveltecontext.models.registry import ComponentMetadata

DOCS_BASE_URL = "https://shadcn-svelte.com/docs/components"

_RUNNERS: dict[str, str] = {
    "npm": "npx",
    "pnpm": "pnpm dlx",
    "yarn": "yarn dlx",
    "bun": "bunx",
}


def install_command(component_name: str, package_manager: str = "npm") -> str:
    """CLI command that adds a component to a project. Unknown managers fall back to npm."""
    runner = _RUNNERS.get(package_manager.lower(), _RUNNERS["npm"])
    return f"{runner} shadcn-svelte@latest add {component_name}"


def to_pascal_case(name: str) -> str:
    """``"alert-dialog"`` → ``"AlertDialog"``."""
    return "".join(part[:1].upper() + part[1:] for part in name.split("-"))


def render_component_source(component: ComponentMetadata) -> str:
    """Concatenate every file body into one annotated document.

    Files keep manifest order. Files whose body could not be fetched are
    listed with a placeholder instead of being dropped.
    """
    lines = [
        f"// {component.name} component from shadcn-svelte",
        f"// Install with: {install_command(component.name)}",
        "",
    ]

    if component.npm_dependencies:
        lines.append("// Dependencies:")
        lines.extend(f"// - {dep}" for dep in component.npm_dependencies)
        lines.append("")

    if component.registry_dependencies:
        lines.append("// Required components:")
        lines.extend(f"// - {dep}" for dep in component.registry_dependencies)
        lines.append("")

    for file in component.files:
        lines.append(f"// File: {posixpath.basename(file.path)}")
        lines.append(file.content if file.content else "// Content not available")
        lines.append("")

    return "\n".join(lines)


def render_component_context(component: ComponentMetadata) -> str:
    """Markdown summary of a component for agent context."""
    out = [f"# {component.name} Component", "", f"Type: {component.kind}"]
    if component.description:
        out.append(f"Description: {component.description}")

    out += ["", "## Installation", "```bash", install_command(component.name), "```"]

    if component.files:
        out += ["", "## Files"]
        out += [f"- {file.path}" for file in component.files]

    if component.npm_dependencies:
        out += ["", "## NPM Dependencies"]
        out += [f"- {dep}" for dep in component.npm_dependencies]

    if component.registry_dependencies:
        out += ["", "## Required Components"]
        out += [f"- {dep}" for dep in component.registry_dependencies]

    pascal = to_pascal_case(component.name)
    module = f"$lib/components/ui/{component.name}"
    if len(component.files) == 1:
        import_line = f"import {{ {pascal} }} from '{module}'"
    else:
        import_line = f"import * as {pascal} from '{module}'"
    out += ["", "## Import Pattern", "```typescript", import_line, "```"]

    if component.degraded:
        out += [
            "",
            "_Registry unavailable: details are limited to the built-in component list._",
        ]

    return "\n".join(out) + "\n"
