"""JSON schema I/O: export, import validation and file helpers."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .models import BOUNDARY_EDGE_TYPES, Diagram, DiagramMetadata, EdgeType, NodeType
from .renderer import serialize_svg
from .tikz import serialize_tikz

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.1"
DEFAULT_EXPORT_NAME = "pragma-graph"
IMPORTED_DIAGRAM_NAME = "Imported Diagram"

EXPORT_EXTENSIONS = {"json": "json", "svg": "svg", "tex": "tex", "latex": "tex"}

_NODE_TYPES = {t.value for t in NodeType}
_EDGE_TYPES = {t.value for t in EdgeType}
_BOUNDARY_TYPES = {t.value for t in BOUNDARY_EDGE_TYPES}


class DiagramImportError(ValueError):
    """Raised when imported data does not describe a valid diagram."""


def timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def diagram_to_json(diagram: Diagram, indent: int | None = 2) -> str:
    return json.dumps(diagram.to_dict(), indent=indent, ensure_ascii=False)


def diagram_from_json(text: str) -> Diagram:
    """Parse a JSON document without import validation. See ``load_diagram``."""
    return Diagram.from_dict(json.loads(text))


def export_json(diagram: Diagram, now: datetime | None = None) -> str:
    """Pretty-printed export, metadata stamped with the export time and format version."""
    metadata = replace(diagram.metadata, exported=timestamp(now), version=EXPORT_VERSION)
    return diagram_to_json(replace(diagram, metadata=metadata))


def _validate(data: Any) -> None:
    if not isinstance(data, dict):
        raise DiagramImportError("Invalid diagram format: expected a JSON object")

    if not isinstance(data.get("nodes"), list):
        raise DiagramImportError("Invalid diagram format: missing or invalid nodes array")
    if not isinstance(data.get("edges"), list):
        raise DiagramImportError("Invalid diagram format: missing or invalid edges array")

    for key in ("entryPoints", "exitPoints"):
        if data.get(key) is not None and not isinstance(data[key], list):
            raise DiagramImportError(f"Invalid diagram format: {key} must be an array")

    for node in data["nodes"]:
        if not isinstance(node, dict):
            raise DiagramImportError("Invalid node structure in diagram")
        position = node.get("position")
        if (
            not node.get("id")
            or not node.get("type")
            or not isinstance(position, dict)
            or "x" not in position
            or "y" not in position
            or not isinstance(node.get("label"), str)
        ):
            raise DiagramImportError("Invalid node structure in diagram")
        if node["type"] not in _NODE_TYPES:
            raise DiagramImportError(f"Invalid node type: {node['type']}")

    for edge in data["edges"]:
        if not isinstance(edge, dict) or not edge.get("id") or not edge.get("type"):
            raise DiagramImportError("Invalid edge structure in diagram")
        if edge["type"] not in _EDGE_TYPES:
            raise DiagramImportError(f"Invalid edge type: {edge['type']}")
        # Entry/exit edges may leave one endpoint empty
        if edge["type"] not in _BOUNDARY_TYPES and (not edge.get("source") or not edge.get("target")):
            raise DiagramImportError("Invalid edge: missing source or target")


def load_diagram(data: Any, now: datetime | None = None) -> Diagram:
    """Validate imported data and build a diagram from it.

    Missing id and name are filled in, ``created`` is kept when present and
    ``modified`` is set to the import time.
    """
    _validate(data)

    stamp = timestamp(now)
    try:
        diagram = Diagram.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise DiagramImportError(f"Invalid diagram format: {e}") from e
    metadata = data.get("metadata") or {}
    diagram.id = data.get("id") or str(int((now or datetime.now(timezone.utc)).timestamp() * 1000))
    diagram.name = data.get("name") or IMPORTED_DIAGRAM_NAME
    diagram.metadata = DiagramMetadata(
        created=metadata.get("created") or stamp,
        modified=stamp,
        author=metadata.get("author"),
        description=metadata.get("description"),
    )
    logger.debug(
        "Imported diagram %r: %d nodes, %d edges", diagram.name, len(diagram.nodes), len(diagram.edges)
    )
    return diagram


def loads_diagram(text: str, now: datetime | None = None) -> Diagram:
    """Parse and validate a JSON document."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DiagramImportError(f"Invalid JSON: {e}") from e
    return load_diagram(data, now)


def read_diagram(path: str | Path) -> Diagram:
    """Load and validate a diagram file."""
    return loads_diagram(Path(path).read_text(encoding="utf-8"))


def export_filename(diagram: Diagram, fmt: str) -> str:
    """Default file name for an export, e.g. ``My Diagram.svg``."""
    return f"{diagram.name or DEFAULT_EXPORT_NAME}.{EXPORT_EXTENSIONS[fmt]}"


def render_export(diagram: Diagram, fmt: str, standalone: bool = False) -> str:
    """Export content for ``fmt`` (``json``, ``svg``, ``tex``/``latex``)."""
    if fmt == "json":
        return export_json(diagram)
    if fmt == "svg":
        return serialize_svg(diagram)
    if fmt in ("tex", "latex"):
        return serialize_tikz(diagram, standalone=standalone)
    raise ValueError(f"Unknown export format: {fmt}")


def write_export(diagram: Diagram, path: str | Path, fmt: str, standalone: bool = False) -> Path:
    """Render an export and write it to ``path``."""
    path = Path(path)
    path.write_text(render_export(diagram, fmt, standalone), encoding="utf-8")
    logger.debug("Wrote %s export to %s", fmt, path)
    return path
