"""Exporters package — convert account records to brief formats."""
from __future__ import annotations

import json

from execbrief.exporters.markdown import render_markdown
from execbrief.exporters.text import render_text
from execbrief.models.record import AccountRecord

FORMATS = ("text", "markdown", "json")


def render_briefs(records: list[AccountRecord], fmt: str = "text") -> str:
    """Render every record in one output document."""
    fmt = fmt.lower()
    if fmt == "text":
        return "\n".join(render_text(r) for r in records)
    if fmt in ("markdown", "md"):
        return "\n---\n\n".join(render_markdown(r) for r in records)
    if fmt == "json":
        return json.dumps([r.to_dict() for r in records], indent=2)
    raise ValueError(f"Unknown output format: {fmt!r} (expected one of {', '.join(FORMATS)})")


__all__ = ["FORMATS", "render_briefs", "render_markdown", "render_text"]
