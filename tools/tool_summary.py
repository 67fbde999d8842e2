"""One-line summaries of meta-operation and routed calls for log records."""
from __future__ import annotations

from typing import Any, Mapping

from .identifier import encode_tool_identifier

_SUMMARY_KEYS: tuple[str, ...] = ("toolbox", "path", "query", "command", "name", "text")


def truncate_text(value: Any, *, limit: int = 60) -> str:
    text = str(value)
    if len(text) <= limit:
        return text
    if limit < 4:
        return text[:limit]
    return text[: limit - 3] + "..."


def _describe_target(tool: Any) -> str | None:
    if isinstance(tool, str):
        return tool
    if isinstance(tool, Mapping):
        name = tool.get("name", tool.get("tool"))
        parts = (tool.get("toolbox"), tool.get("server"), name)
        if all(isinstance(part, str) for part in parts):
            return encode_tool_identifier(*parts)
    return None


def summarize_arguments(arguments: Any, *, limit: int = 60) -> str:
    """Pick the most telling scalar from *arguments*, or list its keys."""

    if not isinstance(arguments, Mapping):
        return truncate_text(arguments, limit=limit) if isinstance(arguments, (str, int, float)) else ""

    # use_tool: name the target instead of the envelope
    target = _describe_target(arguments.get("tool"))
    if target is not None:
        inner = summarize_arguments(arguments.get("arguments"), limit=limit)
        return truncate_text(f"{target}: {inner}" if inner else target, limit=limit)

    for key in _SUMMARY_KEYS:
        value = arguments.get(key)
        if isinstance(value, (str, int, float)) and not isinstance(value, bool):
            return truncate_text(value, limit=limit)
    return truncate_text(", ".join(sorted(str(key) for key in arguments)), limit=limit)


def summarize_tool_call(name: str, arguments: Any, *, limit: int = 60) -> str:
    summary = summarize_arguments(arguments, limit=limit)
    base = name or "tool"
    return f"{base}({summary})" if summary else base


__all__ = ["summarize_arguments", "summarize_tool_call", "truncate_text"]
