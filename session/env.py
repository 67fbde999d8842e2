"""Environment variable expansion for configuration documents.

Supports ``${VAR}`` (required) and ``${VAR:-default}`` (optional) references in
string values and mapping keys. Expansion happens on the raw parsed document,
before any validation, so every configured field can be templated.
"""
from __future__ import annotations

import os
import re
from typing import Any, Mapping, Optional

from errors import EnvExpansionError

ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-(.*?))?\}")
_UNCLOSED_PATTERN = re.compile(r"\$\{[^}]*$")


def expand_string(value: str, location: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Expand every environment reference in *value*."""

    env = os.environ if environ is None else environ
    if ENV_VAR_PATTERN.search(value) is None and _UNCLOSED_PATTERN.search(value):
        raise EnvExpansionError("", location, "Malformed syntax: unclosed brace")

    def _replace(match: re.Match[str]) -> str:
        name, default = match.group(1), match.group(2)
        current = env.get(name)
        if current is not None:
            return current
        if default is not None:
            return default
        raise EnvExpansionError(name, location, "Variable is not set")

    return ENV_VAR_PATTERN.sub(_replace, value)


def expand_env_vars(value: Any, location: str = "", environ: Optional[Mapping[str, str]] = None) -> Any:
    """Recursively expand environment references, preserving structure and key order."""

    if isinstance(value, str):
        return expand_string(value, location, environ)
    if isinstance(value, list):
        return [expand_env_vars(item, f"{location}[{idx}]", environ) for idx, item in enumerate(value)]
    if isinstance(value, Mapping):
        result: dict[str, Any] = {}
        for key, item in value.items():
            path = f"{location}.{key}" if location else str(key)
            expanded_key = expand_string(key, path, environ) if isinstance(key, str) else key
            result[expanded_key] = expand_env_vars(item, path, environ)
        return result
    return value


__all__ = ["ENV_VAR_PATTERN", "expand_env_vars", "expand_string"]
