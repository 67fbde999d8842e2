"""Three-part tool identifiers: ``toolbox__server__tool``.

The delimiter is inserted only between fields and never validated against the
field contents. Toolbox and server names are kept free of it by the
configuration loader; tool names are not, so decoding caps the split at three
parts and takes the remainder verbatim as the tool name.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from errors import InvalidIdentifierError

DELIMITER = "__"
_PARTS = 3


def encode_tool_identifier(toolbox: str, server: str, name: str) -> str:
    return DELIMITER.join((toolbox, server, name))


def decode_tool_identifier(value: str) -> Optional[tuple[str, str, str]]:
    """Split *value* into ``(toolbox, server, name)`` or return ``None``."""

    parts = value.split(DELIMITER, _PARTS - 1)
    if len(parts) != _PARTS or not all(parts):
        return None
    toolbox, server, name = parts
    return toolbox, server, name


@dataclass(frozen=True)
class ToolIdentifier:
    """Immutable address of one downstream tool."""

    toolbox: str
    server: str
    name: str

    def __post_init__(self) -> None:
        for label in ("toolbox", "server", "name"):
            if not getattr(self, label):
                raise InvalidIdentifierError(self.encode(), f"{label} cannot be empty")

    @classmethod
    def parse(cls, value: str) -> "ToolIdentifier":
        decoded = decode_tool_identifier(value)
        if decoded is None:
            raise InvalidIdentifierError(value)
        return cls(*decoded)

    def encode(self) -> str:
        return encode_tool_identifier(self.toolbox, self.server, self.name)

    def as_dict(self) -> dict[str, str]:
        return {"toolbox": self.toolbox, "server": self.server, "name": self.name}

    def __str__(self) -> str:
        return self.encode()


__all__ = [
    "DELIMITER",
    "ToolIdentifier",
    "decode_tool_identifier",
    "encode_tool_identifier",
]
