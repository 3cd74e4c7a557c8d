"""Errors raised when a project document cannot be loaded at all."""

from pathlib import Path
from typing import Optional, Sequence, Union

KeyPath = Sequence[Union[str, int]]


def format_key_path(key_path: KeyPath) -> str:
    """Render ``("registers", 2, "fields")`` as ``registers[2].fields``."""
    text = ""
    for part in key_path:
        if isinstance(part, int):
            text += f"[{part}]"
        elif text:
            text += f".{part}"
        else:
            text = part
    return text


class ParseError(Exception):
    """
    A project document that is unreadable or structurally wrong.

    Besides the message it records where the problem is: the file, a
    1-based line and column for syntax errors, and the key path inside the
    document for structural ones. ``str()`` joins them as
    ``path:line:column: key.path: message``.
    """

    def __init__(
        self,
        message: str,
        file_path: Optional[Path] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
        key_path: KeyPath = (),
    ):
        super().__init__(message)
        self.message = message
        self.file_path = file_path
        self.line = line
        self.column = column
        self.key_path = tuple(key_path)

    @property
    def location(self) -> str:
        parts = []
        if self.file_path or self.line is not None:
            position = str(self.file_path) if self.file_path else "<text>"
            if self.line is not None:
                position += f":{self.line}"
                if self.column is not None:
                    position += f":{self.column}"
            parts.append(position)
        if self.key_path:
            parts.append(format_key_path(self.key_path))
        return ": ".join(parts)

    def __str__(self) -> str:
        location = self.location
        return f"{location}: {self.message}" if location else self.message
