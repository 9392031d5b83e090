"""Layout management for properties files: keeps the parsed lines in sync with edits and writes them back."""
import logging
from typing import List, Optional

from propfile.properties_parser import KEY_VALUE_SEPARATOR, LINE_TERMINATOR, Line

logger = logging.getLogger(__name__)


def render_layout(lines: List[Line]) -> bytes:
    """
    Reassemble the file content from parsed lines.

    Properties are written as ``key = value``; multi-line properties keep one
    physical line per value segment; comments and plain lines are written
    back verbatim. A blank line closes the output.

    Args:
        lines (List[Line]): The parsed lines.

    Returns:
        bytes: The file content, ready to be written.
    """
    chunks = []
    for line in lines:
        if line.is_multi_line_property():
            segments = line.value_lines
            chunks.append(line.key.strip() + KEY_VALUE_SEPARATOR + segments[0].lstrip() + LINE_TERMINATOR)
            for segment in segments[1:]:
                chunks.append(segment + LINE_TERMINATOR)
        elif line.is_property():
            chunks.append(line.key.strip() + KEY_VALUE_SEPARATOR + line.value.strip() + LINE_TERMINATOR)
        else:
            chunks.append(line.key + LINE_TERMINATOR)
    chunks.append(LINE_TERMINATOR)
    return b''.join(chunks)


class PropertiesLayout:
    """Ordered lines of one properties source, mutated alongside its key/value mapping."""

    def __init__(self, lines: Optional[List[Line]] = None):
        self._lines = lines if lines is not None else []

    @property
    def lines(self) -> List[Line]:
        return self._lines

    def append(self, key: str, value: str) -> Line:
        """Append a new property at the end of the layout."""
        line = Line.from_key_value(key, value)
        self._lines.append(line)
        return line

    def update(self, key: str, new_value: str) -> int:
        """
        Set the value of every property line whose key matches.

        Returns:
            int: The number of lines updated.
        """
        updated = 0
        for line in self._lines:
            if line.is_property() and line.key_string == key:
                line.set_value(new_value)
                updated += 1
        if not updated:
            logger.debug("No layout line found for updated key '%s'.", key)
        return updated

    def remove(self, key: str) -> int:
        """
        Drop every property line whose key matches.

        Returns:
            int: The number of lines removed.
        """
        kept = [line for line in self._lines
                if not (line.is_property() and line.key_string == key)]
        removed = len(self._lines) - len(kept)
        self._lines[:] = kept
        return removed

    @property
    def layout_as_bytes(self) -> bytes:
        return render_layout(self._lines)
