"""Byte-level parser for .properties files.

Raw file bytes are split into physical lines, each line is classified as a
property, a comment or a plain line, and backslash-continued values are folded
into a single logical ``Line``. The resulting sequence keeps enough of the
original shape for ``properties_layout`` to write the file back.
"""
import logging
import os
from typing import Dict, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

BACKSLASH = ord('\\')
SPACE = ord(' ')
NEWLINE = ord('\n')
CR = ord('\r')
EQUAL = ord('=')

COMMENT_PREFIXES = (b'#', b'!')
KEY_VALUE_SEPARATOR = b' = '
LINE_TERMINATOR = b'\n'


class PropertiesSourceNotFoundError(FileNotFoundError):
    """Raised when a properties source cannot be found on disk."""


def has_unescaped_trailing_backslash(data: bytes) -> bool:
    """Check if a byte string ends with an odd number of backslashes."""
    count = 0
    i = len(data) - 1
    while i >= 0 and data[i] == BACKSLASH:
        count += 1
        i -= 1
    # An odd number of trailing backslashes indicates an unescaped one
    return count % 2 == 1


def _is_escaped(data: bytes, index: int) -> bool:
    """Check if the byte at ``index`` is preceded by an odd run of backslashes."""
    count = 0
    k = index - 1
    while k >= 0 and data[k] == BACKSLASH:
        count += 1
        k -= 1
    return count % 2 == 1


def _remove_continuation(data: bytes) -> bytes:
    """Replace a trailing unescaped backslash with a single space."""
    if has_unescaped_trailing_backslash(data):
        return data[:-1] + bytes((SPACE,))
    return data


def _find_separator(data: bytes) -> int:
    """Return the index of the first unescaped '=' or -1."""
    for i, byte in enumerate(data):
        if byte == EQUAL and not _is_escaped(data, i):
            return i
    return -1


def _is_comment(data: bytes) -> bool:
    return data.startswith(COMMENT_PREFIXES)


def _decode(data: bytes) -> str:
    return data.decode('utf-8', errors='replace')


class Line:
    """
    One logical line of a properties file.

    A line is either a property (``key = value``, possibly continued over
    several physical lines), a comment, or a plain line that is neither. Plain
    lines and comments keep the raw bytes in both ``key`` and ``value`` so
    they can be written back untouched.
    """

    def __init__(self, raw: bytes):
        self._key = b''
        self._value = b''
        self._value_lines: List[bytes] = []
        self._comment = _is_comment(raw)
        self._property = False
        self._multi_line = False

        separator = -1
        if raw and not self._comment:
            separator = _find_separator(raw)

        if separator != -1:
            self._property = True
            self._key = raw[:separator]
            value = raw[separator + 1:]
            self._multi_line = has_unescaped_trailing_backslash(value)
            segment = _remove_continuation(value)
            self._value = segment
            self._value_lines = [segment]
        else:
            self._key = self._value = raw

    @classmethod
    def from_string(cls, line: str) -> 'Line':
        return cls(line.encode('utf-8'))

    @classmethod
    def from_key_value(cls, key: str, value: str) -> 'Line':
        """Build a single-line property entry without going through classification."""
        line = cls(b'')
        line._key = key.encode('utf-8')
        line._value = value.encode('utf-8')
        line._value_lines = [line._value]
        line._property = True
        line._comment = False
        line._multi_line = False
        return line

    def is_property(self) -> bool:
        return self._property

    def is_multi_line_property(self) -> bool:
        return self._multi_line

    def is_comment(self) -> bool:
        return self._comment

    @property
    def key(self) -> bytes:
        return self._key

    @property
    def value(self) -> bytes:
        return self._value

    @property
    def value_lines(self) -> List[bytes]:
        return list(self._value_lines)

    @property
    def key_string(self) -> str:
        return _decode(self._key).strip()

    @property
    def value_string(self) -> str:
        return _decode(self._value).strip()

    def set_value(self, new_value: str) -> None:
        """
        Replace the value of this property.

        The entry collapses to a single physical line: any multi-line shape it
        was parsed with is dropped.
        """
        self._value = new_value.encode('utf-8')
        self._value_lines = [self._value]
        self._multi_line = False

    def add_value_line(self, raw: bytes) -> bool:
        """
        Append a continuation line to the value of this property.

        Args:
            raw: The physical line, without terminator.

        Returns:
            bool: True if the line itself continues onto the next one.
        """
        segment = _remove_continuation(raw)
        self._value_lines.append(segment)
        self._value += segment
        return has_unescaped_trailing_backslash(raw)

    def __repr__(self) -> str:
        return (f"Line(key={self._key!r}, value={self._value!r}, property={self._property}, "
                f"comment={self._comment}, multi_line={self._multi_line})")

    def __str__(self) -> str:
        if self.is_property():
            return f"{self.key_string} = {self.value_string}"
        return self.key_string


def split_byte_lines(data: bytes) -> List[bytes]:
    """
    Split raw file content into physical lines.

    LF terminates a line, CR bytes are dropped wherever they appear and blank
    lines are skipped.

    Args:
        data (bytes): The raw file content.

    Returns:
        List[bytes]: The non-empty lines, without terminators.
    """
    result = []
    line = bytearray()
    for byte in data:
        if byte == NEWLINE:
            if line:
                result.append(bytes(line))
                line = bytearray()
        elif byte != CR:
            line.append(byte)
    if line:
        result.append(bytes(line))
    return result


def assemble_lines(byte_lines: Iterable[bytes]) -> List[Line]:
    """
    Classify physical lines and fold continuation lines into their property.

    Args:
        byte_lines (Iterable[bytes]): Physical lines in file order.

    Returns:
        List[Line]: The logical lines in file order.
    """
    lines: List[Line] = []
    open_line: Optional[Line] = None
    for raw in byte_lines:
        if open_line is None:
            line = Line(raw)
            lines.append(line)
            if line.is_multi_line_property():
                open_line = line
        elif not open_line.add_value_line(raw):
            open_line = None
    return lines


def project_properties(lines: Iterable[Line]) -> Dict[str, str]:
    """Build the flat key -> value mapping of every property line."""
    content = {}
    for line in lines:
        if line.is_property():
            content[line.key_string] = line.value_string
    return content


def parse_properties(data: bytes) -> Tuple[Dict[str, str], List[Line]]:
    """
    Parse the content of a .properties file.

    Args:
        data (bytes): The raw, UTF-8 encoded file content.

    Returns:
        Tuple[Dict[str, str], List[Line]]: The key/value mapping and the parsed lines.
    """
    lines = assemble_lines(split_byte_lines(data))
    content = project_properties(lines)
    logger.debug("Parsed %d line(s) holding %d key(s).", len(lines), len(content))
    return content, lines


def read_properties_bytes(file_path: str) -> bytes:
    """Read the raw content of a properties file."""
    if not os.path.exists(file_path):
        logger.error("Properties file '%s' does not exist.", file_path)
        raise PropertiesSourceNotFoundError(
            f"It's impossible to load properties from input file '{file_path}'. File does not exist.")
    with open(file_path, 'rb') as f:
        return f.read()


def write_properties_bytes(file_path: str, data: bytes) -> None:
    """Write rendered properties content to a file, creating its directory if needed."""
    target_dir = os.path.dirname(file_path)
    if target_dir:
        os.makedirs(target_dir, exist_ok=True)
    with open(file_path, 'wb') as f:
        f.write(data)


def parse_properties_file(file_path: str) -> Tuple[Dict[str, str], List[Line]]:
    """
    Parse a .properties file.

    Args:
        file_path (str): The path to the .properties file.

    Returns:
        Tuple[Dict[str, str], List[Line]]: The key/value mapping and the parsed lines.

    Raises:
        PropertiesSourceNotFoundError: If the file does not exist.
    """
    return parse_properties(read_properties_bytes(file_path))
