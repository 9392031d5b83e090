import logging
import re
from typing import List, Set, Tuple

from propfile.properties import Properties
from propfile.properties_parser import (
    assemble_lines,
    has_unescaped_trailing_backslash,
    read_properties_bytes,
    split_byte_lines
)

logger = logging.getLogger(__name__)

# A backslash followed by a unicode escape or by any single character.
ESCAPE_SEQUENCE_PATTERN = re.compile(r'\\(u[0-9a-fA-F]{4}|.?)', re.DOTALL)
VALID_ESCAPED_CHARS = set('tnfr\\=:#!" ')

# 'Ã' followed by a byte in 0x80-0xFF: UTF-8 text that was decoded as latin-1/cp1252 at some point.
MOJIBAKE_PATTERN = re.compile(r'Ã[\x80-\xff]')


def check_key_coverage(base_keys: Set[str], target_keys: Set[str]) -> Tuple[Set[str], Set[str]]:
    """
    Compares the keys of a target properties file against a base file.

    Args:
        base_keys: The keys of the base file.
        target_keys: The keys of the target file.

    Returns:
        A tuple containing two sets:
        - missing_keys: Keys present in the base file but missing from the target file.
        - extra_keys: Keys present in the target file but absent from the base file.
    """
    return base_keys - target_keys, target_keys - base_keys


def synchronize_keys(target_file_path: str, source_file_path: str, dry_run: bool = False) -> bool:
    """
    Synchronizes the keys in a target .properties file with a source file.
    - Removes keys from the target that are not in the source.
    - Appends keys that are in the source but not the target, with the source value.
    Comments and untouched lines of the target keep their layout.

    Args:
        target_file_path: The path to the file to be modified.
        source_file_path: The path to the reference file.
        dry_run: Compute and log the changes without writing the target.

    Returns:
        bool: True if the target needed changes.
    """
    target = Properties.from_file(target_file_path)
    source = Properties.from_file(source_file_path)

    missing_keys, extra_keys = check_key_coverage(set(source.keys), set(target.keys))
    if not missing_keys and not extra_keys:
        return False

    for key in sorted(extra_keys):
        target.delete(key)
    # Sorted for a deterministic order of the appended lines
    for key in sorted(missing_keys):
        target.add(key, source.get(key))

    if dry_run:
        logger.info("[Dry Run] Would remove %d and add %d key(s) in '%s'.",
                    len(extra_keys), len(missing_keys), target_file_path)
    else:
        target.save()
        logger.info("Removed %d and added %d key(s) in '%s'.",
                    len(extra_keys), len(missing_keys), target_file_path)
    return True


def check_encoding_and_mojibake(file_path: str) -> List[str]:
    """
    Checks a file for UTF-8 encoding and common mojibake patterns.

    Args:
        file_path: The path to the file to check.

    Returns:
        A list of string error messages. An empty list means the file is valid.
    """
    errors = []
    try:
        content = read_properties_bytes(file_path).decode('utf-8')
    except UnicodeDecodeError:
        errors.append(f"File '{file_path}' is not a valid UTF-8 file.")
        return errors
    except OSError as e:
        errors.append(f"Could not read file '{file_path}'. Reason: {e}")
        return errors

    if MOJIBAKE_PATTERN.search(content):
        errors.append(f"Potential mojibake detected in '{file_path}'. Found patterns like 'Ã¼', 'Ã¤', etc.")

    if '\uFFFD' in content:
        errors.append(f"File '{file_path}' contains the Unicode replacement character (\uFFFD), "
                      f"indicating a previous encoding/decoding error.")

    return errors


def _invalid_escapes(value: str) -> List[str]:
    invalid = []
    for match in ESCAPE_SEQUENCE_PATTERN.finditer(value):
        escaped = match.group(1)
        if len(escaped) == 5 or escaped in VALID_ESCAPED_CHARS or escaped.isspace():
            continue
        invalid.append(match.group(0))
    return invalid


def lint_properties_file(file_path: str) -> List[str]:
    """
    Lints a .properties file to check for common issues.

    Entries are numbered from 1 in parse order: blank lines are not counted
    and a multi-line property counts once.

    Args:
        file_path: The path to the .properties file.

    Returns:
        A list of error messages. An empty list means no errors were found.
    """
    errors = []
    try:
        byte_lines = split_byte_lines(read_properties_bytes(file_path))
    except OSError as e:
        errors.append(f"Linter Error: Could not read file {file_path}. Reason: {e}")
        return errors

    lines = assemble_lines(byte_lines)
    seen_keys = set()
    for entry, line in enumerate(lines, 1):
        if not line.is_property():
            continue
        key = line.key_string

        if not key:
            errors.append(f"Linter Error: Property without a key found at entry {entry}.")
        elif '..' in key:
            errors.append(f"Linter Error: Malformed key '{key}' with double dots found at entry {entry}.")

        if key in seen_keys:
            errors.append(f"Linter Error: Duplicate key '{key}' found at entry {entry}.")
        seen_keys.add(key)

        invalid = _invalid_escapes(line.value_string)
        if invalid:
            errors.append(
                f"Linter Error: Invalid escape sequence(s) {', '.join(invalid)} in value for key '{key}' "
                f"at entry {entry}.")

    if lines and lines[-1].is_multi_line_property() and has_unescaped_trailing_backslash(byte_lines[-1]):
        errors.append(
            f"Linter Error: Value of key '{lines[-1].key_string}' continues past the end of the file.")

    return errors
