"""
Key-value store on top of a parsed properties file.

``Properties`` keeps a flat ``Dict[str, str]`` for lookups and a
``PropertiesLayout`` for writing the file back. Every mutation goes through
``_add`` / ``_update`` / ``_delete`` so both views change together.
"""
import json
import logging
from typing import Callable, Dict, Iterator, List, Optional

import jsonschema

from propfile.properties_events import (
    AddEvent,
    ChangeEvent,
    ChangeListener,
    DeleteEvent,
    EventType,
    UpdateEvent
)
from propfile.properties_layout import PropertiesLayout
from propfile.properties_parser import parse_properties_file, write_properties_bytes

logger = logging.getLogger(__name__)

# Properties only hold flat string-to-string content.
PROPERTIES_JSON_SCHEMA = {
    "type": "object",
    "patternProperties": {
        "^.*$": {"type": "string"}
    },
    "additionalProperties": False
}


class PropertiesFormatError(ValueError):
    """Raised when imported content cannot be represented as flat properties."""


def _parse_json_map(json_map: str) -> Dict[str, str]:
    """Parse and validate a JSON object of string values."""
    try:
        parsed = json.loads(json_map)
        jsonschema.validate(instance=parsed, schema=PROPERTIES_JSON_SCHEMA)
    except json.JSONDecodeError as json_exc:
        raise PropertiesFormatError(f"Invalid JSON properties map: {json_exc}") from json_exc
    except jsonschema.ValidationError as schema_exc:
        raise PropertiesFormatError(
            f"JSON properties map must be a flat object of strings: {schema_exc.message}") from schema_exc
    return parsed


class BoolEvaluator:
    """Decide whether a property value means true or false."""

    DEFAULT_TRUES = ('true', 'TRUE', 'True', '1')
    DEFAULT_FALSES = ('false', 'FALSE', 'False', '0')

    def __init__(self, trues: Optional[List[str]] = None, falses: Optional[List[str]] = None):
        self.trues = list(trues) if trues is not None else list(self.DEFAULT_TRUES)
        self.falses = list(falses) if falses is not None else list(self.DEFAULT_FALSES)

    def evaluate(self, value: str) -> bool:
        if value in self.trues:
            return True
        if value in self.falses:
            return False
        raise ValueError(f"Input value '{value}' is not a bool value.")


class Properties:
    """
    Load key-values from a properties file, a mapping or a JSON object.

    Args:
        source_file: Optional path of the file to load. When given, the file
            is parsed immediately and ``save``/``reload`` default to it.
    """

    def __init__(self, source_file: Optional[str] = None):
        self._source_file = source_file
        self._content: Dict[str, str] = {}
        self._layout = PropertiesLayout()
        self._listeners: Dict[EventType, List[ChangeListener]] = {event_type: [] for event_type in EventType}
        self.enable_events = True
        self.bool_evaluator = BoolEvaluator()
        self.list_separator = ','

        if source_file is not None:
            self._init_from_file()

    @classmethod
    def from_file(cls, path: str) -> 'Properties':
        return cls(path)

    @classmethod
    def from_map(cls, mapping: Dict[str, str]) -> 'Properties':
        properties = cls()
        for key, value in mapping.items():
            key = key.strip()
            properties._content[key] = value
            properties._layout.append(key, value)
        return properties

    @classmethod
    def from_json(cls, json_map: str) -> 'Properties':
        return cls.from_map(_parse_json_map(json_map))

    def _init_from_file(self) -> None:
        content, lines = parse_properties_file(self._source_file)
        self._content = content
        self._layout = PropertiesLayout(lines)
        logger.debug("Loaded %d properties from '%s'.", len(content), self._source_file)

    @property
    def source_file(self) -> Optional[str]:
        return self._source_file

    @property
    def layout(self) -> PropertiesLayout:
        return self._layout

    def get(self, key: str, default: object = None, default_key: Optional[str] = None) -> Optional[str]:
        """
        Load the value of a property given its key.

        Args:
            key: The property key.
            default: Value returned (as a string) when the key is missing.
            default_key: Key whose value is returned when the key is missing
                and no ``default`` is given.

        Returns:
            Optional[str]: The value, or None if nothing matched.
        """
        if key is None:
            return None
        if key in self._content:
            return self._content[key]
        if default is not None:
            return str(default)
        if default_key is not None:
            return self._content.get(default_key)
        return None

    def _get_converted(self, key: str, convert: Callable[[str], object], throw_exception: bool,
                       default: object, default_key: Optional[str]):
        value = self.get(key, default=default, default_key=default_key)
        if value is None:
            return None
        try:
            return convert(value)
        except ValueError:
            if throw_exception:
                raise
            logger.debug("Value '%s' of key '%s' could not be converted.", value, key)
            return None

    def get_bool(self, key: str, throw_exception: bool = False, default: Optional[bool] = None,
                 default_key: Optional[str] = None) -> Optional[bool]:
        """Load a property as a bool, according to ``bool_evaluator``."""
        return self._get_converted(key, self.bool_evaluator.evaluate, throw_exception, default, default_key)

    def get_int(self, key: str, throw_exception: bool = False, default: Optional[int] = None,
                default_key: Optional[str] = None) -> Optional[int]:
        return self._get_converted(key, int, throw_exception, default, default_key)

    def get_double(self, key: str, throw_exception: bool = False, default: Optional[float] = None,
                   default_key: Optional[str] = None) -> Optional[float]:
        return self._get_converted(key, float, throw_exception, default, default_key)

    def get_list(self, key: str) -> Optional[List[str]]:
        """Load a property as a list of strings split on ``list_separator``."""
        value = self.get(key)
        if value is None:
            return None
        return value.split(self.list_separator)

    def contains(self, key: str) -> bool:
        return key is not None and key in self._content

    @property
    def keys(self):
        return self._content.keys()

    @property
    def values(self):
        return self._content.values()

    @property
    def size(self) -> int:
        return len(self._content)

    def add(self, key: str, value: str, overwrite_existing: bool = True) -> bool:
        """
        Add a property, replacing an existing value unless told otherwise.

        Returns:
            bool: True if the property was added or updated, False otherwise.
        """
        if key is None or value is None:
            return False
        # The layout matches lines on the trimmed key, so the map must use the same form
        key = key.strip()

        if key in self._content:
            if overwrite_existing:
                self._update(key, value)
                return True
            return False

        self._add(key, value)
        return True

    def delete(self, key: str) -> bool:
        """Remove a property. Returns False if the key did not exist."""
        if key is None:
            return False
        key = key.strip()
        if key not in self._content:
            return False
        self._delete(key)
        return True

    def _add(self, key: str, value: str) -> None:
        self._content[key] = value
        self._layout.append(key, value)
        logger.debug("Added property '%s'.", key)
        self._notify(AddEvent(key, value))

    def _update(self, key: str, new_value: str) -> None:
        old_value = self._content[key]
        self._content[key] = new_value
        self._layout.update(key, new_value)
        logger.debug("Updated property '%s'.", key)
        self._notify(UpdateEvent(key, new_value, old_value))

    def _delete(self, key: str) -> None:
        del self._content[key]
        self._layout.remove(key)
        logger.debug("Deleted property '%s'.", key)
        self._notify(DeleteEvent(key))

    def merge(self, properties: 'Properties', overwrite_existing: bool = True) -> None:
        """Merge another instance's properties into this one."""
        for key in list(properties.keys):
            self.add(key, properties.get(key), overwrite_existing)

    def merge_map(self, mapping: Dict[str, str], overwrite_existing: bool = True) -> None:
        for key, value in mapping.items():
            self.add(key, value, overwrite_existing)

    def merge_json(self, json_map: str, overwrite_existing: bool = True) -> None:
        self.merge_map(_parse_json_map(json_map), overwrite_existing)

    def _every(self, key_predicate: Callable[[str], bool],
               value_predicate: Optional[Callable[[str], bool]] = None) -> Dict[str, str]:
        return {key: value for key, value in self._content.items()
                if key_predicate(key) and (value_predicate is None or value_predicate(value))}

    def every(self, key_predicate: Callable[[str], bool],
              value_predicate: Optional[Callable[[str], bool]] = None) -> Optional['Properties']:
        """
        Collect every property whose key satisfies ``key_predicate`` and,
        optionally, whose value satisfies ``value_predicate``.

        Returns:
            Optional[Properties]: A new instance with the matches, or None if nothing matched.
        """
        result = self._every(key_predicate, value_predicate)
        if not result:
            return None
        properties = Properties.from_map(result)
        properties.bool_evaluator = self.bool_evaluator
        properties.list_separator = self.list_separator
        return properties

    def reload(self) -> None:
        """Reload the properties from the source file. Does nothing for other sources."""
        if self._source_file is None:
            return
        # Both views are replaced together, and only once the file parsed
        self._init_from_file()
        logger.info("Reloaded properties from '%s'.", self._source_file)

    def save(self, path: Optional[str] = None) -> str:
        """
        Write the layout, including any edits, to ``path`` or to the source file.

        Returns:
            str: The path written.
        """
        target_path = path or self._source_file
        if target_path is None:
            raise ValueError("No target path given and the properties have no source file.")
        write_properties_bytes(target_path, self._layout.layout_as_bytes)
        logger.info("Saved %d properties to '%s'.", len(self._content), target_path)
        return target_path

    def to_json(self, prefix: Optional[str] = None, suffix: Optional[str] = None) -> str:
        """
        Export the content as a JSON map, optionally keeping only the keys
        starting with ``prefix`` and/or ending with ``suffix``.
        """
        to_export = self._content
        if prefix is not None and suffix is not None:
            to_export = self._every(lambda key: key.startswith(prefix) and key.endswith(suffix))
        elif prefix is not None:
            to_export = self._every(lambda key: key.startswith(prefix))
        elif suffix is not None:
            to_export = self._every(lambda key: key.endswith(suffix))
        return json.dumps(to_export, separators=(',', ':'), ensure_ascii=False)

    def on_add(self, listener: ChangeListener) -> None:
        self._listeners[EventType.ADD].append(listener)

    def on_update(self, listener: ChangeListener) -> None:
        self._listeners[EventType.UPDATE].append(listener)

    def on_delete(self, listener: ChangeListener) -> None:
        self._listeners[EventType.DELETE].append(listener)

    def _notify(self, event: ChangeEvent) -> None:
        if not self.enable_events:
            return
        for listener in self._listeners[event.type]:
            listener(event)

    def __contains__(self, key: str) -> bool:
        return self.contains(key)

    def __getitem__(self, key: str) -> str:
        return self._content[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._content)

    def __len__(self) -> int:
        return len(self._content)

    def __str__(self) -> str:
        return str(self._content)
