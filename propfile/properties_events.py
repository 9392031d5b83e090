"""Change events raised by ``Properties`` when a property is added, updated or deleted."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Union


class EventType(Enum):
    ADD = 'add'
    UPDATE = 'update'
    DELETE = 'delete'


@dataclass(frozen=True)
class AddEvent:
    """A new property was added."""
    key: str
    value: str
    type: EventType = field(default=EventType.ADD, init=False)

    def __str__(self) -> str:
        return f"{self.type.value} on {self.key}: {self.value}"


@dataclass(frozen=True)
class UpdateEvent:
    """The value of an existing property changed."""
    key: str
    new_value: Optional[str]
    old_value: Optional[str]
    type: EventType = field(default=EventType.UPDATE, init=False)

    def __str__(self) -> str:
        return f"{self.type.value} on {self.key}"


@dataclass(frozen=True)
class DeleteEvent:
    """A property was removed."""
    key: str
    type: EventType = field(default=EventType.DELETE, init=False)

    def __str__(self) -> str:
        return f"{self.type.value} on {self.key}"


ChangeEvent = Union[AddEvent, UpdateEvent, DeleteEvent]
ChangeListener = Callable[[ChangeEvent], None]
