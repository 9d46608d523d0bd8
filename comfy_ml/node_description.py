"""Node description contract consumed by the node catalog."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Iterator, Protocol, Sequence

from comfy_ml.ports import PortDescriptor


class MessageType(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Message:
    type: MessageType
    text: str


class NodeDescription(Protocol):
    @property
    def name(self) -> str: ...

    @property
    def category(self) -> str: ...

    @property
    def fragmented(self) -> bool: ...

    @property
    def inputs(self) -> Sequence[PortDescriptor]: ...

    @property
    def outputs(self) -> Sequence[PortDescriptor]: ...

    @property
    def messages(self) -> Iterable[Message]: ...

    @property
    def summary(self) -> str | None: ...

    @property
    def remarks(self) -> str: ...

    @property
    def invalidated(self) -> Iterator[Any]: ...

    def create_instance(self, context: Any) -> Any: ...

    def open_editor(self) -> bool: ...
