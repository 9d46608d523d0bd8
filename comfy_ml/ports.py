"""Port descriptors and the column-to-port type mapping."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from comfy_ml.schema import SchemaColumn, ValueKind

TRIGGER_PORT_NAME = "Predict"


class PortType(str, Enum):
    STRING = "STRING"
    FLOAT = "FLOAT"
    BOOLEAN = "BOOLEAN"
    ANY = "*"


@dataclass(frozen=True)
class PortDescriptor:
    name: str
    type: PortType = PortType.ANY
    default: Any = ""
    description: str = ""

    def as_input_spec(self) -> tuple[str, dict[str, Any]]:
        return self.type.value, {"default": self.default, "tooltip": self.description}


def port_from_column(column: SchemaColumn, name: str | None = None) -> PortDescriptor:
    """Build a port for ``column``, optionally shown under a different ``name``."""
    kind = column.kind
    if kind == ValueKind.TEXT:
        port_type, default = PortType.STRING, ""
    elif kind == ValueKind.FLOAT32:
        port_type, default = PortType.FLOAT, 0.0
    elif kind in (ValueKind.VECTOR_FLOAT32, ValueKind.OTHER):
        port_type, default = PortType.ANY, ""
    else:
        raise AssertionError(f"unhandled value kind {kind!r}")

    return PortDescriptor(
        name=column.name if name is None else name,
        type=port_type,
        default=default,
        description=column.name,
    )


def trigger_port() -> PortDescriptor:
    return PortDescriptor(
        name=TRIGGER_PORT_NAME,
        type=PortType.BOOLEAN,
        default=False,
        description="Runs a prediction every frame as long as enabled",
    )
