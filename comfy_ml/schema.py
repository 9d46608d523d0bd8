"""Schema columns reported by the ML runtime for a loaded model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable


class ModelNodeError(Exception):
    """Base class for errors raised while exposing a model as a node."""


class SchemaColumnNotFound(ModelNodeError):
    def __init__(self, column_name: str):
        super().__init__(f"schema has no column named {column_name!r}")
        self.column_name = column_name


class ValueKind(str, Enum):
    TEXT = "text"
    FLOAT32 = "float32"
    # Vector columns are recognized but not exposed as typed ports yet.
    VECTOR_FLOAT32 = "vector_float32"
    OTHER = "other"

    @classmethod
    def from_type_name(cls, type_name: str) -> "ValueKind":
        if type_name == "String":
            return cls.TEXT
        if type_name == "Single":
            return cls.FLOAT32
        if type_name == "Single[]" or type_name.startswith("Vector<Single"):
            return cls.VECTOR_FLOAT32
        return cls.OTHER


@dataclass(frozen=True)
class SchemaColumn:
    name: str
    type_name: str

    @property
    def kind(self) -> ValueKind:
        return ValueKind.from_type_name(self.type_name)


def find_column(schema: Iterable[SchemaColumn], name: str) -> SchemaColumn:
    for column in schema:
        if column.name == name:
            return column
    raise SchemaColumnNotFound(name)
