"""
Node descriptions for pre-trained ML models.

A model file named ``<DisplayName>_<ModelKind>[_...].<ext>`` is loaded once
through an ML runtime and exposed as a node whose ports are inferred from the
model schema. Port inference is lazy: it runs on the first read of ``inputs``
or ``outputs`` and never again, even when it fails. A failed inference leaves
the node in the catalog with the ports derived so far and a warning message.
"""

from __future__ import annotations

import logging
import os
import re
from enum import Enum
from pathlib import Path
from typing import Any, Iterator

from comfy_ml.model_runner import ModelRunnerNode
from comfy_ml.node_description import Message, MessageType
from comfy_ml.ports import PortDescriptor, port_from_column, trigger_port
from comfy_ml.runtime import JoblibRuntime, MLRuntime, ModelHandle, ModelLoadError, Schema
from comfy_ml.schema import ModelNodeError, find_column

logger = logging.getLogger(__name__)

CATEGORY = "ML.MLNet"
DERIVATION_WARNING = "Error loading ML model"


class InvalidModelFileName(ModelNodeError):
    def __init__(self, path: str):
        super().__init__(f"expected <Name>_<ModelKind> model file name: {path}")
        self.path = path


class ModelKind(str, Enum):
    CLASSIFICATION = "Classification"
    REGRESSION = "Regression"
    # Reserved, no ports are derived for image models yet.
    IMAGE_CLASSIFICATION = "ImageClassification"
    UNKNOWN = "Unknown"

    @classmethod
    def from_tag(cls, tag: str) -> "ModelKind":
        for kind in cls:
            if kind is not cls.UNKNOWN and kind.value == tag:
                return kind
        return cls.UNKNOWN


class DerivationState(str, Enum):
    PENDING = "pending"
    DERIVED = "derived"
    FAILED = "failed"


def parse_model_file_name(path: str | os.PathLike) -> tuple[str, str]:
    """Split a model file name into its display name and model kind tag."""
    segments = Path(path).stem.split("_")
    if len(segments) < 2:
        raise InvalidModelFileName(os.fspath(path))
    return segments[0], segments[1]


class ModelNodeDescriptor:
    """Describes one model file as a node. Construction loads the model."""

    category = CATEGORY
    fragmented = False
    remarks = ""

    def __init__(self, factory: Any, path: str | os.PathLike, runtime: MLRuntime | None = None):
        self.factory = factory
        self.path = os.fspath(path)
        self.name, self.model_type = parse_model_file_name(self.path)
        self.model_kind = ModelKind.from_tag(self.model_type)

        runtime = runtime if runtime is not None else JoblibRuntime()
        try:
            self._model, schema = runtime.load(self.path)
            self._schema = tuple(schema)
        except ModelLoadError:
            raise
        except Exception as exc:
            raise ModelLoadError(self.path) from exc

        self._state = DerivationState.PENDING
        self._inputs: tuple[PortDescriptor, ...] = ()
        self._outputs: tuple[PortDescriptor, ...] = ()
        self._summary: str | None = None

    @property
    def model(self) -> ModelHandle:
        return self._model

    @property
    def schema(self) -> Schema:
        return self._schema

    @property
    def state(self) -> DerivationState:
        return self._state

    @property
    def has_error(self) -> bool:
        return self._state == DerivationState.FAILED

    @property
    def inputs(self) -> tuple[PortDescriptor, ...]:
        self._derive_ports()
        return self._inputs

    @property
    def outputs(self) -> tuple[PortDescriptor, ...]:
        self._derive_ports()
        return self._outputs

    @property
    def summary(self) -> str | None:
        return self._summary

    @property
    def messages(self) -> Iterator[Message]:
        if self.has_error:
            yield Message(MessageType.WARNING, DERIVATION_WARNING)

    @property
    def invalidated(self) -> Iterator[Any]:
        # Descriptions never change after construction.
        return iter(())

    def _derive_ports(self) -> None:
        if self._state != DerivationState.PENDING:
            return

        inputs: list[PortDescriptor] = []
        outputs: list[PortDescriptor] = []
        try:
            kind = self.model_kind
            if kind == ModelKind.CLASSIFICATION:
                inputs.append(port_from_column(find_column(self._schema, "Input")))
                output_schema = self._model.get_output_schema(self._schema)
                label = find_column(output_schema, "PredictedLabel")
                outputs.append(port_from_column(label, name="Predicted Label"))
            elif kind == ModelKind.REGRESSION:
                # Every column becomes an input, including a label column if the schema kept one.
                inputs.extend(port_from_column(column) for column in self._schema)
                output_schema = self._model.get_output_schema(self._schema)
                outputs.append(port_from_column(find_column(output_schema, "Score")))
            elif kind in (ModelKind.IMAGE_CLASSIFICATION, ModelKind.UNKNOWN):
                pass
            else:
                raise AssertionError(f"unhandled model kind {kind!r}")

            inputs.append(trigger_port())
            self._summary = f"Runs the {self.name} {self.model_type} pre-trained model"
            self._state = DerivationState.DERIVED
        except Exception:
            logger.warning("Could not derive ports for model %s", self.path, exc_info=True)
            self._state = DerivationState.FAILED
        finally:
            self._inputs = tuple(inputs)
            self._outputs = tuple(outputs)

    def create_instance(self, context: Any = None) -> ModelRunnerNode:
        return ModelRunnerNode(self, context)

    def open_editor(self) -> bool:
        return True

    def input_types(self) -> dict[str, dict[str, tuple]]:
        return {"required": {port.name: port.as_input_spec() for port in self.inputs}}

    def return_types(self) -> tuple[str, ...]:
        return tuple(port.type.value for port in self.outputs)

    def return_names(self) -> tuple[str, ...]:
        return tuple(port.name for port in self.outputs)

    def as_node_class(self) -> type:
        """Build a node class whose instances run this model."""
        description = self

        def __init__(node, context: Any = None):
            ModelRunnerNode.__init__(node, description, context)

        def INPUT_TYPES(cls):
            return description.input_types()

        class_name = re.sub(r"\W", "", f"{self.name}{self.model_type}") + "Runner"
        return type(class_name, (ModelRunnerNode,), {
            "__init__": __init__,
            "INPUT_TYPES": classmethod(INPUT_TYPES),
            "RETURN_TYPES": self.return_types(),
            "RETURN_NAMES": self.return_names(),
            "FUNCTION": "run",
            "CATEGORY": self.category,
            "DESCRIPTION": self.summary or "",
        })

    def __repr__(self) -> str:
        return f"ModelNodeDescriptor({self.path!r}, state={self._state.value})"
