"""Executable node running one prediction per triggered evaluation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from comfy_ml.ports import TRIGGER_PORT_NAME

if TYPE_CHECKING:
    from comfy_ml.model_node import ModelNodeDescriptor

logger = logging.getLogger(__name__)


class ModelRunnerNode:
    """Feeds current input values to the model while the Predict trigger is set."""

    def __init__(self, description: ModelNodeDescriptor, context: Any = None):
        self.description = description
        self.context = context
        self._last_outputs = tuple(port.default for port in description.outputs)

    @property
    def last_outputs(self) -> tuple:
        return self._last_outputs

    def _row(self, values: dict[str, Any]) -> dict[str, Any]:
        # Port descriptions carry the schema column name.
        row = {}
        for port in self.description.inputs:
            if port.name == TRIGGER_PORT_NAME:
                continue
            row[port.description] = values.get(port.name, port.default)
        return row

    def run(self, **values) -> tuple:
        if not values.get(TRIGGER_PORT_NAME, False):
            return self._last_outputs

        try:
            prediction = self.description.model.predict(self._row(values))
        except Exception:
            logger.exception("Prediction failed for model %s", self.description.path)
            raise

        self._last_outputs = tuple(
            prediction.get(port.description, port.default) for port in self.description.outputs
        )
        return self._last_outputs
