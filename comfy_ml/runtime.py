"""
ML runtime collaborators used to load models and run predictions.

The node layer only needs two things from a runtime: a loader returning an
opaque model handle together with the model's input schema, and a handle able
to describe its output columns and to predict one row at a time. The default
runtime reads joblib artifacts holding fitted scikit-learn estimators.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Mapping, Protocol, Sequence

import joblib
import numpy as np
import pandas as pd
from sklearn.base import is_classifier, is_regressor

from comfy_ml.schema import ModelNodeError, SchemaColumn

logger = logging.getLogger(__name__)

Schema = tuple[SchemaColumn, ...]


class ModelLoadError(ModelNodeError):
    def __init__(self, path: str | os.PathLike, reason: str = "could not load model"):
        super().__init__(f"{reason}: {os.fspath(path)}")
        self.path = os.fspath(path)


class ModelHandle(Protocol):
    def get_output_schema(self, schema: Sequence[SchemaColumn]) -> Schema: ...

    def predict(self, values: Mapping[str, Any]) -> dict[str, Any]: ...


class MLRuntime(Protocol):
    def load(self, path: str | os.PathLike) -> tuple[ModelHandle, Schema]: ...


def type_name_for_dtype(dtype: Any) -> str:
    """Name a numpy dtype the way the runtime names column value types."""
    dtype = np.dtype(dtype)
    if dtype.kind in ("U", "S", "O"):
        return "String"
    if dtype.kind == "f":
        return "Single"
    if dtype.kind == "b":
        return "Boolean"
    if dtype.kind in ("i", "u"):
        return "Int32" if dtype.itemsize <= 4 else "Int64"
    return dtype.name


def _to_python(value: Any) -> Any:
    if isinstance(value, np.generic):
        return value.item()
    return value


class SklearnModelHandle:
    """Wraps a fitted scikit-learn estimator or pipeline."""

    def __init__(self, estimator: Any, schema: Sequence[SchemaColumn]):
        self.estimator = estimator
        self._input_names = [column.name for column in schema]

    @property
    def is_classifier(self) -> bool:
        return is_classifier(self.estimator)

    def get_output_schema(self, schema: Sequence[SchemaColumn]) -> Schema:
        columns = list(schema)
        if self.is_classifier:
            classes = getattr(self.estimator, "classes_", None)
            label_type = type_name_for_dtype(classes.dtype) if classes is not None else "String"
            columns.append(SchemaColumn("PredictedLabel", label_type))
            if hasattr(self.estimator, "predict_proba"):
                columns.append(SchemaColumn("Score", "Vector<Single>"))
        else:
            if not is_regressor(self.estimator):
                logger.debug("Estimator %r is neither classifier nor regressor", self.estimator)
            columns.append(SchemaColumn("Score", "Single"))
        return tuple(columns)

    def _frame(self, values: Mapping[str, Any]) -> pd.DataFrame:
        row = {name: [values.get(name)] for name in self._input_names}
        return pd.DataFrame(row, columns=self._input_names)

    def predict(self, values: Mapping[str, Any]) -> dict[str, Any]:
        frame = self._frame(values)
        prediction = self.estimator.predict(frame)[0]
        if not self.is_classifier:
            return {"Score": float(prediction)}

        result = {"PredictedLabel": _to_python(prediction)}
        if hasattr(self.estimator, "predict_proba"):
            scores = self.estimator.predict_proba(frame)[0]
            result["Score"] = [float(score) for score in scores]
        return result


class JoblibRuntime:
    """Loads joblib artifacts holding an estimator or a ``{"model", "schema"}`` bundle."""

    def load(self, path: str | os.PathLike) -> tuple[SklearnModelHandle, Schema]:
        try:
            artifact = joblib.load(path)
        except Exception as exc:
            raise ModelLoadError(path) from exc

        if isinstance(artifact, Mapping):
            estimator = artifact.get("model")
            declared = artifact.get("schema")
        else:
            estimator, declared = artifact, None

        if estimator is None or not hasattr(estimator, "predict"):
            raise ModelLoadError(path, "artifact holds no fitted estimator")

        schema = self._resolve_schema(path, estimator, declared)
        logger.debug("Loaded %s with %d input columns", os.fspath(path), len(schema))
        return SklearnModelHandle(estimator, schema), schema

    def _resolve_schema(self, path, estimator, declared) -> Schema:
        if declared is not None:
            columns = []
            for entry in declared:
                try:
                    if isinstance(entry, SchemaColumn):
                        columns.append(entry)
                    elif isinstance(entry, Mapping):
                        columns.append(SchemaColumn(str(entry["name"]), str(entry["type"])))
                    else:
                        name, type_name = entry
                        columns.append(SchemaColumn(str(name), str(type_name)))
                except (KeyError, TypeError, ValueError) as exc:
                    raise ModelLoadError(path, "invalid schema entry") from exc
            return tuple(columns)

        feature_names = getattr(estimator, "feature_names_in_", None)
        if feature_names is None:
            raise ModelLoadError(path, "model does not declare its input columns")
        return tuple(SchemaColumn(str(name), "Single") for name in feature_names)
