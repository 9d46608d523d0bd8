import pytest

from comfy_ml.schema import SchemaColumn


class FakeModelHandle:
    def __init__(self, output_columns=(), prediction=None, output_error=None):
        self.output_columns = tuple(output_columns)
        self.prediction = prediction or {}
        self.output_error = output_error
        self.output_schema_calls = 0
        self.predict_calls = []

    def get_output_schema(self, schema):
        self.output_schema_calls += 1
        if self.output_error is not None:
            raise self.output_error
        return tuple(schema) + self.output_columns

    def predict(self, values):
        self.predict_calls.append(dict(values))
        return dict(self.prediction)


class FakeRuntime:
    def __init__(self, schema=(), handle=None, error=None):
        self.schema = tuple(schema)
        self.handle = handle if handle is not None else FakeModelHandle()
        self.error = error
        self.loaded = []

    def load(self, path):
        self.loaded.append(path)
        if self.error is not None:
            raise self.error
        return self.handle, self.schema


@pytest.fixture
def regression_runtime():
    handle = FakeModelHandle(
        output_columns=[SchemaColumn("Score", "Single")],
        prediction={"Score": 42.5},
    )
    return FakeRuntime(
        schema=[SchemaColumn("Age", "Single"), SchemaColumn("Label", "Single")],
        handle=handle,
    )


@pytest.fixture
def classification_runtime():
    handle = FakeModelHandle(
        output_columns=[SchemaColumn("PredictedLabel", "String"), SchemaColumn("Score", "Vector<Single>")],
        prediction={"PredictedLabel": "spam", "Score": [0.1, 0.9]},
    )
    return FakeRuntime(schema=[SchemaColumn("Input", "String")], handle=handle)


@pytest.fixture
def fake_handle():
    return FakeModelHandle


@pytest.fixture
def fake_runtime():
    return FakeRuntime
