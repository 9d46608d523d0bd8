import pytest

from comfy_ml.model_node import ModelNodeDescriptor
from comfy_ml.schema import SchemaColumn


def test_runner_returns_defaults_until_triggered(regression_runtime):
    node = ModelNodeDescriptor(None, "Housing_Regression.joblib", runtime=regression_runtime)
    runner = node.create_instance(context={"node_id": "7"})

    assert runner.context == {"node_id": "7"}
    assert runner.run(Age=30.0, Label=1.0, Predict=False) == (0.0,)
    assert regression_runtime.handle.predict_calls == []


def test_runner_predicts_and_keeps_last_outputs(regression_runtime):
    node = ModelNodeDescriptor(None, "Housing_Regression.joblib", runtime=regression_runtime)
    runner = node.create_instance()

    assert runner.run(Age=30.0, Predict=True) == (42.5,)
    assert regression_runtime.handle.predict_calls == [{"Age": 30.0, "Label": 0.0}]
    assert runner.run(Age=31.0, Predict=False) == (42.5,)
    assert len(regression_runtime.handle.predict_calls) == 1


def test_runner_maps_predicted_label_column(classification_runtime):
    node = ModelNodeDescriptor(None, "Spam_Classification.joblib", runtime=classification_runtime)
    runner = node.create_instance()

    assert runner.run(Input="win money now", Predict=True) == ("spam",)
    assert classification_runtime.handle.predict_calls == [{"Input": "win money now"}]


def test_runner_propagates_prediction_errors(fake_handle, fake_runtime):
    class BrokenHandle(fake_handle):
        def predict(self, values):
            raise ValueError("bad input")

    handle = BrokenHandle(output_columns=[SchemaColumn("Score", "Single")])
    runtime = fake_runtime(schema=[SchemaColumn("Age", "Single")], handle=handle)
    runner = ModelNodeDescriptor(None, "Housing_Regression.joblib", runtime=runtime).create_instance()

    with pytest.raises(ValueError):
        runner.run(Age=1.0, Predict=True)
    assert runner.last_outputs == (0.0,)
