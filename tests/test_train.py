import numpy as np
import pytest
import tensorflow as tf

from gdlab.models import clone_with_weights
from gdlab.train import (
    HISTORY_METRICS,
    build_callbacks,
    evaluate_final_test,
    history_to_records,
    train_model,
    weight_trajectory,
)


def _train(base_model, tiny_data, config):
    x_train, y_train, x_test, y_test = tiny_data
    model = clone_with_weights(base_model)
    return model, train_model(model, config, x_train, y_train, x_test, y_test)


def test_history_has_one_value_per_epoch(base_model, tiny_data, quick_config):
    _, history = _train(base_model, tiny_data, quick_config)
    for metric in HISTORY_METRICS + ("learning_rate",):
        assert len(history[metric]) == quick_config["epochs"]
    # Initial snapshot plus one per epoch
    assert len(history["weights"]) == quick_config["epochs"] + 1


def test_first_snapshot_is_initial_weights(base_model, tiny_data, quick_config):
    kernel = base_model.get_layer("hidden").get_weights()[0]
    _, history = _train(base_model, tiny_data, quick_config)
    np.testing.assert_allclose(
        history["weights"][0], [kernel[0, 0], kernel[1, 0]], rtol=1e-6
    )


def test_momentum_changes_trajectory_from_shared_start(
    base_model, tiny_data, quick_config
):
    _, plain = _train(base_model, tiny_data, dict(quick_config, momentum=0.0))
    _, heavy = _train(base_model, tiny_data, dict(quick_config, momentum=0.9))
    plain_path, heavy_path = weight_trajectory(plain), weight_trajectory(heavy)
    np.testing.assert_allclose(plain_path[0], heavy_path[0])
    assert not np.allclose(plain_path[-1], heavy_path[-1])


def test_constant_learning_rate_is_recorded(base_model, tiny_data, quick_config):
    _, history = _train(base_model, tiny_data, dict(quick_config, learning_rate=0.05))
    np.testing.assert_allclose(history["learning_rate"], 0.05, rtol=1e-6)


def test_decay_lowers_learning_rate_each_epoch(base_model, tiny_data, quick_config):
    config = dict(quick_config, decay=0.1)
    _, history = _train(base_model, tiny_data, config)
    rates = np.array(history["learning_rate"])
    assert rates[0] < config["learning_rate"]
    assert np.all(np.diff(rates) < 0)


def test_plateau_reduces_learning_rate(base_model, tiny_data, quick_config):
    # No epoch can improve val_loss by 100, so every epoch after the first plateaus
    config = dict(quick_config, patience=1, epochs=4, plateau_min_delta=100.0)
    _, history = _train(base_model, tiny_data, config)
    rates = np.array(history["learning_rate"])
    factor = config["plateau_factor"]
    assert rates[0] == pytest.approx(config["learning_rate"])
    assert rates[1] == pytest.approx(rates[0] * factor, rel=1e-4)
    assert rates[-1] < rates[1]


def test_plateau_waits_for_patience(base_model, tiny_data, quick_config):
    config = dict(quick_config, patience=3, epochs=4, plateau_min_delta=100.0)
    _, history = _train(base_model, tiny_data, config)
    rates = np.array(history["learning_rate"])
    np.testing.assert_allclose(rates[:3], config["learning_rate"], rtol=1e-6)
    assert rates[3] == pytest.approx(rates[0] * config["plateau_factor"], rel=1e-4)


def test_decay_and_patience_are_exclusive(base_model, tiny_data, quick_config):
    with pytest.raises(ValueError, match="decay and patience"):
        _train(base_model, tiny_data, dict(quick_config, decay=0.01, patience=2))


def test_plateau_callback_only_with_patience(quick_config):
    callbacks, _, _ = build_callbacks(quick_config)
    assert len(callbacks) == 2
    callbacks, _, _ = build_callbacks(dict(quick_config, patience=5))
    assert len(callbacks) == 3
    plateau = [
        cb for cb in callbacks if isinstance(cb, tf.keras.callbacks.ReduceLROnPlateau)
    ]
    assert plateau[0].patience == 5


def test_evaluate_final_test(base_model, tiny_data, quick_config):
    model, _ = _train(base_model, tiny_data, quick_config)
    metrics = evaluate_final_test(model, tiny_data[2], tiny_data[3])
    assert set(metrics) == {"test_loss", "test_accuracy"}
    assert 0.0 <= metrics["test_accuracy"] <= 1.0


def test_history_to_records():
    history = {
        "loss": [1.0, 0.5],
        "val_accuracy": [0.4, 0.6],
        "weights": [[0.0, 0.0], [0.1, 0.2], [0.2, 0.3]],
    }
    records = history_to_records(history, "momentum", "momentum", 0.9)
    assert len(records) == 4
    assert records[0] == {
        "study": "momentum",
        "epoch": 1,
        "metric": "loss",
        "value": 1.0,
        "momentum": 0.9,
    }
    assert {r["metric"] for r in records} == {"loss", "val_accuracy"}
