"""
Training and evaluation built on model.fit() and Keras callbacks.

This module implements:
- Callbacks that record the learning rate and weight snapshots every epoch
- A single training run for one hyperparameter configuration
- Conversion of the run history to long-format table rows for plotting

All gradient computation and weight updates happen inside model.fit();
the code here only configures it and collects what it produces.

Course: CS 599 Deep Learning
Author: Karl Reger
Date: December 2025
"""

import numpy as np
import tensorflow as tf

from gdlab.optimizers import build_optimizer, current_learning_rate

# Per-epoch metrics copied from the Keras History object
HISTORY_METRICS = ("loss", "accuracy", "val_loss", "val_accuracy")


class LearningRateHistory(tf.keras.callbacks.Callback):
    """
    Record the optimizer's learning rate at the end of every epoch.

    With a decay schedule the rate changes every batch; with ReduceLROnPlateau
    it drops in steps. In both cases the value recorded is the rate the
    *next* update will use.
    """

    def __init__(self):
        super().__init__()
        self.learning_rates = []

    def on_train_begin(self, logs=None):
        self.learning_rates = []

    def on_epoch_end(self, epoch, logs=None):
        self.learning_rates.append(current_learning_rate(self.model.optimizer))


class WeightHistory(tf.keras.callbacks.Callback):
    """
    Snapshot selected kernel entries of one layer during training.

    A snapshot is taken before the first update (epoch 0) and after every
    epoch, giving epochs + 1 points. Since every run starts from the same
    initial weights, the first point is identical across a study and the
    trajectories show where each hyperparameter setting takes the weights.

    Args:
        layer_name: Name of the Dense layer to watch
        indices: (row, col) positions in the layer's kernel
    """

    def __init__(self, layer_name="hidden", indices=((0, 0), (1, 0))):
        super().__init__()
        self.layer_name = layer_name
        self.indices = [tuple(ix) for ix in indices]
        self.snapshots = []

    def _snapshot(self):
        kernel = self.model.get_layer(self.layer_name).get_weights()[0]
        self.snapshots.append([float(kernel[ix]) for ix in self.indices])

    def on_train_begin(self, logs=None):
        self.snapshots = []
        self._snapshot()

    def on_epoch_end(self, epoch, logs=None):
        self._snapshot()


def build_callbacks(config):
    """
    Create the callbacks for one run.

    Returns:
        Tuple: (callbacks, lr_history, weight_history)
    """
    lr_history = LearningRateHistory()
    weight_history = WeightHistory(
        layer_name=config.get("tracked_layer", "hidden"),
        indices=config.get("tracked_weights", ((0, 0), (1, 0))),
    )
    callbacks = [weight_history]

    if config.get("patience") is not None:
        # Drop the learning rate by `factor` when val_loss stops improving
        callbacks.append(
            tf.keras.callbacks.ReduceLROnPlateau(
                monitor="val_loss",
                factor=config.get("plateau_factor", 0.1),
                patience=config["patience"],
                min_delta=config.get("plateau_min_delta", 1e-7),
                verbose=0,
            )
        )

    # Last, so it sees any reduction made at the end of the same epoch
    callbacks.append(lr_history)

    return callbacks, lr_history, weight_history


def train_model(model, config, x_train, y_train, x_val, y_val):
    """
    Compile and fit a model for one hyperparameter configuration.

    Config keys used:
        optimizer, learning_rate, momentum, decay: optimizer construction
        patience (+ plateau_factor, plateau_min_delta): ReduceLROnPlateau
        epochs, batch_size: passed to fit()
        tracked_layer, tracked_weights: weight snapshots

    Args:
        model: Uncompiled Keras model (already reset to the shared weights)
        config: Experiment configuration dict
        x_train, y_train: Training data
        x_val, y_val: Validation data, evaluated at the end of each epoch

    Returns:
        history: Dict with per-epoch lists for 'loss', 'accuracy', 'val_loss',
            'val_accuracy', 'learning_rate', and 'weights' (epochs + 1 snapshots)
    """
    if config.get("decay") is not None and config.get("patience") is not None:
        raise ValueError(
            "decay and patience cannot be combined: ReduceLROnPlateau "
            "cannot change a scheduled learning rate"
        )

    optimizer = build_optimizer(
        config.get("optimizer", "sgd"),
        learning_rate=config.get("learning_rate"),
        momentum=config.get("momentum", 0.0),
        decay=config.get("decay"),
    )
    model.compile(
        optimizer=optimizer,
        loss="categorical_crossentropy",
        metrics=["accuracy"],
    )

    callbacks, lr_history, weight_history = build_callbacks(config)

    fit_history = model.fit(
        x_train,
        y_train,
        validation_data=(x_val, y_val),
        epochs=config["epochs"],
        batch_size=config.get("batch_size", 32),
        callbacks=callbacks,
        verbose=0,
    )

    history = {
        metric: [float(v) for v in fit_history.history[metric]]
        for metric in HISTORY_METRICS
    }
    history["learning_rate"] = list(lr_history.learning_rates)
    history["weights"] = list(weight_history.snapshots)

    return history


def evaluate_final_test(model, x_test, y_test):
    """
    Evaluate a trained model on the test set.

    Returns:
        Dict with 'test_loss' and 'test_accuracy'
    """
    test_loss, test_acc = model.evaluate(x_test, y_test, verbose=0)
    return {
        "test_loss": float(test_loss),
        "test_accuracy": float(test_acc),
    }


def history_to_records(history, study, param, value):
    """
    Flatten a run history into long-format rows.

    Each row is one (epoch, metric, value) observation tagged with the study
    name and the hyperparameter value, e.g.
        {"study": "momentum", "epoch": 3, "metric": "val_loss",
         "value": 0.41, "momentum": 0.9}

    Weight snapshots are not included (they are plotted separately).
    Epochs are 1-based.
    """
    records = []
    for metric, values in history.items():
        if metric == "weights":
            continue
        for epoch, metric_value in enumerate(values, start=1):
            records.append(
                {
                    "study": study,
                    "epoch": epoch,
                    "metric": metric,
                    "value": float(metric_value),
                    param: value,
                }
            )
    return records


def weight_trajectory(history):
    """Weight snapshots of a run as an array of shape (epochs + 1, n_tracked)."""
    return np.asarray(history["weights"], dtype=float)
