"""
Optimizer construction for the learning rate, momentum, decay and optimizer studies.

Only built-in Keras optimizers and schedules are used. The update rules,
momentum accumulation and decay are entirely TensorFlow's.

Course: CS 599 Deep Learning
Author: Karl Reger
Date: December 2025
"""

import numpy as np
import tensorflow as tf

OPTIMIZERS = {
    "sgd": tf.keras.optimizers.SGD,
    "rmsprop": tf.keras.optimizers.RMSprop,
    "adagrad": tf.keras.optimizers.Adagrad,
    "adam": tf.keras.optimizers.Adam,
}


def inverse_time_decay(learning_rate, decay):
    """
    Per-update inverse time decay: lr_t = lr_0 / (1 + decay * t)

    decay_steps=1 means t counts optimizer updates (batches), not epochs. That
    reproduces the classic optimizer `decay` argument that newer Keras
    versions removed.
    """
    return tf.keras.optimizers.schedules.InverseTimeDecay(
        initial_learning_rate=learning_rate, decay_steps=1, decay_rate=decay
    )


def build_optimizer(name, learning_rate=None, momentum=0.0, decay=None):
    """
    Build a Keras optimizer by name.

    Args:
        name: One of 'sgd', 'rmsprop', 'adagrad', 'adam'
        learning_rate: Initial learning rate; None keeps the Keras default
        momentum: SGD momentum (must be 0 for the other optimizers)
        decay: Inverse time decay rate per update, or None for a constant rate

    Returns:
        tf.keras.optimizers.Optimizer
    """
    key = name.lower()
    if key not in OPTIMIZERS:
        raise ValueError(
            f"Unknown optimizer '{name}', expected one of {sorted(OPTIMIZERS)}"
        )

    optimizer_cls = OPTIMIZERS[key]
    kwargs = {}

    if decay is not None:
        if learning_rate is None:
            # Schedules need an explicit starting point
            learning_rate = optimizer_cls().get_config()["learning_rate"]
        kwargs["learning_rate"] = inverse_time_decay(learning_rate, decay)
    elif learning_rate is not None:
        kwargs["learning_rate"] = learning_rate

    if key == "sgd":
        kwargs["momentum"] = momentum
    elif momentum:
        raise ValueError(f"momentum is only supported for SGD, not '{name}'")

    return optimizer_cls(**kwargs)


def current_learning_rate(optimizer):
    """Current learning rate as a float, evaluating schedules at the current step."""
    lr = optimizer.learning_rate
    if isinstance(lr, tf.keras.optimizers.schedules.LearningRateSchedule):
        lr = lr(optimizer.iterations)
    return float(np.array(lr))


def decay_schedule_values(learning_rate, decay, steps):
    """
    Evaluate the inverse time decay schedule for updates 0..steps-1.

    No model is trained; this is used to illustrate how quickly each decay
    rate shrinks the learning rate.
    """
    schedule = inverse_time_decay(learning_rate, decay)
    return np.asarray(schedule(np.arange(steps)), dtype=float)
