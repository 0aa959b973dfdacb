"""
Experiment configurations for Lab 4: Learning Rate, Momentum and Optimizers

This file defines all studies to be run. Each study varies exactly one
hyperparameter while everything else stays at SHARED_CONFIG:
- Learning rate (plain SGD)
- Momentum (SGD)
- Learning rate decay (SGD with inverse time decay)
- Plateau patience (SGD with ReduceLROnPlateau)
- Optimizer choice (SGD, RMSprop, Adagrad, Adam at their default rates)

Course: CS 599 Deep Learning
Author: Karl Reger
Date: December 2025
"""

# Seed derived from "Karl": K(75) + a(97) + r(114) + l(108) = 394
SEED = 394

# Synthetic blobs problem shared by every study
DATA_CONFIG = {
    "n_samples": 1000,
    "centers": 3,
    "n_features": 2,
    "cluster_std": 2.0,
    "train_fraction": 0.5,
}

# Shared configuration across all experiments
SHARED_CONFIG = {
    "epochs": 200,
    "batch_size": 32,
    "hidden_units": 50,
    "optimizer": "sgd",
    "learning_rate": 0.01,
    "momentum": 0.0,
    "decay": None,
    "patience": None,
    "plateau_factor": 0.1,
    "plateau_min_delta": 1e-7,
    # Two input weights of the first hidden unit, plotted as a 2-D path
    "tracked_layer": "hidden",
    "tracked_weights": [(0, 0), (1, 0)],
}

# Define all studies
# `fixed` overrides SHARED_CONFIG for the whole study; `param` takes each of `values`
STUDIES = [
    {
        "name": "learning_rate",
        "param": "learning_rate",
        "values": [1e0, 1e-1, 1e-2, 1e-3, 1e-4, 1e-5, 1e-6, 1e-7],
        "fixed": {"optimizer": "sgd"},
        "description": "SGD learning rate from 1.0 down to 1e-7",
    },
    {
        "name": "momentum",
        "param": "momentum",
        "values": [0.0, 0.5, 0.9, 0.99],
        "fixed": {"optimizer": "sgd", "learning_rate": 0.01},
        "description": "SGD momentum at a fixed learning rate of 0.01",
    },
    {
        "name": "decay",
        "param": "decay",
        "values": [1e-1, 1e-2, 1e-3, 1e-4],
        "fixed": {"optimizer": "sgd", "learning_rate": 0.01},
        "description": "Inverse time decay of the learning rate, applied per update",
    },
    {
        "name": "patience",
        "param": "patience",
        "values": [2, 5, 10, 15],
        "fixed": {"optimizer": "sgd", "learning_rate": 0.01},
        "description": "ReduceLROnPlateau patience (epochs without val_loss improvement)",
    },
    {
        "name": "optimizer",
        "param": "optimizer",
        "values": ["sgd", "rmsprop", "adagrad", "adam"],
        # None -> each optimizer's own default learning rate
        "fixed": {"learning_rate": None},
        "description": "Adaptive optimizers vs SGD at their default learning rates",
    },
]

# Studies that also get a learning-rate-per-epoch plot
LR_CURVE_STUDIES = ("decay", "patience")

# LAB QUESTION MAPPING:
# Q1: "How does the learning rate affect training?"
#     → learning_rate study: too large diverges/oscillates, too small never learns
#
# Q2: "What does momentum add?"
#     → momentum study: faster convergence, longer weight trajectories;
#        0.99 overshoots and oscillates
#
# Q3: "Does a learning rate schedule help?"
#     → decay and patience studies: large decay freezes learning too early,
#        small patience drops the rate aggressively
#
# Q4: "Are adaptive optimizers less sensitive?"
#     → optimizer study: RMSprop/Adam converge at defaults, Adagrad is slower


def get_study(name):
    """Look up a study definition by name."""
    for study in STUDIES:
        if study["name"] == name:
            return study
    raise ValueError(
        f"Unknown study '{name}', expected one of {[s['name'] for s in STUDIES]}"
    )


def run_config(study, value, epochs=None):
    """Full configuration for one run: shared, then study overrides, then the grid value."""
    config = dict(SHARED_CONFIG)
    config.update(study.get("fixed", {}))
    config[study["param"]] = value
    if epochs is not None:
        config["epochs"] = epochs
    return config
