"""
Utilities for Lab 4: Learning Rate, Momentum and Optimizers
Handles: seed setting, device configuration, I/O operations, result tables, plotting

Course: CS 599 Deep Learning
Author: Karl Reger
Date: December 2025
"""

import json
import math
import os
import random

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
import tensorflow as tf

from gdlab.optimizers import decay_schedule_values
from gdlab.train import history_to_records, weight_trajectory

# Set plotting style
sns.set_style("whitegrid")
plt.rcParams["figure.figsize"] = (12, 8)
plt.rcParams["font.size"] = 10


def derive_seed_from_string(s):
    """
    Derive a deterministic seed from a string.
    For "Karl", this computes: K(75) + a(97) + r(114) + l(108) = 394

    Args:
        s: String to convert to seed

    Returns:
        Integer seed value
    """
    seed = sum([ord(c) for c in s])
    print(f"Derived seed from '{s}': {seed}")
    return seed


def setup(seed_string="Karl"):
    """
    Initialize the experimental environment with reproducible random seeds
    and configure TensorFlow GPU memory growth.

    Reproducibility matters more than usual here: the whole point of each
    study is that only one hyperparameter changes between runs.

    Args:
        seed_string: String to derive seed from (default: "Karl")

    Returns:
        The derived seed
    """
    seed = derive_seed_from_string(seed_string)

    tf.random.set_seed(seed)
    np.random.seed(seed)
    random.seed(seed)

    os.environ["TF_DETERMINISTIC_OPS"] = "1"

    gpus = tf.config.list_physical_devices("GPU")
    if gpus:
        try:
            for gpu in gpus:
                tf.config.experimental.set_memory_growth(gpu, True)
            print(f"✓ Configured {len(gpus)} GPU(s) with memory growth enabled")
        except RuntimeError as e:
            # Memory growth must be set before GPUs are initialized
            print(f"GPU configuration error: {e}")
    else:
        print("⚠ No GPU detected - training will use CPU")

    print(f"✓ Environment setup complete (seed={seed})")
    return seed


def save_results(results, filepath):
    """
    Save experiment results to JSON file.
    Converts numpy/TensorFlow types to native Python types for JSON serialization.

    Args:
        results: Dictionary of results (can contain numpy arrays, TF tensors)
        filepath: Path to save JSON file
    """
    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)

    def convert(obj):
        if isinstance(obj, (np.ndarray, tf.Tensor)):
            return obj.tolist() if isinstance(obj, np.ndarray) else obj.numpy().tolist()
        elif isinstance(obj, np.floating):
            return float(obj)
        elif isinstance(obj, np.integer):
            return int(obj)
        elif isinstance(obj, dict):
            return {key: convert(value) for key, value in obj.items()}
        elif isinstance(obj, (list, tuple)):
            return [convert(item) for item in obj]
        else:
            return obj

    serializable_results = convert(results)

    with open(filepath, "w") as f:
        json.dump(serializable_results, f, indent=2)

    print(f"✓ Results saved to {filepath}")


def load_results(filepath):
    """
    Load experiment results from JSON file.

    Args:
        filepath: Path to JSON file

    Returns:
        Dictionary of results
    """
    with open(filepath, "r") as f:
        results = json.load(f)
    return results


def results_to_frame(study_results):
    """
    Build the long-format table for one study.

    Args:
        study_results: Dict mapping run_id -> results dict (as produced by
            experiments.run.run_study)

    Returns:
        pandas DataFrame with columns study, epoch, metric, value, <param>
    """
    records = []
    for results in study_results.values():
        records.extend(
            history_to_records(
                results["history"],
                results["study"],
                results["param"],
                results["value"],
            )
        )
    return pd.DataFrame.from_records(records)


def _format_value(value):
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def plot_study_grid(df, param, save_path, title=None):
    """
    One panel per hyperparameter value, each showing train and test accuracy.

    This is the classic "line plot per setting" layout: it makes it easy to
    see which settings fail to learn at all, which learn too slowly, and which
    oscillate.

    Args:
        df: Long-format study table (see results_to_frame)
        param: Hyperparameter column name
        save_path: Where to save the plot
        title: Optional figure title
    """
    values = list(dict.fromkeys(df[param]))
    n_cols = min(4, len(values))
    n_rows = math.ceil(len(values) / n_cols)

    fig, axes = plt.subplots(
        n_rows, n_cols, figsize=(4 * n_cols, 3.5 * n_rows), sharey=True, squeeze=False
    )

    acc = df[df["metric"].isin(["accuracy", "val_accuracy"])]
    labels = {"accuracy": "train", "val_accuracy": "test"}

    for ax, value in zip(axes.flat, values):
        subset = acc[acc[param] == value]
        for metric, label in labels.items():
            rows = subset[subset["metric"] == metric]
            ax.plot(rows["epoch"], rows["value"], linewidth=1.5, label=label)
        ax.set_title(f"{param}={_format_value(value)}", fontsize=12)
        ax.set_xlabel("Epoch")
        ax.set_ylabel("Accuracy")
        ax.legend(loc="lower right", fontsize=9)

    # Hide unused panels
    for ax in list(axes.flat)[len(values):]:
        ax.set_visible(False)

    if title:
        fig.suptitle(title, fontsize=14, fontweight="bold")

    plt.tight_layout()
    plt.savefig(save_path, dpi=150, bbox_inches="tight")
    print(f"✓ Study grid saved to {save_path}")
    plt.close()


def plot_metric_comparison(df, param, save_path, metrics=("val_accuracy", "loss")):
    """
    Overlay every hyperparameter value on one axis per metric.

    Args:
        df: Long-format study table
        param: Hyperparameter column name
        save_path: Where to save the plot
        metrics: Metrics to plot, one panel each
    """
    fig, axes = plt.subplots(1, len(metrics), figsize=(7 * len(metrics), 5), squeeze=False)

    data = df.copy()
    data[param] = data[param].map(_format_value)

    for ax, metric in zip(axes[0], metrics):
        sns.lineplot(
            data=data[data["metric"] == metric],
            x="epoch",
            y="value",
            hue=param,
            ax=ax,
            linewidth=1.5,
        )
        ax.set_xlabel("Epoch", fontsize=12)
        ax.set_ylabel(metric, fontsize=12)
        ax.set_title(f"{metric} by {param}", fontsize=14, fontweight="bold")
        if metric.endswith("loss"):
            # Diverged runs (very high learning rate) blow up the linear scale
            ax.set_yscale("log")

    plt.tight_layout()
    plt.savefig(save_path, dpi=150, bbox_inches="tight")
    print(f"✓ Metric comparison saved to {save_path}")
    plt.close()


def weight_axis_labels(study_results):
    """
    Axis labels for the two tracked kernel entries, e.g. ("hidden[0, 0]", "hidden[1, 0]").

    Read from the first run's config; runs without one fall back to SHARED_CONFIG's
    defaults (hidden layer, entries (0, 0) and (1, 0)).
    """
    config = next(iter(study_results.values()), {}).get("config", {})
    layer = config.get("tracked_layer", "hidden")
    tracked = config.get("tracked_weights", [(0, 0), (1, 0)])
    return tuple(f"{layer}[{row}, {col}]" for row, col in tracked[:2])


def plot_weight_trajectories(study_results, param, save_path):
    """
    Plot the path of the two tracked weights for every hyperparameter value.

    All runs start from the shared initial weights, marked with a black dot.
    Small learning rates barely move; large ones take big, sometimes
    erratic steps; momentum smooths and extends the path.

    Args:
        study_results: Dict mapping run_id -> results dict
        param: Hyperparameter name, used in the legend
        save_path: Where to save the plot
    """
    fig, ax = plt.subplots(figsize=(8, 7))
    palette = sns.color_palette("viridis", len(study_results))

    start = None
    for color, results in zip(palette, study_results.values()):
        path = weight_trajectory(results["history"])
        if path.ndim != 2 or path.shape[1] < 2:
            continue
        ax.plot(
            path[:, 0],
            path[:, 1],
            color=color,
            linewidth=1.5,
            marker="o",
            markersize=2,
            label=f"{param}={_format_value(results['value'])}",
        )
        ax.plot(path[-1, 0], path[-1, 1], marker="X", color=color, markersize=9)
        start = path[0]

    if start is not None:
        ax.plot(start[0], start[1], "ko", markersize=8, label="initial weights")

    x_label, y_label = weight_axis_labels(study_results)
    ax.set_xlabel(x_label, fontsize=12)
    ax.set_ylabel(y_label, fontsize=12)
    ax.set_title(f"Weight trajectories by {param}", fontsize=14, fontweight="bold")
    ax.legend(loc="best", fontsize=9)

    plt.tight_layout()
    plt.savefig(save_path, dpi=150, bbox_inches="tight")
    print(f"✓ Weight trajectories saved to {save_path}")
    plt.close()


def plot_learning_rate_curves(df, param, save_path):
    """
    Plot the learning rate at the end of each epoch for every value.

    Used for the decay study (smooth decline) and the patience study
    (step drops each time val_loss plateaus).
    """
    data = df[df["metric"] == "learning_rate"].copy()
    data[param] = data[param].map(_format_value)

    fig, ax = plt.subplots(figsize=(9, 5))
    sns.lineplot(data=data, x="epoch", y="value", hue=param, ax=ax, linewidth=2)
    ax.set_yscale("log")
    ax.set_xlabel("Epoch", fontsize=12)
    ax.set_ylabel("Learning rate", fontsize=12)
    ax.set_title(f"Learning rate by {param}", fontsize=14, fontweight="bold")

    plt.tight_layout()
    plt.savefig(save_path, dpi=150, bbox_inches="tight")
    print(f"✓ Learning rate curves saved to {save_path}")
    plt.close()


def plot_decay_schedule(learning_rate, decays, steps, save_path):
    """
    Plot lr_t = lr_0 / (1 + decay * t) for several decay rates.

    Nothing is trained; this shows the schedule on its own so it can be
    compared with what the decay study actually experiences.
    """
    fig, ax = plt.subplots(figsize=(9, 5))
    updates = np.arange(steps)

    for decay in decays:
        ax.plot(
            updates,
            decay_schedule_values(learning_rate, decay, steps),
            linewidth=2,
            label=f"decay={_format_value(decay)}",
        )

    ax.set_xlabel("Update", fontsize=12)
    ax.set_ylabel("Learning rate", fontsize=12)
    ax.set_title(
        f"Inverse time decay (initial lr={_format_value(learning_rate)})",
        fontsize=14,
        fontweight="bold",
    )
    ax.legend(loc="best")

    plt.tight_layout()
    plt.savefig(save_path, dpi=150, bbox_inches="tight")
    print(f"✓ Decay schedule saved to {save_path}")
    plt.close()
