"""
Synthetic data for Lab 4: Learning Rate, Momentum and Optimizers
Generates the multi-class "blobs" problem every experiment trains on

Course: CS 599 Deep Learning
Author: Karl Reger
Date: December 2025
"""

import numpy as np
import tensorflow as tf
from sklearn.datasets import make_blobs


def make_blobs_dataset(
    n_samples=1000,
    centers=3,
    n_features=2,
    cluster_std=2.0,
    train_fraction=0.5,
    seed=None,
):
    """
    Generate and split a Gaussian blobs classification problem.

    The blobs problem is deliberately small: 2 input features, 3 classes and
    enough cluster overlap (cluster_std=2.0) that no model reaches 100%
    accuracy. This keeps each training run to a few seconds, so we can afford
    to train dozens of models while sweeping one hyperparameter at a time.

    The split is contiguous (first rows train, remaining rows test). The
    samples from make_blobs are already shuffled, so no extra shuffle is needed.

    Args:
        n_samples: Total number of points
        centers: Number of classes (one Gaussian cluster per class)
        n_features: Input dimensionality
        cluster_std: Standard deviation of each cluster
        train_fraction: Fraction of points used for training, in (0, 1)
        seed: Random state passed to make_blobs

    Returns:
        Tuple: (x_train, y_train, x_test, y_test)
            x_*: float32 features, shape (n, n_features)
            y_*: one-hot labels, shape (n, centers)
    """
    if not 0 < train_fraction < 1:
        raise ValueError(f"train_fraction must be in (0, 1), got {train_fraction}")

    x, y = make_blobs(
        n_samples=n_samples,
        centers=centers,
        n_features=n_features,
        cluster_std=cluster_std,
        random_state=seed,
    )
    x = x.astype("float32")

    # Integer class ids -> one-hot, to match categorical cross-entropy
    y = tf.keras.utils.to_categorical(y, centers)

    n_train = int(n_samples * train_fraction)
    x_train, x_test = x[:n_train], x[n_train:]
    y_train, y_test = y[:n_train], y[n_train:]

    print("✓ Generated blobs dataset:")
    print(f"  Training set: {x_train.shape} points, {y_train.shape} labels")
    print(f"  Test set: {x_test.shape} points, {y_test.shape} labels")
    balance = ", ".join(f"{share:.2f}" for share in class_balance(y_train))
    print(f"  Training class balance: {balance}")

    return x_train, y_train, x_test, y_test


def class_balance(y):
    """Fraction of samples per class for one-hot labels."""
    counts = np.sum(y, axis=0)
    return counts / counts.sum()
