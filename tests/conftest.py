"""
Shared fixtures: a tiny blobs problem and a small base model.
"""

import sys
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

sys.path.append(str(Path(__file__).parent.parent))

import pytest
import tensorflow as tf

from experiments.config import SHARED_CONFIG
from gdlab.data import make_blobs_dataset
from gdlab.models import create_mlp


@pytest.fixture
def tiny_data():
    return make_blobs_dataset(n_samples=80, centers=3, n_features=2, seed=0)


@pytest.fixture
def base_model(tiny_data):
    tf.random.set_seed(0)
    x_train, y_train = tiny_data[0], tiny_data[1]
    return create_mlp(
        input_dim=x_train.shape[1],
        num_classes=y_train.shape[1],
        hidden_units=8,
        verbose=False,
    )


@pytest.fixture
def quick_config():
    config = dict(SHARED_CONFIG)
    config.update({"epochs": 3, "batch_size": 16})
    return config
