"""
Small MLP architecture shared by every learning-rate experiment.

Every run in a study starts from *the same* initial weights, so differences
between curves come from the hyperparameter alone and not from a lucky or
unlucky initialization. The base model is built once; each run gets a clone
reset to the base weights.

Course: CS 599 Deep Learning
Author: Karl Reger
Date: December 2025
"""

import tensorflow as tf


def create_mlp(input_dim=2, num_classes=3, hidden_units=50, name="mlp", verbose=True):
    """
    Create the two-layer dense classifier.

    ARCHITECTURE:
        Input(input_dim) -> Dense(hidden_units, relu) -> Dense(num_classes, softmax)

    He-uniform initialization suits the ReLU hidden layer. The output is a
    softmax so the model can be compiled with plain categorical cross-entropy.

    Args:
        input_dim: Number of input features
        num_classes: Number of output classes
        hidden_units: Width of the hidden layer
        name: Model name
        verbose: Print the model summary

    Returns:
        model: Keras Sequential model (not compiled)
    """
    model = tf.keras.Sequential(
        [
            tf.keras.Input(shape=(input_dim,), name="input"),
            tf.keras.layers.Dense(
                hidden_units,
                activation="relu",
                kernel_initializer="he_uniform",
                name="hidden",
            ),
            tf.keras.layers.Dense(num_classes, activation="softmax", name="output"),
        ],
        name=name,
    )

    if verbose:
        print(f"\n{'=' * 60}")
        print(f"Created model: {name} ({hidden_units} hidden units)")
        print(f"{'=' * 60}")
        model.summary()

    return model


def clone_with_weights(model):
    """
    Clone a model's architecture and reset the clone to the model's weights.

    clone_model creates fresh variables with new random initial values, so the
    weights must be copied over explicitly. Training the clone leaves the source
    model untouched.

    Args:
        model: Built Keras model to copy

    Returns:
        A new, uncompiled Keras model with identical weight values
    """
    clone = tf.keras.models.clone_model(model)
    clone.set_weights(model.get_weights())
    return clone
