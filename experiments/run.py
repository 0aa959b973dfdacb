"""
Experiment orchestrator for Lab 4: Learning Rate, Momentum and Optimizers

This module runs all studies defined in config.py and generates
all required plots and analysis.

Course: CS 599 Deep Learning
Author: Karl Reger
Date: December 2025
"""

import os
import sys
import time
from pathlib import Path

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

from tqdm import tqdm

from experiments.config import (
    DATA_CONFIG,
    LR_CURVE_STUDIES,
    SHARED_CONFIG,
    STUDIES,
    get_study,
    run_config,
)
from gdlab.data import make_blobs_dataset
from gdlab.models import clone_with_weights, create_mlp
from gdlab.train import evaluate_final_test, train_model
from gdlab.utilities import (
    load_results,
    plot_decay_schedule,
    plot_learning_rate_curves,
    plot_metric_comparison,
    plot_study_grid,
    plot_weight_trajectories,
    results_to_frame,
    save_results,
    setup,
)


def run_id_for(study, value):
    """Experiment ID such as 'momentum_momentum0.9' or 'optimizer_optimizeradam'."""
    if isinstance(value, float):
        value = f"{value:g}"
    return f"{study['name']}_{study['param']}{value}"


def run_study(
    study,
    data,
    base_model,
    results_dir="results/metrics",
    plots_dir="plots",
    epochs=None,
    force=False,
):
    """
    Run (or load from cache) every value of one study, then plot it.

    Each run:
        a. Clones the base model and resets it to the shared initial weights
        b. Trains with the study's hyperparameter set to the grid value
        c. Evaluates on the test split
        d. Saves results as JSON

    Args:
        study: Study dict from config.STUDIES
        data: Tuple (x_train, y_train, x_test, y_test)
        base_model: Built model holding the shared initial weights
        results_dir: Directory for cached JSON results
        plots_dir: Directory for plots
        epochs: Override for SHARED_CONFIG["epochs"]
        force: Re-run even if cached results exist

    Returns:
        Dict mapping run_id -> results dict
    """
    x_train, y_train, x_test, y_test = data
    os.makedirs(results_dir, exist_ok=True)
    os.makedirs(plots_dir, exist_ok=True)

    print("\n" + "=" * 70)
    print(f"STUDY: {study['name']}")
    print(f"Description: {study['description']}")
    print("=" * 70)

    study_results = {}
    pbar = tqdm(study["values"], desc=study["name"], leave=False)
    for value in pbar:
        run_id = run_id_for(study, value)
        results_file = os.path.join(results_dir, f"{run_id}.json")
        config = run_config(study, value, epochs=epochs)
        pbar.set_postfix({study["param"]: value})

        if os.path.exists(results_file) and not force:
            cached = load_results(results_file)
            if len(cached["history"]["loss"]) == config["epochs"]:
                print(f"\n✓ Loading cached results from {results_file}")
                study_results[run_id] = cached
                continue
            print(f"\n⚠ Cached {run_id} has a different epoch count, re-running")

        model = clone_with_weights(base_model)

        start_time = time.time()
        history = train_model(model, config, x_train, y_train, x_test, y_test)
        training_time = time.time() - start_time

        test_metrics = evaluate_final_test(model, x_test, y_test)

        results = {
            "study": study["name"],
            "param": study["param"],
            "value": value,
            "config": config,
            "history": history,
            "test_metrics": test_metrics,
            "training_time": training_time,
        }

        save_results(results, results_file)
        study_results[run_id] = results

        print(
            f"  {run_id}: train acc {history['accuracy'][-1]:.4f} | "
            f"test acc {test_metrics['test_accuracy']:.4f} | {training_time:.1f}s"
        )

    # ========== PLOTS ==========
    df = results_to_frame(study_results)
    name, param = study["name"], study["param"]

    plot_study_grid(
        df, param, os.path.join(plots_dir, f"{name}_grid.png"), title=study["description"]
    )
    plot_metric_comparison(df, param, os.path.join(plots_dir, f"{name}_comparison.png"))
    plot_weight_trajectories(
        study_results, param, os.path.join(plots_dir, f"{name}_weights.png")
    )
    if name in LR_CURVE_STUDIES:
        plot_learning_rate_curves(
            df, param, os.path.join(plots_dir, f"{name}_learning_rate.png")
        )

    return study_results


def print_summary(all_results):
    """Print final train/test accuracy and training time for every run."""
    print("\n" + "=" * 70)
    print("EXPERIMENT SUMMARY")
    print("=" * 70)

    print(f"\n{'Experiment':<34} {'Train Acc':<11} {'Test Acc':<11} {'Training Time'}")
    print("-" * 70)

    for run_id, results in all_results.items():
        train_acc = results["history"]["accuracy"][-1]
        test_acc = results["test_metrics"]["test_accuracy"]
        train_time = results["training_time"]
        print(f"{run_id:<34} {train_acc:<11.4f} {test_acc:<11.4f} {train_time:>7.1f}s")


def run_all(
    study_names=None,
    epochs=None,
    force=False,
    results_dir="results/metrics",
    plots_dir="plots",
):
    """
    Main experiment orchestrator.

    WORKFLOW:
        1. Setup environment (seeds, GPU config)
        2. Generate data once
        3. Build the base model once (shared initial weights)
        4. For each selected study: run/load every value, plot
        5. Plot the decay schedule on its own
        6. Print summary

    Args:
        study_names: Names of studies to run (default: all)
        epochs: Override the number of epochs per run
        force: Ignore cached results
        results_dir: Directory for cached JSON results
        plots_dir: Directory for plots

    Returns:
        Dict mapping run_id -> results dict across all studies
    """
    print("\n" + "=" * 70)
    print(" " * 10 + "LAB 4: LEARNING RATE, MOMENTUM AND OPTIMIZERS")
    print(" " * 20 + "Experiment Runner")
    print("=" * 70 + "\n")

    studies = STUDIES if not study_names else [get_study(n) for n in study_names]

    # ========== SETUP ==========
    seed = setup(seed_string="Karl")

    # ========== DATA ==========
    print("\n" + "-" * 70)
    print("GENERATING DATA")
    print("-" * 70)
    data = make_blobs_dataset(seed=seed, **DATA_CONFIG)
    x_train, y_train = data[0], data[1]

    # ========== BASE MODEL ==========
    base_model = create_mlp(
        input_dim=x_train.shape[1],
        num_classes=y_train.shape[1],
        hidden_units=SHARED_CONFIG["hidden_units"],
        name="base_mlp",
    )

    # ========== RUN STUDIES ==========
    all_results = {}
    for i, study in enumerate(studies, start=1):
        print(f"\nStudy {i}/{len(studies)}")
        all_results.update(
            run_study(
                study,
                data,
                base_model,
                results_dir=results_dir,
                plots_dir=plots_dir,
                epochs=epochs,
                force=force,
            )
        )

    # ========== DECAY SCHEDULE ==========
    decay_study = get_study("decay")
    n_epochs = epochs or SHARED_CONFIG["epochs"]
    updates_per_epoch = -(-len(x_train) // SHARED_CONFIG["batch_size"])
    plot_decay_schedule(
        decay_study["fixed"]["learning_rate"],
        decay_study["values"],
        n_epochs * updates_per_epoch,
        os.path.join(plots_dir, "decay_schedule.png"),
    )

    print_summary(all_results)

    print("\n" + "=" * 70)
    print("ALL EXPERIMENTS COMPLETE!")
    print("=" * 70)
    print(f"\n✓ Results saved in: {results_dir}/")
    print(f"✓ Plots saved in: {plots_dir}/\n")

    return all_results


if __name__ == "__main__":
    run_all()
