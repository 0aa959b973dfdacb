import os

import pytest

import experiments.run as run
from experiments.config import STUDIES, get_study, run_config
from main import build_parser, main


@pytest.fixture
def tiny_study():
    return {
        "name": "momentum",
        "param": "momentum",
        "values": [0.0, 0.9],
        "fixed": {"optimizer": "sgd", "learning_rate": 0.01},
        "description": "tiny momentum study",
    }


def test_every_study_has_a_grid():
    names = [study["name"] for study in STUDIES]
    assert names == ["learning_rate", "momentum", "decay", "patience", "optimizer"]
    for study in STUDIES:
        assert study["values"]


def test_get_study_unknown():
    with pytest.raises(ValueError, match="Unknown study"):
        get_study("dropout")


def test_run_config_layers_overrides():
    config = run_config(get_study("optimizer"), "adam", epochs=7)
    assert config["optimizer"] == "adam"
    assert config["learning_rate"] is None
    assert config["epochs"] == 7
    assert config["momentum"] == 0.0


def test_run_id_for():
    assert run.run_id_for(get_study("momentum"), 0.9) == "momentum_momentum0.9"
    assert run.run_id_for(get_study("learning_rate"), 1e-5) == (
        "learning_rate_learning_rate1e-05"
    )
    assert run.run_id_for(get_study("optimizer"), "adam") == "optimizer_optimizeradam"


def test_run_study_writes_results_and_plots(
    tmp_path, tiny_study, tiny_data, base_model
):
    results_dir, plots_dir = tmp_path / "metrics", tmp_path / "plots"
    results = run.run_study(
        tiny_study,
        tiny_data,
        base_model,
        results_dir=str(results_dir),
        plots_dir=str(plots_dir),
        epochs=2,
    )

    assert set(results) == {"momentum_momentum0", "momentum_momentum0.9"}
    for run_id, result in results.items():
        assert (results_dir / f"{run_id}.json").exists()
        assert len(result["history"]["loss"]) == 2
        assert result["value"] in tiny_study["values"]
    for plot in ("momentum_grid", "momentum_comparison", "momentum_weights"):
        assert (plots_dir / f"{plot}.png").exists()


def test_run_study_uses_cache(
    tmp_path, tiny_study, tiny_data, base_model, monkeypatch
):
    kwargs = dict(results_dir=str(tmp_path / "m"), plots_dir=str(tmp_path / "p"), epochs=2)
    first = run.run_study(tiny_study, tiny_data, base_model, **kwargs)

    def fail(*args, **kwargs):
        raise AssertionError("cached run was retrained")

    monkeypatch.setattr(run, "train_model", fail)
    second = run.run_study(tiny_study, tiny_data, base_model, **kwargs)

    assert set(second) == set(first)
    for run_id in first:
        assert second[run_id]["history"]["loss"] == pytest.approx(
            first[run_id]["history"]["loss"]
        )


def test_cache_ignored_when_epochs_differ(
    tmp_path, tiny_study, tiny_data, base_model
):
    kwargs = dict(results_dir=str(tmp_path / "m"), plots_dir=str(tmp_path / "p"))
    run.run_study(tiny_study, tiny_data, base_model, epochs=2, **kwargs)
    results = run.run_study(tiny_study, tiny_data, base_model, epochs=3, **kwargs)
    for result in results.values():
        assert len(result["history"]["loss"]) == 3


def test_lr_curve_plot_for_patience(tmp_path, tiny_data, base_model):
    study = dict(get_study("patience"), values=[1])
    plots_dir = tmp_path / "plots"
    run.run_study(
        study,
        tiny_data,
        base_model,
        results_dir=str(tmp_path / "metrics"),
        plots_dir=str(plots_dir),
        epochs=3,
    )
    assert os.path.exists(plots_dir / "patience_learning_rate.png")


def test_cli_parser():
    args = build_parser().parse_args(
        ["--study", "decay", "--study", "patience", "--epochs", "5", "--force"]
    )
    assert args.study == ["decay", "patience"]
    assert args.epochs == 5
    assert args.force
    assert args.results_dir == "results/metrics"


def test_cli_rejects_unknown_study():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--study", "dropout"])


def test_cli_rejects_non_positive_epochs(monkeypatch):
    def fail(**kwargs):
        raise AssertionError("run_all should not be reached")

    monkeypatch.setattr("main.run_all", fail)
    with pytest.raises(SystemExit) as excinfo:
        main(["--epochs", "0"])
    assert excinfo.value.code == 2


def test_cli_passes_options_to_run_all(monkeypatch, tmp_path):
    calls = []
    monkeypatch.setattr("main.run_all", lambda **kwargs: calls.append(kwargs))
    main(["--study", "momentum", "--epochs", "3", "--plots-dir", str(tmp_path)])
    assert calls == [
        {
            "study_names": ["momentum"],
            "epochs": 3,
            "force": False,
            "results_dir": "results/metrics",
            "plots_dir": str(tmp_path),
        }
    ]


def test_print_summary(capsys):
    results = {
        "momentum_momentum0.9": {
            "history": {"accuracy": [0.5, 0.8125]},
            "test_metrics": {"test_accuracy": 0.75},
            "training_time": 3.5,
        }
    }
    run.print_summary(results)
    out = capsys.readouterr().out
    assert "EXPERIMENT SUMMARY" in out
    line = next(row for row in out.splitlines() if row.startswith("momentum_momentum0.9"))
    assert "0.8125" in line
    assert "0.7500" in line
    assert "3.5s" in line


def test_run_all_single_study(tmp_path, capsys):
    results_dir, plots_dir = tmp_path / "metrics", tmp_path / "plots"
    results = run.run_all(
        study_names=["momentum"],
        epochs=2,
        results_dir=str(results_dir),
        plots_dir=str(plots_dir),
    )

    assert list(results) == [
        "momentum_momentum0",
        "momentum_momentum0.5",
        "momentum_momentum0.9",
        "momentum_momentum0.99",
    ]
    for result in results.values():
        assert len(result["history"]["loss"]) == 2
    assert (plots_dir / "decay_schedule.png").exists()
    assert (plots_dir / "momentum_weights.png").exists()
    # Other studies were not run
    assert not list(results_dir.glob("learning_rate_*.json"))
    assert "ALL EXPERIMENTS COMPLETE!" in capsys.readouterr().out


def test_run_all_rejects_unknown_study(tmp_path):
    with pytest.raises(ValueError, match="Unknown study"):
        run.run_all(study_names=["dropout"], results_dir=str(tmp_path))
