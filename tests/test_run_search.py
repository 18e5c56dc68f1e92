import json

import pytest

from run_search import VERSION, build_parser, main, run_benchmark
from search_budget import COST_MODEL_FILENAME, CostModel


@pytest.fixture
def constants_file(tmp_path):
    path = tmp_path / "constants.conf"
    path.write_text("pi\ne\nL = 2 m\n")
    return path


def _run_args(tmp_path, constants_file, *extra):
    return [
        "--digits", "12",
        "--target", "5 m",
        "--max-expr-size", "2",
        "--max-int", "3",
        "--constants", str(constants_file),
        "--save-dir", str(tmp_path / "save"),
        *extra,
    ]


def test_version(capsys) -> None:
    assert main(["--version"]) == 0
    assert capsys.readouterr().out.strip() == f"closed-form search version {VERSION}, 2024"


def test_help_exits(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        build_parser().parse_args(["-h"])
    assert excinfo.value.code == 0
    assert "--max-expr-size" in capsys.readouterr().out


def test_full_run_prints_and_saves_results(tmp_path, constants_file, capsys) -> None:
    assert main(_run_args(tmp_path, constants_file, "--top-k", "5")) == 0

    lines = [l for l in capsys.readouterr().out.splitlines() if " | err: " in l]
    assert len(lines) == 5
    assert lines[0].endswith("| err: 0.0")

    save_dir = tmp_path / "save"
    [results_file] = save_dir.glob("*.json")
    state = json.loads(results_file.read_text())
    assert state["seed"].startswith("max_expr=2,max_int=3;pi,e,%0=2 m")
    assert (save_dir / results_file.stem).read_text().strip() == state["seed"]
    assert len(state["results"]) == 5
    assert list((save_dir / "logs").glob("search_*.log"))


def test_rerun_reports_previous_results(tmp_path, constants_file, capsys) -> None:
    assert main(_run_args(tmp_path, constants_file)) == 0
    capsys.readouterr()

    assert main(_run_args(tmp_path, constants_file)) == 0

    assert "previous results for this run id" in capsys.readouterr().out


def test_validate_flag(tmp_path, constants_file, capsys) -> None:
    assert main(_run_args(tmp_path, constants_file, "--top-k", "3", "--validate")) == 0

    out = capsys.readouterr().out
    assert "=== VALIDATION at 74 digits ===" in out
    assert "3/3 results consistent" in out


def test_missing_parameters_are_prompted(tmp_path, constants_file, monkeypatch, capsys) -> None:
    replies = iter(["10", "6", "2", "3"])
    monkeypatch.setattr("builtins.input", lambda prompt: next(replies))

    args = ["--constants", str(constants_file), "--save-dir", str(tmp_path / "save")]
    assert main(args) == 0
    assert " | err: 0" in capsys.readouterr().out


def test_duplicate_constant_is_fatal(tmp_path, capsys) -> None:
    path = tmp_path / "constants.conf"
    path.write_text("pi\npi = 3.14\n")

    assert main(_run_args(tmp_path, path)) == 2

    err = capsys.readouterr().err
    assert err.startswith("error: ")
    assert "pi" in err
    assert not (tmp_path / "save").exists()


def test_malformed_target_is_fatal(tmp_path, constants_file, capsys) -> None:
    args = _run_args(tmp_path, constants_file)
    args[args.index("5 m")] = "five meters"

    assert main(args) == 2
    assert capsys.readouterr().err.startswith("error: ")


def test_estimate_only(tmp_path, constants_file, capsys) -> None:
    args = ["--estimate", "--constants", str(constants_file), "--max-expr-size", "3", "--max-int", "2"]

    assert main(args) == 0

    out = capsys.readouterr().out
    assert "3 constants, integers up to 2" in out
    assert "total ≤ " in out
    assert not (tmp_path / "save").exists()


def test_benchmark_calibrates_a_model(capsys) -> None:
    model = run_benchmark(max_expr_size=2, max_int=1)

    assert model.k > 0
    assert "=== BENCHMARK ===" in capsys.readouterr().out


def test_benchmark_saves_calibration(tmp_path, capsys) -> None:
    save_dir = tmp_path / "save"

    assert main(["--benchmark", "--save-dir", str(save_dir)]) == 0

    model_file = save_dir / COST_MODEL_FILENAME
    assert model_file.exists()
    assert CostModel.load(model_file).k > 0
    assert f"saved to {model_file}" in capsys.readouterr().out


def test_estimate_uses_saved_calibration(tmp_path, constants_file, capsys) -> None:
    save_dir = tmp_path / "save"
    CostModel(k=1.0, alpha=1.0, beta=0.0).save(save_dir / COST_MODEL_FILENAME)
    args = [
        "--estimate", "--constants", str(constants_file), "--save-dir", str(save_dir),
        "--max-expr-size", "1", "--max-int", "0",
    ]

    assert main(args) == 0

    out = capsys.readouterr().out
    assert "model: k=1.00e+00, alpha=1.00, beta=0.00" in out
    assert "total ≤ 3 candidates, ≈ 3.0s" in out
