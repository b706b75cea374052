import pytest

from lpsolver.main import main


@pytest.fixture
def model_file(tmp_path):
    path = tmp_path / "model.txt"
    path.write_text("max: 8x1 + 5x2\nx1 + x2 <= 6\n9x1 + 5x2 <= 45\n")
    return path


def test_solves_model(model_file, capsys):
    assert main([str(model_file), "--algorithm", "branch and bound"]) == 0
    out = capsys.readouterr().out
    assert "OPTIMAL INTEGER" in out
    assert "z* = 40" in out


def test_trace_prints_snapshots(model_file, capsys):
    assert main([str(model_file), "--algorithm", "primal simplex", "--trace"]) == 0
    assert "Primal Simplex tableau, iteration 1" in capsys.readouterr().out


def test_missing_file(tmp_path):
    assert main([str(tmp_path / "missing.txt")]) == 1


def test_unknown_algorithm(model_file):
    assert main([str(model_file), "--algorithm", "simulated annealing"]) == 1


def test_method_rejects_model(tmp_path):
    path = tmp_path / "cover.txt"
    path.write_text("min: 2x1 + 3x2\nx1 + x2 >= 10\n")
    assert main([str(path), "--algorithm", "primal simplex"]) == 1
    assert main([str(path), "--algorithm", "dual simplex"]) == 0


def test_check_against_highs(model_file, capsys):
    pytest.importorskip("scipy")
    assert main([str(model_file), "--algorithm", "branch and bound", "--check"]) == 0
    assert "HiGHS agrees" in capsys.readouterr().out
