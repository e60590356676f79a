"""
Tests for the ga-engine command line.
"""
import json

from ga_engine.cli import main


def last_json_line(out):
    return json.loads(out.strip().splitlines()[-1])


def test_real_run(capsys):
    code = main(["real", "--dimension", "5", "--population", "6", "--generations", "3", "--seed", "1"])
    assert code == 0
    result = last_json_line(capsys.readouterr().out)
    assert len(result["candidate"]) == 5
    assert result["fitness"] >= 0.0


def test_route_run_with_random_cities(capsys):
    code = main(
        ["route", "--random-cities", "6", "--population", "8", "--generations", "5", "--seed", "2", "--tournament", "2"]
    )
    assert code == 0
    result = last_json_line(capsys.readouterr().out)
    assert sorted(result["route"]) == list(range(6))
    assert result["length"] > 0


def test_route_from_coordinates_file(tmp_path, capsys):
    path = tmp_path / "cities.txt"
    path.write_text("0 0\n0 1\n1 1\n1 0\n")
    code = main(["route", "--coordinates", str(path), "--population", "10", "--generations", "15", "--seed", "4"])
    assert code == 0
    assert last_json_line(capsys.readouterr().out)["length"] >= 4.0 - 1e-9


def test_checkpoint_and_resume(tmp_path, capsys):
    checkpoint = tmp_path / "state.json"
    args = ["real", "--dimension", "3", "--population", "4", "--seed", "5", "--checkpoint", str(checkpoint)]
    assert main(args + ["--generations", "2"]) == 0
    state = json.loads(checkpoint.read_text())
    assert state["generation"] == 2
    assert len(state["population"]) == 4

    assert main(args + ["--generations", "4", "--resume"]) == 0
    assert json.loads(checkpoint.read_text())["generation"] == 4


def test_configuration_error_exit_code(capsys):
    code = main(["real", "--dimension", "3", "--population", "2", "--elites", "3", "--generations", "1"])
    assert code == 2
