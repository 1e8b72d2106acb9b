import csv
import json

import pytest

from forest_sim.app.headless import run_headless


def _read_csv(path):
    with path.open(newline="") as handle:
        return list(csv.reader(handle))


def test_headless_basic_log_header(tmp_path):
    log_path = tmp_path / "basic.csv"
    run_headless(steps=2, seed=1, log_path=log_path, deterministic_log=True, log_format="basic")
    rows = _read_csv(log_path)
    assert len(rows) == 3
    assert rows[0] == [
        "tick",
        "population",
        "predators",
        "prey",
        "targets_sensed",
        "outside_safe_zone",
        "avg_speed",
        "max_acceleration",
        "tick_ms",
    ]
    assert rows[1][:4] == ["0", "2", "1", "1"]
    assert float(rows[1][-1]) == 0.0


def test_headless_detailed_log_has_per_agent_columns(tmp_path):
    log_path = tmp_path / "detailed.csv"
    world = run_headless(steps=3, seed=2, log_path=log_path, deterministic_log=True, log_format="detailed")
    rows = _read_csv(log_path)
    assert len(rows) == 4
    header = rows[0]
    for column in ["predator_0_x", "predator_0_y", "predator_0_rotation", "predator_0_speed", "prey_1_x"]:
        assert column in header
    assert all(len(row) == len(header) for row in rows)

    idx = {name: i for i, name in enumerate(header)}
    last = rows[-1]
    predator = world.agents[0]
    assert float(last[idx["predator_0_x"]]) == pytest.approx(predator.position.x, abs=1e-4)
    assert float(last[idx["predator_0_y"]]) == pytest.approx(predator.position.y, abs=1e-4)


def test_deterministic_logs_match_for_same_seed(tmp_path):
    first = tmp_path / "a.csv"
    second = tmp_path / "b.csv"
    run_headless(steps=25, seed=4, log_path=first, deterministic_log=True)
    run_headless(steps=25, seed=4, log_path=second, deterministic_log=True)
    assert first.read_text() == second.read_text()


def test_headless_summary_output(tmp_path):
    summary_path = tmp_path / "summary.json"
    run_headless(
        steps=4,
        seed=3,
        log_path=None,
        deterministic_log=True,
        log_format="basic",
        summary_path=summary_path,
        summary_window=2,
    )
    payload = json.loads(summary_path.read_text())
    assert payload["steps"] == 4
    assert payload["seed"] == 3
    assert payload["log_format"] == "basic"
    assert payload["tick_ms"]["max"] == 0.0
    assert set(payload["avg_speed"]) == {"min", "max", "avg", "p50", "p90", "p95", "p99"}
    assert payload["ticks_with_target"] == 0
    assert payload["tail_window"]["window"] == 2


def test_headless_uses_config_file(tmp_path):
    config_path = tmp_path / "sim.yaml"
    config_path.write_text("seed: 77\npopulation: [prey, prey, predator]\n")
    world = run_headless(steps=1, seed=None, log_path=None, config_path=config_path)
    assert world.config.seed == 77
    assert len(world.agents) == 3


def test_unknown_log_format_rejected(tmp_path):
    with pytest.raises(ValueError, match="Unknown log format"):
        run_headless(steps=1, seed=1, log_path=tmp_path / "x.csv", log_format="verbose")
