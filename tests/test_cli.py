from __future__ import annotations

from pathlib import Path

import pytest

from src.user_cf import cli


@pytest.fixture()
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    (tmp_path / "config.yaml").write_text(
        "dataset:\n  data_file: ratings.csv\nuser_cf:\n  k_neighbors: 3\n  top_n: 5\nlogging:\n  level: WARNING\n"
    )
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_cli_creates_sample_and_recommends(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["--user-id", "U3"]) == 0
    out = capsys.readouterr().out

    assert (workdir / "ratings.csv").exists()
    assert "Created sample dataset" in out
    assert "=== Top Neighbors for U3 ===" in out
    for value in ("0.2300", "0.1850", "0.1043"):
        assert value in out
    assert "=== Top Recommendations for U3 ===" in out
    assert "4.000" in out
    assert "not enough overlap" not in out


def test_cli_reports_fallback(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["--user-id", "U3", "--k", "0"]) == 0
    out = capsys.readouterr().out

    assert "No personalized recommendations found" in out
    assert "(none)" in out
    assert "4.667" in out


def test_cli_unknown_user(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["--user-id", "nobody"]) == 1
    out = capsys.readouterr().out

    assert "Target user 'nobody' not found in dataset" in out
    assert "'U1'" in out


def test_cli_output_is_deterministic(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cli.main(["--user-id", "U1", "--k", "4"])
    capsys.readouterr()

    cli.main(["--user-id", "U1", "--k", "4"])
    first = capsys.readouterr().out
    cli.main(["--user-id", "U1", "--k", "4"])
    second = capsys.readouterr().out

    assert first == second


def test_cli_missing_data_file_without_sample(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["--data-file", "missing.csv", "--no-sample"]) == 1
    assert "Failed to read data file" in capsys.readouterr().err


def test_cli_missing_explicit_config(workdir: Path) -> None:
    with pytest.raises(FileNotFoundError):
        cli.main(["--config", "other.yaml"])


def test_cli_survives_undecodable_bytes(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (workdir / "ratings.csv").write_bytes(b"U1,I1,5\nU1,I\xe92,4\nU2,I1,4\nU2,I3,2\n")

    assert cli.main(["--user-id", "U1", "--show-ratings"]) == 0
    out = capsys.readouterr().out

    assert "Skipped rows: 1" in out
    assert "=== Top Recommendations for U1 ===" in out
    assert "I3" in out


def test_cli_show_ratings_prints_matrix(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["--user-id", "U3", "--show-ratings"]) == 0
    out = capsys.readouterr().out

    assert "Users: 6  Items: 8  Ratings: 24  Skipped rows: 0" in out
    assert "I8" in out.split("=== Top Neighbors")[0]
