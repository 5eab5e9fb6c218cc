import logging
import os
import pytest

from service.exporter.app import main


@pytest.fixture
def clear_env(monkeypatch):
    for k in [
        "TEMPCHART_POSTGRES_URL",
        "TEMPCHART_DB_HOST",
        "TEMPCHART_POSTGRES_ROLE_SECRET",
        "TEMPCHART_BAR_PLACEMENT",
        "TEMPCHART_BASE_DIR",
        "TEMPCHART_OUTPUT_DIR",
    ]:
        monkeypatch.delenv(k, raising=False)


@pytest.fixture
def monthly_csv(tmp_path):
    path = tmp_path / "phoenix_month.csv"
    rows = ["tyear,tmonth,tmax,tmin"] + [
        f"2024,{m},{60 + m},{40 + m}" for m in range(1, 13)
    ]
    path.write_text("\n".join(rows) + "\n")
    return str(path)


def test_import_and_render(clear_env, tmp_path, monthly_csv, capsys):
    rc = main(
        [
            "--city", "Phoenix_AZ",
            "--year", "2024",
            "--granularity", "Month",
            "--base-dir", str(tmp_path),
            "--import-csv", monthly_csv,
            "--set-extremes", "20", "115",
            "--summary",
        ]
    )
    assert rc == 0
    expected = os.path.join(str(tmp_path), "imgs", "Phoenix_AZ_2024_month.png")
    assert capsys.readouterr().out.strip() == expected
    with open(expected, "rb") as f:
        assert f.read(4) == b"\x89PNG"
    assert os.path.exists(tmp_path / "temperatures.sqlite")


def test_recompute_extremes_and_out_dir(clear_env, tmp_path, monthly_csv):
    out_dir = tmp_path / "charts"
    rc = main(
        [
            "--city", "Phoenix_AZ",
            "--year", "2024",
            "--granularity", "month",
            "--base-dir", str(tmp_path),
            "--out-dir", str(out_dir),
            "--bar-placement", "baseline",
            "--import-csv", monthly_csv,
            "--recompute-extremes",
        ]
    )
    assert rc == 0
    assert os.listdir(out_dir) == ["Phoenix_AZ_2024_month.png"]


def test_unknown_city_fails(clear_env, tmp_path):
    rc = main(
        [
            "--city", "Atlantis",
            "--year", "2024",
            "--granularity", "Month",
            "--base-dir", str(tmp_path),
        ]
    )
    assert rc == 1
    assert not os.path.exists(tmp_path / "imgs")


def test_import_of_missing_file_fails(clear_env, tmp_path):
    rc = main(
        [
            "--city", "Phoenix_AZ",
            "--year", "2024",
            "--granularity", "Month",
            "--base-dir", str(tmp_path),
            "--import-csv", str(tmp_path / "nope.csv"),
        ]
    )
    assert rc == 1


def test_conflicting_extremes_flags(clear_env, tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(
            [
                "--city", "Phoenix_AZ",
                "--year", "2024",
                "--granularity", "Month",
                "--base-dir", str(tmp_path),
                "--set-extremes", "20", "115",
                "--recompute-extremes",
            ]
        )
    assert exc.value.code == 2


def test_import_counts_are_logged(clear_env, tmp_path, monthly_csv, caplog):
    caplog.set_level(logging.INFO, logger="exporter")
    rc = main(
        [
            "--city", "Phoenix_AZ",
            "--year", "2024",
            "--granularity", "Month",
            "--base-dir", str(tmp_path),
            "--import-csv", monthly_csv,
            "--set-extremes", "20", "115",
        ]
    )
    assert rc == 0
    assert "Imported 12 rows from 1 files" in caplog.messages
