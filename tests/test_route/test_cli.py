"""
Tests for the route command line interface
"""

import json

import pytest
import requests
from click.testing import CliRunner
from loguru import logger as loguru_logger

from src.cli import cli, configure_logging
from src.route.parser import parse
from tests.fixtures import GPXTestDataFactory


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def _restore_loguru():
    """Drop the click sink the CLI installs so it does not outlive the runner"""
    yield
    loguru_logger.remove()


@pytest.fixture
def gpx_file(temp_dir, sample_gpx_text):
    path = temp_dir / "route.gpx"
    path.write_text(sample_gpx_text, encoding="utf-8")
    return path


@pytest.fixture
def dense_file(temp_dir):
    path = temp_dir / "dense.gpx"
    path.write_text(GPXTestDataFactory.create_dense_gpx_text(), encoding="utf-8")
    return path


class TestStatsCommand:
    """Test `route stats`"""

    def test_text_output(self, runner, gpx_file):
        result = runner.invoke(cli, ["route", "stats", str(gpx_file)])

        assert result.exit_code == 0, result.output
        assert "Points:    3" in result.output
        assert "Gain:      50 m / 164 ft" in result.output
        assert "Loss:      30 m / 98 ft" in result.output
        assert "Lowest:    100 m / 328 ft" in result.output
        assert "Highest:   150 m / 492 ft" in result.output
        assert "Center:    12.61000, 80.20500" in result.output

    def test_json_output(self, runner, gpx_file):
        result = runner.invoke(cli, ["route", "stats", str(gpx_file), "--json"])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["elevationGainM"] == 50
        assert payload["elevationLossM"] == 30
        assert payload["minElevationM"] == 100
        assert payload["maxElevationM"] == 150
        assert payload["distanceKm"] > 0
        assert payload["bounds"] == [[12.6, 80.2], [12.62, 80.21]]
        assert payload["center"] == pytest.approx([12.61, 80.205])

    @pytest.mark.parametrize("mode", ["dom", "regex", "strict", "REGEX"])
    def test_modes(self, runner, gpx_file, mode):
        result = runner.invoke(
            cli, ["route", "stats", str(gpx_file), "--mode", mode, "--json"]
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["elevationGainM"] == 50

    def test_json_omits_missing_elevation(self, runner, temp_dir):
        path = temp_dir / "flat.gpx"
        path.write_text(
            GPXTestDataFactory.build_gpx_text([(1.0, 1.0, None), (1.0, 1.01, None)]),
            encoding="utf-8",
        )

        result = runner.invoke(cli, ["route", "stats", str(path), "--json"])

        payload = json.loads(result.output)
        assert "minElevationM" not in payload
        assert "maxElevationM" not in payload

    def test_strict_mode_reports_parse_error(self, runner, temp_dir):
        path = temp_dir / "broken.gpx"
        path.write_text("<gpx><trk>", encoding="utf-8")

        result = runner.invoke(cli, ["route", "stats", str(path), "--mode", "strict"])

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_missing_file(self, runner, temp_dir):
        result = runner.invoke(cli, ["route", "stats", str(temp_dir / "nope.gpx")])

        assert result.exit_code == 1
        assert "Cannot read" in result.output

    def test_url_source(self, runner, monkeypatch, sample_gpx_text):
        def fake_get(url, timeout=None):
            response = requests.Response()
            response.status_code = 200
            response._content = sample_gpx_text.encode("utf-8")
            response.encoding = "utf-8"
            response.url = url
            return response

        monkeypatch.setattr(requests, "get", fake_get)

        result = runner.invoke(
            cli, ["route", "stats", "https://example.org/route.gpx", "--json"]
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["elevationGainM"] == 50


class TestSimplifyCommand:
    """Test `route simplify`"""

    def test_overwrites_in_place(self, runner, dense_file):
        before = len(parse(dense_file.read_text(encoding="utf-8")))

        result = runner.invoke(cli, ["route", "simplify", str(dense_file)])

        assert result.exit_code == 0, result.output
        after = len(parse(dense_file.read_text(encoding="utf-8")))
        assert after < before

    def test_output_option(self, runner, dense_file, temp_dir):
        original = dense_file.read_text(encoding="utf-8")
        target = temp_dir / "out.gpx"

        result = runner.invoke(
            cli, ["route", "simplify", str(dense_file), "-o", str(target)]
        )

        assert result.exit_code == 0, result.output
        assert dense_file.read_text(encoding="utf-8") == original
        assert target.read_text(encoding="utf-8").startswith("<?xml")

    def test_dry_run(self, runner, dense_file):
        original = dense_file.read_text(encoding="utf-8")

        result = runner.invoke(cli, ["route", "simplify", str(dense_file), "--dry-run"])

        assert result.exit_code == 0, result.output
        assert dense_file.read_text(encoding="utf-8") == original

    def test_precision_options(self, runner, dense_file):
        result = runner.invoke(
            cli,
            [
                "route",
                "simplify",
                str(dense_file),
                "--coord-precision",
                "2",
                "--elevation-precision",
                "0",
            ],
        )

        assert result.exit_code == 0, result.output
        for point in parse(dense_file.read_text(encoding="utf-8")):
            assert point.lat == round(point.lat, 2)
            assert point.elevation == round(point.elevation)

    def test_negative_tolerance_aborts(self, runner, dense_file):
        original = dense_file.read_text(encoding="utf-8")

        result = runner.invoke(
            cli, ["route", "simplify", str(dense_file), "--tolerance", "-1"]
        )

        assert result.exit_code == 1
        assert "Aborted" in result.output
        assert dense_file.read_text(encoding="utf-8") == original

    def test_tolerance_from_environment(self, runner, dense_file, monkeypatch):
        monkeypatch.setenv("TRIPGPX_TOLERANCE_DEG", "1")

        result = runner.invoke(cli, ["route", "simplify", str(dense_file)])

        assert result.exit_code == 0, result.output
        assert len(parse(dense_file.read_text(encoding="utf-8"))) == 2

    def test_option_overrides_environment(self, runner, dense_file, monkeypatch):
        monkeypatch.setenv("TRIPGPX_TOLERANCE_DEG", "1")

        result = runner.invoke(
            cli, ["route", "simplify", str(dense_file), "--tolerance", "0"]
        )

        assert result.exit_code == 0, result.output
        assert len(parse(dense_file.read_text(encoding="utf-8"))) > 2


class TestDayCommands:
    """Test the content tree commands"""

    def test_simplify_days(self, runner, days_dir):
        before = (days_dir / "day-01" / "route.gpx").read_text(encoding="utf-8")

        result = runner.invoke(cli, ["route", "simplify-days", str(days_dir)])

        assert result.exit_code == 0, result.output
        assert (days_dir / "day-01" / "route.gpx").read_text(encoding="utf-8") != before

    def test_simplify_days_reports_failures(self, runner, days_dir):
        (days_dir / "day-02" / "route.gpx").write_bytes(b"\xff\xfe\x00broken")

        result = runner.invoke(cli, ["route", "simplify-days", str(days_dir)])

        assert result.exit_code == 1
        assert "1 route file(s) could not be simplified" in result.output

    def test_day_stats(self, runner, days_dir):
        result = runner.invoke(cli, ["route", "day-stats", str(days_dir)])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert list(payload) == ["day-01", "day-02"]
        assert payload["day-02"]["elevationGainM"] == 50


class TestProfileCommand:
    """Test `route profile`"""

    def test_csv_output(self, runner, gpx_file):
        result = runner.invoke(cli, ["route", "profile", str(gpx_file)])

        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert lines[0] == "distance_km,elevation_m"
        assert lines[1] == "0.000,100"
        assert len(lines) == 4

    def test_no_elevation(self, runner, temp_dir):
        path = temp_dir / "flat.gpx"
        path.write_text(
            GPXTestDataFactory.build_gpx_text([(1.0, 1.0, None)]), encoding="utf-8"
        )

        result = runner.invoke(cli, ["route", "profile", str(path)])

        assert result.exit_code == 0, result.output
        assert "distance_km" not in result.output


class TestLoggingOptions:
    """Test the top-level verbosity flags"""

    @pytest.fixture
    def enabled_logs(self):
        loguru_logger.enable("src")
        yield
        loguru_logger.disable("src")

    def test_reports_reduction_in_logs(self, runner, dense_file, enabled_logs):
        result = runner.invoke(cli, ["route", "simplify", str(dense_file), "--dry-run"])

        assert result.exit_code == 0, result.output
        assert "Size:" in result.output

    def test_quiet_hides_info_logs(self, runner, dense_file, enabled_logs):
        result = runner.invoke(
            cli, ["-q", "route", "simplify", str(dense_file), "--dry-run"]
        )

        assert result.exit_code == 0, result.output
        assert "Size:" not in result.output

    def test_verbose_and_quiet_conflict(self, runner, gpx_file):
        result = runner.invoke(cli, ["-v", "-q", "route", "stats", str(gpx_file)])

        assert result.exit_code == 2
        assert "cannot be used together" in result.output

    @pytest.mark.parametrize(
        "verbose, quiet, level",
        [(False, False, "INFO"), (True, False, "DEBUG"), (False, True, "WARNING")],
    )
    def test_configure_logging_level(self, verbose, quiet, level):
        assert configure_logging(verbose=verbose, quiet=quiet) == level


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "tripgpx, version 0.1.0" in result.output
