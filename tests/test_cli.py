"""
Tests for the replay CLI.
"""

from datetime import datetime, timedelta, timezone

from click.testing import CliRunner

from runtrack.cli import cli


M_PER_DEG = 111194.92664455873


def write_gpx(path, count=12, step_m=110.0, interval_s=10):
    start = datetime(2024, 5, 1, 6, 0, tzinfo=timezone.utc)
    points = []
    for i in range(count):
        time = (start + timedelta(seconds=i * interval_s)).strftime("%Y-%m-%dT%H:%M:%SZ")
        points.append(
            f'<trkpt lat="0.0" lon="{i * step_m / M_PER_DEG:.9f}">'
            f'<ele>{100 + i}</ele><time>{time}</time></trkpt>'
        )
    path.write_text(
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<gpx version="1.1" creator="test" xmlns="http://www.topografix.com/GPX/1/1">'
        f'<trk><trkseg>{"".join(points)}</trkseg></trk></gpx>'
    )
    return path


class TestReplay:

    def test_summary(self, tmp_path):
        gpx_file = write_gpx(tmp_path / "run.gpx")

        result = CliRunner().invoke(cli, ["replay", str(gpx_file)])

        assert result.exit_code == 0, result.output
        assert "Replaying 12 fixes from run.gpx" in result.output
        assert "Distance:   1.21 km" in result.output
        assert "Duration:   1:50" in result.output
        assert "12 accepted" in result.output

    def test_split_printed(self, tmp_path):
        gpx_file = write_gpx(tmp_path / "run.gpx")

        result = CliRunner().invoke(cli, ["replay", str(gpx_file), "--split-km", "0.5"])

        assert result.exit_code == 0, result.output
        assert "km   1" in result.output
        assert "km   2" in result.output

    def test_miles(self, tmp_path):
        gpx_file = write_gpx(tmp_path / "run.gpx", count=20)

        result = CliRunner().invoke(cli, ["replay", str(gpx_file), "--unit", "mi"])

        assert result.exit_code == 0, result.output
        assert "Distance:   1.30 mi" in result.output
        assert "mi   1" in result.output

    def test_invalid_gpx(self, tmp_path):
        bad = tmp_path / "bad.gpx"
        bad.write_text("not a gpx file")

        result = CliRunner().invoke(cli, ["replay", str(bad)])

        assert result.exit_code != 0
        assert "Invalid GPX" in result.output

    def test_invalid_split(self, tmp_path):
        gpx_file = write_gpx(tmp_path / "run.gpx")

        result = CliRunner().invoke(cli, ["replay", str(gpx_file), "--split-km", "-1"])

        assert result.exit_code != 0
