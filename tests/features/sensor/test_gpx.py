"""
Tests for GPX -> Fix loading.
"""

from datetime import datetime, timezone

import pytest

from runtrack.features.sensor import load_fixes_from_gpx


TRACK_GPX = b"""<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="test" xmlns="http://www.topografix.com/GPX/1/1">
  <trk>
    <name>Morning run</name>
    <trkseg>
      <trkpt lat="43.2000" lon="76.9000"><ele>800.0</ele><time>2024-05-01T06:00:00Z</time></trkpt>
      <trkpt lat="43.2005" lon="76.9000"><ele>802.5</ele><time>2024-05-01T06:00:20Z</time></trkpt>
      <trkpt lat="43.2010" lon="76.9000"><ele>805.0</ele></trkpt>
    </trkseg>
  </trk>
</gpx>
"""

ROUTE_GPX = b"""<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="test" xmlns="http://www.topografix.com/GPX/1/1">
  <rte>
    <rtept lat="43.2000" lon="76.9000"></rtept>
    <rtept lat="43.2010" lon="76.9000"></rtept>
  </rte>
</gpx>
"""

EMPTY_GPX = b"""<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="test" xmlns="http://www.topografix.com/GPX/1/1">
</gpx>
"""


class TestLoadFixesFromGpx:

    def test_track_points(self):
        fixes = load_fixes_from_gpx(TRACK_GPX, default_interval_s=5.0)
        start_ms = int(datetime(2024, 5, 1, 6, 0, tzinfo=timezone.utc).timestamp() * 1000)

        assert len(fixes) == 3
        assert fixes[0].lat == pytest.approx(43.2)
        assert fixes[0].timestamp_ms == start_ms
        assert fixes[1].timestamp_ms == start_ms + 20_000
        assert fixes[1].altitude_m == pytest.approx(802.5)
        assert fixes[0].accuracy_m == 5.0

    def test_missing_time_synthesized(self):
        """A point without a time follows the previous one by the default interval."""
        fixes = load_fixes_from_gpx(TRACK_GPX, default_interval_s=5.0)
        assert fixes[2].timestamp_ms == fixes[1].timestamp_ms + 5_000

    def test_route_fallback(self):
        fixes = load_fixes_from_gpx(ROUTE_GPX, start_ms=1000)

        assert len(fixes) == 2
        assert fixes[0].timestamp_ms == 1000
        assert fixes[1].timestamp_ms == 2000
        assert fixes[0].altitude_m is None

    def test_no_points(self):
        with pytest.raises(ValueError, match="no track or route points"):
            load_fixes_from_gpx(EMPTY_GPX)

    def test_invalid_xml(self):
        with pytest.raises(ValueError, match="Invalid GPX"):
            load_fixes_from_gpx(b"not a gpx file")
