"""Unit tests for the station registry."""
import pytest

from checkpoint.services.dispatcher import ScanMode


@pytest.mark.unit
class TestStationRegistry:

    def test_get_creates_once(self, stations):
        first = stations.get("gate-a")
        again = stations.get("gate-a")

        assert first is again
        assert first.station_id == "gate-a"
        assert len(stations) == 1

    def test_stations_are_independent(self, stations, make_participant):
        make_participant(qr_token="abc123")
        gate = stations.get("gate-a")
        canteen = stations.get("canteen")
        canteen.configure(mode=ScanMode.FOOD, session_key="LUNCH_DAY1")

        gate.process("abc123")

        assert gate.state.value == "settled"
        assert canteen.state.value == "idle"
        assert gate.mode is ScanMode.ATTENDANCE

    def test_statuses_sorted_by_station(self, stations):
        stations.get("gate-b")
        stations.get("canteen")
        stations.get("gate-a")

        ids = [status["station_id"] for status in stations.statuses()]

        assert ids == ["canteen", "gate-a", "gate-b"]

    def test_empty_registry(self, stations):
        assert len(stations) == 0
        assert stations.statuses() == []
