"""Test rate limiting functionality."""
import pytest


@pytest.mark.integration
@pytest.mark.rate_limit
class TestRateLimiting:
    """Test per-station rate limiting on station endpoints."""

    def test_station_control_rate_limit(self, client):
        """Reset endpoint allows 120 requests per minute per station."""
        for i in range(120):
            response = client.post("/api/v1/stations/gate-a/reset")
            assert response.status_code == 200, f"Request {i+1} should succeed under 120/min limit"

        response = client.post("/api/v1/stations/gate-a/reset")
        assert response.status_code == 429, "Request 121 should be rate limited with 429 status"

    def test_limit_is_per_station(self, client):
        """Stations behind one address do not share a budget."""
        for _ in range(120):
            client.post("/api/v1/stations/gate-a/reset")

        assert client.post("/api/v1/stations/gate-a/reset").status_code == 429
        assert client.post("/api/v1/stations/gate-b/reset").status_code == 200
