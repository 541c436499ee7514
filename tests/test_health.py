"""Tests for the health endpoint."""


class TestHealth:
    def test_health_reports_dependencies(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "service": "tutorhub-service",
            "version": "1.0.0",
            "environment": "test",
            "database": "up",
            "redis": "disabled",
        }

    def test_unknown_route_uses_envelope(self, client):
        response = client.get("/api/nowhere")
        assert response.status_code == 404
        assert response.json()["success"] is False
