import pytest

from videohub import config
from videohub.ratelimit import RateLimiter, limiter


@pytest.fixture
def tight_limit(monkeypatch):
    monkeypatch.setattr(limiter, "max_requests", 3)
    monkeypatch.setattr(limiter, "window_seconds", 60)


class TestRateLimitMiddleware:
    def test_requests_over_the_limit_get_429(self, client, tight_limit):
        allowed = [client.get("/videos") for _ in range(3)]
        blocked = client.get("/videos")

        assert [response.status_code for response in allowed] == [200, 200, 200]
        assert [response.headers["x-ratelimit-remaining"] for response in allowed] == ["2", "1", "0"]
        assert allowed[0].headers["x-ratelimit-limit"] == "3"

        assert blocked.status_code == 429
        assert blocked.json() == {"success": False, "message": "Too many requests, please try again later"}
        assert blocked.headers["x-ratelimit-remaining"] == "0"
        assert 1 <= int(blocked.headers["retry-after"]) <= 60

    def test_clients_are_counted_separately(self, client, tight_limit):
        for _ in range(3):
            client.get("/videos", headers={"X-Forwarded-For": "10.0.0.1"})

        assert client.get("/videos", headers={"X-Forwarded-For": "10.0.0.1"}).status_code == 429
        assert client.get("/videos", headers={"X-Forwarded-For": "10.0.0.2, 172.16.0.1"}).status_code == 200

    def test_health_check_is_exempt(self, client, tight_limit):
        for _ in range(5):
            response = client.get("/healthz")
            assert response.status_code == 200
            assert "x-ratelimit-limit" not in response.headers

    def test_disabled(self, client, tight_limit, monkeypatch):
        monkeypatch.setattr(config, "RATE_LIMIT_ENABLED", False)
        assert all(client.get("/videos").status_code == 200 for _ in range(5))


class TestRateLimiter:
    def test_window_resets(self):
        window = RateLimiter(max_requests=2, window_seconds=10)

        assert window.hit("a", now=100.0) == (True, 1, 10)
        assert window.hit("a", now=104.0) == (True, 0, 6)
        assert window.hit("a", now=109.5) == (False, 0, 1)
        assert window.hit("a", now=110.0) == (True, 1, 10)

    def test_expired_windows_are_pruned(self):
        window = RateLimiter(max_requests=5, window_seconds=10)
        window.hit("old", now=0.0)
        window.hit("new", now=20.0)
        assert "old" not in window._windows
