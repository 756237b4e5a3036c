"""
Tests for the rate governor.

Validates:
1. Sliding-window accounting with an injectable clock
2. The AI budget rejects the 11th call within a minute without side effects
3. Budgets are tracked per client address
4. The general budget covers every API route; health checks are exempt
"""

from fastapi.testclient import TestClient

from backend.middleware.rate_limit import RateLimitMiddleware, SlidingWindowLimiter, hit_all
from backend.models_db import Idea
from conftest import auth_headers, register


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class TestSlidingWindowLimiter:
    """Test the limiter in isolation."""

    def test_admits_up_to_limit(self):
        limiter = SlidingWindowLimiter(3, 60, clock=FakeClock())
        assert [limiter.hit("a") for _ in range(4)] == [True, True, True, False]

    def test_rejected_hits_are_not_recorded(self):
        clock = FakeClock()
        limiter = SlidingWindowLimiter(2, 60, clock=clock)
        limiter.hit("a")
        limiter.hit("a")
        for _ in range(5):
            assert not limiter.hit("a")
        clock.advance(61)
        assert limiter.remaining("a") == 2

    def test_window_slides(self):
        clock = FakeClock()
        limiter = SlidingWindowLimiter(2, 60, clock=clock)
        limiter.hit("a")
        clock.advance(30)
        limiter.hit("a")
        assert not limiter.hit("a")
        clock.advance(31)
        # The first hit has left the window, the second has not
        assert limiter.hit("a")
        assert not limiter.hit("a")

    def test_keys_are_independent(self):
        limiter = SlidingWindowLimiter(1, 60, clock=FakeClock())
        assert limiter.hit("a")
        assert not limiter.hit("a")
        assert limiter.hit("b")

    def test_prune_drops_idle_keys(self):
        clock = FakeClock()
        limiter = SlidingWindowLimiter(5, 60, clock=clock)
        limiter.hit("a")
        clock.advance(45)
        limiter.hit("b")
        clock.advance(30)
        assert limiter.prune() == 1
        assert limiter.remaining("b") == 4


class TestHitAll:
    """Test recording against several budgets at once."""

    def test_records_on_every_limiter(self):
        clock = FakeClock()
        general = SlidingWindowLimiter(5, 900, clock=clock)
        ai = SlidingWindowLimiter(2, 60, clock=clock)
        assert hit_all("a", general, ai) is None
        assert general.remaining("a") == 4
        assert ai.remaining("a") == 1

    def test_general_rejection_leaves_ai_budget_untouched(self):
        clock = FakeClock()
        general = SlidingWindowLimiter(1, 900, clock=clock)
        ai = SlidingWindowLimiter(2, 60, clock=clock)
        general.hit("a")
        assert hit_all("a", general, ai) is general
        assert hit_all("a", general, ai) is general
        assert ai.remaining("a") == 2

    def test_ai_rejection_leaves_general_budget_untouched(self):
        clock = FakeClock()
        general = SlidingWindowLimiter(5, 900, clock=clock)
        ai = SlidingWindowLimiter(1, 60, clock=clock)
        ai.hit("a")
        assert hit_all("a", general, ai) is ai
        assert general.remaining("a") == 5


def _rate_limiter(app):
    """The RateLimitMiddleware instance inside a built middleware stack."""
    layer = app.middleware_stack
    while layer is not None and not isinstance(layer, RateLimitMiddleware):
        layer = getattr(layer, "app", None)
    return layer


class TestRateLimitMiddleware:
    """Test the budgets applied to API requests."""

    def test_eleventh_ai_call_rejected(self, client, db, analyst):
        token, _ = register(client)
        for n in range(10):
            response = client.post(
                "/api/ideas", json={"title": f"Idea {n}", "description": "Y"}, headers=auth_headers(token)
            )
            assert response.status_code == 201

        response = client.post(
            "/api/ideas", json={"title": "One too many", "description": "Y"}, headers=auth_headers(token)
        )
        assert response.status_code == 429
        assert response.json()["error"] == "RateLimitExceeded"
        assert db.query(Idea).count() == 10
        assert len(analyst.analyze_calls) == 10

    def test_ai_budget_shared_with_assistant(self, client, analyst):
        token, _ = register(client)
        body = {"question": "Q", "ideaContext": {"title": "X", "description": "Y", "phase": "Idea Spark"}}
        for _ in range(10):
            assert client.post("/api/ai/ask", json=body, headers=auth_headers(token)).status_code == 200
        response = client.post(
            "/api/ideas", json={"title": "X", "description": "Y"}, headers=auth_headers(token)
        )
        assert response.status_code == 429
        assert len(analyst.ask_calls) == 10
        assert analyst.analyze_calls == []

    def test_reads_are_not_ai_limited(self, client):
        for _ in range(15):
            assert client.get("/api/ideas").status_code == 200

    def test_clients_tracked_separately(self, client):
        token, _ = register(client)
        headers = auth_headers(token)
        for n in range(10):
            client.post(
                "/api/ideas",
                json={"title": f"Idea {n}", "description": "Y"},
                headers={**headers, "X-Forwarded-For": "10.0.0.1"},
            )
        blocked = client.post(
            "/api/ideas",
            json={"title": "X", "description": "Y"},
            headers={**headers, "X-Forwarded-For": "10.0.0.1"},
        )
        other = client.post(
            "/api/ideas",
            json={"title": "X", "description": "Y"},
            headers={**headers, "X-Forwarded-For": "10.0.0.2, 192.168.1.1"},
        )
        assert blocked.status_code == 429
        assert other.status_code == 201

    def test_general_budget(self, app_factory):
        with TestClient(app_factory(requests_per_window=3)) as client:
            for _ in range(3):
                assert client.get("/api/ideas/public").status_code == 200
            response = client.get("/api/ideas/public")
            assert response.status_code == 429
            assert response.json()["error"] == "RateLimitExceeded"
            # Health checks stay reachable
            assert client.get("/api/health").status_code == 200

    def test_general_rejection_does_not_spend_ai_budget(self, app_factory, analyst):
        app = app_factory(requests_per_window=1, ai_requests_per_window=2)
        with TestClient(app) as client:
            assert client.get("/api/ideas").status_code == 200
            for _ in range(2):
                response = client.post("/api/ideas", json={"title": "X", "description": "Y"})
                assert response.status_code == 429
                assert response.json()["message"].startswith("Too many requests")
            limiter = _rate_limiter(app)
            assert limiter.ai.remaining("testclient") == 2
            assert limiter.general.remaining("testclient") == 0
        assert analyst.analyze_calls == []

    def test_remaining_header(self, app_factory):
        with TestClient(app_factory(requests_per_window=5)) as client:
            assert client.get("/api/ideas/public").headers["X-RateLimit-Remaining"] == "4"
            assert client.get("/api/ideas/public").headers["X-RateLimit-Remaining"] == "3"
            assert "X-RateLimit-Remaining" not in client.get("/api/health").headers
