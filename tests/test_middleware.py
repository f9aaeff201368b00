"""Tests for the CORS policy and the middleware composer."""

import pytest
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from app.api.cors import CORSPolicy
from app.api.middleware import GENERIC_ERROR, ApiMiddleware
from app.models.config import CORSSettings
from app.services.rate_limiter import RateLimiter
from conftest import FakeClock, make_request

ALLOWED_METHODS = "GET,POST,PUT,DELETE,OPTIONS"


def build_app(
    handler,
    rate_limiter=None,
    enable_cors=True,
    production=False,
) -> FastAPI:
    """Mount ``handler`` behind the composer at /api/test."""
    policy = CORSPolicy.from_settings(CORSSettings(), production=production)
    api = ApiMiddleware(policy, production=production)
    app = FastAPI()
    app.add_api_route(
        "/api/test",
        api.wrap(handler, rate_limiter=rate_limiter, enable_cors=enable_cors),
        methods=["GET", "OPTIONS"],
    )
    return app


class HandlerSpy:
    """Records invocations and returns a fixed response."""

    def __init__(self, response_factory=None):
        self.calls = 0
        self.response_factory = response_factory or (lambda: JSONResponse({"ok": True}))

    async def __call__(self, request: Request) -> Response:
        self.calls += 1
        return self.response_factory()


async def ok_handler(request: Request) -> Response:
    return JSONResponse({"ok": True}, headers={"X-Handler": "yes"})


async def failing_handler(request: Request) -> Response:
    raise RuntimeError("database exploded")


@pytest.mark.unit
class TestCORSPolicy:
    """Test CORS header stamping."""

    def test_allowed_origin_reflected(self):
        policy = CORSPolicy.from_settings(CORSSettings(), production=False)
        response = policy.apply(make_request(headers={"Origin": "http://localhost:3000"}), Response())
        assert response.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"
        assert "Origin" in response.headers["Vary"]

    def test_disallowed_origin_not_reflected(self):
        policy = CORSPolicy.from_settings(CORSSettings(), production=False)
        response = policy.apply(make_request(headers={"Origin": "https://evil.example"}), Response())
        assert "Access-Control-Allow-Origin" not in response.headers

    def test_fixed_headers_always_set(self):
        policy = CORSPolicy.from_settings(CORSSettings(), production=False)
        response = policy.apply(make_request(headers={"Origin": "https://evil.example"}), Response())
        assert response.headers["Access-Control-Allow-Methods"] == ALLOWED_METHODS
        assert response.headers["Access-Control-Allow-Headers"] == "Content-Type, Authorization"
        assert response.headers["Access-Control-Allow-Credentials"] == "true"
        assert response.headers["Access-Control-Max-Age"] == "86400"

    def test_production_origins(self):
        settings = CORSSettings(production_origins=["https://wellness.example"])
        policy = CORSPolicy.from_settings(settings, production=True)
        assert policy.is_allowed("https://wellness.example")
        assert not policy.is_allowed("http://localhost:3000")

    def test_development_origins(self):
        policy = CORSPolicy.from_settings(CORSSettings(), production=False)
        assert policy.is_allowed("http://localhost:3000")
        assert not policy.is_allowed("https://your-domain.com")


@pytest.mark.unit
class TestApiMiddleware:
    """Test the composed request pipeline."""

    def test_success_carries_cors_headers(self):
        client = TestClient(build_app(ok_handler))
        response = client.get("/api/test", headers={"Origin": "http://localhost:3000"})
        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert response.headers["X-Handler"] == "yes"
        assert response.headers["Access-Control-Allow-Methods"] == ALLOWED_METHODS
        assert response.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"

    def test_handler_status_preserved(self):
        spy = HandlerSpy(lambda: JSONResponse({"error": "User not found"}, status_code=404))
        client = TestClient(build_app(spy))
        response = client.get("/api/test")
        assert response.status_code == 404
        assert response.headers["Access-Control-Allow-Methods"] == ALLOWED_METHODS

    def test_rate_limited_request_skips_handler(self):
        spy = HandlerSpy()
        limiter = RateLimiter(window_seconds=60, max_requests=2, message="Too many", clock=FakeClock())
        client = TestClient(build_app(spy, rate_limiter=limiter))

        assert client.get("/api/test").status_code == 200
        assert client.get("/api/test").status_code == 200
        response = client.get("/api/test")

        assert response.status_code == 429
        assert response.json() == {"error": "Too many"}
        assert response.headers["Retry-After"] == "60"
        assert response.headers["Access-Control-Allow-Methods"] == ALLOWED_METHODS
        assert spy.calls == 2

    def test_exception_becomes_single_500(self):
        client = TestClient(build_app(failing_handler), raise_server_exceptions=True)
        response = client.get("/api/test")
        assert response.status_code == 500
        assert response.json() == {"error": "Error: database exploded"}
        assert response.headers["Access-Control-Allow-Methods"] == ALLOWED_METHODS

    def test_exception_details_hidden_in_production(self):
        client = TestClient(build_app(failing_handler, production=True))
        response = client.get("/api/test")
        assert response.status_code == 500
        assert response.json() == {"error": GENERIC_ERROR}

    def test_sync_exception_in_limiter_is_caught(self):
        class BrokenLimiter:
            def check(self, request):
                raise KeyError("store")

        spy = HandlerSpy()
        client = TestClient(build_app(spy, rate_limiter=BrokenLimiter()))
        response = client.get("/api/test")
        assert response.status_code == 500
        assert spy.calls == 0

    def test_cors_disabled(self):
        client = TestClient(build_app(ok_handler, enable_cors=False))
        response = client.get("/api/test", headers={"Origin": "http://localhost:3000"})
        assert response.status_code == 200
        assert "Access-Control-Allow-Methods" not in response.headers
        assert "Access-Control-Allow-Origin" not in response.headers

    def test_preflight(self):
        spy = HandlerSpy()
        limiter = RateLimiter(window_seconds=60, max_requests=1, clock=FakeClock())
        client = TestClient(build_app(spy, rate_limiter=limiter))

        for _ in range(3):
            response = client.options(
                "/api/test",
                headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "GET"},
            )
            assert response.status_code == 204
            assert response.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"
            assert response.headers["Access-Control-Allow-Credentials"] == "true"
            assert response.headers["Access-Control-Max-Age"] == "86400"
        assert spy.calls == 0
