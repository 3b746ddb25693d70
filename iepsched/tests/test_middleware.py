"""Tests for the HTTP request log middleware."""

import logging

from fastapi import FastAPI
from fastapi.testclient import TestClient

from iepsched.middleware import REQUEST_ID_HEADER, HTTPLogMiddleware


def _app():
    app = FastAPI()
    app.add_middleware(HTTPLogMiddleware, logger_name="test.http")

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    @app.post("/meetings")
    async def create():
        return {"id": "mtg_1"}

    return app


def test_generates_request_id():
    client = TestClient(_app())
    resp = client.get("/ping")
    assert resp.status_code == 200
    assert len(resp.headers[REQUEST_ID_HEADER]) == 16


def test_echoes_caller_request_id():
    client = TestClient(_app())
    resp = client.get("/ping", headers={REQUEST_ID_HEADER: "abc123"})
    assert resp.headers[REQUEST_ID_HEADER] == "abc123"


def test_writes_log_at_info(caplog):
    client = TestClient(_app())
    with caplog.at_level(logging.INFO, logger="test.http"):
        client.get("/ping")
        client.post("/meetings", headers={REQUEST_ID_HEADER: "req-7"})

    messages = [r.getMessage() for r in caplog.records if r.name == "test.http"]
    assert len(messages) == 1
    assert "id=req-7 method=POST path=/meetings status=200" in messages[0]
