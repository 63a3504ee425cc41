"""Tests for the module entry point."""
from __future__ import annotations

import runpy

import uvicorn


def test_running_main_module_starts_uvicorn(monkeypatch):
    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda *args, **kwargs: calls.append((args, kwargs)))

    runpy.run_module("campus_hub.main", run_name="__main__")

    assert calls == [(("campus_hub.main:app",), {"host": "127.0.0.1", "port": 8000})]
