"""Pytest configuration and fixtures for Trickle tests."""

import os

import pytest


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Clear Trickle environment variables and keep .env files out of reach."""
    for key in list(os.environ.keys()):
        if key.startswith("TRICKLE_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
