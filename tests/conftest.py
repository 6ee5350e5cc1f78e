"""Pytest configuration and fixtures."""

import json
import tempfile
from pathlib import Path
from typing import Any, Dict

import pytest


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def write_json(temp_dir):
    """Write a document to ``<temp_dir>/<name>`` and return the path."""
    def _write(data: Any, name: str = "input.json") -> Path:
        path = temp_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def flat_document() -> Dict[str, Any]:
    """Document with only scalar root fields."""
    return {"id": 1, "name": "Matt", "active": True, "score": 9.5, "nickname": None}


@pytest.fixture
def nested_document() -> Dict[str, Any]:
    """Document with a mixed parent object holding a nested object."""
    return {"user": {"id": 1, "addr": {"city": "X"}}}


@pytest.fixture
def mixed_root_document() -> Dict[str, Any]:
    """Document whose root mixes scalar fields with collections."""
    return {
        "title": "Inventory",
        "version": 3,
        "items": [
            {"sku": "A-1", "qty": 4, "price": 2.5},
            {"sku": "B-2", "qty": 1, "price": 10.25},
        ],
        "settings": {"currency": "EUR", "rounding": 2},
    }


@pytest.fixture
def orders_document() -> Dict[str, Any]:
    """Array of objects whose elements carry nested arrays."""
    return {
        "orders": [
            {"id": 10, "customer": "Ann", "lines": [{"sku": "A", "qty": 1}, {"sku": "B", "qty": 2}]},
            {"id": 20, "customer": "Bob", "lines": [{"sku": "C", "qty": 3}, {"sku": "D", "qty": 4}]},
        ]
    }
