"""
Shared pytest fixtures.
"""

from __future__ import annotations

from itertools import count
from typing import Any

import pytest


class FakeSession:
    """
    Minimal stand-in for a SQLAlchemy Session keyed by (model, id).

    Supports the get/add/flush/delete/commit/rollback calls made by the
    plain repositories; query-building calls are not supported.
    """

    def __init__(self) -> None:
        self.objects: dict[tuple[type, int], Any] = {}
        self.commits = 0
        self.rollbacks = 0
        self._ids = count(1)

    def get(self, model: type, pk: int) -> Any:
        return self.objects.get((model, pk))

    def add(self, obj: Any) -> None:
        if getattr(obj, "id", None) is None:
            obj.id = next(self._ids)
        self.objects[(type(obj), obj.id)] = obj

    def flush(self) -> None:
        return None

    def delete(self, obj: Any) -> None:
        self.objects.pop((type(obj), obj.id), None)

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1

    def close(self) -> None:
        return None


@pytest.fixture()
def fake_session() -> FakeSession:
    return FakeSession()
