import json
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from app.core.security import CurrentUser, get_current_user
from app.db.database import get_supabase
from app.main import app
from app.meal_plans import ai_service
from factories import USER_ID


# ---------- In-memory stand-in for the supabase-py query builder ----------
class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.op = "select"
        self.columns = "*"
        self.count = None
        self.payload: Any = None
        self.filters: List[tuple] = []
        self.orders: List[tuple] = []
        self.bounds: Optional[tuple] = None
        self.max_rows: Optional[int] = None

    def select(self, columns: str = "*", count: Optional[str] = None):
        self.op, self.columns, self.count = "select", columns, count
        return self

    def insert(self, payload):
        self.op, self.payload = "insert", payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column: str, value):
        self.filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False):
        self.orders.append((column, desc))
        return self

    def range(self, start: int, end: int):
        self.bounds = (start, end)
        return self

    def limit(self, n: int):
        self.max_rows = n
        return self

    def _matches(self, row: Dict[str, Any]) -> bool:
        return all(str(row.get(c)) == str(v) for c, v in self.filters)

    def execute(self):
        self.db.check_failure(self.op, self.table_name)
        rows = self.db.tables[self.table_name]
        if self.op == "insert":
            return SimpleNamespace(data=self.db.insert(self.table_name, self.payload), count=None)
        if self.op == "delete":
            gone = [r for r in rows if self._matches(r)]
            self.db.delete(self.table_name, gone)
            return SimpleNamespace(data=gone, count=None)

        found = [r for r in rows if self._matches(r)]
        for column, desc in reversed(self.orders):
            found.sort(key=lambda r: r.get(column), reverse=desc)
        total = len(found)
        if self.bounds:
            found = found[self.bounds[0]:self.bounds[1] + 1]
        if self.max_rows is not None:
            found = found[:self.max_rows]
        if self.columns.strip() != "*":
            keep = [c.strip() for c in self.columns.split(",")]
            found = [{k: r.get(k) for k in keep} for r in found]
        else:
            found = [dict(r) for r in found]
        return SimpleNamespace(data=json.loads(json.dumps(found)), count=total if self.count else None)


class FakeSupabase:
    """Three tables, cascade on plan delete, UNIQUE(shopping_lists.plan_id)."""

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {"meal_plans": [], "meals": [], "shopping_lists": []}
        self.failures: Dict[tuple, APIError] = {}
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def fail_on(self, op: str, table: str, code: str = "XX000", message: str = "boom"):
        self.failures[(op, table)] = APIError({"code": code, "message": message})

    def check_failure(self, op: str, table: str):
        err = self.failures.get((op, table))
        if err:
            raise err

    def insert(self, table: str, payload) -> List[Dict[str, Any]]:
        rows = payload if isinstance(payload, list) else [payload]
        created = []
        for row in rows:
            if table == "shopping_lists" and any(r["plan_id"] == row["plan_id"] for r in self.tables[table]):
                raise APIError({"code": "23505", "message": "duplicate key value violates unique constraint"})
            self._clock += timedelta(seconds=1)
            new = {"id": str(uuid.uuid4()), "created_at": self._clock.isoformat(), **json.loads(json.dumps(row))}
            self.tables[table].append(new)
            created.append(dict(new))
        return created

    def delete(self, table: str, rows: List[Dict[str, Any]]):
        ids = {r["id"] for r in rows}
        self.tables[table] = [r for r in self.tables[table] if r["id"] not in ids]
        if table == "meal_plans":
            for child in ("meals", "shopping_lists"):
                self.tables[child] = [r for r in self.tables[child] if r["plan_id"] not in ids]


# ---------- Scripted AI ----------
class ScriptedAI:
    def __init__(self):
        self.responses: List[Any] = []
        self.calls: List[Dict[str, str]] = []

    def queue(self, *responses):
        self.responses.extend(responses)

    def __call__(self, system_prompt: str, prompt: str) -> str:
        self.calls.append({"system": system_prompt, "prompt": prompt})
        if not self.responses:
            raise AssertionError("unexpected AI call")
        nxt = self.responses.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt if isinstance(nxt, str) else json.dumps(nxt)


@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def ai(monkeypatch):
    scripted = ScriptedAI()
    monkeypatch.setattr(ai_service, "_generate_text", scripted)
    return scripted


@pytest.fixture
def client(fake_db, ai):
    app.dependency_overrides[get_current_user] = lambda: CurrentUser(id=USER_ID, email="ala@example.com")
    app.dependency_overrides[get_supabase] = lambda: fake_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def anon_client(fake_db, ai):
    app.dependency_overrides[get_supabase] = lambda: fake_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
