# =============================================================================
# tests/fakes.py - In-memory Supabase Stand-in
# =============================================================================
# Implements the subset of the supabase-py query builder the services use
# (select/insert/update/upsert/delete with eq/neq/in_/lt/lte/gt/gte/ilike,
# order, limit, single), the stored procedures from supabase/migrations and
# auth.admin.delete_user.
#
# Rows are stored the way PostgREST returns them: plain dicts with ISO-8601
# timestamp strings. All statements run under one lock, like a single
# Postgres transaction each.
# =============================================================================

import re
import threading
import uuid
from datetime import timedelta
from typing import Any, Callable

from lib.utils import parse_timestamp, to_iso, utc_now


class FakeAPIError(Exception):
    """Mimics postgrest.exceptions.APIError: the message carries the code."""

    def __init__(self, code: str, message: str):
        super().__init__(f"{{'code': '{code}', 'message': '{message}'}}")
        self.code = code


class FakeResponse:
    def __init__(self, data: Any):
        self.data = data


# Columns with a unique constraint, per table
UNIQUE_KEYS: dict[str, list[tuple[str, ...]]] = {
    "user_roles": [("user_id",)],
    "user_credits": [("user_id",)],
    "user_subscriptions": [("user_id",)],
    "user_team_slots": [("user_id", "team_id")],
    "profiles": [("id",)],
}

TIMESTAMP_DEFAULTS: dict[str, tuple[str, ...]] = {
    "user_team_slots": ("created_at", "last_changed_at"),
    "credit_transactions": ("created_at",),
    "user_credits": ("created_at", "last_reset_date"),
    "user_roles": ("created_at",),
}


def _comparable(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return parse_timestamp(value)
        except ValueError:
            return value
    return value


def _like_to_regex(pattern: str) -> re.Pattern:
    parts = [re.escape(part) for part in pattern.split("%")]
    return re.compile("^" + ".*".join(parts) + "$", re.IGNORECASE | re.DOTALL)


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.operation = "select"
        self.columns = "*"
        self.payload: Any = None
        self.on_conflict: str | None = None
        self.ignore_duplicates = False
        self.filters: list[Callable[[dict], bool]] = []
        self.order_by: list[tuple[str, bool]] = []
        self.row_limit: int | None = None
        self.want_single = False

    # -- operations ----------------------------------------------------------

    def select(self, columns: str = "*"):
        self.operation = "select"
        self.columns = columns
        return self

    def insert(self, payload):
        self.operation = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.operation = "update"
        self.payload = payload
        return self

    def upsert(self, payload, on_conflict: str | None = None, ignore_duplicates: bool = False):
        self.operation = "upsert"
        self.payload = payload
        self.on_conflict = on_conflict
        self.ignore_duplicates = ignore_duplicates
        return self

    def delete(self):
        self.operation = "delete"
        return self

    # -- filters -------------------------------------------------------------

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def in_(self, column, values):
        allowed = list(values)
        self.filters.append(lambda row: row.get(column) in allowed)
        return self

    def _compare(self, column, value, op):
        target = _comparable(value)

        def check(row):
            current = row.get(column)
            return current is not None and op(_comparable(current), target)

        self.filters.append(check)
        return self

    def lt(self, column, value):
        return self._compare(column, value, lambda a, b: a < b)

    def lte(self, column, value):
        return self._compare(column, value, lambda a, b: a <= b)

    def gt(self, column, value):
        return self._compare(column, value, lambda a, b: a > b)

    def gte(self, column, value):
        return self._compare(column, value, lambda a, b: a >= b)

    def ilike(self, column, pattern):
        regex = _like_to_regex(pattern)
        self.filters.append(lambda row: bool(regex.match(str(row.get(column) or ""))))
        return self

    def order(self, column, desc: bool = False):
        self.order_by.append((column, desc))
        return self

    def limit(self, count: int):
        self.row_limit = count
        return self

    def single(self):
        self.want_single = True
        return self

    # -- execution -----------------------------------------------------------

    def execute(self) -> FakeResponse:
        with self.db.lock:
            self.db.calls.append((self.table_name, self.operation))
            failure = self.db.failures.get((self.table_name, self.operation))
            if failure is not None:
                raise failure
            return getattr(self, f"_execute_{self.operation}")()

    def _matching(self) -> list[dict]:
        rows = self.db.tables.setdefault(self.table_name, [])
        return [row for row in rows if all(check(row) for check in self.filters)]

    def _execute_select(self) -> FakeResponse:
        rows = self._matching()
        for column, desc in reversed(self.order_by):
            rows = sorted(rows, key=lambda row: _comparable(row.get(column)), reverse=desc)
        if self.row_limit is not None:
            rows = rows[: self.row_limit]

        if self.columns.strip() != "*":
            wanted = [c.strip() for c in self.columns.split(",")]
            rows = [{c: row.get(c) for c in wanted} for row in rows]
        rows = [dict(row) for row in rows]

        if self.want_single:
            if len(rows) != 1:
                raise FakeAPIError("PGRST116", "JSON object requested, multiple (or no) rows returned")
            return FakeResponse(rows[0])
        return FakeResponse(rows)

    def _execute_insert(self) -> FakeResponse:
        payload = self.payload if isinstance(self.payload, list) else [self.payload]
        inserted = [self.db.insert_row(self.table_name, dict(row)) for row in payload]
        return FakeResponse([dict(row) for row in inserted])

    def _execute_update(self) -> FakeResponse:
        updated = []
        for row in self._matching():
            candidate = {**row, **self.payload}
            self.db.check_unique(self.table_name, candidate, ignore=row)
            row.update(self.payload)
            updated.append(dict(row))
        return FakeResponse(updated)

    def _execute_upsert(self) -> FakeResponse:
        payload = self.payload if isinstance(self.payload, list) else [self.payload]
        keys = [k.strip() for k in (self.on_conflict or "id").split(",")]
        result = []
        for new_row in payload:
            existing = next(
                (row for row in self.db.tables.setdefault(self.table_name, [])
                 if all(row.get(k) == new_row.get(k) for k in keys)),
                None,
            )
            if existing is None:
                result.append(dict(self.db.insert_row(self.table_name, dict(new_row))))
            elif not self.ignore_duplicates:
                existing.update(new_row)
                result.append(dict(existing))
        return FakeResponse(result)

    def _execute_delete(self) -> FakeResponse:
        doomed = self._matching()
        rows = self.db.tables.setdefault(self.table_name, [])
        self.db.tables[self.table_name] = [row for row in rows if row not in doomed]
        return FakeResponse([dict(row) for row in doomed])


class FakeRpc:
    def __init__(self, db: "FakeSupabase", name: str, params: dict):
        self.db = db
        self.name = name
        self.params = params

    def execute(self) -> FakeResponse:
        with self.db.lock:
            self.db.calls.append(("rpc", self.name))
            failure = self.db.failures.get(("rpc", self.name))
            if failure is not None:
                raise failure
            handler = getattr(self.db, f"_rpc_{self.name}", None)
            if handler is None:
                raise FakeAPIError("PGRST202", f"Could not find the function public.{self.name}")
            return FakeResponse(handler(**self.params))


class FakeAuthAdmin:
    def __init__(self):
        self.deleted_users: list[str] = []
        self.failure: Exception | None = None

    def delete_user(self, user_id: str):
        if self.failure is not None:
            raise self.failure
        self.deleted_users.append(user_id)


class FakeAuth:
    def __init__(self):
        self.admin = FakeAuthAdmin()


class FakeSupabase:
    """
    Drop-in for supabase.Client in tests.

    Example:
        fake = FakeSupabase()
        fake.seed("user_roles", {"user_id": USER_ID, "role": "paid_user"})
        fake.fail("user_roles", "delete", FakeAPIError("500", "boom"))
    """

    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.lock = threading.RLock()
        self.calls: list[tuple[str, str]] = []
        self.failures: dict[tuple[str, str], Exception] = {}
        self.auth = FakeAuth()
        self._last_timestamp = None

    # -- client API ----------------------------------------------------------

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: dict | None = None) -> FakeRpc:
        return FakeRpc(self, name, params or {})

    # -- test helpers --------------------------------------------------------

    def seed(self, table: str, *rows: dict) -> list[dict]:
        with self.lock:
            return [self.insert_row(table, dict(row)) for row in rows]

    def rows(self, table: str) -> list[dict]:
        return [dict(row) for row in self.tables.get(table, [])]

    def fail(self, table: str, operation: str, error: Exception | None = None):
        self.failures[(table, operation)] = error or FakeAPIError("500", f"{operation} on {table} failed")

    def now_iso(self) -> str:
        """Strictly increasing timestamps so created_at ordering is stable."""
        now = utc_now()
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = now
        return to_iso(now)

    def insert_row(self, table: str, row: dict) -> dict:
        row.setdefault("id", str(uuid.uuid4()))
        for column in TIMESTAMP_DEFAULTS.get(table, ()):
            if row.get(column) is None:
                row[column] = self.now_iso()
        self.check_unique(table, row)
        self.tables.setdefault(table, []).append(row)
        return row

    def check_unique(self, table: str, candidate: dict, ignore: dict | None = None):
        for keys in UNIQUE_KEYS.get(table, []):
            for row in self.tables.get(table, []):
                if row is ignore:
                    continue
                if all(row.get(k) == candidate.get(k) for k in keys):
                    raise FakeAPIError(
                        "23505",
                        f"duplicate key value violates unique constraint on {table}{keys}",
                    )

    # -- stored procedures (mirror supabase/migrations) ----------------------

    def _rpc_consume_credit(self, p_user_id, p_game_url=None, p_template_info=None):
        ledger = next((r for r in self.tables.get("user_credits", []) if r["user_id"] == p_user_id), None)
        if ledger is None or ledger["credits_remaining"] <= 0:
            return False
        ledger["credits_remaining"] -= 1
        self.insert_row("credit_transactions", {
            "user_id": p_user_id,
            "amount": -1,
            "transaction_type": "consumption",
            "description": "Graphic export",
            "game_url": p_game_url,
            "template_info": p_template_info,
        })
        return True

    def _rpc_add_purchased_credits(self, p_user_id, p_amount):
        if p_amount <= 0:
            raise FakeAPIError("P0001", "p_amount must be positive")
        ledger = next((r for r in self.tables.get("user_credits", []) if r["user_id"] == p_user_id), None)
        if ledger is None:
            self.insert_row("user_credits", {
                "user_id": p_user_id,
                "credits_remaining": p_amount,
                "credits_purchased": p_amount,
            })
        else:
            ledger["credits_remaining"] += p_amount
            ledger["credits_purchased"] += p_amount
        self.insert_row("credit_transactions", {
            "user_id": p_user_id,
            "amount": p_amount,
            "transaction_type": "purchase",
            "description": "Purchased credits",
        })
        return None

    def _rpc_reset_monthly_credits(self, p_user_id, p_allowance, p_month_start, p_now=None):
        ledger = next((r for r in self.tables.get("user_credits", []) if r["user_id"] == p_user_id), None)
        if ledger is None or parse_timestamp(ledger["last_reset_date"]) >= parse_timestamp(p_month_start):
            return False
        ledger["credits_remaining"] = p_allowance
        ledger["last_reset_date"] = p_now or self.now_iso()
        self.insert_row("credit_transactions", {
            "user_id": p_user_id,
            "amount": p_allowance,
            "transaction_type": "monthly_reset",
            "description": "Monthly reset",
        })
        return True

    def _rpc_claim_team_slot(self, p_user_id, p_team_id, p_team_name, p_sport, p_club_id, p_max_teams):
        slots = [r for r in self.tables.get("user_team_slots", []) if r["user_id"] == p_user_id]
        existing = next((r for r in slots if r["team_id"] == p_team_id), None)
        if existing is not None:
            existing.update({"team_name": p_team_name, "sport": p_sport, "club_id": p_club_id})
            return {"status": "existing", "slot": dict(existing)}

        if len(slots) >= p_max_teams:
            return {"status": "quota_exceeded", "current": len(slots), "limit": p_max_teams}

        slot = self.insert_row("user_team_slots", {
            "user_id": p_user_id,
            "team_id": p_team_id,
            "team_name": p_team_name,
            "sport": p_sport,
            "club_id": p_club_id,
        })
        return {"status": "created", "slot": dict(slot), "current": len(slots) + 1, "limit": p_max_teams}
