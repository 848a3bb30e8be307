# src/tasklist/tasks/remote_store.py

from __future__ import annotations

"""
Remote task store.

Talks to a PostgREST-style data service:

  GET    /rest/v1/<table>?select=*&order=created_at.desc
  POST   /rest/v1/<table>                (Prefer: return=representation)
  PATCH  /rest/v1/<table>?id=eq.<id>
  DELETE /rest/v1/<table>?id=eq.<id>

Rows use separated-word column names (due_date, created_at); this module is
the only place that knows about them. No retries: any failure surfaces as
StoreError right away.
"""

import logging
from datetime import date
from typing import Any

import httpx

from ..core.errors import StoreError
from .task_models import DEFAULT_CATEGORY, Task, TaskId, parse_due_date, parse_timestamp

logger = logging.getLogger(__name__)

# in-memory field -> row column
_COLUMNS = {
    "text": "text",
    "completed": "completed",
    "category": "category",
    "due_date": "due_date",
}


def _row_to_task(row: Any) -> Task:
    if not isinstance(row, dict):
        raise StoreError(f"malformed row: {row!r}")
    try:
        tid = row["id"]
        text = row["text"]
        created_at = parse_timestamp(row["created_at"])
        due_date = parse_due_date(row.get("due_date"))
    except (KeyError, ValueError) as e:
        raise StoreError(f"malformed row: {row!r}") from e
    if tid is None:
        raise StoreError(f"row without id: {row!r}")
    if not isinstance(text, str) or not text.strip():
        raise StoreError(f"malformed row: {row!r}")
    return Task(
        id=tid,
        text=text,
        completed=bool(row.get("completed", False)),
        category=str(row.get("category") or DEFAULT_CATEGORY),
        due_date=due_date,
        created_at=created_at,
    )


def _fields_to_row(fields: dict[str, Any]) -> dict[str, Any]:
    row: dict[str, Any] = {}
    for name, value in fields.items():
        column = _COLUMNS.get(name)
        if column is None:
            raise StoreError(f"unsupported field: {name}")
        if isinstance(value, date):
            value = value.isoformat()
        row[column] = value
    return row


class RemoteTaskStore:
    """
    Async REST-backed store.

    The service assigns id and created_at and returns rows newest-first,
    so created records go to the front of the in-memory list.
    """

    newest_first = True

    def __init__(
        self,
        base_url: str,
        *,
        table: str = "todos",
        api_key: str | None = None,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url or not base_url.strip():
            raise ValueError("base_url is required for the remote store")

        headers = {"Accept": "application/json"}
        if api_key:
            headers["apikey"] = api_key
            headers["Authorization"] = f"Bearer {api_key}"

        self._table = table
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/rest/v1",
            headers=headers,
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
        )
        logger.info("RemoteTaskStore ready url=%s table=%s", base_url, table)

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        prefer: str | None = None,
    ) -> Any:
        headers = {"Prefer": prefer} if prefer else None
        try:
            resp = await self._client.request(
                method,
                f"/{self._table}",
                params=params,
                json=json,
                headers=headers,
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise StoreError(
                f"{method} {self._table} failed: HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise StoreError(f"{method} {self._table} failed: {e}") from e

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise StoreError(f"{method} {self._table} returned malformed JSON") from e

    async def list(self) -> list[Task]:
        rows = await self._request("GET", params={"select": "*", "order": "created_at.desc"})
        if not isinstance(rows, list):
            raise StoreError(f"expected a list of rows, got {type(rows).__name__}")
        tasks = [_row_to_task(r) for r in rows]
        logger.debug("Fetched %d tasks", len(tasks))
        return tasks

    async def create(
        self,
        *,
        text: str,
        completed: bool,
        category: str,
        due_date: date | None,
    ) -> Task:
        payload = {
            "text": text,
            "completed": completed,
            "category": category,
            "due_date": due_date.isoformat() if due_date else None,
        }
        rows = await self._request("POST", json=[payload], prefer="return=representation")
        if not isinstance(rows, list) or not rows:
            raise StoreError("create returned no row")
        task = _row_to_task(rows[0])
        logger.debug("Task created id=%s", task.id)
        return task

    async def update(self, task_id: TaskId, fields: dict[str, Any]) -> None:
        row = _fields_to_row(fields)
        await self._request("PATCH", params={"id": f"eq.{task_id}"}, json=row)

    async def delete(self, task_id: TaskId) -> None:
        await self._request("DELETE", params={"id": f"eq.{task_id}"})
