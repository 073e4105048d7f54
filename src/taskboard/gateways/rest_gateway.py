# src/taskboard/gateways/rest_gateway.py

from __future__ import annotations

"""
PostgREST (Supabase-style) task repository over HTTP.

Requests:
- list:   GET    /rest/v1/<table>?select=*&order=created_at.desc
- create: POST   /rest/v1/<table>
- update: PATCH  /rest/v1/<table>?id=eq.<id>   (Prefer: return=representation)
- delete: DELETE /rest/v1/<table>?id=eq.<id>   (Prefer: return=representation)

PostgREST answers 2xx with an empty list when a filter matched no rows;
that is reported as NOT_FOUND so the board can treat it as stale state.
"""

import logging
from typing import Any

import httpx

from ..core.dates import parse_timestamp, utc_now
from ..core.errors import ErrorKind, Failure, Ok, classify_error, classify_exception
from ..tasks.task_models import Task, TaskPatch, TaskStatus

logger = logging.getLogger(__name__)


def _row_to_task(row: dict[str, Any]) -> Task:
    created_at = parse_timestamp(row.get("created_at")) or utc_now()
    return Task(
        id=str(row["id"]),
        title=str(row.get("title") or ""),
        description=str(row.get("description") or ""),
        status=TaskStatus.from_db(row.get("status")),
        created_at=created_at,
        updated_at=parse_timestamp(row.get("updated_at")) or created_at,
    )


def _failure_from_response(response: httpx.Response) -> Failure:
    code: str | None = None
    message: str | None = None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        raw_code = body.get("code")
        code = str(raw_code) if raw_code is not None else None
        message = body.get("message") or body.get("error") or body.get("msg")
    if not message:
        message = response.reason_phrase or None
    return classify_error(code=code, message=message, http_status=response.status_code)


class RestTaskGateway:
    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        table: str = "tasks",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url or not base_url.strip():
            raise ValueError("REST base URL is not set. Set TASKBOARD_REST_URL in your .env.")
        if not api_key or not api_key.strip():
            raise ValueError("REST API key is not set. Set TASKBOARD_REST_API_KEY in your .env.")

        self._path = f"/rest/v1/{table}"
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
            },
            timeout=httpx.Timeout(timeout_seconds, connect=min(5.0, timeout_seconds)),
            transport=transport,
        )

    async def _send(self, method: str, *, params: dict[str, str] | None = None, json: Any = None,
                    prefer: str | None = None) -> httpx.Response | Failure:
        headers = {"Prefer": prefer} if prefer else None
        try:
            response = await self._client.request(method, self._path, params=params, json=json, headers=headers)
        except httpx.HTTPError as e:
            logger.info("REST %s transport error: %s", method, e.__class__.__name__)
            return classify_exception(e)

        if response.is_success:
            return response

        failure = _failure_from_response(response)
        logger.info(
            "REST %s failed status=%s code=%s kind=%s",
            method,
            response.status_code,
            failure.code,
            failure.kind.value,
        )
        return failure

    @staticmethod
    def _rows(response: httpx.Response) -> list[dict[str, Any]] | Failure:
        try:
            data = response.json()
        except ValueError:
            return Failure.of(ErrorKind.UNKNOWN, message="The server returned an invalid response.")
        if not isinstance(data, list):
            return Failure.of(ErrorKind.UNKNOWN, message="The server returned an invalid response.")
        return [r for r in data if isinstance(r, dict)]

    # ---- TaskGateway ----

    async def list_tasks(self) -> Ok[list[Task]] | Failure:
        response = await self._send("GET", params={"select": "*", "order": "created_at.desc"})
        if isinstance(response, Failure):
            return response
        rows = self._rows(response)
        if isinstance(rows, Failure):
            return rows
        tasks: list[Task] = []
        for row in rows:
            try:
                tasks.append(_row_to_task(row))
            except KeyError:
                logger.warning("REST list: skipping row without id")
        return Ok(tasks)

    async def create_task(
        self,
        *,
        title: str,
        description: str,
        status: TaskStatus = TaskStatus.PENDING,
    ) -> Ok[None] | Failure:
        response = await self._send(
            "POST",
            json=[{"title": title, "description": description, "status": status.value}],
            prefer="return=minimal",
        )
        if isinstance(response, Failure):
            return response
        return Ok()

    async def _mutate_one(self, method: str, task_id: str, body: Any = None) -> Ok[None] | Failure:
        response = await self._send(
            method,
            params={"id": f"eq.{task_id}"},
            json=body,
            prefer="return=representation",
        )
        if isinstance(response, Failure):
            return response
        rows = self._rows(response)
        if isinstance(rows, Failure):
            return rows
        if not rows:
            return Failure.of(ErrorKind.NOT_FOUND, code="PGRST116")
        return Ok()

    async def update_task(self, task_id: str, patch: TaskPatch) -> Ok[None] | Failure:
        if patch.is_empty():
            return Failure.validation("Nothing to update")
        return await self._mutate_one("PATCH", task_id, patch.as_fields())

    async def delete_task(self, task_id: str) -> Ok[None] | Failure:
        return await self._mutate_one("DELETE", task_id)

    async def aclose(self) -> None:
        await self._client.aclose()
