# todo_app/services/todo_client.py

import json
from datetime import date
from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from todo_app.models.todos import TodoAPI, TodoCreateAPI, TodoStats, TodoUpdateAPI


class TodoClientError(Exception):
    """Non-success response from the todo API."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class TodoClient:
    """Async client for the todo API.

    Mirrors the operations the browser client consumes. Failures are raised
    as TodoClientError and never retried.
    """

    def __init__(
        self,
        base_url: str,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            transport=transport,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> "TodoClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self):
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        log = logger.bind(client="TodoClient", method=method, url=url)
        log.debug(f"{method} {url}")
        response = await self._client.request(method, url, **kwargs)
        if response.is_success:
            return response.json()

        try:
            message = response.json().get("error") or response.reason_phrase
        except (json.JSONDecodeError, AttributeError):
            message = response.text[:200] or response.reason_phrase
        log.warning(f"API error {response.status_code}: {message}")
        raise TodoClientError(response.status_code, message)

    async def list_todos(
        self,
        *,
        completed: Optional[bool] = None,
        priority: Optional[str] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
        due_date: Optional[date] = None,
    ) -> List[TodoAPI]:
        filters = {
            "completed": completed,
            "priority": priority,
            "category": category,
            "search": search,
            "due_date": due_date,
        }
        params: Dict[str, str] = {}
        for key, value in filters.items():
            if value is None or value == "":
                continue
            if isinstance(value, bool):
                params[key] = "true" if value else "false"
            elif isinstance(value, date):
                params[key] = value.isoformat()
            else:
                params[key] = str(value)
        data = await self._request("GET", "/todos", params=params)
        return [TodoAPI.model_validate(item) for item in data]

    async def get_todo(self, todo_id: str) -> TodoAPI:
        return TodoAPI.model_validate(await self._request("GET", f"/todos/{todo_id}"))

    async def create_todo(self, payload: TodoCreateAPI) -> TodoAPI:
        body = payload.model_dump(mode="json", exclude_unset=True)
        return TodoAPI.model_validate(await self._request("POST", "/todos", json=body))

    async def update_todo(self, todo_id: str, payload: TodoUpdateAPI) -> TodoAPI:
        body = payload.model_dump(mode="json", exclude_unset=True)
        return TodoAPI.model_validate(await self._request("PUT", f"/todos/{todo_id}", json=body))

    async def delete_todo(self, todo_id: str) -> None:
        await self._request("DELETE", f"/todos/{todo_id}")

    async def toggle_todo(self, todo_id: str, completed: bool) -> TodoAPI:
        return await self.update_todo(todo_id, TodoUpdateAPI(completed=completed))

    async def get_stats(self) -> TodoStats:
        return TodoStats.model_validate(await self._request("GET", "/todos/stats/overview"))
