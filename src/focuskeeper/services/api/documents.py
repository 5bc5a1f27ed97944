"""Document store and task API endpoints."""

from typing import Any

import httpx

from focuskeeper.services.api.client import APIClient


class DocumentsAPI:
    """Documents API client.

    Each document lives at ``/v1/documents/{collection}/{doc_id}`` and is
    replaced wholesale on write.
    """

    def __init__(self, client: APIClient):
        self.client = client

    async def get_document(self, collection: str, doc_id: str) -> dict | None:
        """Fetch one document; None if it does not exist."""
        try:
            response = await self.client.get(f"/v1/documents/{collection}/{doc_id}")
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise
        return response.json()

    async def put_document(
        self, collection: str, doc_id: str, body: dict[str, Any]
    ) -> None:
        """Create or replace a document."""
        await self.client.put(f"/v1/documents/{collection}/{doc_id}", json=body)

    async def query_documents(self, collection: str, **filters: Any) -> list[dict]:
        """List documents in a collection matching equality/range filters."""
        response = await self.client.get(f"/v1/documents/{collection}", params=filters)
        result = response.json()
        return result.get("documents", []) if isinstance(result, dict) else result


class TasksAPI:
    """Tasks API client."""

    def __init__(self, client: APIClient):
        self.client = client

    async def list_tasks(self, user_id: str) -> dict:
        """List tasks owned by a user."""
        response = await self.client.get("/v1/tasks", params={"user_id": user_id})
        return response.json()

    async def get_task(self, task_id: str) -> dict:
        """Get a specific task by ID."""
        response = await self.client.get(f"/v1/tasks/{task_id}")
        return response.json()

    async def create_task(self, text: str, user_id: str) -> dict:
        """Create a new task."""
        response = await self.client.post(
            "/v1/tasks", json={"text": text, "user_id": user_id}
        )
        return response.json()

    async def delete_task(self, task_id: str) -> None:
        """Delete a task."""
        await self.client.delete(f"/v1/tasks/{task_id}")

    async def increment_pomodoros(self, task_id: str, credit_serial: int | None = None) -> dict:
        """Atomically add one completed pomodoro to a task.

        The server ignores a *credit_serial* at or below the one it stored for
        the task and answers with ``"credited": false``.
        """
        if credit_serial is None:
            response = await self.client.post(f"/v1/tasks/{task_id}/pomodoros")
        else:
            response = await self.client.post(
                f"/v1/tasks/{task_id}/pomodoros", json={"credit_serial": credit_serial}
            )
        return response.json()
