# farmdesk/services/task_service.py
from __future__ import annotations

from typing import Any, Dict, List

from farmdesk.models.task_models import Task, TaskCreate
from farmdesk.services.api_client import ApiClient


class TaskService:
    """Plain CRUD over /tasks."""

    def __init__(self, api: ApiClient):
        self.api = api

    def get_all_tasks(self, **params: Any) -> List[Task]:
        params = {k: v for k, v in params.items() if v not in (None, "")}
        data = self.api.get("/tasks", params=params or None, default_error="Failed to load tasks")
        return [Task.model_validate(t) for t in (data.get("data") or [])]

    def get_task_by_id(self, task_id: str) -> Task:
        data = self.api.get(f"/tasks/{task_id}", default_error="Failed to load task")
        return Task.model_validate(data.get("data") or {})

    def create_task(self, task: TaskCreate) -> Task:
        data = self.api.post("/tasks", json=task.model_dump(exclude_none=True), default_error="Failed to create task")
        return Task.model_validate(data.get("data") or {})

    def update_task(self, task_id: str, changes: Dict[str, Any]) -> Task:
        data = self.api.put(f"/tasks/{task_id}", json=changes, default_error="Failed to update task")
        return Task.model_validate(data.get("data") or {})

    def delete_task(self, task_id: str) -> None:
        self.api.delete(f"/tasks/{task_id}", default_error="Failed to delete task")

    def add_task_note(self, task_id: str, note: str) -> Task:
        data = self.api.post(f"/tasks/{task_id}/notes", json={"note": note}, default_error="Failed to add note")
        return Task.model_validate(data.get("data") or {})

    def get_task_metrics(self) -> Dict[str, Any]:
        data = self.api.get("/tasks/metrics", default_error="Failed to load task metrics")
        return data.get("data") or {}
