# farmdesk/models/task_models.py

from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

TaskPriority = Literal["low", "medium", "high", "urgent"]
TaskStatus = Literal["pending", "in-progress", "completed", "cancelled"]


class Task(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    title: str = ""
    description: str = ""
    assignedTo: Any = None
    priority: str = "medium"
    category: Optional[str] = None
    status: str = "pending"
    dueDate: Optional[str] = None

    @property
    def assignee_name(self) -> str:
        if isinstance(self.assignedTo, dict):
            return self.assignedTo.get("name") or "Unassigned"
        return self.assignedTo or "Unassigned"


class TaskCreate(BaseModel):
    """Body of POST /tasks."""

    title: str = Field(..., min_length=1)
    description: str = ""
    assignedTo: str = Field(..., min_length=1)
    priority: TaskPriority = "medium"
    category: Optional[str] = None
    status: TaskStatus = "pending"
    dueDate: str = Field(..., min_length=1)
    notes: Optional[str] = None

    @field_validator("title", "assignedTo", "dueDate", mode="before")
    @classmethod
    def _strip(cls, v):
        return (v or "").strip()
