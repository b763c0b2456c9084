from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from tasktracker.utils.date_window import date_key


@dataclass
class Task:
    title: str
    task_date: datetime
    user_id: str
    completed: bool = False
    # Reminder point-in-time, independent of task_date
    due_date: Optional[datetime] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
    id: Optional[str] = None

    @classmethod
    def from_doc(cls, doc):
        return cls(
            id=str(doc["_id"]),
            title=doc["title"],
            task_date=doc["task_date"],
            user_id=doc["user_id"],
            completed=bool(doc.get("completed", False)),
            due_date=doc.get("due_date"),
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    def to_doc(self):
        doc = {
            "title": self.title,
            "task_date": self.task_date,
            "user_id": self.user_id,
            "completed": self.completed,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if self.due_date is not None:
            doc["due_date"] = self.due_date
        return doc

    def to_json(self):
        return {
            "id": self.id,
            "title": self.title,
            "completed": self.completed,
            "task_date": date_key(self.task_date),
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
