import logging
from datetime import date, datetime, time

from pymongo import DESCENDING, ReturnDocument

from tasktracker.errors import NotFoundError, ValidationError
from tasktracker.models.task_model import Task
from tasktracker.services.watch import Watch, owner_pipeline
from tasktracker.utils.date_window import date_key, day_bounds
from tasktracker.utils.db import mongo_errors, to_object_id

logger = logging.getLogger(__name__)

TASKS_COLLECTION = "tasks"

DAY_ORDER = [("task_date", DESCENDING), ("created_at", DESCENDING)]


def _as_datetime(value):
    # BSON has no date type; calendar days are stored as midnight datetimes.
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.min)
    return value


def _clean_title(title):
    if title is not None and not isinstance(title, str):
        raise ValidationError("Title must be a string")
    title = (title or "").strip()
    if not title:
        raise ValidationError("Title is required")
    return title


class TaskStore:
    """Tasks of each owner, scoped by the calendar day they belong to."""

    def __init__(self, db):
        self.collection = db[TASKS_COLLECTION]

    def _id_filter(self, task_id, owner_id):
        query = {"_id": to_object_id(task_id)}
        if owner_id is not None:
            query["user_id"] = owner_id
        return query

    def add(self, title, owner_id, task_date, due_date=None):
        """Create a task and return its id."""
        now = datetime.utcnow()
        task = Task(
            title=_clean_title(title),
            task_date=_as_datetime(task_date),
            user_id=owner_id,
            due_date=_as_datetime(due_date),
            created_at=now,
            updated_at=now,
        )
        with mongo_errors("Adding task"):
            res = self.collection.insert_one(task.to_doc())
        logger.debug("Added task %s for %s", res.inserted_id, owner_id)
        return str(res.inserted_id)

    def update(self, task_id, changes, owner_id=None):
        """Patch title, completed and/or due_date; returns the updated Task.

        A ``due_date`` of None clears the reminder. ``updated_at`` is always
        refreshed, even when ``changes`` is empty.
        """
        query = self._id_filter(task_id, owner_id)
        updates = {"$set": {"updated_at": datetime.utcnow()}}
        if "title" in changes:
            updates["$set"]["title"] = _clean_title(changes["title"])
        if "completed" in changes:
            if not isinstance(changes["completed"], bool):
                raise ValidationError("completed must be true or false")
            updates["$set"]["completed"] = changes["completed"]
        if "due_date" in changes:
            if changes["due_date"] is None:
                updates["$unset"] = {"due_date": ""}
            else:
                updates["$set"]["due_date"] = _as_datetime(changes["due_date"])

        with mongo_errors("Updating task"):
            doc = self.collection.find_one_and_update(
                query, updates, return_document=ReturnDocument.AFTER
            )
        if doc is None:
            raise NotFoundError("Task not found")
        return Task.from_doc(doc)

    def delete(self, task_id, owner_id=None):
        """Remove a task; False when nothing matched."""
        with mongo_errors("Deleting task"):
            res = self.collection.delete_one(self._id_filter(task_id, owner_id))
        return res.deleted_count > 0

    def get(self, task_id, owner_id=None):
        with mongo_errors("Loading task"):
            doc = self.collection.find_one(self._id_filter(task_id, owner_id))
        if doc is None:
            raise NotFoundError("Task not found")
        return Task.from_doc(doc)

    def _day_query(self, owner_id, task_date):
        start, end = day_bounds(task_date)
        return {"user_id": owner_id, "task_date": {"$gte": start, "$lte": end}}

    def list_for_date(self, owner_id, task_date):
        with mongo_errors("Listing tasks"):
            cursor = self.collection.find(self._day_query(owner_id, task_date)).sort(DAY_ORDER)
            return [Task.from_doc(doc) for doc in cursor]

    def list_all(self, owner_id):
        with mongo_errors("Listing tasks"):
            cursor = self.collection.find({"user_id": owner_id}).sort("created_at", DESCENDING)
            return [Task.from_doc(doc) for doc in cursor]

    def subscribe_for_date(self, owner_id, task_date, on_change):
        """Deliver the day's task list now and after every change.

        Returns the started :class:`Watch`; call ``cancel()`` on it when done.
        """
        watch = Watch(
            self.collection,
            owner_pipeline(owner_id),
            lambda: self.list_for_date(owner_id, task_date),
            on_change,
            name=f"tasks-watch:{owner_id}:{date_key(task_date)}",
        )
        return watch.start()

    def dates_with_tasks(self, owner_id, range_start, range_end):
        """Distinct date keys of the owner's tasks within [range_start, range_end].

        Both bounds are widened to whole days, so plain dates work too.
        """
        start, _ = day_bounds(range_start)
        _, end = day_bounds(range_end)
        query = {"user_id": owner_id, "task_date": {"$gte": start, "$lte": end}}
        with mongo_errors("Listing task dates"):
            cursor = self.collection.find(query, {"task_date": 1})
            return {date_key(doc["task_date"]) for doc in cursor}
