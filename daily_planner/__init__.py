"""Daily Planner - JSON-file-backed task API."""

from .errors import MalformedBodyError, NotFoundError, StorageError, TaskStoreError, ValidationError
from .main import create_app
from .schema import Task, TaskCreate, TaskUpdate
from .service import TaskService
from .storage import JsonFileStorage, MemoryStorage, TaskStorage

__all__ = [
    "create_app",
    "TaskService",
    "TaskStorage",
    "JsonFileStorage",
    "MemoryStorage",
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "TaskStoreError",
    "ValidationError",
    "MalformedBodyError",
    "NotFoundError",
    "StorageError",
]
