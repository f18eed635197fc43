import json
import logging
import mimetypes
import re
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from daily_planner.config import DEFAULT_TASKS_FILE
from daily_planner.errors import MalformedBodyError, NotFoundError, TaskStoreError
from daily_planner.schema import Task
from daily_planner.service import TaskService
from daily_planner.storage import JsonFileStorage, TaskStorage

logger = logging.getLogger(__name__)

API_PREFIX = "/api/tasks"
TASK_ID_PATTERN = re.compile(r"[\w-]+", re.ASCII)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

mimetypes.add_type("application/json", ".webmanifest")


async def read_json_object(request: Request) -> dict:
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise MalformedBodyError("Invalid JSON") from exc
    if not isinstance(data, dict):
        raise MalformedBodyError("Invalid JSON")
    return data


def checked_task_id(task_id: str) -> str:
    if not TASK_ID_PATTERN.fullmatch(task_id):
        raise NotFoundError("Not found")
    return task_id


def create_app(
    storage: Optional[TaskStorage] = None,
    *,
    static_dir: Optional[Path] = None,
) -> FastAPI:
    """Build the planner API; non-API paths are served from static_dir when given."""
    service = TaskService(storage if storage is not None else JsonFileStorage(DEFAULT_TASKS_FILE))

    # FastAPI App initialization
    app = FastAPI(title="Daily Planner", redirect_slashes=False)
    app.state.service = service

    @app.middleware("http")
    async def cross_origin(request: Request, call_next):
        if request.method == "OPTIONS":
            response = Response(status_code=204)
        else:
            try:
                response = await call_next(request)
            except Exception:
                logger.exception("Unhandled error for %s %s", request.method, request.url.path)
                response = JSONResponse({"error": "Internal server error"}, status_code=500)
        response.headers.update(CORS_HEADERS)
        return response

    @app.exception_handler(TaskStoreError)
    async def task_store_error(request: Request, exc: TaskStoreError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if request.url.path.startswith(API_PREFIX):
            if exc.status_code in (404, 405):
                return JSONResponse({"error": "Not found"}, status_code=404)
            return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code)
        if exc.status_code == 404:
            return PlainTextResponse("Not found", status_code=404)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    @app.get(API_PREFIX, response_model=list[Task])
    async def list_tasks():
        return await service.list_tasks()

    @app.post(API_PREFIX, response_model=Task, status_code=201)
    async def create_task(request: Request):
        data = await read_json_object(request)
        return await service.create_task(data)

    @app.put(API_PREFIX + "/{task_id}", response_model=Task)
    async def update_task(task_id: str, request: Request):
        task_id = checked_task_id(task_id)
        data = await read_json_object(request)
        return await service.update_task(task_id, data)

    @app.delete(API_PREFIX + "/{task_id}", response_model=Task)
    async def delete_task(task_id: str):
        return await service.delete_task(checked_task_id(task_id))

    if static_dir is not None:
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")

    return app
