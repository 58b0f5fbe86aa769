"""API routes for the taskboard application."""
import json
import logging
from typing import Optional

from aiohttp import web
from pydantic import ValidationError

from taskboard.models import (
    PrayerCreate,
    PrayerUpdate,
    TaskCreate,
    TaskUpdate,
    options,
    to_json,
    validation_errors,
)
from taskboard.storage import Storage

logger = logging.getLogger(__name__)

storage_key = web.AppKey("storage", Storage)

# SQLite INTEGER range
MAX_ID = 2 ** 63 - 1


def get_storage(request: web.Request) -> Storage:
    return request.config_dict[storage_key]


def parse_id(request: web.Request, name: str) -> Optional[int]:
    """Positive integer id from the path, or None if malformed."""
    raw = request.match_info.get(name, "")
    if not (raw.isascii() and raw.isdigit()):
        return None
    value = int(raw)
    if not 0 < value <= MAX_ID:
        return None
    return value


def message(text: str, status: int) -> web.Response:
    return web.json_response({"message": text}, status=status)


def invalid(text: str, exc: ValidationError) -> web.Response:
    return web.json_response(
        {"message": text, "errors": validation_errors(exc)},
        status=400
    )


async def list_tasks(request: web.Request) -> web.Response:
    """
    List all tasks in insertion order
    """
    logger.info(f"Received list tasks request from {request.remote}")

    tasks = get_storage(request).list_tasks()
    logger.info(f"Returning list of {len(tasks)} tasks")
    return web.json_response([to_json(task) for task in tasks])


async def get_task(request: web.Request) -> web.Response:
    task_id = parse_id(request, "task_id")
    if task_id is None:
        return message("Invalid task ID", 400)

    task = get_storage(request).get_task(task_id)
    if task is None:
        logger.warning(f"Task {task_id} not found")
        return message("Task not found", 404)
    return web.json_response(to_json(task))


async def create_task(request: web.Request) -> web.Response:
    """
    Validate the body and store a new task
    """
    client_ip = request.remote
    logger.info(f"Received task creation request from {client_ip}")

    try:
        data = await request.json()
        task = TaskCreate.model_validate(data)
        created = get_storage(request).create_task(task)
        logger.info(f"Task created successfully with ID: {created.id}")
        return web.json_response(to_json(created))

    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning(
            f"Invalid JSON in task creation request from {client_ip}")
        return message("Invalid JSON", 400)
    except ValidationError as e:
        logger.warning(
            f"Task creation rejected: {e.error_count()} validation error(s)")
        return invalid("Invalid task data", e)
    except Exception as e:
        logger.error(f"Task creation error: {e}", exc_info=True)
        return message("Failed to create task", 500)


async def update_task(request: web.Request) -> web.Response:
    """
    Apply a partial update to an existing task
    """
    client_ip = request.remote
    task_id = parse_id(request, "task_id")
    if task_id is None:
        return message("Invalid task ID", 400)
    logger.info(f"Received update request from {client_ip} for task {task_id}")

    try:
        data = await request.json()
        updates = TaskUpdate.model_validate(data)
        updated = get_storage(request).update_task(task_id, updates)
        if updated is None:
            return message("Task not found", 404)
        return web.json_response(to_json(updated))

    except (json.JSONDecodeError, UnicodeDecodeError):
        return message("Invalid JSON", 400)
    except ValidationError as e:
        logger.warning(f"Task {task_id} update rejected: {e.error_count()} "
                       f"validation error(s)")
        return invalid("Invalid task data", e)
    except Exception as e:
        logger.error(f"Error updating task {task_id}: {e}", exc_info=True)
        return message("Failed to update task", 500)


async def delete_task(request: web.Request) -> web.Response:
    client_ip = request.remote
    task_id = parse_id(request, "task_id")
    if task_id is None:
        return message("Invalid task ID", 400)
    logger.info(f"Received request from {client_ip} to delete task {task_id}")

    if not get_storage(request).delete_task(task_id):
        return message("Task not found", 404)
    return web.json_response({"success": True})


async def list_prayers(request: web.Request) -> web.Response:
    logger.info(f"Received list prayers request from {request.remote}")

    prayers = get_storage(request).list_prayers()
    logger.info(f"Returning list of {len(prayers)} prayer requests")
    return web.json_response([to_json(prayer) for prayer in prayers])


async def get_prayer(request: web.Request) -> web.Response:
    prayer_id = parse_id(request, "prayer_id")
    if prayer_id is None:
        return message("Invalid prayer ID", 400)

    prayer = get_storage(request).get_prayer(prayer_id)
    if prayer is None:
        logger.warning(f"Prayer request {prayer_id} not found")
        return message("Prayer request not found", 404)
    return web.json_response(to_json(prayer))


async def create_prayer(request: web.Request) -> web.Response:
    """
    Validate the body, including the prayer type rule, and store it
    """
    client_ip = request.remote
    logger.info(f"Received prayer creation request from {client_ip}")

    try:
        data = await request.json()
        prayer = PrayerCreate.model_validate(data)
        created = get_storage(request).create_prayer(prayer)
        logger.info(f"Prayer request created with ID: {created.id}")
        return web.json_response(to_json(created))

    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning(
            f"Invalid JSON in prayer creation request from {client_ip}")
        return message("Invalid JSON", 400)
    except ValidationError as e:
        logger.warning(
            f"Prayer creation rejected: {e.error_count()} validation error(s)")
        return invalid("Invalid prayer data", e)
    except Exception as e:
        logger.error(f"Prayer creation error: {e}", exc_info=True)
        return message("Failed to create prayer request", 500)


async def update_prayer(request: web.Request) -> web.Response:
    """
    Apply a partial update; the merged record must still satisfy the
    prayer type rule
    """
    prayer_id = parse_id(request, "prayer_id")
    if prayer_id is None:
        return message("Invalid prayer ID", 400)
    logger.info(f"Received update request from {request.remote} "
                f"for prayer request {prayer_id}")

    try:
        data = await request.json()
        updates = PrayerUpdate.model_validate(data)
        updated = get_storage(request).update_prayer(prayer_id, updates)
        if updated is None:
            return message("Prayer request not found", 404)
        return web.json_response(to_json(updated))

    except (json.JSONDecodeError, UnicodeDecodeError):
        return message("Invalid JSON", 400)
    except ValidationError as e:
        logger.warning(f"Prayer request {prayer_id} update rejected: "
                       f"{e.error_count()} validation error(s)")
        return invalid("Invalid prayer data", e)
    except Exception as e:
        logger.error(f"Error updating prayer request {prayer_id}: {e}",
                     exc_info=True)
        return message("Failed to update prayer request", 500)


async def delete_prayer(request: web.Request) -> web.Response:
    prayer_id = parse_id(request, "prayer_id")
    if prayer_id is None:
        return message("Invalid prayer ID", 400)
    logger.info(f"Received request from {request.remote} "
                f"to delete prayer request {prayer_id}")

    if not get_storage(request).delete_prayer(prayer_id):
        return message("Prayer request not found", 404)
    return web.json_response({"success": True})


async def get_options(request: web.Request) -> web.Response:
    return web.json_response(options())


async def health(request: web.Request) -> web.Response:
    return web.json_response(
        {"status": "ok", **get_storage(request).counts()})


def setup_routes(app: web.Application):
    """Register the API routes on ``app``"""
    app.router.add_get('/tasks', list_tasks)
    app.router.add_post('/tasks', create_task)
    app.router.add_get('/tasks/{task_id}', get_task)
    app.router.add_patch('/tasks/{task_id}', update_task)
    app.router.add_delete('/tasks/{task_id}', delete_task)

    app.router.add_get('/prayers', list_prayers)
    app.router.add_post('/prayers', create_prayer)
    app.router.add_get('/prayers/{prayer_id}', get_prayer)
    app.router.add_patch('/prayers/{prayer_id}', update_prayer)
    app.router.add_delete('/prayers/{prayer_id}', delete_prayer)

    app.router.add_get('/options', get_options)
    app.router.add_get('/health', health)

    logger.info("Routes configured")
    return app
