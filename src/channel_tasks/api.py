"""
REST API - task and group endpoints, slash commands and activity hooks
"""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse, Response
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from .commands import execute_command
from .context import PluginContext
from .core.tasks import TaskGroup, TaskItem, parse_timestamp
from .notifier import check_and_send_daily_message, on_message_posted
from .ports.kv_store import StoreError
from .store import NotFoundError, channel_key, private_key

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1")

USER_HEADER = "Mattermost-User-Id"


# --- Pydantic Schemas ---

class TaskPayload(BaseModel):
    id: str = ""
    text: str = ""
    notes: str = ""
    completed: bool = False
    assignee_ids: Optional[List[str]] = None
    group_id: Optional[str] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    deadline: Optional[datetime] = None

    def to_item(self) -> TaskItem:
        return TaskItem(
            id=self.id,
            text=self.text,
            notes=self.notes,
            completed=self.completed,
            assignee_ids=list(self.assignee_ids or []),
            group_id=self.group_id or "",
            created_at=parse_timestamp(self.created_at),
            completed_at=parse_timestamp(self.completed_at),
            deadline=parse_timestamp(self.deadline),
        )


class GroupPayload(BaseModel):
    id: str = ""
    name: str = ""
    order: Optional[str] = None

    def to_group(self) -> TaskGroup:
        return TaskGroup(id=self.id, name=self.name, order=self.order or "")


# --- Dependencies ---

def get_context(request: Request) -> PluginContext:
    return request.app.state.ctx


def require_channel_id(channel_id: str = Query("")) -> str:
    if not channel_id:
        raise HTTPException(status_code=400, detail="channel_id required")
    return channel_id


def require_private_user(
    user_id: str = Query(""),
    header_user_id: str = Header("", alias=USER_HEADER),
) -> str:
    """Private scope owner from ?user_id=, falling back to the caller."""
    owner = user_id or header_user_id
    if not owner:
        raise HTTPException(status_code=400, detail="user_id is required")
    return owner


def require_id(id: str = Query("")) -> str:
    if not id:
        raise HTTPException(status_code=400, detail="id required")
    return id


# --- Channel task endpoints ---

@router.get("/tasks")
def list_tasks(
    channel_id: str = Depends(require_channel_id),
    user_id: str = Header("", alias=USER_HEADER),
    ctx: PluginContext = Depends(get_context),
):
    """Channel task list. Viewing it counts as activity for the daily reminder."""
    if user_id:
        check_and_send_daily_message(ctx, user_id)
    return ctx.tasks.load(channel_key(channel_id)).to_dict()


@router.post("/tasks")
def create_task(
    data: TaskPayload,
    channel_id: str = Depends(require_channel_id),
    ctx: PluginContext = Depends(get_context),
):
    return ctx.tasks.create_item(channel_key(channel_id), data.to_item()).to_dict()


@router.put("/tasks")
def update_task(
    data: TaskPayload,
    channel_id: str = Depends(require_channel_id),
    ctx: PluginContext = Depends(get_context),
):
    return ctx.tasks.update_item(channel_key(channel_id), data.to_item()).to_dict()


@router.delete("/tasks", status_code=204)
def delete_task(
    channel_id: str = Depends(require_channel_id),
    task_id: str = Depends(require_id),
    ctx: PluginContext = Depends(get_context),
):
    ctx.tasks.delete_item(channel_key(channel_id), task_id)
    return Response(status_code=204)


# --- Channel group endpoints ---

@router.post("/groups")
def create_group(
    data: GroupPayload,
    channel_id: str = Depends(require_channel_id),
    ctx: PluginContext = Depends(get_context),
):
    return ctx.tasks.create_group(channel_key(channel_id), data.to_group()).to_dict()


@router.put("/groups")
def update_group(
    data: GroupPayload,
    channel_id: str = Depends(require_channel_id),
    ctx: PluginContext = Depends(get_context),
):
    return ctx.tasks.update_group(channel_key(channel_id), data.to_group()).to_dict()


@router.delete("/groups", status_code=204)
def delete_group(
    channel_id: str = Depends(require_channel_id),
    group_id: str = Depends(require_id),
    ctx: PluginContext = Depends(get_context),
):
    """Delete a group; its tasks become ungrouped."""
    ctx.tasks.delete_group(channel_key(channel_id), group_id)
    return Response(status_code=204)


# --- Private task endpoints ---

@router.get("/private/tasks")
def list_private_tasks(
    user_id: str = Depends(require_private_user),
    ctx: PluginContext = Depends(get_context),
):
    return ctx.tasks.load(private_key(user_id)).to_dict()


@router.post("/private/tasks")
def create_private_task(
    data: TaskPayload,
    user_id: str = Depends(require_private_user),
    ctx: PluginContext = Depends(get_context),
):
    return ctx.tasks.create_item(private_key(user_id), data.to_item()).to_dict()


@router.put("/private/tasks")
def update_private_task(
    data: TaskPayload,
    user_id: str = Depends(require_private_user),
    ctx: PluginContext = Depends(get_context),
):
    return ctx.tasks.update_item(private_key(user_id), data.to_item()).to_dict()


@router.delete("/private/tasks", status_code=204)
def delete_private_task(
    user_id: str = Depends(require_private_user),
    task_id: str = Depends(require_id),
    ctx: PluginContext = Depends(get_context),
):
    ctx.tasks.delete_item(private_key(user_id), task_id)
    return Response(status_code=204)


# --- Private group endpoints ---

@router.post("/private/groups")
def create_private_group(
    data: GroupPayload,
    user_id: str = Depends(require_private_user),
    ctx: PluginContext = Depends(get_context),
):
    return ctx.tasks.create_group(private_key(user_id), data.to_group()).to_dict()


@router.put("/private/groups")
def update_private_group(
    data: GroupPayload,
    user_id: str = Depends(require_private_user),
    ctx: PluginContext = Depends(get_context),
):
    return ctx.tasks.update_group(private_key(user_id), data.to_group()).to_dict()


@router.delete("/private/groups", status_code=204)
def delete_private_group(
    user_id: str = Depends(require_private_user),
    group_id: str = Depends(require_id),
    ctx: PluginContext = Depends(get_context),
):
    ctx.tasks.delete_group(private_key(user_id), group_id)
    return Response(status_code=204)


# --- Activity, slash commands and webhooks ---

@router.post("/activity")
def activity(
    user_id: str = Header("", alias=USER_HEADER),
    ctx: PluginContext = Depends(get_context),
):
    """Client-reported activity (login, opening the sidebar)."""
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    check_and_send_daily_message(ctx, user_id)
    return Response(status_code=200)


def _check_token(expected: str, given: str, what: str) -> None:
    if expected and given != expected:
        logger.warning(f"Rejected {what} with invalid token")
        raise HTTPException(status_code=401, detail="Unauthorized")


async def _read_fields(request: Request) -> dict:
    """Mattermost sends either form-encoded or JSON bodies."""
    if request.headers.get("content-type", "").startswith("application/json"):
        try:
            data = await request.json()
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid JSON body")
        if not isinstance(data, dict):
            raise HTTPException(status_code=400, detail="Invalid JSON body")
        return data
    form = await request.form()
    return dict(form)


@router.post("/commands")
async def slash_command(request: Request, ctx: PluginContext = Depends(get_context)):
    """Custom slash command endpoint."""
    fields = await _read_fields(request)
    _check_token(ctx.config.command_token, fields.get("token", ""), "slash command")

    user_id = fields.get("user_id", "")
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")

    response = execute_command(
        ctx,
        fields.get("command", ""),
        user_id,
        fields.get("channel_id", ""),
    )
    return response.to_dict()


@router.post("/hooks/message-posted")
async def message_posted(request: Request, ctx: PluginContext = Depends(get_context)):
    """Outgoing webhook fired for every post; counts as activity for its author."""
    fields = await _read_fields(request)
    _check_token(ctx.config.webhook_token, fields.get("token", ""), "webhook")
    on_message_posted(ctx, fields.get("user_id", ""))
    return {}


# --- Application ---

def create_app(ctx: PluginContext) -> FastAPI:
    """Build the FastAPI application around an explicit context."""
    app = FastAPI(title="Channel Tasks")
    app.state.ctx = ctx
    app.include_router(router)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return PlainTextResponse(f"Invalid request: {exc.errors()}", status_code=400)

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return PlainTextResponse(str(exc), status_code=404)

    @app.exception_handler(StoreError)
    async def store_error(request: Request, exc: StoreError):
        logger.error(f"Store failure on {request.method} {request.url.path}: {exc}")
        return PlainTextResponse(str(exc), status_code=500)

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    return app
