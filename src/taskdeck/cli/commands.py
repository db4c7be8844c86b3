# src/taskdeck/cli/commands.py

from __future__ import annotations

import logging
import shlex
from collections.abc import Awaitable, Callable
from datetime import datetime

from ..core.state import AppState
from ..tasks.task_forms import FormError, TaskForm, apply_form, build_new_task, submit_message
from ..tasks.task_models import SortBy, Task, TaskStatus

CommandHandler = Callable[[AppState, list[str], str], Awaitable[str]]

logger = logging.getLogger(__name__)

SHORT_ID_LEN = 8

STATUS_ALIASES: dict[str, TaskStatus] = {
    "t": TaskStatus.TODO,
    "todo": TaskStatus.TODO,
    "ip": TaskStatus.IN_PROGRESS,
    "progress": TaskStatus.IN_PROGRESS,
    "in-progress": TaskStatus.IN_PROGRESS,
    "d": TaskStatus.COMPLETED,
    "done": TaskStatus.COMPLETED,
    "completed": TaskStatus.COMPLETED,
    "c": TaskStatus.CANCELLED,
    "cancel": TaskStatus.CANCELLED,
    "cancelled": TaskStatus.CANCELLED,
}

EDIT_FIELDS = {
    "title": "title",
    "description": "description",
    "desc": "description",
    "location": "location",
    "loc": "location",
    "when": "date_time",
    "date": "date_time",
}


class CommandRegistry:
    """Slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        body = line[1:].strip()
        parts = body.split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]
        rest = body[len(parts[0]):].strip()

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return await handler(state, args, rest)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- rendering ----


def _fmt_local(ts: datetime) -> str:
    return ts.astimezone().strftime("%Y-%m-%d %H:%M")


def format_task_line(task: Task) -> str:
    return f"{task.id[:SHORT_ID_LEN]}  [{task.status.value}]  {task.title}  @ {_fmt_local(task.date_time)}"


def format_task_detail(task: Task) -> str:
    lines = [
        f"{task.title}",
        f"  id:          {task.id}",
        f"  status:      {task.status.value}",
        f"  when:        {_fmt_local(task.date_time)}",
    ]
    if task.location:
        lines.append(f"  location:    {task.location}")
    if task.description:
        lines.append(f"  description: {task.description}")
    lines.append(f"  created:     {_fmt_local(task.created_at)}")
    return "\n".join(lines)


def format_task_list(tasks: list[Task]) -> str:
    if not tasks:
        return "No tasks yet. Use /add <title> to create one."
    return "\n".join(format_task_line(t) for t in tasks)


# ---- parsing helpers ----


def parse_when(raw: str) -> datetime:
    """ISO date or date-time; naive values are local time."""
    s = raw.strip()
    if s.lower() == "now":
        return datetime.now().astimezone()
    ts = datetime.fromisoformat(s)
    if ts.tzinfo is None:
        ts = ts.astimezone()
    return ts


def resolve_task(state: AppState, token: str) -> tuple[Task | None, str | None]:
    """Find a task by full id or unique id prefix."""
    token = token.strip().lower()
    if not token:
        return None, "Task id required."
    exact = state.tasks.get(token)
    if exact is not None:
        return exact, None
    matches = [t for t in state.tasks.list() if t.id.startswith(token)]
    if not matches:
        return None, f"Task {token} not found."
    if len(matches) > 1:
        return None, f"Task id {token} is ambiguous ({len(matches)} matches)."
    return matches[0], None


def _render_current(state: AppState) -> str:
    return format_task_list(state.tasks.sort(state.sort_by))


# ---- handlers ----


async def cmd_help(state: AppState, args: list[str], rest: str) -> str:
    return registry.build_help()


async def cmd_list(state: AppState, args: list[str], rest: str) -> str:
    return _render_current(state)


async def cmd_show(state: AppState, args: list[str], rest: str) -> str:
    if len(args) != 1:
        return "Usage: /show <id>"
    task, err = resolve_task(state, args[0])
    if task is None:
        return err or "Task not found."
    return format_task_detail(task)


async def cmd_add(state: AppState, args: list[str], rest: str) -> str:
    """
    /add <title> [| description | location | when]
    """
    fields = [p.strip() for p in rest.split("|")]
    while len(fields) < 4:
        fields.append("")
    title, description, location, when_raw = fields[:4]

    try:
        when = parse_when(when_raw) if when_raw else None
    except ValueError:
        return f"Invalid date/time: {when_raw}"

    form = TaskForm(title=title, description=description, location=location, date_time=when)
    try:
        task = build_new_task(state.tasks, form)
    except FormError as e:
        return "; ".join(e.errors.values())

    result = await state.tasks.add(task)
    if not result.ok:
        return submit_message("add", False)
    return f"{submit_message('add', True)}\n{format_task_line(task)}"


async def cmd_edit(state: AppState, args: list[str], rest: str) -> str:
    """
    /edit <id> field=value ...   (fields: title, desc, loc, when)
    """
    try:
        tokens = shlex.split(rest)
    except ValueError as e:
        return f"Could not parse arguments: {e}"
    if len(tokens) < 2:
        return "Usage: /edit <id> title=... desc=... loc=... when=YYYY-MM-DDTHH:MM"

    task, err = resolve_task(state, tokens[0])
    if task is None:
        return err or "Task not found."

    form = TaskForm.from_task(task)
    for tok in tokens[1:]:
        key, sep, value = tok.partition("=")
        attr = EDIT_FIELDS.get(key.strip().lower())
        if not sep or attr is None:
            return f"Unknown field: {key}. Fields: title, desc, loc, when."
        if attr == "date_time":
            try:
                form.date_time = parse_when(value)
            except ValueError:
                return f"Invalid date/time: {value}"
        else:
            setattr(form, attr, value)

    try:
        updated = apply_form(task, form)
    except FormError as e:
        return "; ".join(e.errors.values())

    result = await state.tasks.update(updated)
    if not result.ok:
        return submit_message("edit", False)
    return f"{submit_message('edit', True)}\n{format_task_line(updated)}"


async def cmd_status(state: AppState, args: list[str], rest: str) -> str:
    if len(args) != 2:
        return "Usage: /status <id> <todo|ip|done|cancel>"
    new_status = STATUS_ALIASES.get(args[1].lower())
    if new_status is None:
        return f"Invalid status: {args[1]}. Use todo, ip, done or cancel."
    task, err = resolve_task(state, args[0])
    if task is None:
        return err or "Task not found."

    result = await state.tasks.change_status(task.id, new_status)
    if not result.ok:
        return result.error or "Failed to update task"
    return f"Task {task.id[:SHORT_ID_LEN]} -> {new_status.value}"


async def cmd_rm(state: AppState, args: list[str], rest: str) -> str:
    if len(args) != 1:
        return "Usage: /rm <id>"
    task, err = resolve_task(state, args[0])
    if task is None:
        return err or "Task not found."

    result = await state.tasks.remove(task.id)
    if not result.ok:
        return result.error or "Failed to delete task"
    return f'Task "{task.title}" removed.'


async def cmd_sort(state: AppState, args: list[str], rest: str) -> str:
    if len(args) != 1 or args[0].lower() not in {s.value for s in SortBy}:
        return "Usage: /sort date | /sort status"
    state.sort_by = SortBy(args[0].lower())
    return _render_current(state)


async def cmd_reload(state: AppState, args: list[str], rest: str) -> str:
    result = await state.tasks.reload()
    if not result.ok:
        return result.error or "Failed to load tasks"
    return _render_current(state)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="List tasks in the current sort order.", aliases=["ls"])
registry.register("show", cmd_show, help_text="Show task details: /show <id>.")
registry.register("add", cmd_add, help_text="Add a task: /add <title> [| description | location | when].")
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <id> title=... desc=... loc=... when=...")
registry.register("status", cmd_status, help_text="Change status: /status <id> <todo|ip|done|cancel>.", aliases=["mv"])
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <id>.", aliases=["delete"])
registry.register("sort", cmd_sort, help_text="Sort the list: /sort date | /sort status.")
registry.register("reload", cmd_reload, help_text="Reload tasks from storage.", aliases=["refresh"])
