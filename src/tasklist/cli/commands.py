# src/tasklist/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import cast

from ..core.state import AppState
from ..tasks.task_models import ALL_CATEGORIES, Task, TaskId
from ..tasks.task_manager import TaskManager

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], Awaitable[str]]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

EMPTY_LIST_TEXT = "No tasks yet. Add one above!"


class CommandRegistry:
    """Simple slash-command registry used by the console (/add, /list, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}
        self._raw: set[str] = set()

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
        *,
        raw: bool = False,
    ) -> None:
        """`raw` handlers get the rest of the line as a single argument, spacing intact."""
        aliases = aliases or []
        key = name.lower()
        self._help[key] = help_text
        for k in [key, *(a.lower() for a in aliases)]:
            self._handlers[k] = handler
            if raw:
                self._raw.add(k)

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        StoreError raised by a handler propagates to the caller.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split(maxsplit=1)
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        rest = parts[1] if len(parts) > 1 else ""
        if name in self._raw:
            args = [rest] if rest.strip() else []
        else:
            args = rest.split()

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return await h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return await h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- rendering ----


def render_task(manager: TaskManager, task: Task) -> str:
    mark = "x" if task.completed else " "
    parts = [f"[{mark}] #{task.id} {task.text}", f"({task.category})"]
    if task.due_date is not None:
        parts.append(f"Due: {task.due_date.isoformat()}")
    if manager.is_overdue(task):
        parts.append("OVERDUE")
    editing = manager.editing
    if editing is not None and editing.task_id == task.id:
        parts.append(f"<editing: {editing.draft!r}>")
    return "  ".join(parts)


def render_stats(manager: TaskManager) -> str:
    s = manager.stats()
    return f"Total: {s.total}  Active: {s.active}  Completed: {s.completed}"


def render_list(manager: TaskManager) -> str:
    label = "All Categories" if manager.category_filter == ALL_CATEGORIES else manager.category_filter
    lines = [f"Filter: {label}", render_stats(manager)]
    tasks = manager.filtered_tasks()
    if not tasks:
        lines.append(EMPTY_LIST_TEXT)
    else:
        lines.extend(render_task(manager, t) for t in tasks)
    return "\n".join(lines)


def _resolve_id(manager: TaskManager, raw: str) -> TaskId | None:
    """Map the id typed by the user back to the stored id (int or str)."""
    raw = raw.lstrip("#")
    for t in manager.tasks:
        if str(t.id) == raw:
            return t.id
    return None


# ---- handlers ----


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_list(state: AppState, args: list[str]) -> str:
    return render_list(state.manager)


async def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <text>
    /add <text> | <category>
    /add <text> | <category> | YYYY-MM-DD
    """
    fields = [p.strip() for p in (args[0] if args else "").split("|")]
    text = fields[0] if fields else ""
    category = fields[1] if len(fields) > 1 else ""
    due = fields[2] if len(fields) > 2 else ""

    task = await state.manager.add_task(text, category, due)
    if task is None:
        return "Nothing added (task text is empty or the due date is not YYYY-MM-DD)."
    return f"Added: {render_task(state.manager, task)}"


async def cmd_toggle(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done <id>"
    task_id = _resolve_id(state.manager, args[0])
    if task_id is None:
        return f"No task with id {args[0]}."
    task = await state.manager.toggle_completed(task_id)
    return render_task(state.manager, task) if task else f"No task with id {args[0]}."


async def cmd_delete(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /del <id>"
    task_id = _resolve_id(state.manager, args[0])
    if task_id is None:
        return f"No task with id {args[0]}."
    await state.manager.delete_task(task_id)
    return f"Deleted #{task_id}."


async def cmd_edit(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /edit <id>"
    task_id = _resolve_id(state.manager, args[0])
    session = state.manager.start_edit(task_id) if task_id is not None else None
    if session is None:
        return f"No task with id {args[0]}."
    return (
        f"Editing #{session.task_id}: {session.draft}\n"
        "Use /draft <new text>, then /save or /cancel."
    )


async def cmd_draft(state: AppState, args: list[str]) -> str:
    if state.manager.editing is None:
        return "Not editing anything. Use /edit <id> first."
    state.manager.update_draft(args[0] if args else "")
    return f"Draft: {state.manager.editing.draft}"


async def cmd_save(state: AppState, args: list[str]) -> str:
    session = state.manager.editing
    if session is None:
        return "Not editing anything."
    task = await state.manager.save_edit()
    if task is None:
        return "Draft is empty; nothing saved. Use /draft <text> or /cancel."
    return f"Saved: {render_task(state.manager, task)}"


async def cmd_cancel(state: AppState, args: list[str]) -> str:
    if state.manager.editing is None:
        return "Not editing anything."
    state.manager.cancel_edit()
    return "Edit cancelled."


async def cmd_filter(state: AppState, args: list[str]) -> str:
    """
    /filter            -> show current filter
    /filter <category> -> show only that category (exact, case-sensitive)
    /filter all        -> show everything
    """
    if not args:
        return f"Current filter: {state.manager.category_filter}"
    state.manager.set_category_filter(args[0].strip())
    return render_list(state.manager)


async def cmd_categories(state: AppState, args: list[str]) -> str:
    return "Categories: " + ", ".join(state.manager.derived_categories())


async def cmd_stats(state: AppState, args: list[str]) -> str:
    return render_stats(state.manager)


async def cmd_sync(
    state: AppState,
    args: list[str],
    emit: CommandEmitter | None = None,
) -> str:
    if emit:
        emit("[STORE] Reloading tasks...")
    await state.manager.initialize()
    logger.debug("Manual re-sync: %d tasks", len(state.manager.tasks))
    return f"Reloaded {len(state.manager.tasks)} tasks."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="Show tasks for the current filter.", aliases=["ls"])
registry.register("add", cmd_add, help_text="Add a task: /add text | category | YYYY-MM-DD.", raw=True)
registry.register("done", cmd_toggle, help_text="Toggle completed: /done <id>.", aliases=["toggle"])
registry.register("del", cmd_delete, help_text="Delete a task: /del <id>.", aliases=["rm"])
registry.register("edit", cmd_edit, help_text="Start editing a task: /edit <id>.")
registry.register("draft", cmd_draft, help_text="Replace the draft text: /draft <text>.", raw=True)
registry.register("save", cmd_save, help_text="Save the draft.")
registry.register("cancel", cmd_cancel, help_text="Discard the draft.")
registry.register("filter", cmd_filter, help_text="Filter by category: /filter <name> | /filter all.", raw=True)
registry.register("cats", cmd_categories, help_text="List categories.", aliases=["categories"])
registry.register("stats", cmd_stats, help_text="Counts for the current filter.")
registry.register("sync", cmd_sync, help_text="Reload tasks from the store.")
