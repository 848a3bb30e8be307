# tests/test_commands.py

from __future__ import annotations

from datetime import date

import pytest

from tasklist.cli.commands import CommandRegistry, registry
from tasklist.core.errors import StoreError


@pytest.mark.asyncio
async def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}
    notes: list[str] = []

    async def h2(state, args):
        called["h2"] += 1
        return "h2"

    async def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b", aliases=["bee"])

    assert await reg.handle(state, "/a x") == "h2"
    assert await reg.handle(state, "/BEE y", emit=notes.append) == "h3"
    assert called == {"h2": 1, "h3": 1}
    assert notes == ["note"]


@pytest.mark.asyncio
async def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert await reg.handle(state, "hello") is None
    assert "Unknown command" in (await reg.handle(state, "/nope") or "")
    assert "Empty command" in (await reg.handle(state, "/") or "")


@pytest.mark.asyncio
async def test_add_list_toggle_delete_flow(state) -> None:
    reply = await registry.handle(state, "/add Buy milk | Home | 2024-06-20")
    assert reply is not None and reply.startswith("Added:")
    (task,) = state.manager.tasks
    assert (task.text, task.category, task.due_date) == ("Buy milk", "Home", date(2024, 6, 20))

    listing = await registry.handle(state, "/list")
    assert "Filter: All Categories" in listing
    assert "Total: 1  Active: 1  Completed: 0" in listing
    assert "Due: 2024-06-20" in listing

    await registry.handle(state, f"/done {task.id}")
    assert state.manager.get_task(task.id).completed is True
    assert "[x]" in await registry.handle(state, "/ls")

    assert await registry.handle(state, f"/del #{task.id}") == f"Deleted #{task.id}."
    assert "No tasks yet. Add one above!" in await registry.handle(state, "/list")


@pytest.mark.asyncio
async def test_add_with_defaults_and_rejections(state) -> None:
    await registry.handle(state, "/add Call mom")
    assert state.manager.tasks[0].category == "General"

    reply = await registry.handle(state, "/add   ")
    assert reply is not None and reply.startswith("Nothing added")
    reply = await registry.handle(state, "/add Pay rent | Home | someday")
    assert reply is not None and reply.startswith("Nothing added")
    assert len(state.manager.tasks) == 1


@pytest.mark.asyncio
async def test_edit_draft_save_cancel(state) -> None:
    await registry.handle(state, "/add old text")
    (task,) = state.manager.tasks

    assert "Not editing" in await registry.handle(state, "/save")

    reply = await registry.handle(state, f"/edit {task.id}")
    assert reply.startswith(f"Editing #{task.id}: old text")
    await registry.handle(state, "/draft new text")
    assert (await registry.handle(state, "/save")).startswith("Saved:")
    assert state.manager.get_task(task.id).text == "new text"

    await registry.handle(state, f"/edit {task.id}")
    await registry.handle(state, "/draft scrap")
    assert await registry.handle(state, "/cancel") == "Edit cancelled."
    assert state.manager.get_task(task.id).text == "new text"


@pytest.mark.asyncio
async def test_filter_categories_and_stats(state) -> None:
    await registry.handle(state, "/add a | Work")
    await registry.handle(state, "/add b | Home")
    await registry.handle(state, "/add c | Work")

    assert await registry.handle(state, "/cats") == "Categories: all, Work, Home"

    listing = await registry.handle(state, "/filter Work")
    assert "Filter: Work" in listing
    assert await registry.handle(state, "/stats") == "Total: 2  Active: 2  Completed: 0"
    assert await registry.handle(state, "/filter") == "Current filter: Work"

    await registry.handle(state, "/filter all")
    assert await registry.handle(state, "/stats") == "Total: 3  Active: 3  Completed: 0"


@pytest.mark.asyncio
async def test_free_text_commands_keep_inner_spacing(state) -> None:
    await registry.handle(state, "/add a  b | My  List")
    await registry.handle(state, "/add c | My List")
    (task, _) = state.manager.tasks
    assert (task.text, task.category) == ("a  b", "My  List")

    listing = await registry.handle(state, "/filter My  List")
    assert "Filter: My  List" in listing
    assert "Total: 1  Active: 1  Completed: 0" in listing

    await registry.handle(state, f"/edit {task.id}")
    await registry.handle(state, "/draft two  spaces")
    assert state.manager.editing.draft == "two  spaces"
    await registry.handle(state, "/save")
    assert state.manager.get_task(task.id).text == "two  spaces"

    # Non-free-text commands still split on any whitespace.
    await registry.handle(state, f"/done   {task.id}")
    assert state.manager.get_task(task.id).completed is True


@pytest.mark.asyncio
async def test_unknown_ids_are_reported(state) -> None:
    assert await registry.handle(state, "/done 42") == "No task with id 42."
    assert await registry.handle(state, "/del 42") == "No task with id 42."
    assert await registry.handle(state, "/edit 42") == "No task with id 42."


@pytest.mark.asyncio
async def test_store_errors_propagate_to_caller(state, fake_store) -> None:
    fake_store.fail_on.add("create")
    with pytest.raises(StoreError):
        await registry.handle(state, "/add doomed")
    assert state.manager.tasks == []


@pytest.mark.asyncio
async def test_sync_reloads_and_emits(state, fake_store) -> None:
    await registry.handle(state, "/add a")
    notes: list[str] = []

    reply = await registry.handle(state, "/sync", emit=notes.append)

    assert reply == "Reloaded 1 tasks."
    assert notes and notes[0].startswith("[STORE]")
