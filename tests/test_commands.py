# tests/test_commands.py

from __future__ import annotations

import json
from datetime import timedelta

import pytest

from tasktogo.cli import main as cli_main
from tasktogo.cli.arguments import CommandError
from tasktogo.cli.bootstrap import create_initial_state, save_if_modified
from tasktogo.cli.commands import CommandRegistry
from tasktogo.cli.commands import registry as commands
from tasktogo.config import Settings
from tasktogo.connectors.console_connector import PROMPT, run_command, run_console_loop
from tasktogo.tasks.task_models import RecurrenceSchedule, TaskError
from tasktogo.tasks.task_store import TaskFileStore, TaskStoreError

from .fakes import ScriptedInput


def _plain(reply) -> str:
    return reply if isinstance(reply, str) else reply.plain


# ---- registry mechanics ----


def test_command_registry_routes_names_and_aliases(state) -> None:
    reg = CommandRegistry()
    seen: list[list[str]] = []

    def handler(state, args):
        seen.append(args)
        return "ok"

    reg.register("ping", handler, "answer", aliases=["p"])

    assert reg.dispatch(state, ["ping", "a"]) == "ok"
    assert reg.dispatch(state, ["P", "b"]) == "ok"
    assert reg.handle(state, "PING 'c d'") == "ok"
    assert seen == [["a"], ["b"], ["c d"]]


def test_unknown_command_and_empty_input(state) -> None:
    with pytest.raises(CommandError, match="unknown command: nope"):
        commands.dispatch(state, ["nope"])
    with pytest.raises(CommandError, match="no arguments given"):
        commands.dispatch(state, [])


def test_help_lists_every_command(state) -> None:
    text = _plain(commands.handle(state, "help"))
    for usage in ("list [maxItems]", "info name", "add name priority", "eventually name", "recurring name", "done name"):
        assert usage in text


# ---- add / eventually / list ----


def test_add_then_list(state) -> None:
    reply = commands.handle(state, 'add "Pay rent" 8 Oct 17 14:00 -- to landlord')

    assert _plain(reply) == "Added (8) Today 14:00 - Pay rent"
    assert state.modified is True
    assert state.registry.one_shot[0].description == "to landlord"
    assert _plain(commands.handle(state, "list")) == "(8) Today 14:00 - Pay rent"


def test_list_orders_by_urgency_and_honours_limit(state) -> None:
    commands.handle(state, "eventually Read book 2")
    commands.handle(state, "add Dentist 7 Oct 18 09:30")
    commands.handle(state, "add Taxes 9 Oct 17 13:00")

    assert _plain(commands.handle(state, "list")).splitlines() == [
        "(9) Today 13:00 - Taxes",
        "(7) Tomorrow 09:30 - Dentist",
        "(2) - Read book",
    ]
    assert len(_plain(commands.handle(state, "l 2")).splitlines()) == 2


def test_list_falls_back_to_configured_limit(state) -> None:
    state.settings.max_list_items = 1
    commands.handle(state, "eventually a 2")
    commands.handle(state, "eventually b 3")

    assert _plain(commands.handle(state, "list")) == "(2) - a"
    assert len(_plain(commands.handle(state, "list 5")).splitlines()) == 2


def test_list_on_new_empty_file_is_an_error(state) -> None:
    state.is_new_list = True
    with pytest.raises(CommandError, match="no tasks in list"):
        commands.handle(state, "list")


def test_list_on_existing_empty_file(state) -> None:
    assert commands.handle(state, "list") == "No pending tasks."


def test_add_rejects_bad_priority(state) -> None:
    with pytest.raises(TaskError):
        commands.handle(state, "eventually Nothing 0")
    assert state.modified is False
    assert len(state.registry) == 0


# ---- recurring ----


def test_recurring_reports_pending_occurrences(state) -> None:
    reply = commands.handle(state, "recurring Water plants #%d 4 2026-10-15 12:00 24h")

    assert reply == "Added recurring 'Water plants #%d' (3 pending)."
    assert isinstance(state.registry.containers[0], RecurrenceSchedule)
    assert _plain(commands.handle(state, "list")).splitlines() == [
        "(4) Yesterday 12:00 - Water plants #1",
        "(4) Today 12:00 - Water plants #2",
        "(4) Tomorrow 12:00 - Water plants #3",
    ]


def test_recurring_in_the_future_reports_first_due_time(state) -> None:
    reply = commands.handle(state, "recurring Gym 5 2026-10-20 07:00 48h")

    assert reply == "Added recurring 'Gym'; first occurrence due 2026-10-22 07:00."
    assert commands.handle(state, "list") == "No pending tasks."


def test_recurring_occurrences_follow_the_clock(state, clock) -> None:
    commands.handle(state, "recurring Stretch %d 3 2026-10-17 11:00 1h")
    assert len(_plain(commands.handle(state, "list")).splitlines()) == 2

    clock.advance(timedelta(hours=3))

    assert len(_plain(commands.handle(state, "list")).splitlines()) == 5


# ---- done / info ----


def test_done_removes_one_shot(state) -> None:
    commands.handle(state, "add Dentist 7 Oct 18 09:30")
    state.modified = False

    assert commands.handle(state, "done dent") == "Done: Dentist"
    assert state.modified is True
    assert len(state.registry) == 0


def test_done_on_recurring_keeps_schedule(state) -> None:
    commands.handle(state, "recurring Water plants #%d 4 2026-10-15 12:00 24h")

    assert commands.handle(state, "d water plants #2") == "Done: Water plants #2"
    assert _plain(commands.handle(state, "list")).splitlines() == [
        "(4) Yesterday 12:00 - Water plants #1",
        "(4) Tomorrow 12:00 - Water plants #3",
    ]


def test_done_without_match_changes_nothing(state) -> None:
    commands.handle(state, "eventually Read book 2")
    state.modified = False

    assert commands.handle(state, "done zzz") == "No task matches 'zzz'."
    assert state.modified is False
    assert len(state.registry) == 1


def test_done_needs_a_name(state) -> None:
    with pytest.raises(CommandError, match="no task name given"):
        commands.handle(state, "done")


def test_info_shows_description(state) -> None:
    commands.handle(state, "eventually Read book 2 -- anything by Le Guin")

    assert _plain(commands.handle(state, "info read")) == "(2) - Read book\n\tanything by Le Guin"
    assert commands.handle(state, "i nothing") == "No task matches 'nothing'."


# ---- command mode / console loop ----


def test_run_command_reports_errors_with_status(state, capsys) -> None:
    assert run_command(state, ["eventually", "Read", "book", "2"]) == 0
    assert run_command(state, ["bogus"]) == 1

    out = capsys.readouterr().out
    assert "Added (2) - Read book" in out
    assert "Error: unknown command: bogus" in out


def test_console_loop_runs_until_exit(state, capsys) -> None:
    read_line = ScriptedInput(
        ["eventually Read book 2", "", "bogus", "list", "exit", "eventually never 3"]
    )

    run_console_loop(state, read_line=read_line)

    out = capsys.readouterr().out
    assert "Error: unknown command: bogus" in out
    assert "(2) - Read book" in out
    assert read_line.prompts == [PROMPT] * 5
    assert read_line.lines == ["eventually never 3"]
    assert [t.name for t in state.registry.eventual] == ["Read book"]


def test_console_loop_stops_on_eof(state) -> None:
    read_line = ScriptedInput(["eventually a 2"])

    run_console_loop(state, read_line=read_line)

    assert read_line.prompts == [PROMPT, PROMPT]
    assert len(state.registry) == 1


def test_console_loop_survives_bad_quoting(state, capsys) -> None:
    run_console_loop(state, read_line=ScriptedInput(['add "unterminated', "q"]))
    assert "Error: could not split arguments" in capsys.readouterr().out


# ---- bootstrap / persistence ----


def test_save_if_modified_writes_once(state) -> None:
    assert save_if_modified(state) is False
    assert not state.store.path.exists()

    commands.handle(state, "eventually Read book 2")

    assert save_if_modified(state) is True
    assert save_if_modified(state) is False
    reloaded = TaskFileStore(state.store.path).load()
    assert [t.name for t in reloaded.eventual] == ["Read book"]


def test_create_initial_state_for_new_file(settings) -> None:
    app = create_initial_state(settings=settings)

    assert app.is_new_list is True
    assert app.render_config.colors is False
    with pytest.raises(CommandError, match="no tasks in list"):
        commands.handle(app, "list")


def test_create_initial_state_rejects_broken_file(settings) -> None:
    settings.list_path.write_text("[1, 2", "utf-8")
    with pytest.raises(TaskStoreError):
        create_initial_state(settings=settings)


@pytest.fixture()
def cli_settings(tmp_path, monkeypatch) -> Settings:
    s = Settings(
        app_name="tasktogo",
        log_level="WARNING",
        data_dir=tmp_path / "state",
        list_path=tmp_path / "default.json",
        max_list_items=0,
        colors=False,
        due_format="%A, %b %d, %H:%M",
        color_threshold_hours=24.0,
    )
    monkeypatch.setattr(cli_main, "get_settings", lambda: s)
    monkeypatch.setattr(cli_main, "setup_logging", lambda **kwargs: None)
    return s


def test_main_command_mode_saves_and_lists(cli_settings, tmp_path, capsys) -> None:
    path = tmp_path / "mine.json"

    assert cli_main.main(["-l", str(path), "eventually", "Read", "book", "2"]) == 0
    assert json.loads(path.read_text("utf-8"))["containers"][0]["name"] == "Read book"

    assert cli_main.main(["-l", str(path), "list"]) == 0
    assert "(2) - Read book" in capsys.readouterr().out
    assert not cli_settings.list_path.exists()


def test_main_leaves_unreadable_file_untouched(cli_settings, capsys) -> None:
    cli_settings.list_path.write_text("not json", "utf-8")

    assert cli_main.main(["eventually", "Read", "book", "2"]) == 1

    assert cli_settings.list_path.read_text("utf-8") == "not json"
    assert "Could not read task list" in capsys.readouterr().err


def test_main_reports_user_errors(cli_settings, capsys) -> None:
    assert cli_main.main(["add", "Pay", "rent"]) == 1
    assert "Error: no priority argument given" in capsys.readouterr().out
    assert not cli_settings.list_path.exists()


def test_main_reports_undecodable_file(cli_settings, capsys) -> None:
    cli_settings.list_path.write_bytes(b'{"containers": ["\xff\xfe"]}')

    assert cli_main.main(["list"]) == 1

    assert "Could not read task list" in capsys.readouterr().err


def test_run_command_reports_oversized_delay(state, capsys) -> None:
    status = run_command(state, ["recurring", "x", "2", "2026-10-01", "08:00", "100000000000h"])

    assert status == 1
    assert "Error: invalid duration '100000000000h'" in capsys.readouterr().out
    assert len(state.registry) == 0
