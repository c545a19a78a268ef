import json
from pathlib import Path

import pytest

from effigy.commands import DoctorArgs, HelpTopic, TaskInvocation, TasksArgs
from effigy.envelope import (
    command_kind_and_name,
    error_envelope,
    help_payload,
    parse_json_or_string,
    render_envelope,
    success_envelope,
)


@pytest.mark.parametrize(
    "topic, label",
    [
        (HelpTopic.GENERAL, "general"),
        (HelpTopic.DOCTOR, "doctor"),
        (HelpTopic.TASKS, "tasks"),
        (HelpTopic.TEST, "test"),
        (HelpTopic.WATCH, "watch"),
        (HelpTopic.INIT, "init"),
        (HelpTopic.MIGRATE, "migrate"),
    ],
)
def test_help_kind_and_name(topic, label):
    assert command_kind_and_name(topic) == ("help", label)


def test_builtin_command_kind_and_name():
    assert command_kind_and_name(DoctorArgs()) == ("doctor", "doctor")
    assert command_kind_and_name(TasksArgs(repo_override=Path("/tmp/repo"))) == (
        "tasks",
        "tasks",
    )


def test_task_kind_uses_task_name():
    task = TaskInvocation(name="farmyard/build", args=["--", "--watch"])
    assert command_kind_and_name(task) == ("task", "farmyard/build")


def test_unknown_command_is_rejected():
    with pytest.raises(TypeError):
        command_kind_and_name("doctor")


def test_parse_json_object_and_array():
    assert parse_json_or_string('{"a": [1, 2]}') == {"a": [1, 2]}
    assert parse_json_or_string("[true, null]") == [True, None]


def test_parse_non_json_wraps_text():
    assert parse_json_or_string("build-ok") == {"text": "build-ok"}
    assert parse_json_or_string("") == {"text": ""}


def test_parse_rejects_non_standard_constants():
    assert parse_json_or_string("NaN") == {"text": "NaN"}


def test_success_envelope_shape():
    envelope = success_envelope("task", "build", {"stdout": "build-ok"})
    assert envelope["schema"] == "effigy.command.v1"
    assert envelope["schema_version"] == 1
    assert envelope["ok"] is True
    assert envelope["command"] == {"kind": "task", "name": "build"}
    assert envelope["result"] == {"stdout": "build-ok"}
    assert envelope["error"] is None


def test_error_envelope_shape():
    envelope = error_envelope(
        "cli", "parse", "CliParseError", "unknown argument: --json-raw", None
    )
    assert envelope["ok"] is False
    assert envelope["result"] is None
    assert envelope["command"] == {"kind": "cli", "name": "parse"}
    assert envelope["error"] == {
        "kind": "CliParseError",
        "message": "unknown argument: --json-raw",
        "details": None,
    }


def test_error_envelope_keeps_details():
    details = {"hint": "Run `effigy --help` to see supported command forms"}
    envelope = error_envelope("tasks", "tasks", "RunnerError", "failed", details)
    assert envelope["error"]["details"] == details


def test_help_payload_general():
    payload = help_payload(HelpTopic.GENERAL)
    assert payload["schema"] == "effigy.help.v1"
    assert payload["schema_version"] == 1
    assert payload["ok"] is True
    assert payload["topic"] == "general"
    assert "Commands" in payload["text"]


def test_help_payload_scoped_topic():
    payload = help_payload(HelpTopic.DOCTOR)
    assert payload["topic"] == "doctor"
    assert "doctor Help" in payload["text"]


def test_render_envelope_round_trips():
    envelope = success_envelope("help", "general", help_payload(HelpTopic.GENERAL))
    rendered = render_envelope(envelope)
    assert json.loads(rendered) == envelope
    assert "\n" in rendered


def test_render_envelope_sorts_keys():
    envelope = error_envelope("task", "fail", "RunnerError", "boom", None)
    keys = list(json.loads(rendered_keys := render_envelope(envelope)).keys())
    assert keys == sorted(keys)
    assert rendered_keys.index('"command"') < rendered_keys.index('"schema"')


def test_render_envelope_keeps_non_ascii():
    rendered = render_envelope({"text": "╭─╮"})
    assert "╭─╮" in rendered