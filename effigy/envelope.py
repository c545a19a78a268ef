"""JSON command envelopes wrapped around command output."""

from __future__ import annotations

import json
from typing import Any, Optional

from effigy.commands import (
    Command,
    DoctorArgs,
    HelpTopic,
    TaskInvocation,
    TasksArgs,
)
from effigy.help import render_help

COMMAND_SCHEMA = "effigy.command.v1"
HELP_SCHEMA = "effigy.help.v1"
SCHEMA_VERSION = 1


def command_kind_and_name(command: Command) -> tuple[str, str]:
    """Return the envelope `kind` and `name` that describe `command`."""
    if isinstance(command, HelpTopic):
        return "help", command.value
    if isinstance(command, DoctorArgs):
        return "doctor", "doctor"
    if isinstance(command, TasksArgs):
        return "tasks", "tasks"
    if isinstance(command, TaskInvocation):
        return "task", command.name
    raise TypeError(f"unsupported command: {command!r}")


def _reject_constant(token: str) -> Any:
    raise ValueError(f"non-standard JSON constant: {token}")


def parse_json_or_string(raw: str) -> Any:
    """Decode `raw` as JSON, or wrap it as `{"text": raw}` when it is not JSON."""
    try:
        return json.loads(raw, parse_constant=_reject_constant)
    except ValueError:
        return {"text": raw}


def success_envelope(kind: str, name: str, result: Any) -> dict[str, Any]:
    """Build the envelope for a command that succeeded."""
    return {
        "schema": COMMAND_SCHEMA,
        "schema_version": SCHEMA_VERSION,
        "ok": True,
        "command": {"kind": kind, "name": name},
        "result": result,
        "error": None,
    }


def error_envelope(
    kind: str,
    name: str,
    error_kind: str,
    message: str,
    details: Optional[Any] = None,
) -> dict[str, Any]:
    """Build the envelope for a command that failed."""
    return {
        "schema": COMMAND_SCHEMA,
        "schema_version": SCHEMA_VERSION,
        "ok": False,
        "command": {"kind": kind, "name": name},
        "result": None,
        "error": {
            "kind": error_kind,
            "message": message,
            "details": details,
        },
    }


def help_payload(topic: HelpTopic) -> dict[str, Any]:
    """Build the JSON payload carrying the plain-text help for `topic`."""
    topic = HelpTopic(topic)
    return {
        "schema": HELP_SCHEMA,
        "schema_version": SCHEMA_VERSION,
        "ok": True,
        "topic": topic.value,
        "text": render_help(topic),
    }


def render_envelope(payload: Any) -> str:
    """Serialise a payload as pretty JSON with keys in sorted order."""
    return json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False)