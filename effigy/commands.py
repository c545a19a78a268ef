"""Command-line parsing for the effigy task runner."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union


class HelpTopic(Enum):
    """Which help panel to show."""

    GENERAL = "general"
    DOCTOR = "doctor"
    TASKS = "tasks"
    TEST = "test"
    WATCH = "watch"
    INIT = "init"
    MIGRATE = "migrate"


@dataclass(frozen=True)
class TaskInvocation:
    """A task selector together with the arguments passed to it."""

    name: str
    args: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class DoctorArgs:
    """Options of the `doctor` command."""

    repo_override: Optional[Path] = None
    output_json: bool = False
    fix: bool = False
    verbose: bool = False
    explain: Optional[TaskInvocation] = None


@dataclass(frozen=True)
class TasksArgs:
    """Options of the `tasks` (alias `catalogs`) command."""

    repo_override: Optional[Path] = None
    task_name: Optional[str] = None
    resolve_selector: Optional[str] = None
    output_json: bool = False
    pretty_json: bool = True


Command = Union[DoctorArgs, TasksArgs, TaskInvocation, HelpTopic]


class CliParseError(ValueError):
    """Raised when the command line cannot be parsed."""

    def __init__(self, message: str, argument: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.argument = argument

    def __str__(self) -> str:
        return self.message

    @classmethod
    def missing_repo_value(cls) -> "CliParseError":
        return cls("--repo requires a value")

    @classmethod
    def missing_task_name_value(cls) -> "CliParseError":
        return cls("--task requires a value")

    @classmethod
    def missing_resolve_selector_value(cls) -> "CliParseError":
        return cls("--resolve requires a value")

    @classmethod
    def missing_pretty_value(cls) -> "CliParseError":
        return cls("--pretty requires a value (`true` or `false`)")

    @classmethod
    def invalid_pretty_value(cls, value: str) -> "CliParseError":
        return cls(
            f"--pretty value `{value}` is invalid (expected `true` or `false`)",
            value,
        )

    @classmethod
    def unknown_argument(cls, arg: str) -> "CliParseError":
        return cls(f"unknown argument: {arg}", arg)


_HELP_FLAGS = ("--help", "-h")

_SCOPED_TASK_HELP = {
    "test": HelpTopic.TEST,
    "watch": HelpTopic.WATCH,
    "init": HelpTopic.INIT,
    "migrate": HelpTopic.MIGRATE,
}


def strip_global_json_flags(args: Iterable[str]) -> tuple[list[str], bool]:
    """Remove `--json` tokens appearing before a `--` delimiter.

    Returns the remaining arguments and whether any `--json` was removed.
    """
    stripped: list[str] = []
    json_mode = False
    passthrough = False
    for arg in args:
        if arg == "--":
            passthrough = True
        elif not passthrough and arg == "--json":
            json_mode = True
            continue
        stripped.append(arg)
    return stripped, json_mode


def strip_global_json_flag(args: Iterable[str]) -> tuple[list[str], bool]:
    """Alias of :func:`strip_global_json_flags`."""
    return strip_global_json_flags(args)


def apply_global_json_flag(command: Command, json_mode: bool) -> Command:
    """Propagate a global `--json` flag into the parsed command."""
    if not json_mode:
        return command
    if isinstance(command, TaskInvocation):
        if "--json" in command.args:
            return command
        return dataclasses.replace(command, args=["--json", *command.args])
    if isinstance(command, (TasksArgs, DoctorArgs)):
        return dataclasses.replace(command, output_json=True)
    return command


def command_requests_json(command: Command, global_json_mode: bool) -> bool:
    """Tell whether the command should produce JSON output."""
    if global_json_mode:
        return True
    if isinstance(command, (TasksArgs, DoctorArgs)):
        return command.output_json
    if isinstance(command, TaskInvocation):
        return "--json" in command.args
    return False


def parse_command(args: Iterable[str]) -> Command:
    """Parse command-line arguments (without the program name)."""
    remaining = iter(args)
    cmd = next(remaining, None)
    if cmd is None or cmd in _HELP_FLAGS:
        return HelpTopic.GENERAL
    if cmd.startswith("-"):
        raise CliParseError.unknown_argument(cmd)
    if cmd == "help":
        return HelpTopic.GENERAL
    if cmd == "doctor":
        return _parse_doctor(remaining)
    if cmd in ("tasks", "catalogs"):
        return _parse_tasks(remaining)

    task_args = list(remaining)
    topic = _SCOPED_TASK_HELP.get(cmd)
    if topic is not None and any(arg in _HELP_FLAGS for arg in task_args):
        return topic
    return TaskInvocation(name=cmd, args=task_args)


def _require(remaining: Iterator[str], error: CliParseError) -> str:
    value = next(remaining, None)
    if value is None:
        raise error
    return value


def _parse_tasks(remaining: Iterator[str]) -> Command:
    repo_override: Optional[Path] = None
    task_name: Optional[str] = None
    resolve_selector: Optional[str] = None
    output_json = False
    pretty_json = True

    for arg in remaining:
        if arg == "--repo":
            repo_override = Path(_require(remaining, CliParseError.missing_repo_value()))
        elif arg == "--task":
            task_name = _require(remaining, CliParseError.missing_task_name_value())
        elif arg == "--resolve":
            resolve_selector = _require(
                remaining, CliParseError.missing_resolve_selector_value()
            )
        elif arg == "--json":
            output_json = True
        elif arg == "--pretty":
            value = _require(remaining, CliParseError.missing_pretty_value())
            if value == "true":
                pretty_json = True
            elif value == "false":
                pretty_json = False
            else:
                raise CliParseError.invalid_pretty_value(value)
        elif arg in _HELP_FLAGS:
            return HelpTopic.TASKS
        else:
            raise CliParseError.unknown_argument(arg)

    return TasksArgs(
        repo_override=repo_override,
        task_name=task_name,
        resolve_selector=resolve_selector,
        output_json=output_json,
        pretty_json=pretty_json,
    )


def _parse_doctor(remaining: Iterator[str]) -> Command:
    repo_override: Optional[Path] = None
    output_json = False
    fix = False
    verbose = False
    explain_name: Optional[str] = None
    explain_args: list[str] = []

    for arg in remaining:
        if explain_name is not None:
            explain_args.append(arg)
        elif arg == "--repo":
            repo_override = Path(_require(remaining, CliParseError.missing_repo_value()))
        elif arg == "--json":
            output_json = True
        elif arg == "--fix":
            fix = True
        elif arg == "--verbose":
            verbose = True
        elif arg in _HELP_FLAGS:
            return HelpTopic.DOCTOR
        else:
            explain_name = arg

    explain = (
        TaskInvocation(name=explain_name, args=explain_args)
        if explain_name is not None
        else None
    )
    return DoctorArgs(
        repo_override=repo_override,
        output_json=output_json,
        fix=fix,
        verbose=verbose,
        explain=explain,
    )