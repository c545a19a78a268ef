# effigy

The front end of a task runner for repositories that hold nested task
catalogs. The package has four modules:

- `effigy.commands` parses the command line. It turns an argument list into a
  help request, a `tasks` listing request, a `doctor` request or a task
  invocation.
- `effigy.resolver` finds the project root. It walks up from a working
  directory to the nearest root. When a parent workspace's `package.json` or
  `Cargo.toml` includes the child, it promotes the root to that parent.
- `effigy.help` renders the help panel for each built-in command as plain
  text. It also renders the boxed header that shows the project root.
- `effigy.envelope` builds the versioned JSON envelopes that tooling and CI
  read.

The package has no runtime dependencies. Install `effigy[test]` to run the tests
with pytest.

## Parsing commands

```python
from effigy.commands import (
    parse_command,
    strip_global_json_flags,
    apply_global_json_flag,
    command_requests_json,
    CliParseError,
)

args, json_mode = strip_global_json_flags(["tasks", "--json", "--repo", "/tmp/repo"])
command = apply_global_json_flag(parse_command(args), json_mode)
print(command)                                   # TasksArgs(repo_override=PosixPath('/tmp/repo'), ..., output_json=True, ...)
print(command_requests_json(command, json_mode))  # True
```

`strip_global_json_flags` removes every `--json` that comes before a `--`
delimiter. It returns the remaining arguments and whether it removed any.
A `--json` after `--` stays in the list and is passed on to the task.
`strip_global_json_flag` is an alias.

`apply_global_json_flag` applies the global flag to a parsed command. On a
`TaskInvocation` it puts `--json` first in the arguments, unless it is already
there. On `TasksArgs` and `DoctorArgs` it sets `output_json`. A help topic is
left as it is.

`parse_command` returns one of these:

- `HelpTopic.GENERAL` for an empty list, `help`, `--help` or `-h`.
- `DoctorArgs` for `doctor [--repo PATH] [--fix] [--verbose] [--json]`. The
  first word that is not an option becomes `explain`, a `TaskInvocation`. Every
  argument after it goes to that invocation. `doctor --help` gives
  `HelpTopic.DOCTOR`.
- `TasksArgs` for `tasks`, or its alias `catalogs`. It accepts
  `[--repo PATH] [--task NAME] [--resolve SELECTOR] [--json] [--pretty true|false]`.
  `pretty_json` defaults to `True`. `--help` gives `HelpTopic.TASKS`.
- `TaskInvocation` for any other word, such as `build` or `farmyard/build`. The
  arguments that follow it are kept unchanged. For `test`, `watch`, `init` and
  `migrate`, a `--help` or `-h` anywhere among the arguments gives the matching
  `HelpTopic` instead.

All the parsed types are frozen dataclasses. Malformed input raises
`CliParseError`, which is a `ValueError`. Its message uses the command-line
wording, for example:

- `unknown argument: --json-raw`
- `--repo requires a value`
- ``--pretty value `maybe` is invalid (expected `true` or `false`)``

A leading token that starts with `-` is rejected, unless it is a help flag.

## Resolving the project root

```python
from pathlib import Path
from effigy.resolver import resolve_target_root, ResolutionMode, ResolveError

target = resolve_target_root(Path.cwd(), None)
print(target.resolved_root, target.resolution_mode)
print(target.evidence, target.warnings)
```

Each of these marks a directory as a project root:

- `package.json`
- `composer.json`
- `Cargo.toml`
- `.git`

The search starts from the canonical working directory and goes upward.

`ResolveError` is raised in two cases:

- the explicit override is not an existing directory;
- no root is found above the working directory.

`ResolutionMode` records how the root was chosen:

- `EXPLICIT`: the override was used.
- `AUTO_NEAREST`: the nearest root was used.
- `AUTO_PROMOTED`: the parent workspace was used.

The parent counts as a workspace when one of these holds:

- Its `package.json` mentions `"workspaces"`.
- Its `Cargo.toml` has `[workspace]` and `members`.

In either case the file must also contain the child's directory name or a `*`.
A child with its own `.git` is never promoted. The result then carries a
warning.

`canonicalize_best_effort(path)` resolves a path that exists and returns any
other path unchanged.

## Help and header

```python
from pathlib import Path
from effigy.commands import HelpTopic
from effigy.help import render_help, render_cli_header

print(render_cli_header(Path("/tmp/repo")), end="")
print(render_help(HelpTopic.TASKS), end="")
```

Both functions return strings. The header is a box that holds `EFFIGY`, the
root path and the version. It is drawn with ANSI colours unless `NO_COLOR` is
set or `EFFIGY_COLOR` is `never`.

## JSON envelopes

```python
from effigy.envelope import success_envelope, error_envelope, render_envelope

payload = success_envelope("tasks", "tasks", {"schema": "effigy.tasks.v1"})
print(render_envelope(payload))

failure = error_envelope("cli", "parse", "CliParseError", "unknown argument: --x", None)
print(render_envelope(failure))
```

Envelopes carry these keys:

- `schema`, which is `effigy.command.v1`
- `schema_version`, which is `1`
- `ok`
- `command`, holding `kind` and `name`
- `result`
- `error`, holding `kind`, `message` and `details`

`render_envelope` writes JSON indented by two spaces, with the keys sorted.

The module also has these helpers:

- `command_kind_and_name` names a parsed command for its envelope, for example
  `("task", "build")` or `("help", "general")`.
- `parse_json_or_string` decodes JSON output. Anything that is not JSON comes
  back wrapped as `{"text": ...}`.
- `help_payload` builds the `effigy.help.v1` document for a help topic. Its
  `text` field holds the rendered help.

## What this package does not do

There is no `effigy` console command. Nothing here runs, schedules or
supervises tasks. The package reads no `effigy.toml` catalogs and does not
list or resolve catalog tasks. The `doctor` checks, test-runner detection,
`watch`, `init`, `migrate` and `unlock` are not carried out either.
`parse_command` recognises these commands, and the help panels describe them.
Acting on the parsed command is left to the caller.