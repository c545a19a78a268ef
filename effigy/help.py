"""Help panels and the banner shown at the top of command output."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Sequence, Union

from effigy.commands import HelpTopic

VERSION = "0.1.0"

_ACCENT = "\x1b[36m"
_ACCENT_SOFT = "\x1b[96m"
_MUTED = "\x1b[90m"
_RESET = "\x1b[0m"


class _HelpWriter:
    """Collects structured help output as plain text lines."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def text(self, line: str) -> None:
        self.lines.append(line)

    def section(self, title: str) -> None:
        self.lines.append(title)
        self.lines.append("─" * len(title))

    def notice(self, message: str) -> None:
        self.lines.append(f"info: {message}")

    def table(self, headers: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
        all_rows = [list(headers), *map(list, rows)] if headers else list(map(list, rows))
        if not all_rows:
            return
        columns = max(len(row) for row in all_rows)
        widths = [
            max((len(row[col]) for row in all_rows if col < len(row)), default=0)
            for col in range(columns)
        ]

        def render(row: Sequence[str]) -> str:
            cells = [cell.ljust(width) for cell, width in zip(row, widths)]
            return "  ".join(cells).rstrip()

        if headers:
            self.lines.append(render(headers))
            self.lines.append("  ".join("─" * width for width in widths))
        self.lines.extend(render(row) for row in rows)

    def key_values(self, pairs: Sequence[tuple[str, str]]) -> None:
        width = max((len(key) for key, _ in pairs), default=0)
        self.lines.extend(f"{key.ljust(width)}  {value}" for key, value in pairs)

    def bullet_list(self, items: Sequence[str]) -> None:
        self.lines.extend(f"- {item}" for item in items)

    def render(self) -> str:
        return "\n".join(self.lines) + "\n"


def _general(w: _HelpWriter) -> None:
    w.section("Commands")
    w.table(
        [],
        [
            ["effigy help", "Show general help (same as --help)"],
            ["effigy tasks", "List discovered catalogs/task commands and probe routing"],
            ["effigy config", "Show supported effigy.toml configuration keys and examples"],
            [
                "effigy doctor",
                "Run remedial-first health checks for environment, manifests, and task references",
            ],
            [
                "effigy test",
                "Run built-in auto-detected tests (or explicit tasks.test); supports <catalog>/test fallback",
            ],
            [
                "effigy watch",
                "Watch mode phase-1 runtime with explicit owner policy and debounce/glob controls",
            ],
            [
                "effigy init",
                "Initialize baseline effigy.toml scaffold with safe overwrite/dry-run controls",
            ],
            ["effigy migrate", "Migrate package scripts into `[tasks]` with preview/apply flow"],
            [
                "effigy unlock",
                "Manually clear lock scopes (`workspace`, `task:*`, `profile:*/*`)",
            ],
            ["effigy <task>", "Resolve task across discovered catalogs"],
            ["effigy <catalog>/<task>", "Run task from explicit catalog alias"],
        ],
    )
    w.text("")
    w.notice("Use `effigy <built-in-task> --help` for task-specific flags and examples.")
    w.key_values(
        [
            ("-h, --help", "Print this help panel"),
            ("--json", "Render command-envelope JSON for CI/tooling"),
        ]
    )


_OPTION_HEADERS = ["Option", "Description"]
_HELP_ROW = ["-h, --help", "Print command help"]


def _doctor(w: _HelpWriter) -> None:
    w.section("doctor Help")
    w.notice(
        "Run remediation-first health checks for environment tooling, manifest validity, and task references."
    )
    w.notice("Explain task resolution with `effigy doctor <task> <args>`.")
    w.text("")
    w.section("Usage")
    w.text("effigy doctor [--repo <PATH>] [--fix] [--verbose] [--json]")
    w.text("effigy doctor <task> <args> [--json]")
    w.text("")
    w.section("Options")
    w.table(
        _OPTION_HEADERS,
        [
            ["--repo <PATH>", "Override target repository path"],
            ["--fix", "Apply safe automatic remediations when available"],
            ["--verbose", "Include expanded per-finding detail in text output"],
            ["--json", "Render machine-readable doctor report payload"],
            _HELP_ROW,
        ],
    )
    w.text("")
    w.section("Examples")
    w.bullet_list(
        [
            "effigy doctor",
            "effigy doctor --repo /path/to/workspace",
            "effigy doctor --fix",
            "effigy doctor --verbose",
            "effigy doctor farmyard/build -- --watch",
            "effigy --json doctor --repo /path/to/workspace",
        ]
    )


def _tasks(w: _HelpWriter) -> None:
    w.section("tasks Help")
    w.notice(
        "List discovered task catalogs and task commands; use routing probes only when debugging selector resolution."
    )
    w.text("")
    w.section("Usage")
    w.text(
        "effigy tasks [--repo <PATH>] [--task <TASK_NAME>] [--resolve <SELECTOR>] [--json] [--pretty true|false]"
    )
    w.text("")
    w.section("Options")
    w.table(
        _OPTION_HEADERS,
        [
            ["--repo <PATH>", "Override target repository path"],
            ["--task <TASK_NAME>", "Filter output to matching task entries"],
            [
                "--resolve <SELECTOR>",
                "Probe task routing evidence for a selector (for example `<catalog>/task` or `test`)",
            ],
            ["--json", "Render machine-readable task catalog payload"],
            [
                "--pretty <true|false>",
                "When used with --json, toggle pretty formatting (default: true)",
            ],
            _HELP_ROW,
        ],
    )
    w.text("")
    w.section("Examples")
    w.bullet_list(
        [
            "effigy tasks",
            "effigy tasks --repo /path/to/workspace",
            "effigy tasks --repo /path/to/workspace --task db:reset",
            "effigy tasks --resolve <catalog>/<task>",
            "effigy tasks --json --resolve test",
            "effigy --json tasks --repo /path/to/workspace --task test",
        ]
    )


def _test(w: _HelpWriter) -> None:
    w.section("test Help")
    w.notice(
        "Run built-in test runner detection by default (including <catalog>/test fallback)."
    )
    w.notice("If `tasks.test` is defined, it takes precedence over built-in detection.")
    w.text("")
    w.section("Usage")
    w.text("effigy test [--plan] [--verbose-results] [--tui] [suite] [runner args]")
    w.text("effigy test --help")
    w.text("")
    w.notice(
        "When multiple suites are detected and runner args are provided, prefix the suite explicitly (for example `effigy test vitest my-test`)."
    )
    w.notice(
        "If `[test.suites]` is defined in effigy.toml, those suites are used as source of truth and auto-detection is skipped."
    )
    w.notice(
        "Use `effigy test --plan ...` and check `available-suites` per target before running filtered tests."
    )
    w.notice(
        "When suite names are mistyped or unavailable, effigy suggests nearest suite names and copy-paste retry commands."
    )
    w.text("")
    w.section("Options")
    w.table(
        _OPTION_HEADERS,
        [
            ["--plan", "Print per-target detection plan and fallback chain without executing"],
            ["--verbose-results", "Include runner/root/command fields in Test Results output"],
            [
                "--tui",
                "Force TUI mode when interactive (auto-enabled when multiple suites are detected)",
            ],
            _HELP_ROW,
        ],
    )
    w.text("")
    w.section("Detection Order")
    w.bullet_list(
        [
            "vitest (package/config/bin markers)",
            "cargo nextest run (when Cargo.toml exists and cargo-nextest is available)",
            "cargo test (Rust fallback)",
        ]
    )
    w.text("")
    w.section("Configuration")
    for line in (
        "Root manifest (fanout concurrency):",
        "[package_manager]",
        'js = "bun"  # optional: bun|pnpm|npm|direct',
        "[test]",
        "max_parallel = 2",
        "[test.suites]",
        'unit = "bun x vitest run"',
        'integration = "cargo nextest run"',
        "[test.runners]",
        'vitest = "bun x vitest run"',
        '"cargo-nextest" = "cargo nextest run --workspace"',
        "",
        "Task-ref chain with quoted args:",
        "[tasks.validate]",
        'run = [{ task = "test vitest \\"user service\\"" }, "printf validate-ok"]',
    ):
        w.text(line)
    w.notice(
        'Task-ref chain parsing is shell-like tokenization only; Effigy does not perform shell expansion inside `task = "..."` values.'
    )
    w.text("")
    w.section("Examples")
    w.bullet_list(
        [
            "effigy test",
            "effigy test vitest",
            "effigy test nextest user_service --nocapture",
            "effigy <catalog>/test",
            "effigy test --plan",
            "effigy test --plan user-service",
            "effigy test --plan viteest user-service",
            "effigy test --verbose-results",
            "effigy test --tui",
            "effigy test -- --runInBand",
            "effigy test -- --watch",
        ]
    )
    w.text("")
    w.section("Named Test Selection")
    w.bullet_list(
        [
            "effigy test user-service",
            "effigy test vitest user-service",
            "effigy test viteest user-service  # suggests vitest",
            "effigy <catalog>/test billing",
            "effigy test -- tests/api/user.test.ts",
            "effigy test -- user_service --nocapture",
        ]
    )
    w.text("")
    w.section("Error Recovery")
    w.bullet_list(
        [
            "Ambiguity: `effigy test user-service` in multi-suite repos fails and suggests suite-first retries.",
            "Unavailable or mistyped suite: `effigy test viteest user-service` fails with nearest suite name and a copy-paste command.",
        ]
    )
    w.text("")
    w.section("Migration")
    w.bullet_list(
        [
            "before: effigy test user-service (ambiguous in multi-suite repos)",
            "after: effigy test vitest user-service",
            "after: effigy test nextest user_service --nocapture",
            "after: effigy test viteest user-service -> suggests `effigy test vitest user-service`",
        ]
    )


def _watch(w: _HelpWriter) -> None:
    w.section("watch Help")
    w.notice(
        "Run file-triggered reruns for non-watcher tasks with explicit watch-owner policy controls."
    )
    w.text("")
    w.section("Usage")
    w.text(
        "effigy watch --owner <effigy|external> [--debounce-ms <MS>] [--include <GLOB>] [--exclude <GLOB>] <task> [task args]"
    )
    w.text("effigy watch --owner effigy --once <task> [task args]")
    w.text("")
    w.section("Options")
    w.table(
        _OPTION_HEADERS,
        [
            [
                "--owner <effigy|external>",
                "Required owner policy. `effigy` enables file-triggered reruns; `external` blocks nested loops and expects task-managed watching.",
            ],
            [
                "--debounce-ms <MS>",
                "Debounce quiet window before rerunning after detected changes (default: 400).",
            ],
            ["--include <GLOB>", "Optional repeatable include glob set (defaults to all files)."],
            [
                "--exclude <GLOB>",
                "Optional repeatable exclude glob set, merged with default excludes (`.git/**`, `node_modules/**`, `target/**`).",
            ],
            [
                "--once",
                "Run target once with watch policy checks, then exit (useful for CI/contracts).",
            ],
            ["--max-runs <N>", "Stop after N executions (useful for bounded automation/testing)."],
            ["--json", "Render JSON payload for bounded runs (`--once` or `--max-runs`)."],
            [
                "lock scope",
                "Effigy owner mode acquires `task:watch:<target>`; clear manually with `effigy unlock task:watch:<target>` when needed.",
            ],
            _HELP_ROW,
        ],
    )
    w.text("")
    w.section("Phase-1 Scope")
    w.bullet_list(
        [
            "file-triggered reruns for non-watcher tasks",
            "explicit watch-owner policy safeguards",
            "debounce and include/exclude glob controls",
            "fail-fast guidance when owner policy indicates external watcher ownership",
        ]
    )


def _init(w: _HelpWriter) -> None:
    w.section("init Help")
    w.notice(
        "Generate a baseline `effigy.toml` scaffold with minimal defaults and commented examples."
    )
    w.text("")
    w.section("Usage")
    w.text("effigy init [--dry-run] [--force] [--json]")
    w.text("")
    w.section("Options")
    w.table(
        _OPTION_HEADERS,
        [
            ["--dry-run", "Print scaffold content without writing to disk."],
            ["--force", "Overwrite existing `effigy.toml` if present."],
            ["--json", "Render machine-readable init report payload."],
            _HELP_ROW,
        ],
    )
    w.text("")
    w.section("Phase-1 Scope")
    w.bullet_list(
        [
            "generate minimal valid effigy.toml",
            "include commented DAG and managed task examples",
            "safe file existence handling (`--dry-run`/`--force`)",
        ]
    )


def _migrate(w: _HelpWriter) -> None:
    w.section("migrate Help")
    w.notice(
        "Import `package.json` scripts into `[tasks]` with preview-first, explicit apply flow."
    )
    w.text("")
    w.section("Usage")
    w.text("effigy migrate [--from <PATH>] [--script <NAME>]... [--apply] [--json]")
    w.text("")
    w.section("Options")
    w.table(
        _OPTION_HEADERS,
        [
            ["--from <PATH>", "Override source package file (default: <repo>/package.json)."],
            ["--script <NAME>", "Repeatable script selector filter (defaults to all scripts)."],
            ["--apply", "Write ready imports into `[tasks]` (preview-only by default)."],
            ["--json", "Render machine-readable migration report payload."],
            _HELP_ROW,
        ],
    )
    w.text("")
    w.section("Phase-1 Scope")
    w.bullet_list(
        [
            "import package.json scripts only",
            "preview + explicit apply flow",
            "non-destructive source preservation",
            "manual remediation hints for task-name conflicts",
        ]
    )


_RENDERERS: dict[HelpTopic, Callable[[_HelpWriter], None]] = {
    HelpTopic.GENERAL: _general,
    HelpTopic.DOCTOR: _doctor,
    HelpTopic.TASKS: _tasks,
    HelpTopic.TEST: _test,
    HelpTopic.WATCH: _watch,
    HelpTopic.INIT: _init,
    HelpTopic.MIGRATE: _migrate,
}


def render_help(topic: HelpTopic) -> str:
    """Return the plain-text help panel for `topic`."""
    writer = _HelpWriter()
    _RENDERERS[HelpTopic(topic)](writer)
    return writer.render()


def _use_color() -> bool:
    if "NO_COLOR" in os.environ:
        return False
    return os.environ.get("EFFIGY_COLOR", "auto") != "never"


def render_cli_header(root: Union[str, Path]) -> str:
    """Return the boxed banner naming the tool, the project root and the version."""
    title_line = "EFFIGY"
    path_line = str(root)
    combined_line = f"{title_line}  {path_line}"
    version = f" v{VERSION} "
    inner_width = len(combined_line)
    bottom_fill = max(inner_width + 2 - len(version), 0)

    if _use_color():
        spacer = "  "
        trailing = " " * max(inner_width - len(title_line + spacer + path_line), 0)
        box = [
            f"{_ACCENT}╭{'─' * (inner_width + 2)}╮{_RESET}",
            f"{_ACCENT}│ {_RESET}{_ACCENT}{title_line}{_RESET}{_MUTED}{spacer}{path_line}"
            f"{trailing}{_RESET}{_ACCENT} │{_RESET}",
            f"{_ACCENT}╰{'─' * bottom_fill}{_RESET}{_ACCENT_SOFT}{version}{_RESET}"
            f"{_ACCENT}╯{_RESET}",
        ]
    else:
        box = [
            f"╭{'─' * (inner_width + 2)}╮",
            f"│ {combined_line:<{inner_width}} │",
            f"╰{'─' * bottom_fill}{version}╯",
        ]
    return "\n".join(["", *box, ""]) + "\n"