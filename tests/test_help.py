import pytest

from effigy.commands import HelpTopic
from effigy.help import VERSION, render_cli_header, render_help


def test_render_help_writes_structured_sections():
    rendered = render_help(HelpTopic.GENERAL)
    assert "Commands" in rendered
    assert "effigy help" in rendered
    assert "effigy config" in rendered
    assert "effigy doctor" in rendered
    assert "effigy test" in rendered
    assert "effigy watch" in rendered
    assert "effigy init" in rendered
    assert "effigy migrate" in rendered
    assert "<catalog>/test fallback" in rendered
    assert "effigy test --plan" not in rendered
    assert "Use `effigy <built-in-task> --help`" in rendered
    assert "Quick Start" not in rendered
    assert "effigy Help" not in rendered


def test_render_doctor_help_shows_fix_and_json_options():
    rendered = render_help(HelpTopic.DOCTOR)
    assert "doctor Help" in rendered
    assert "--fix" in rendered
    assert "--verbose" in rendered
    assert "--json" in rendered
    assert "effigy doctor --fix" in rendered
    assert "effigy doctor --verbose" in rendered
    assert "effigy doctor <task> <args>" in rendered
    assert "effigy doctor farmyard/build -- --watch" in rendered


def test_render_tasks_help_shows_resolve_and_json_options():
    rendered = render_help(HelpTopic.TASKS)
    assert "tasks Help" in rendered
    assert "--resolve <SELECTOR>" in rendered
    assert "routing probes only when debugging selector resolution" in rendered
    assert "--json" in rendered
    assert "--pretty <true|false>" in rendered
    assert "effigy tasks --resolve <catalog>/<task>" in rendered
    assert "effigy tasks --json --resolve test" in rendered


def test_render_test_help_shows_detection_and_config():
    rendered = render_help(HelpTopic.TEST)
    expected = [
        "test Help",
        "built-in test runner detection by default",
        "`tasks.test` is defined, it takes precedence",
        "<catalog>/test fallback",
        "Detection Order",
        "--verbose-results",
        "--tui",
        "[suite] [runner args]",
        "effigy test vitest user-service",
        "effigy <catalog>/test",
        "effigy test --plan user-service",
        "effigy test --plan viteest user-service",
        "Named Test Selection",
        "effigy test user-service",
        "prefix the suite explicitly",
        "check `available-suites` per target",
        "suggests nearest suite names",
        "source of truth and auto-detection is skipped",
        "Migration",
        "ambiguous in multi-suite repos",
        "effigy test viteest user-service",
        "suggests `effigy test vitest user-service`",
        "effigy test nextest user_service --nocapture",
        "Error Recovery",
        "Ambiguity: `effigy test user-service`",
        "Unavailable or mistyped suite",
        "[package_manager]",
        'js = "bun"',
        "[test]",
        "max_parallel = 2",
        "[test.suites]",
        'unit = "bun x vitest run"',
        "[test.runners]",
        'vitest = "bun x vitest run"',
        "Task-ref chain with quoted args",
        'run = [{ task = "test vitest \\"user service\\"" }, "printf validate-ok"]',
        "Task-ref chain parsing is shell-like tokenization only",
    ]
    for marker in expected:
        assert marker in rendered, marker
    assert "[tasks.test]" not in rendered


def test_render_watch_help_shows_phase_scope():
    rendered = render_help(HelpTopic.WATCH)
    assert "watch Help" in rendered
    assert "--owner <effigy|external>" in rendered
    assert "--debounce-ms <MS>" in rendered
    assert "file-triggered reruns for non-watcher tasks" in rendered


def test_render_init_help_shows_phase_scope():
    rendered = render_help(HelpTopic.INIT)
    assert "init Help" in rendered
    assert "effigy init [--dry-run] [--force] [--json]" in rendered
    assert "generate minimal valid effigy.toml" in rendered
    assert "--dry-run" in rendered
    assert "--force" in rendered


def test_render_migrate_help_shows_phase_scope():
    rendered = render_help(HelpTopic.MIGRATE)
    assert "migrate Help" in rendered
    assert "effigy migrate [--from <PATH>] [--script <NAME>]... [--apply] [--json]" in rendered
    assert "import package.json scripts only" in rendered
    assert "--apply" in rendered
    assert "--script <NAME>" in rendered


@pytest.mark.parametrize(
    "topic,title",
    [
        (HelpTopic.DOCTOR, "doctor Help"),
        (HelpTopic.TASKS, "tasks Help"),
        (HelpTopic.TEST, "test Help"),
        (HelpTopic.WATCH, "watch Help"),
        (HelpTopic.INIT, "init Help"),
        (HelpTopic.MIGRATE, "migrate Help"),
    ],
)
def test_scoped_help_starts_with_its_title(topic, title):
    rendered = render_help(topic)
    assert rendered.splitlines()[0] == title
    assert rendered.endswith("\n")


def test_render_cli_header_includes_ascii_and_root():
    rendered = render_cli_header("/tmp/repo")
    assert "╭" in rendered
    assert "EFFIGY" in rendered
    assert "/tmp/repo" in rendered
    assert f"v{VERSION}" in rendered


def test_render_cli_header_plain_box(monkeypatch):
    monkeypatch.setenv("NO_COLOR", "1")
    lines = render_cli_header("/tmp/repo").split("\n")
    assert lines[0] == ""
    assert lines[1] == "╭" + "─" * 19 + "╮"
    assert lines[2] == "│ EFFIGY  /tmp/repo │"
    assert lines[3] == "╰" + "─" * 11 + " v0.1.0 ╯"
    assert lines[4] == ""
    assert len(lines[1]) == len(lines[2]) == len(lines[3])
    assert "\x1b" not in "\n".join(lines)


def test_render_cli_header_color_never_is_plain(monkeypatch):
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.setenv("EFFIGY_COLOR", "never")
    rendered = render_cli_header("/tmp/repo")
    assert "\x1b" not in rendered
    assert "│ EFFIGY  /tmp/repo │" in rendered


def test_render_cli_header_colored_by_default(monkeypatch):
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("EFFIGY_COLOR", raising=False)
    rendered = render_cli_header("/tmp/repo")
    assert "\x1b[" in rendered
    assert "EFFIGY" in rendered
    assert "/tmp/repo" in rendered
    assert f" v{VERSION} " in rendered