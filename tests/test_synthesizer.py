import asyncio

import pytest

from conftest import NO_CLICK_PAGE, PASSING_COMPONENT, PASSING_PAGE, TINY_PNG, FakeClient
from records import ComponentCandidate, PageSnapshot
from stages.synthesizer import (
    component_target,
    generate_all,
    isolate_source,
    page_filename,
    page_target,
    strip_code_fence,
    synthesize,
)
from stages.tagger import extract_components


def _run(coro):
    return asyncio.run(coro)


def _tasks_target(snapshot):
    return page_target(snapshot, "TasksPage", ["Button", "Header", "Sidebar"], None)


# ── Response cleanup ─────────────────────────────────────────────────────────

def test_strip_code_fence_takes_first_block():
    reply = "Here you go:\n```tsx\nconst a = 1;\n```\nThanks"
    assert strip_code_fence(reply) == "const a = 1;"


def test_strip_code_fence_without_fence():
    assert strip_code_fence("  plain text \n") == "plain text"


def test_isolate_source_drops_prose_after_default_export():
    reply = f"```tsx\n{PASSING_PAGE}```\n\nThis page keeps tasks in state."
    assert isolate_source(reply) == PASSING_PAGE


def test_isolate_source_cuts_trailing_text_without_fence():
    reply = PASSING_COMPONENT + "\nLet me know if you need changes!"
    assert isolate_source(reply) == PASSING_COMPONENT


def test_isolate_source_handles_unterminated_fence():
    reply = "```typescript\n" + PASSING_COMPONENT
    assert isolate_source(reply) == PASSING_COMPONENT


# ── The loop ─────────────────────────────────────────────────────────────────

def test_passes_on_first_attempt(settings, tasks_snapshot):
    client = FakeClient([PASSING_PAGE])
    artifact = _run(synthesize(_tasks_target(tasks_snapshot), client, settings))

    assert artifact.verdict == "passed"
    assert artifact.attempts == 1
    assert artifact.violations == []
    assert artifact.relative_path == "src/pages/TasksPage.tsx"
    assert artifact.input_tokens == 100
    assert artifact.output_tokens == 50
    assert len(client.requests) == 1


def test_retry_prompt_names_previous_violation(settings, tasks_snapshot):
    client = FakeClient([NO_CLICK_PAGE, PASSING_PAGE])
    artifact = _run(synthesize(_tasks_target(tasks_snapshot), client, settings))

    assert artifact.verdict == "passed"
    assert artifact.attempts == 2
    first, second = client.requests
    assert "missing click binding" not in first.prompt
    assert 'You MUST fix "missing click binding"' in second.prompt


def test_temperatures_drop_after_first_attempt(settings, tasks_snapshot):
    client = FakeClient([NO_CLICK_PAGE])
    _run(synthesize(_tasks_target(tasks_snapshot), client, settings))

    assert [r.temperature for r in client.requests] == [0.3, 0.2, 0.2]


def test_ceiling_reached_keeps_last_output_with_defects(settings, tasks_snapshot):
    client = FakeClient([NO_CLICK_PAGE])
    artifact = _run(synthesize(_tasks_target(tasks_snapshot), client, settings))

    assert artifact.verdict == "accepted_with_defects"
    assert artifact.attempts == 3
    assert artifact.violations == ["missing click binding"]
    assert artifact.source == NO_CLICK_PAGE
    assert len(client.requests) == 3


def test_ceiling_is_configurable(settings, tasks_snapshot):
    settings = settings.model_copy(update={"max_attempts": 1})
    client = FakeClient([NO_CLICK_PAGE])
    artifact = _run(synthesize(_tasks_target(tasks_snapshot), client, settings))

    assert artifact.attempts == 1
    assert len(client.requests) == 1


@pytest.mark.parametrize("fail_on", [1, 2])
def test_transport_error_yields_placeholder_without_retry(settings, tasks_snapshot, transport_error, fail_on):
    replies = [NO_CLICK_PAGE] * (fail_on - 1) + [transport_error, PASSING_PAGE]
    client = FakeClient(replies)
    artifact = _run(synthesize(_tasks_target(tasks_snapshot), client, settings))

    assert artifact.verdict == "placeholder"
    assert artifact.attempts == fail_on
    assert len(client.requests) == fail_on
    assert "const TasksPage: React.FC" in artifact.source
    assert "My tasks" in artifact.source


def test_image_attached_when_enabled(settings, tasks_snapshot):
    client = FakeClient([PASSING_PAGE])
    _run(synthesize(_tasks_target(tasks_snapshot), client, settings))
    assert client.requests[0].image_png == TINY_PNG


def test_image_not_attached_when_disabled(settings, tasks_snapshot):
    settings = settings.model_copy(update={"attach_screenshots": False})
    client = FakeClient([PASSING_PAGE])
    _run(synthesize(_tasks_target(tasks_snapshot), client, settings))
    assert client.requests[0].image_png is None


def test_no_code_reply_reasks_once_without_image(settings, tasks_snapshot):
    client = FakeClient(["I'm sorry, I can't help with that screenshot.", NO_CLICK_PAGE])
    artifact = _run(synthesize(_tasks_target(tasks_snapshot), client, settings))

    images = [r.image_png for r in client.requests]
    assert images[0] == TINY_PNG
    assert all(img is None for img in images[1:])
    assert len(client.requests) <= settings.max_attempts + 1
    assert len(client.requests) == 4
    assert artifact.attempts == 3
    assert artifact.verdict == "accepted_with_defects"


def test_component_target_uses_component_checklist(settings):
    candidate = ComponentCandidate(
        name="Card", type="card", selector=".task-card", page_url="https://app.example.com/tasks"
    )
    client = FakeClient([PASSING_COMPONENT])
    artifact = _run(synthesize(component_target(candidate, None), client, settings))

    assert artifact.verdict == "passed"
    assert artifact.relative_path == "src/components/Card.tsx"
    assert client.requests[0].kind == "component"


# ── Naming ───────────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "path, title, expected",
    [
        ("", "", "HomePage"),
        ("/0/home/123", "Home", "HomePage"),
        ("/0/projects/42", "Website launch", "ProjectsPage"),
        ("/0/project/42/list", "My tasks - Acme", "TasksPage"),
        ("/tasks", "", "TasksPage"),
        ("/0/my_tasks", "", "TasksPage"),
        ("/0/reporting-dashboard", "", "ReportingDashboardPage"),
        ("/0/42", "", "HomePage"),
    ],
)
def test_page_filename(path, title, expected):
    assert page_filename(path, title) == expected


# ── Whole app ────────────────────────────────────────────────────────────────

def _home_snapshot():
    return PageSnapshot(
        index=1,
        url="https://app.example.com/home",
        path="/home",
        title="Home",
        html="<html></html>",
    )


def test_generate_all_fills_in_base_components_and_detail_page(settings, tasks_snapshot):
    client = FakeClient(by_kind={"component": PASSING_COMPONENT, "page": PASSING_PAGE})
    # Header and Button are tagged from the structure; no sidebar is.
    candidates = extract_components([tasks_snapshot])
    assert {c.name for c in candidates} == {"Header", "MainContent", "Button"}

    artifacts = _run(generate_all([tasks_snapshot, _home_snapshot()], candidates, {}, client, settings))
    by_name = {a.name: a for a in artifacts}

    assert set(by_name) == {
        "Sidebar", "Header", "MainContent", "Button", "TasksPage", "HomePage", "TaskDetailPage"
    }
    assert by_name["Sidebar"].attempts == 1
    assert by_name["TaskDetailPage"].verdict == "passed"
    assert by_name["TaskDetailPage"].attempts == 0
    assert [a.kind for a in artifacts].count("page") == 3
    generated = [r.artifact for r in client.requests]
    assert generated[0] == "Sidebar"
    assert "TaskDetailPage" not in generated


def test_generate_all_uses_static_layout_without_screenshot(settings):
    snapshot = _home_snapshot()
    client = FakeClient(by_kind={"component": PASSING_COMPONENT, "page": PASSING_PAGE})
    artifacts = _run(generate_all([snapshot], [], {}, client, settings))
    by_name = {a.name: a for a in artifacts}

    assert by_name["Sidebar"].attempts == 0
    assert by_name["Header"].attempts == 0
    assert by_name["Button"].attempts == 0
    assert "TaskDetailPage" not in by_name
    assert [r.artifact for r in client.requests] == ["HomePage"]


def test_generate_all_skips_duplicate_page_names(settings):
    first = _home_snapshot()
    second = first.model_copy(update={"index": 2, "url": "https://app.example.com/0/home", "path": "/0/home"})
    client = FakeClient(by_kind={"component": PASSING_COMPONENT, "page": PASSING_PAGE})
    artifacts = _run(generate_all([first, second], [], {}, client, settings))

    pages = [a for a in artifacts if a.kind == "page"]
    assert [p.name for p in pages] == ["HomePage"]
    assert "https://app.example.com/home" in client.requests[-1].prompt
