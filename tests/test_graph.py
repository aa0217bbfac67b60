import asyncio
import threading

import pytest

from conftest import PASSING_COMPONENT, PASSING_PAGE, FakeClient
from errors import CrawlError
from graph import _route_entry, build_graph
from persistence.snapshot_store import build_summary, load_page_tokens, save_snapshot, save_summary


def test_entry_routing():
    assert _route_entry({"mode": "regenerate"}) == "load"
    assert _route_entry({"mode": "run"}) == "crawl"
    assert _route_entry({}) == "crawl"


def test_regenerate_runs_from_saved_crawl(settings, tasks_snapshot):
    save_snapshot(settings.output_dir, tasks_snapshot)
    save_summary(settings.output_dir, build_summary(settings.output_dir, [tasks_snapshot], []))
    client = FakeClient(by_kind={"component": PASSING_COMPONENT, "page": PASSING_PAGE})

    app = build_graph(settings, client)
    final = asyncio.run(app.ainvoke({"run_id": "test", "mode": "regenerate", "total_tokens": 0, "cost_usd": 0.0}))

    assert [s.path for s in final["snapshots"]] == ["/tasks"]
    assert {c.name for c in final["components"]} == {"Header", "MainContent", "Button"}
    assert final["design_tokens"].buckets["backgrounds"]["dark"] == "rgb(46, 46, 48)"
    assert load_page_tokens(settings.output_dir, 0) == final["page_tokens"][0]

    names = {a.name for a in final["artifacts"]}
    assert {"Sidebar", "TasksPage", "TaskDetailPage"} <= names
    assert final["total_tokens"] == 150 * len(client.requests)
    assert final["cost_usd"] > 0

    app_dir = settings.app_dir
    assert (app_dir / "src/pages/TasksPage.tsx").read_text() == PASSING_PAGE
    assert "TaskDetailPage" in (app_dir / "src/App.tsx").read_text()
    assert "<title>My tasks</title>" in (app_dir / "index.html").read_text()
    assert all(row.ok for row in final["report"])


def test_regenerate_without_crawl_output_fails(settings):
    app = build_graph(settings, FakeClient([PASSING_PAGE]))
    with pytest.raises(CrawlError):
        asyncio.run(app.ainvoke({"run_id": "test", "mode": "regenerate"}))


def test_review_prompt_runs_off_the_event_loop(settings, tasks_snapshot, monkeypatch):
    settings = settings.model_copy(update={"require_human_review": True})
    save_snapshot(settings.output_dir, tasks_snapshot)
    save_summary(settings.output_dir, build_summary(settings.output_dir, [tasks_snapshot], []))
    risky = PASSING_COMPONENT.replace('className="p-4"', 'dangerouslySetInnerHTML={{ __html: x }}')
    client = FakeClient(by_kind={"component": risky, "page": PASSING_PAGE})

    prompted = []
    monkeypatch.setattr("builtins.input", lambda prompt="": prompted.append(threading.current_thread()) or "")

    app = build_graph(settings, client)
    asyncio.run(app.ainvoke({"run_id": "test", "mode": "regenerate", "total_tokens": 0, "cost_usd": 0.0}))

    assert len(prompted) == 1
    assert prompted[0] is not threading.main_thread()
