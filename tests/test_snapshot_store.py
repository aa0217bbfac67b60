import json

import pytest

from errors import CrawlError
from persistence.snapshot_store import (
    SUMMARY_FILE,
    build_summary,
    load_page_tokens,
    load_snapshots,
    load_summary,
    save_page_tokens,
    save_snapshot,
    save_summary,
)
from records import DesignTokenSet
from stages.tagger import extract_components


def _save_crawl(output_dir, snapshots):
    for snapshot in snapshots:
        save_snapshot(output_dir, snapshot)
    save_summary(output_dir, build_summary(output_dir, snapshots, extract_components(snapshots)))


def test_layout_on_disk(tmp_path, tasks_snapshot):
    _save_crawl(tmp_path, [tasks_snapshot])

    for relpath in (
        "html/page-0.html",
        "css/page-0.json",
        "css/page-0/stylesheet-0.css",
        "structure/page-0.json",
        "screenshots/page-0-viewport.png",
        "screenshots/page-0-full.png",
        SUMMARY_FILE,
    ):
        assert (tmp_path / relpath).is_file(), relpath


def test_summary_contents(tmp_path, tasks_snapshot):
    _save_crawl(tmp_path, [tasks_snapshot])
    data = json.loads((tmp_path / SUMMARY_FILE).read_text())

    assert data["stats"] == {
        "total_pages": 1,
        "total_components": 3,
        "component_types": ["button", "header", "main"],
    }
    assert data["pages"][0]["screenshots"] == {
        "viewport": "screenshots/page-0-viewport.png",
        "full": "screenshots/page-0-full.png",
    }
    assert data["components"][0] == {
        "name": "Header",
        "type": "header",
        "selector": "#topbar",
        "pages": ["https://app.example.com/tasks"],
    }


def test_snapshot_round_trip(tmp_path, tasks_snapshot):
    second = tasks_snapshot.model_copy(update={
        "index": 1,
        "url": "https://app.example.com/home",
        "path": "/home",
        "stylesheets": ["a { color: #111111; }", "b { color: #222222; }"],
        "full_png": None,
    })
    _save_crawl(tmp_path, [tasks_snapshot, second])

    loaded = load_snapshots(tmp_path)
    assert loaded[0] == tasks_snapshot
    assert loaded[1].stylesheets == ["a { color: #111111; }", "b { color: #222222; }"]
    assert loaded[1].full_png is None
    assert loaded[1].screenshot == tasks_snapshot.viewport_png


def test_missing_output_is_a_crawl_error(tmp_path):
    with pytest.raises(CrawlError, match="Run the full pipeline first"):
        load_summary(tmp_path)
    with pytest.raises(CrawlError):
        load_snapshots(tmp_path)


def test_summary_without_pages_is_a_crawl_error(tmp_path):
    save_summary(tmp_path, build_summary(tmp_path, [], []))
    with pytest.raises(CrawlError, match="lists no pages"):
        load_snapshots(tmp_path)


def test_page_tokens_round_trip(tmp_path):
    tokens = DesignTokenSet(colors=["#111111"], buckets={"borders": {"default": "#cccccc"}})
    save_page_tokens(tmp_path, 3, tokens)

    assert load_page_tokens(tmp_path, 3) == tokens
    assert load_page_tokens(tmp_path, 4) is None
