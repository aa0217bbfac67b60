import pytest

from conftest import PASSING_PAGE
from persistence.run_store import create_run, get_run, init_db, list_runs, update_run
from records import GeneratedArtifact


@pytest.fixture(autouse=True)
def db(tmp_path):
    init_db(f"sqlite:///{tmp_path / 'runs.db'}")


def _artifact(name, verdict):
    return GeneratedArtifact(
        name=name,
        kind="page",
        relative_path=f"src/pages/{name}.tsx",
        source=PASSING_PAGE,
        verdict=verdict,
    )


def test_create_run_starts_running():
    run = create_run("abc12345", "run", "https://app.example.com")
    assert run.status == "running"
    assert get_run("abc12345").target_url == "https://app.example.com"


def test_update_run_records_counts():
    create_run("abc12345", "regenerate")
    state = {
        "snapshots": [object(), object()],
        "components": [object()],
        "artifacts": [
            _artifact("HomePage", "passed"),
            _artifact("TasksPage", "accepted_with_defects"),
            _artifact("ProjectsPage", "placeholder"),
        ],
        "total_tokens": 1234,
        "cost_usd": 0.0123,
    }
    update_run("abc12345", state)

    run = get_run("abc12345")
    assert run.status == "completed"
    assert run.completed_at is not None
    assert (run.pages, run.components, run.artifacts) == (2, 1, 3)
    assert (run.defects, run.placeholders) == (1, 1)
    assert run.total_tokens == 1234
    assert run.cost_usd == pytest.approx(0.0123)
    assert run.error is None


def test_update_run_with_error_marks_failed():
    create_run("abc12345", "run")
    update_run("abc12345", {}, error="No crawl output")

    run = get_run("abc12345")
    assert run.status == "failed"
    assert run.error == "No crawl output"
    assert run.artifacts == 0


def test_update_unknown_run_is_ignored():
    update_run("missing", {"total_tokens": 5})
    assert get_run("missing") is None


def test_list_runs_newest_first_with_limit():
    for run_id in ("one", "two", "three"):
        create_run(run_id, "run")

    runs = list_runs(limit=2)
    assert len(runs) == 2
    assert {r.id for r in list_runs()} == {"one", "two", "three"}
