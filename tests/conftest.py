import pytest

from config import Settings
from errors import TransportError
from generation_client import Completion
from records import DomNode, PageSnapshot, SidebarInfo

PASSING_PAGE = """\
import React, { useState } from 'react';

const TasksPage: React.FC = () => {
  const [tasks, setTasks] = useState([{ id: 1, title: 'Write report', done: false }]);
  const addTask = () => setTasks([...tasks, { id: Date.now(), title: 'New task', done: false }]);
  return (
    <div>
      <button onClick={addTask}>Add task</button>
      {tasks.map(t => (
        <div key={t.id}>{t.title}</div>
      ))}
    </div>
  );
};

export default TasksPage;
"""

NO_CLICK_PAGE = PASSING_PAGE.replace("<button onClick={addTask}>", "<button>")

PASSING_COMPONENT = """\
import React from 'react';

const Widget: React.FC = () => {
  return <div className="p-4">Widget</div>;
};

export default Widget;
"""

TINY_PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class FakeClient:
    """Scripted stand-in for GenerationClient.

    Each entry in *replies* is either reply text or an exception to raise.
    When the script runs out, the last entry repeats.
    """

    def __init__(self, replies=None, by_kind=None):
        self.replies = list(replies or [])
        self.by_kind = by_kind or {}
        self.requests = []

    async def complete(self, request):
        self.requests.append(request)
        if self.by_kind:
            reply = self.by_kind[request.kind]
        else:
            index = min(len(self.requests) - 1, len(self.replies) - 1)
            reply = self.replies[index]
        if isinstance(reply, Exception):
            raise reply
        return Completion(text=reply, model="gpt-4o", input_tokens=100, output_tokens=50)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        target_url="https://app.example.com",
        openai_api_key="sk-test",
        output_dir=tmp_path / "output",
        app_dir=tmp_path / "app",
        metrics_port=0,
        database_url=f"sqlite:///{tmp_path / 'runs.db'}",
    )


@pytest.fixture
def transport_error():
    return TransportError("Widget: no response within 120s")


@pytest.fixture
def tasks_snapshot():
    structure = DomNode(
        tag="body",
        children=[
            DomNode(tag="header", id="topbar", classes=["topbar"], children=[
                DomNode(tag="span", text="My tasks"),
            ]),
            DomNode(tag="main", classes=["main-content"], children=[
                DomNode(tag="button", classes=["btn", "btn-primary"], text="Add task"),
            ]),
        ],
    )
    return PageSnapshot(
        index=0,
        url="https://app.example.com/tasks",
        path="/tasks",
        title="My tasks",
        html="<html><body></body></html>",
        computed_styles={"#topbar": {"backgroundColor": "rgb(255, 255, 255)"}},
        stylesheets=[".topbar { background-color: rgb(46, 46, 48); color: rgb(245, 244, 243); }"],
        structure=structure,
        viewport_png=TINY_PNG,
        full_png=TINY_PNG,
        sidebar=SidebarInfo(detected=True, collapsible=False),
    )
