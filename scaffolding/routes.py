"""Route table and router entry derived from generated page filenames."""

from pathlib import PurePath
from typing import Iterable

HOME_PAGE = "HomePage"


def derive_route(name: str) -> str:
    """Map a page component name to its route by fixed substring rules."""
    if "Detail" in name and "Task" in name:
        return "/tasks/:id"
    if "Projects" in name:
        return "/projects"
    if "Tasks" in name and "Detail" not in name:
        return "/tasks"
    return "/"


def build_route_table(filenames: Iterable[str]) -> dict[str, str]:
    """Return ``{route: page_name}``.

    Input order does not matter. ``HomePage`` owns ``/``; for any other clash
    the alphabetically first page keeps the route.
    """
    names = sorted({PurePath(f).stem for f in filenames})
    table: dict[str, str] = {}
    if HOME_PAGE in names:
        table["/"] = HOME_PAGE
    for name in names:
        route = derive_route(name)
        table.setdefault(route, name)
    return dict(sorted(table.items(), key=lambda kv: (kv[0] != "/", kv[0])))


def render_app(filenames: Iterable[str]) -> str:
    """Source of ``src/App.tsx`` importing every page and mounting its route."""
    names = sorted({PurePath(f).stem for f in filenames})
    table = build_route_table(names)
    imports = "\n".join(f"import {name} from './pages/{name}';" for name in names)
    routes = "\n".join(
        f'        <Route path="{route}" element={{<{name} />}} />' for route, name in table.items()
    )
    return (
        "import React from 'react';\n"
        "import { BrowserRouter as Router, Routes, Route } from 'react-router-dom';\n"
        f"{imports}\n"
        "import './styles/global.css';\n"
        "\n"
        "const App: React.FC = () => {\n"
        "  return (\n"
        "    <Router>\n"
        "      <Routes>\n"
        f"{routes}\n"
        "      </Routes>\n"
        "    </Router>\n"
        "  );\n"
        "};\n"
        "\n"
        "export default App;\n"
    )
