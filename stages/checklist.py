"""Static checklists that gate generated source text.

Checks are substring/regex presence tests on the raw text, not a parse. Each
item carries the message recorded on the artifact and the corrective
instruction fed into the next prompt.
"""

import re
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class ChecklistItem:
    key: str
    message: str
    correction: str
    violated: Callable[[str], bool]


# ── Page checklist ───────────────────────────────────────────────────────────

_DOMAIN_STATE = re.compile(r"const\s+\[\s*(?:tasks|projects|items|data)\b")
_MUTATION_FN = re.compile(r"(?:const|function)\s+(?:add|delete|remove|toggle)[A-Z_]\w*")

PAGE_CHECKLIST: tuple[ChecklistItem, ...] = (
    ChecklistItem(
        key="state_hook",
        message="missing useState state management",
        correction="Import useState from 'react' and keep the page data in component state.",
        violated=lambda code: "useState" not in code,
    ),
    ChecklistItem(
        key="domain_state",
        message="missing domain state variable",
        correction=(
            "Declare the page data as state bound to a domain noun, e.g. "
            "const [tasks, setTasks] = useState([...]) (tasks, projects, items or data)."
        ),
        violated=lambda code: not _DOMAIN_STATE.search(code),
    ),
    ChecklistItem(
        key="mutation_function",
        message="missing add/delete/toggle function",
        correction=(
            "Define mutation functions such as const addTask = ..., "
            "const deleteTask = ... and const toggleTask = ... that update the state."
        ),
        violated=lambda code: not _MUTATION_FN.search(code),
    ),
    ChecklistItem(
        key="click_handler",
        message="missing click binding",
        correction="Attach an onClick handler to every button and clickable row.",
        violated=lambda code: "onClick" not in code,
    ),
    ChecklistItem(
        key="list_rendering",
        message="missing list rendering",
        correction="Render collections from state with .map(...) and a stable key.",
        violated=lambda code: ".map(" not in code,
    ),
)


# ── Component checklist ──────────────────────────────────────────────────────

_BUTTON = re.compile(r"<button\b[^>]*>(.*?)</button>", re.DOTALL)
_CHECKBOX = re.compile(r"type=[\"']checkbox[\"']")
_TEXT_INPUT = re.compile(r"type=[\"']text[\"']")
_ADD_FN = re.compile(r"\b(?:add|create)[A-Z]\w*|\bon(?:Add|Create)\b")
_DELETE_FN = re.compile(r"\b(?:delete|remove)[A-Z]\w*|\bon(?:Delete|Remove)\b")
_EDIT_FN = re.compile(r"\b(?:edit[A-Z]\w*|startEdit|saveEdit|setEditing\w*)|\bonEdit\b")
_TOGGLE_FN = re.compile(r"\btoggle[A-Z]\w*|\bonToggle\b")


def _button_labels(code: str) -> str:
    return " ".join(re.sub(r"<[^>]+>|\{[^}]*\}", " ", m) for m in _BUTTON.findall(code))


def _labelled(code: str, pattern: str) -> bool:
    return re.search(pattern, _button_labels(code), re.IGNORECASE) is not None


def _form_controls(code: str) -> bool:
    return bool(_CHECKBOX.search(code)) or bool(_TEXT_INPUT.search(code))


COMPONENT_CHECKLIST: tuple[ChecklistItem, ...] = (
    ChecklistItem(
        key="button_click",
        message="buttons missing onClick handlers",
        correction="Give every <button> an onClick handler.",
        violated=lambda code: "<button" in code and "onClick" not in code,
    ),
    ChecklistItem(
        key="checkbox_change",
        message="checkboxes missing onChange handlers",
        correction="Give every checkbox an onChange handler bound to state.",
        violated=lambda code: bool(_CHECKBOX.search(code)) and "onChange" not in code,
    ),
    ChecklistItem(
        key="input_change",
        message="text inputs missing onChange handlers",
        correction="Make text inputs controlled: value={...} with an onChange handler.",
        violated=lambda code: bool(_TEXT_INPUT.search(code)) and "onChange" not in code,
    ),
    ChecklistItem(
        key="add_function",
        message="Add/Create button without add function",
        correction="Back the Add/Create button with a function named addX (e.g. addTask).",
        violated=lambda code: _labelled(code, r"\b(?:add|create)\b") and not _ADD_FN.search(code),
    ),
    ChecklistItem(
        key="delete_function",
        message="Delete/Remove button without delete function",
        correction="Back the Delete/Remove button with a function named deleteX (e.g. deleteTask).",
        violated=lambda code: _labelled(code, r"\b(?:delete|remove)\b") and not _DELETE_FN.search(code),
    ),
    ChecklistItem(
        key="edit_function",
        message="Edit button without edit function",
        correction="Back the Edit button with editX/startEdit/saveEdit functions.",
        violated=lambda code: _labelled(code, r"\bedit\b") and not _EDIT_FN.search(code),
    ),
    ChecklistItem(
        key="toggle_function",
        message="checkboxes without toggle function",
        correction="Toggle checkbox state through a function named toggleX (e.g. toggleTask).",
        violated=lambda code: bool(_CHECKBOX.search(code)) and not _TOGGLE_FN.search(code),
    ),
    ChecklistItem(
        key="interactive_state",
        message="form controls without useState",
        correction="Hold checkbox and input values in useState.",
        violated=lambda code: _form_controls(code) and "useState" not in code,
    ),
)


# ── Layout checklist (validate-only mode) ────────────────────────────────────

_COMPONENTS_IMPORT = re.compile(r"from\s+[\"']\.\./components[\"']")
_INLINE_SIDEBAR = re.compile(r"<(?:aside|div)[^>]*className=[\"'][^\"']*\bw-(?:56|60|64)\b[^\"']*[\"'][^>]*>")
_INLINE_HEADER = re.compile(r"<header[^>]*className=")

LAYOUT_CHECKLIST: tuple[ChecklistItem, ...] = (
    ChecklistItem(
        key="inline_sidebar",
        message="inline sidebar markup instead of <Sidebar />",
        correction="Import Sidebar from '../components' and render <Sidebar /> instead of inline markup.",
        violated=lambda code: bool(_INLINE_SIDEBAR.search(code)) and "<Sidebar" not in code,
    ),
    ChecklistItem(
        key="inline_header",
        message="inline <header> instead of <Header />",
        correction="Import Header from '../components' and render <Header /> instead of an inline <header>.",
        violated=lambda code: bool(_INLINE_HEADER.search(code)),
    ),
    ChecklistItem(
        key="unused_sidebar",
        message="imports Sidebar but does not render it",
        correction="Render the imported <Sidebar /> or drop the import.",
        violated=lambda code: bool(_COMPONENTS_IMPORT.search(code))
        and re.search(r"\bSidebar\b", code) is not None
        and "<Sidebar" not in code,
    ),
    ChecklistItem(
        key="unused_header",
        message="imports Header but does not render it",
        correction="Render the imported <Header /> or drop the import.",
        violated=lambda code: bool(_COMPONENTS_IMPORT.search(code))
        and re.search(r"\bHeader\b", code) is not None
        and "<Header" not in code,
    ),
)

CHECKLISTS: dict[str, tuple[ChecklistItem, ...]] = {
    "page": PAGE_CHECKLIST,
    "component": COMPONENT_CHECKLIST,
    "layout": LAYOUT_CHECKLIST,
}

_BY_MESSAGE = {item.message: item for items in CHECKLISTS.values() for item in items}


def run_checklist(code: str, items: tuple[ChecklistItem, ...]) -> list[ChecklistItem]:
    """Return the items *code* violates, in checklist order."""
    return [item for item in items if item.violated(code)]


def violations_for(code: str, kind: str) -> list[str]:
    """Violation messages for a page or component source."""
    return [item.message for item in run_checklist(code, CHECKLISTS[kind])]


def item_for(message: str) -> ChecklistItem | None:
    return _BY_MESSAGE.get(message)
