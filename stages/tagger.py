"""Pattern Tagger: tag DOM subtrees as layout components by name heuristics."""

import logging
from dataclasses import dataclass

from records import ComponentCandidate, DomNode, PageSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TagRule:
    name: str
    type: str
    tags: tuple[str, ...] = ()
    class_substrings: tuple[str, ...] = ()

    def matches(self, node: DomNode) -> bool:
        if node.tag in self.tags:
            return True
        class_str = " ".join(node.classes).lower()
        return any(sub in class_str for sub in self.class_substrings)


# Priority order; the first matching rule wins.
RULES: tuple[TagRule, ...] = (
    TagRule("Header", "header", ("header",), ("header", "topbar")),
    TagRule("Sidebar", "sidebar", ("aside", "nav"), ("sidebar", "nav")),
    TagRule("MainContent", "main", ("main",), ("main-content", "content-area")),
    TagRule("Card", "card", (), ("card", "task-", "project-")),
    TagRule("List", "list", ("ul", "ol"), ("list",)),
    TagRule("Button", "button", ("button",), ("button", "btn")),
    TagRule("Form", "form", ("form",), ("form", "input-group")),
    TagRule("Modal", "modal", (), ("modal", "dialog", "popup")),
)

SNIPPET_DEPTH = 2


def match_rule(node: DomNode) -> TagRule | None:
    for rule in RULES:
        if rule.matches(node):
            return rule
    return None


def selector_for(node: DomNode, fallback: str) -> str:
    if node.id:
        return f"#{node.id}"
    return f".{node.classes[0] if node.classes else fallback}"


def html_snippet(node: DomNode, depth: int = 0) -> str:
    """Shallow HTML rendering of *node*; children are expanded SNIPPET_DEPTH levels deep."""
    indent = "  " * depth
    attrs = ""
    if node.id:
        attrs += f' id="{node.id}"'
    if node.classes:
        attrs += f' class="{" ".join(node.classes)}"'
    html = f"{indent}<{node.tag}{attrs}>"
    if node.text:
        html += node.text
    elif node.children and depth < SNIPPET_DEPTH:
        html += "\n" + "".join(html_snippet(child, depth + 1) for child in node.children) + indent
    return html + f"</{node.tag}>\n"


def relevant_styles(node: DomNode, computed: dict[str, dict[str, str]]) -> dict[str, dict[str, str]]:
    """Computed-style entries keyed by the node's id and class selectors."""
    styles: dict[str, dict[str, str]] = {}
    selectors = ([f"#{node.id}"] if node.id else []) + [f".{cls}" for cls in node.classes]
    for selector in selectors:
        if selector in computed:
            styles[selector] = computed[selector]
    return styles


def tag_tree(root: DomNode | None, snapshot: PageSnapshot, max_depth: int = 5) -> list[ComponentCandidate]:
    """Tag every node of *root* down to *max_depth*; deeper matches are dropped."""
    candidates: list[ComponentCandidate] = []

    def visit(node: DomNode, depth: int) -> None:
        if depth > max_depth:
            return
        rule = match_rule(node)
        if rule is not None:
            candidates.append(ComponentCandidate(
                name=rule.name,
                type=rule.type,
                selector=selector_for(node, rule.type),
                html=html_snippet(node),
                text=node.text if rule.type == "button" else None,
                styles=relevant_styles(node, snapshot.computed_styles),
                page_url=snapshot.url,
                page_path=snapshot.path,
                pages=[snapshot.url],
            ))
        for child in node.children:
            visit(child, depth + 1)

    if root is not None:
        visit(root, 0)
    return candidates


def deduplicate(candidates: list[ComponentCandidate]) -> list[ComponentCandidate]:
    """Keep the first candidate per (type, name) and merge origin page URLs into it."""
    unique: dict[tuple[str, str], ComponentCandidate] = {}
    for candidate in candidates:
        key = (candidate.type, candidate.name)
        existing = unique.get(key)
        if existing is None:
            unique[key] = candidate
            continue
        pages = list(existing.pages)
        for url in candidate.pages or [candidate.page_url]:
            if url not in pages:
                pages.append(url)
        unique[key] = existing.model_copy(update={"pages": pages})
    return list(unique.values())


def extract_components(snapshots: list[PageSnapshot], max_depth: int = 5) -> list[ComponentCandidate]:
    """Tag all snapshots and return the deduplicated candidate list."""
    found: list[ComponentCandidate] = []
    for snapshot in snapshots:
        page_candidates = tag_tree(snapshot.structure, snapshot, max_depth=max_depth)
        logger.info(f"[tagger] {snapshot.title}: {len(page_candidates)} tagged node(s)")
        found.extend(page_candidates)
    unique = deduplicate(found)
    logger.info(f"[tagger] {len(unique)} unique component(s): {', '.join(c.name for c in unique)}")
    return unique
