"""Site Walker: drive a Chromium session over the target app and capture PageSnapshots."""

import logging

from playwright.async_api import (
    Error as PlaywrightError,
    Page,
    Response,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from config import Settings
from errors import CrawlError
from observability.metrics import PAGE_FAILURES, PAGES_CRAWLED
from records import DomNode, PageSnapshot, SidebarInfo
from scaling.config import MAX_STYLESHEET_BYTES, MAX_STYLESHEETS_PER_PAGE

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
LAUNCH_ARGS = ["--disable-blink-features=AutomationControlled"]

SIDEBAR_SELECTOR = (
    'aside, [class*="sidebar"], [class*="Sidebar"], '
    '[class*="Navigation"], nav[class*="navigation"]'
)
EMAIL_SELECTOR = 'input[type="email"], input[name="email"]'
PASSWORD_SELECTOR = 'input[type="password"]'
MASK_TEXT = "████████"
MASK_IMAGE = (
    "data:image/svg+xml;base64,PHN2ZyB3aWR0aD0iNDAiIGhlaWdodD0iNDAiIHhtbG5zPSJodHRwOi8vd3d3Lncz"
    "Lm9yZy8yMDAwL3N2ZyI+PHJlY3Qgd2lkdGg9IjQwIiBoZWlnaHQ9IjQwIiBmaWxsPSIjY2NjIi8+PC9zdmc+"
)

# ── In-page scripts ──────────────────────────────────────────────────────────

COLLAPSIBLE_JS = """
() => {
  const selectors = [
    '[class*="hamburger"]', '[class*="menu-toggle"]', '[class*="sidebar-toggle"]',
    '[class*="collapse"]', '[aria-label*="menu"]', '[aria-label*="navigation"]',
    '[title*="menu"]', '[title*="collapse"]', 'button[class*="Menu"]',
  ];
  if (selectors.some(s => document.querySelectorAll(s).length > 0)) return true;
  return Array.from(document.querySelectorAll('button, a, span')).some(el => {
    const text = el.textContent || '';
    const label = (el.getAttribute('aria-label') || '').toLowerCase();
    return text.includes('☰') || text.includes('≡') ||
      ['menu', 'sidebar', 'collapse', 'expand'].some(word => label.includes(word));
  });
}
"""

MASK_JS = """
([selectors, maskText, maskImage]) => {
  for (const selector of selectors) {
    let elements = [];
    try { elements = document.querySelectorAll(selector.trim()); } catch (e) { continue; }
    elements.forEach(el => {
      if (el.tagName === 'IMG' && el.src) el.src = maskImage;
      else if (el.textContent) el.textContent = maskText;
    });
  }
}
"""

COMPUTED_STYLES_JS = """
() => {
  const props = [
    'display', 'position', 'width', 'height', 'padding', 'margin', 'backgroundColor',
    'color', 'fontSize', 'fontWeight', 'fontFamily', 'border', 'borderRadius',
    'flexDirection', 'alignItems', 'justifyContent', 'gridTemplateColumns', 'gap',
    'boxShadow', 'textDecoration', 'lineHeight',
  ];
  const styles = {};
  document.querySelectorAll('*').forEach(el => {
    const className = typeof el.className === 'string' ? el.className.trim() : '';
    const selector = el.id ? `#${el.id}` : (className ? `.${className.split(/\\s+/)[0]}` : '');
    if (!selector) return;
    const computed = window.getComputedStyle(el);
    const entry = {};
    props.forEach(p => { entry[p] = computed[p]; });
    styles[selector] = entry;
  });
  return styles;
}
"""

STRUCTURE_JS = """
(maxDepth) => {
  const skip = ['script', 'style', 'svg', 'path', 'noscript'];
  function walk(el, depth) {
    if (depth > maxDepth) return null;
    const tag = el.tagName.toLowerCase();
    if (skip.includes(tag)) return null;
    const node = { tag, id: el.id || null, classes: Array.from(el.classList), text: null, children: [] };
    if (el.children.length === 0) {
      const text = (el.textContent || '').trim();
      if (text && text.length < 100) node.text = text;
    }
    for (const child of el.children) {
      const childNode = walk(child, depth + 1);
      if (childNode) node.children.push(childNode);
    }
    return node;
  }
  return document.body ? walk(document.body, 0) : null;
}
"""


async def authenticate(page: Page, settings: Settings) -> None:
    """Two-step email/password login. Any failure here is fatal to the crawl."""
    login_url = f"{settings.target_url}{settings.login_path}"
    timeout = settings.crawl_timeout_ms
    logger.info(f"[walker] Authenticating at {login_url}")
    try:
        await page.goto(login_url, wait_until="domcontentloaded", timeout=timeout)
        await page.wait_for_selector(EMAIL_SELECTOR, timeout=10_000)
        await page.fill(EMAIL_SELECTOR, settings.login_email or "")
        await page.keyboard.press("Enter")
        await page.wait_for_selector(PASSWORD_SELECTOR, timeout=15_000)
        await page.fill(PASSWORD_SELECTOR, settings.login_password or "")
        await page.keyboard.press("Enter")
        await page.wait_for_function(
            "(loginPath) => !window.location.href.includes(loginPath)",
            arg=settings.login_path,
            timeout=30_000,
        )
        await page.wait_for_load_state("domcontentloaded", timeout=timeout)
    except PlaywrightError as exc:
        raise CrawlError(f"Authentication failed at {login_url}: {exc}") from exc
    logger.info(f"[walker] Authenticated, landed on {page.url}")


async def detect_sidebar(page: Page) -> SidebarInfo:
    try:
        await page.wait_for_selector(SIDEBAR_SELECTOR, timeout=5_000)
    except PlaywrightTimeoutError:
        logger.info("[walker]   no sidebar element detected")
        return SidebarInfo(detected=False, collapsible=False)
    collapsible = bool(await page.evaluate(COLLAPSIBLE_JS))
    logger.info(f"[walker]   sidebar detected (collapsible={collapsible})")
    return SidebarInfo(detected=True, collapsible=collapsible)


async def mask_dynamic_content(page: Page, selectors: list[str]) -> None:
    if selectors:
        await page.evaluate(MASK_JS, [selectors, MASK_TEXT, MASK_IMAGE])


async def crawl_page(page: Page, path: str, index: int, settings: Settings) -> PageSnapshot:
    """Navigate to one path and capture everything downstream stages need."""
    url = f"{settings.target_url}{path}"
    stylesheets: list[str] = []

    async def on_response(response: Response) -> None:
        if len(stylesheets) >= MAX_STYLESHEETS_PER_PAGE or not 200 <= response.status < 300:
            return
        content_type = response.headers.get("content-type", "")
        if "text/css" not in content_type and not response.url.endswith(".css"):
            return
        try:
            body = await response.text()
        except PlaywrightError:
            return
        if len(body) < MAX_STYLESHEET_BYTES and len(stylesheets) < MAX_STYLESHEETS_PER_PAGE:
            stylesheets.append(body)

    page.on("response", on_response)
    try:
        await page.goto(url, wait_until="domcontentloaded", timeout=settings.crawl_timeout_ms)
        for state, timeout in (("load", 30_000), ("networkidle", 10_000)):
            try:
                await page.wait_for_load_state(state, timeout=timeout)
            except PlaywrightTimeoutError:
                logger.debug(f"[walker]   {state} not reached for {path}, continuing")
        await page.wait_for_timeout(settings.page_settle_ms)

        sidebar = await detect_sidebar(page)

        await page.evaluate("() => window.scrollTo(0, document.body.scrollHeight / 2)")
        await page.wait_for_timeout(2_000)
        await page.evaluate("() => window.scrollTo(0, 0)")
        await page.wait_for_timeout(1_000)

        await mask_dynamic_content(page, settings.mask_selectors)

        computed_styles = await page.evaluate(COMPUTED_STYLES_JS)
        structure = await page.evaluate(STRUCTURE_JS, settings.dom_depth_cap)
        full_png = await page.screenshot(full_page=True)
        viewport_png = await page.screenshot(full_page=False)
        title = await page.title()
        html = await page.content()
    finally:
        page.remove_listener("response", on_response)

    return PageSnapshot(
        index=index,
        url=url,
        path=path,
        title=title,
        html=html,
        computed_styles=computed_styles or {},
        stylesheets=list(stylesheets),
        structure=DomNode.model_validate(structure) if structure else None,
        viewport_png=viewport_png,
        full_png=full_png,
        sidebar=sidebar,
    )


async def crawl_site(settings: Settings) -> list[PageSnapshot]:
    """Crawl every configured path in order.

    Pages that fail are logged and skipped. Raises CrawlError when the browser
    cannot start, when login fails, or when no page at all could be captured.
    """
    paths = settings.pages_to_crawl
    snapshots: list[PageSnapshot] = []

    async with async_playwright() as playwright:
        try:
            browser = await playwright.chromium.launch(headless=settings.headless, args=LAUNCH_ARGS)
        except PlaywrightError as exc:
            raise CrawlError(f"Could not launch the browser: {exc}") from exc
        try:
            try:
                context = await browser.new_context(
                    viewport={"width": settings.viewport_width, "height": settings.viewport_height},
                    user_agent=USER_AGENT,
                )
                page = await context.new_page()
            except PlaywrightError as exc:
                raise CrawlError(f"Could not open a browser page: {exc}") from exc

            if settings.has_credentials:
                await authenticate(page, settings)

            logger.info(f"[walker] Crawling {len(paths)} page(s) of {settings.target_url}")
            for index, path in enumerate(paths):
                logger.info(f"[walker] [{index + 1}/{len(paths)}] {path}")
                try:
                    snapshot = await crawl_page(page, path, index, settings)
                except PlaywrightError as exc:
                    PAGE_FAILURES.inc()
                    logger.error(f"[walker]   failed {path}: {exc}")
                    continue
                PAGES_CRAWLED.inc()
                snapshots.append(snapshot)
                logger.info(
                    f"[walker]   captured '{snapshot.title}' "
                    f"({len(snapshot.stylesheets)} stylesheet(s), {len(snapshot.computed_styles)} selectors)"
                )
        finally:
            await browser.close()

    if not snapshots:
        raise CrawlError(f"No pages could be captured from {settings.target_url}")
    return snapshots
