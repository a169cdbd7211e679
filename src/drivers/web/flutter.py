"""Flutter Web helper.

Flutter Web (CanvasKit) paints into a canvas, so there are no conventional
DOM widgets to click. What it does expose is an accessibility tree of
``flt-semantics`` nodes, created lazily once the hidden "Enable accessibility"
placeholder is activated.

Key challenges:
- flutter-view intercepts pointer events, so direct clicks often miss
- keyboard navigation (Tab/Enter) through the semantics host is the one
  channel that reliably routes to widgets
- accessibility must be enabled before any semantic node exists
"""
import re

import structlog
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from src.config.settings import Settings, settings
from src.core.exceptions import FlutterNotReadyError
from src.drivers.web.locators import SemanticLocator
from src.drivers.web.semantics import (
    FocusedElement,
    Matcher,
    TraversalResult,
    button_matching,
    role_is,
)

logger = structlog.get_logger(__name__)

GLASS_PANE = "flt-glass-pane"
SEMANTICS_NODE = "flt-semantics"
SEMANTICS_HOST = "flt-semantics-host"
ACCESSIBILITY_PLACEHOLDER = 'flt-semantics-placeholder[aria-label="Enable accessibility"]'
ENABLED_INPUT = 'flt-semantics input[data-semantics-role="text-field"]:not([disabled])'

# Click via script: the placeholder sits outside the viewport.
ENABLE_ACCESSIBILITY_JS = """
() => {
  const btn = document.querySelector('flt-semantics-placeholder[aria-label="Enable accessibility"]');
  if (btn) {
    btn.click();
    return true;
  }
  return false;
}
"""

FOCUS_HOST_JS = """
() => {
  const host = document.querySelector('flt-semantics-host');
  if (host) {
    host.focus();
    return true;
  }
  return false;
}
"""

FOCUSED_ELEMENT_JS = """
() => {
  const active = document.activeElement;
  if (active && active.tagName === 'FLT-SEMANTICS') {
    return {
      role: active.getAttribute('role'),
      label: active.getAttribute('aria-label'),
      text: active.textContent ? active.textContent.trim() : null,
    };
  }
  return null;
}
"""

DEBUG_ELEMENTS_JS = """
(limit) => Array.from(document.querySelectorAll('flt-semantics')).slice(0, limit).map(el => ({
  id: el.id,
  role: el.getAttribute('role'),
  label: el.getAttribute('aria-label'),
  text: el.textContent ? el.textContent.trim().substring(0, 50) : null,
  visible: el.offsetWidth > 0,
}))
"""


class FlutterHelper:
    """Drives a Flutter Web page through its semantics tree."""

    def __init__(self, page: Page, config: Settings | None = None):
        self.page = page
        self.config = config or settings

    # ------------------------------------------------------------------
    # Accessibility enablement
    # ------------------------------------------------------------------

    async def enable_accessibility(self) -> bool:
        """Wait for Flutter and switch on its semantics tree.

        Safe to call repeatedly: once the tree exists the placeholder is gone,
        the click is skipped and both waits return immediately.

        Returns True when this call toggled the tree on.
        """
        try:
            # Glass pane exists (not necessarily visible) once the engine boots
            await self.page.wait_for_selector(
                GLASS_PANE,
                state="attached",
                timeout=self.config.FLUTTER_ATTACH_TIMEOUT_MS,
            )
            # Either the placeholder (not yet enabled) or nodes (already enabled)
            await self.page.wait_for_selector(
                f"{ACCESSIBILITY_PLACEHOLDER}, {SEMANTICS_NODE}",
                state="attached",
                timeout=self.config.FLUTTER_ATTACH_TIMEOUT_MS,
            )
        except PlaywrightTimeoutError as e:
            raise FlutterNotReadyError(
                f"Flutter surface not attached after {self.config.FLUTTER_ATTACH_TIMEOUT_MS}ms"
            ) from e

        toggled = bool(await self.page.evaluate(ENABLE_ACCESSIBILITY_JS))

        try:
            await self.page.wait_for_selector(
                SEMANTICS_NODE,
                state="attached",
                timeout=self.config.FLUTTER_SEMANTICS_TIMEOUT_MS,
            )
        except PlaywrightTimeoutError as e:
            raise FlutterNotReadyError(
                f"No semantic nodes after {self.config.FLUTTER_SEMANTICS_TIMEOUT_MS}ms"
            ) from e

        if toggled:
            # First paint of the semantics tree has no observable completion signal
            await self.page.wait_for_timeout(self.config.FLUTTER_SETTLE_MS)

        logger.debug("flutter_accessibility_ready", toggled=toggled, url=self.page.url)
        return toggled

    async def wait_for_flutter(self) -> None:
        await self.enable_accessibility()

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def flutter_element(self, label: str) -> Locator:
        """Semantic node by exact aria-label."""
        return self.page.locator(f'{SEMANTICS_NODE}[aria-label="{label}"]')

    def semantics(self, role: str | None = None, has_text: str | re.Pattern | None = None) -> Locator:
        """Semantic nodes filtered by role and visible text."""
        selector = f'{SEMANTICS_NODE}[role="{role}"]' if role else SEMANTICS_NODE
        locator = self.page.locator(selector)
        if has_text is not None:
            locator = locator.filter(has_text=has_text)
        return locator

    def enabled_inputs(self) -> Locator:
        """Real <input> elements Flutter places inside text-field nodes.

        Each field renders a disabled decorator input next to the live one.
        """
        return self.page.locator(ENABLED_INPUT)

    def locate(
        self,
        *,
        label: str | None = None,
        role: str | None = None,
        text: str | re.Pattern | None = None,
    ) -> SemanticLocator:
        """Lazy locator over the label, role+text and text strategies."""
        return SemanticLocator(self, label=label, role=role, text=text)

    # ------------------------------------------------------------------
    # Keyboard focus traversal
    # ------------------------------------------------------------------

    async def focus_semantics_host(self) -> bool:
        """Focus the semantics host so Tab routes through the tree."""
        focused = bool(await self.page.evaluate(FOCUS_HOST_JS))
        await self.page.wait_for_timeout(200)
        return focused

    async def get_focused_element(self) -> FocusedElement | None:
        """Focused node's descriptor, or None when focus left the tree."""
        return FocusedElement.from_js(await self.page.evaluate(FOCUSED_ELEMENT_JS))

    async def tab_to_element(self, matcher: Matcher, max_tabs: int | None = None) -> TraversalResult:
        """Press Tab until ``matcher`` accepts the focused node.

        Sends at most ``max_tabs`` Tab presses. Focus escaping to a non
        semantic element uses up a step but never matches. Exhausting the
        budget returns a falsy result rather than raising.
        """
        max_tabs = self.config.DEFAULT_MAX_TABS if max_tabs is None else max_tabs
        await self.focus_semantics_host()

        for step in range(1, max_tabs + 1):
            await self.page.keyboard.press("Tab")
            await self.page.wait_for_timeout(self.config.TAB_SETTLE_MS)

            element = await self.get_focused_element()
            if element is not None and matcher(element):
                logger.debug("tab_match", step=step, role=element.role, label=element.label)
                return TraversalResult(found=True, steps=step, element=element)

        logger.debug("tab_exhausted", max_tabs=max_tabs)
        return TraversalResult(found=False, steps=max_tabs)

    async def tab_to_and_activate(self, matcher: Matcher, max_tabs: int | None = None) -> TraversalResult:
        """Navigate to an element and press Enter to activate it."""
        result = await self.tab_to_element(matcher, max_tabs)
        if result.found:
            await self.page.keyboard.press("Enter")
            await self.page.wait_for_timeout(self.config.ACTIVATE_SETTLE_MS)
            result.activated = True
        return result

    # ------------------------------------------------------------------
    # Composite actions
    # ------------------------------------------------------------------

    async def click_button(self, text_pattern: re.Pattern | str, max_tabs: int | None = None) -> TraversalResult:
        return await self.tab_to_and_activate(button_matching(text_pattern), max_tabs)

    async def activate_role(self, role: str, max_tabs: int | None = None) -> TraversalResult:
        return await self.tab_to_and_activate(role_is(role), max_tabs)

    async def click_first_group(self, max_tabs: int | None = None) -> TraversalResult:
        """Activate the first card-like group in tab order."""
        return await self.activate_role("group", max_tabs)

    async def type_into_focused(self, text: str) -> None:
        await self.page.keyboard.type(text)
        await self.page.wait_for_timeout(100)

    async def fill_input(self, target: str | Locator, value: str) -> None:
        """Clear and type into a Flutter text field."""
        field = self.page.locator(target) if isinstance(target, str) else target
        await field.wait_for(state="visible", timeout=self.config.ACTION_TIMEOUT_MS)
        await field.click()
        await field.fill("")
        await field.fill(value)
        await self.page.wait_for_timeout(200)

    # ------------------------------------------------------------------
    # Debugging
    # ------------------------------------------------------------------

    async def debug_elements(self, limit: int = 30) -> list[dict]:
        """Log the first ``limit`` semantic nodes and their properties."""
        try:
            elements = await self.page.evaluate(DEBUG_ELEMENTS_JS, limit)
        except PlaywrightError as e:
            logger.warning("debug_elements_failed", error=str(e))
            return []
        logger.info("flutter_semantic_elements", count=len(elements), elements=elements)
        return elements
