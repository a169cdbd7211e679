"""Semantic element locator.

Resolves a logical target (accessible label, role + visible text, or raw
text) to a node in the Flutter semantics tree. Strategies run in order and a
later one is only queried when the earlier ones matched nothing:

1. ``label``     exact accessible name (Semantics(label: ...))
2. ``role_text`` flt-semantics nodes with the role, filtered by text
3. ``text``      text anywhere in the tree

Flutter assigns accessible names inconsistently across widget types, so the
label alone misses often.
"""
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator

from src.core.exceptions import ElementNotFoundError, WaitTimeoutError
from src.core.polling import poll_until
from src.drivers.web.semantics import FocusedElement, LookupResult, LookupStatus

if TYPE_CHECKING:
    from src.drivers.web.flutter import FlutterHelper

logger = structlog.get_logger(__name__)

EDITABLE_INSIDE = "input:not([disabled]), textarea:not([disabled])"


@dataclass(frozen=True)
class Strategy:
    name: str
    build: Callable[[], Locator]


class SemanticLocator:
    """Lazy handle: nothing is queried until an action runs."""

    def __init__(
        self,
        flutter: "FlutterHelper",
        *,
        label: str | None = None,
        role: str | None = None,
        text: str | re.Pattern | None = None,
        index: int = 0,
    ):
        if label is None and role is None and text is None:
            raise ValueError("SemanticLocator needs a label, role or text")
        self.flutter = flutter
        self.page = flutter.page
        self.label = label
        self.role = role
        self.text = text
        self.index = index

    def __repr__(self) -> str:
        return f"<SemanticLocator {self.describe()}>"

    def describe(self) -> str:
        parts = []
        if self.label is not None:
            parts.append(f"label={self.label!r}")
        if self.role is not None:
            parts.append(f"role={self.role!r}")
        if self.text is not None:
            pattern = self.text.pattern if isinstance(self.text, re.Pattern) else self.text
            parts.append(f"text={pattern!r}")
        if self.index:
            parts.append(f"nth={self.index}")
        return " ".join(parts)

    def nth(self, index: int) -> "SemanticLocator":
        return SemanticLocator(
            self.flutter,
            label=self.label,
            role=self.role,
            text=self.text,
            index=index,
        )

    @property
    def first(self) -> "SemanticLocator":
        return self.nth(0)

    @property
    def strategies(self) -> list[Strategy]:
        strategies = []
        if self.label is not None:
            strategies.append(
                Strategy("label", lambda: self.page.get_by_label(self.label, exact=True))
            )
        if self.role is not None:
            strategies.append(
                Strategy("role_text", lambda: self.flutter.semantics(self.role, self.text))
            )
        if self.text is not None:
            strategies.append(Strategy("text", lambda: self.page.get_by_text(self.text)))
        return strategies

    def matcher(self, strategy: str | None = None) -> Callable[[FocusedElement], bool]:
        """Predicate equivalent of this locator, for Tab traversal.

        With ``strategy`` the predicate accepts what that strategy resolves;
        without it, what any of this locator's strategies would.
        """
        pattern = self.text
        if isinstance(pattern, str):
            pattern = re.compile(re.escape(pattern), re.IGNORECASE)

        def text_matches(el: FocusedElement) -> bool:
            return any(v is not None and pattern.search(v) for v in (el.text, el.label))

        def by_label(el: FocusedElement) -> bool:
            return el.label == self.label

        def by_role_text(el: FocusedElement) -> bool:
            return el.role == self.role and (pattern is None or text_matches(el))

        checks = {"label": by_label, "role_text": by_role_text, "text": text_matches}
        names = [s.name for s in self.strategies]
        if strategy is not None:
            names = [strategy]

        def matches(el: FocusedElement) -> bool:
            return any(checks[name](el) for name in names)

        return matches

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    async def resolve(self) -> LookupResult:
        """Single pass over the strategies, no waiting.

        The first strategy matching anything decides: ``nth`` past its
        matches is a miss, later strategies are not consulted.
        """
        for strategy in self.strategies:
            locator = strategy.build()
            try:
                count = await locator.count()
            except PlaywrightError as e:
                return LookupResult.failed(e)
            if count == 0:
                continue
            if count > self.index:
                return LookupResult.hit(locator.nth(self.index), strategy=strategy.name)
            return LookupResult.miss()
        return LookupResult.miss()

    async def _resolve_visible(self) -> LookupResult:
        result = await self.resolve()
        if not result.found:
            return result
        try:
            visible = await result.value.is_visible()
        except PlaywrightError as e:
            return LookupResult.failed(e)
        return result if visible else LookupResult.miss()

    async def probe(self, timeout_ms: int = 0) -> LookupResult:
        """Soft visibility check: FOUND, NOT_FOUND or ERROR, never raises."""
        if timeout_ms <= 0:
            return await self._resolve_visible()
        try:
            return await poll_until(
                self._resolve_visible,
                lambda r: r.status is not LookupStatus.NOT_FOUND,
                timeout=timeout_ms / 1000,
                description=self.describe(),
            )
        except WaitTimeoutError:
            return LookupResult.miss()

    async def _wait_for_result(self, timeout_ms: int | None) -> LookupResult:
        timeout_ms = self.flutter.config.ACTION_TIMEOUT_MS if timeout_ms is None else timeout_ms
        try:
            result = await poll_until(
                self.resolve,
                lambda r: r.status is not LookupStatus.NOT_FOUND,
                timeout=timeout_ms / 1000,
                description=self.describe(),
            )
        except WaitTimeoutError as e:
            raise ElementNotFoundError(self.describe(), timeout_ms) from e

        if result.status is LookupStatus.ERROR:
            raise result.error
        logger.debug("element_resolved", target=self.describe(), strategy=result.strategy)
        return result

    async def wait_for(self, timeout_ms: int | None = None) -> Locator:
        """Resolved Playwright locator, or ElementNotFoundError after timeout."""
        result = await self._wait_for_result(timeout_ms)
        return result.value

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _occurrence(self, matcher: Callable[[FocusedElement], bool]) -> Callable[[FocusedElement], bool]:
        """Accept only the ``index``-th node ``matcher`` accepts, in tab order."""
        hits = 0

        def matches(el: FocusedElement) -> bool:
            nonlocal hits
            if not matcher(el):
                return False
            hits += 1
            return hits > self.index

        return matches

    async def click(self, timeout_ms: int | None = None, keyboard_fallback: bool = True) -> None:
        """Pointer click, falling back to Tab traversal + Enter.

        flutter-view swallows many pointer events, so a resolved node that
        won't take the click is reached through the keyboard instead.
        """
        resolved = await self._wait_for_result(timeout_ms)
        try:
            await resolved.value.click(timeout=self.flutter.config.POINTER_CLICK_TIMEOUT_MS)
            return
        except PlaywrightError as e:
            if not keyboard_fallback:
                raise
            logger.info("pointer_click_failed", target=self.describe(), error=str(e).splitlines()[0])

        matcher = self._occurrence(self.matcher(resolved.strategy))
        result = await self.flutter.tab_to_and_activate(matcher)
        if not result:
            raise ElementNotFoundError(f"{self.describe()} (not reachable by Tab)")

    async def fill(self, value: str, timeout_ms: int | None = None) -> None:
        locator = await self.wait_for(timeout_ms)
        tag = await locator.evaluate("el => el.tagName.toLowerCase()")
        if tag not in ("input", "textarea"):
            # Flutter nests the live <input> inside the text-field node
            locator = locator.locator(EDITABLE_INSIDE).first
        await locator.fill("")
        await locator.fill(value)

    async def text_content(self, timeout_ms: int | None = None) -> str | None:
        """Visible text, or the accessible name when the node has no text."""
        locator = await self.wait_for(timeout_ms)
        text = await locator.text_content()
        if text and text.strip():
            return text.strip()
        return await locator.get_attribute("aria-label")
