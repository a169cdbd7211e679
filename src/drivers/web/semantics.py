"""Value types shared by the Flutter semantics helpers."""
import enum
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class FocusedElement:
    """Snapshot of the focused flt-semantics node. Never cached."""

    role: str | None = None
    label: str | None = None
    text: str | None = None

    @classmethod
    def from_js(cls, payload: dict[str, Any] | None) -> "FocusedElement | None":
        if not payload:
            return None
        return cls(
            role=payload.get("role"),
            label=payload.get("label"),
            text=payload.get("text") or None,
        )


Matcher = Callable[[FocusedElement], bool]


def role_is(role: str) -> Matcher:
    return lambda el: el.role == role


def button_matching(pattern: re.Pattern[str] | str) -> Matcher:
    """Button whose visible text matches ``pattern`` (case-insensitive for str)."""
    if isinstance(pattern, str):
        pattern = re.compile(pattern, re.IGNORECASE)

    def matcher(el: FocusedElement) -> bool:
        return el.role == "button" and el.text is not None and bool(pattern.search(el.text))

    return matcher


def label_is(label: str) -> Matcher:
    return lambda el: el.label == label


class LookupStatus(str, enum.Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass
class LookupResult:
    """Outcome of a soft lookup.

    Truthy only when found, so ``if await page.has_x():`` keeps reading
    naturally while callers that care can tell absence from a failed query.
    """

    status: LookupStatus
    value: Any = None
    strategy: str | None = None
    error: BaseException | None = None

    def __bool__(self) -> bool:
        return self.status is LookupStatus.FOUND

    @property
    def found(self) -> bool:
        return self.status is LookupStatus.FOUND

    @classmethod
    def hit(cls, value: Any = None, strategy: str | None = None) -> "LookupResult":
        return cls(LookupStatus.FOUND, value=value, strategy=strategy)

    @classmethod
    def miss(cls) -> "LookupResult":
        return cls(LookupStatus.NOT_FOUND)

    @classmethod
    def failed(cls, error: BaseException) -> "LookupResult":
        return cls(LookupStatus.ERROR, error=error)


@dataclass
class TraversalResult:
    """Outcome of a Tab traversal. Truthy when the matcher fired."""

    found: bool
    steps: int
    element: FocusedElement | None = None
    activated: bool = False

    def __bool__(self) -> bool:
        return self.found
