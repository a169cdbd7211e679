"""Exceptions raised by the E2E drivers."""


class E2EError(Exception):
    """Base exception for E2E driver errors."""

    pass


class FlutterNotReadyError(E2EError):
    """Flutter surface or semantics tree never attached."""

    pass


class ElementNotFoundError(E2EError):
    """No semantic node resolved for a lookup within its timeout."""

    def __init__(self, description: str, timeout_ms: int | None = None):
        self.description = description
        self.timeout_ms = timeout_ms
        message = f"Element not found: {description}"
        if timeout_ms is not None:
            message += f" (waited {timeout_ms}ms)"
        super().__init__(message)


class TestControlError(E2EError):
    """Backend test-control API returned an error."""

    __test__ = False  # not a pytest class

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class ScenarioNotFoundError(TestControlError):
    """Requested scenario is not registered on the E2E server."""

    pass


class BackendUnavailableError(TestControlError):
    """E2E server could not be reached."""

    pass


class WaitTimeoutError(E2EError):
    """Polled condition never held within its timeout."""

    def __init__(self, description: str, timeout: float, last_value=None):
        self.description = description
        self.timeout = timeout
        self.last_value = last_value
        super().__init__(f"Timed out after {timeout}s waiting for {description}")
