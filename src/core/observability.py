"""
Observability module for the MyFit E2E suite.

Reports failed journeys to GlitchTip (open-source, Sentry-compatible) so
flaky Flutter interactions can be tracked across CI runs.
"""

import sentry_sdk
import structlog

from src.config.settings import settings

logger = structlog.get_logger(__name__)


def init_observability() -> bool:
    """Initialize GlitchTip/Sentry reporting. Returns True when enabled."""
    if not settings.GLITCHTIP_DSN:
        logger.info("observability_disabled", reason="no DSN configured")
        return False

    sentry_sdk.init(
        dsn=settings.GLITCHTIP_DSN,
        environment=settings.ENVIRONMENT,
        release=f"myfit-web-e2e@{settings.APP_VERSION}",
        traces_sample_rate=0.0,
        send_default_pii=False,
        default_integrations=False,
        before_send=_before_send,
    )

    logger.info("observability_initialized", environment=settings.ENVIRONMENT)
    return True


def _before_send(event: dict, hint: dict) -> dict | None:
    """Filter events before sending to GlitchTip."""
    # Filter out common non-actionable errors
    if "exc_info" in hint:
        exc_type, exc_value, _ = hint["exc_info"]
        exc_message = str(exc_value).lower()

        # Servers not running locally is not a test failure worth tracking
        if any(
            msg in exc_message
            for msg in ["connection refused", "connection reset", "broken pipe"]
        ):
            return None

    return event


def capture_test_failure(
    test_id: str,
    exception: BaseException,
    tags: dict[str, str] | None = None,
) -> str | None:
    """Capture a failed journey with the pytest node id attached."""
    if not settings.GLITCHTIP_DSN:
        return None

    with sentry_sdk.push_scope() as scope:
        scope.set_tag("test_id", test_id)
        if tags:
            for key, value in tags.items():
                scope.set_tag(key, value)

        return sentry_sdk.capture_exception(exception)
