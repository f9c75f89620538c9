"""Event filter hook installed as Sentry's ``before_send``."""

from typing import Any

from cap_desktop.telemetry.schema import EventSummary

Event = dict[str, Any]
Hint = dict[str, Any]


def filter_event(event: Event, hint: Hint | None = None, *, debug: bool = False) -> Event | None:
    """Pass every captured event through to Sentry.

    In debug mode the event's level, message and user are echoed to stdout
    first. The event itself is never modified or dropped. The function keeps
    no state, so Sentry may call it from any number of threads at once.

    Args:
        event: Sentry event payload
        hint: Sentry hint (original exception, log record, ...); unused
        debug: Echo the event to the console

    Returns:
        The same event object
    """
    if debug:
        summary = EventSummary.from_event(event)
        print(f"Sentry captured {summary.level}: {summary.display_message}")
        print(f"Sentry user: {summary.user}")
    return event
