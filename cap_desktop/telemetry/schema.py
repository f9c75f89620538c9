"""Views over Sentry events and the identity attached to the reporting scope."""

from typing import Any

from pydantic import BaseModel, Field

NO_MESSAGE = "No message"


class Identity(BaseModel):
    """User identity attached to reported events."""

    id: str | None = Field(None, description="Stable user identifier")
    username: str | None = Field(None, description="Display name")
    email: str | None = Field(None, description="Contact address")
    ip_address: str | None = Field(None, description="Client IP address")

    def to_sentry(self) -> dict[str, Any]:
        """Convert to the dictionary shape Sentry expects, without unset fields."""
        return self.model_dump(exclude_none=True)


# Placeholder identity for development builds
DEV_IDENTITY = Identity(username="_DEV_")


class EventSummary(BaseModel):
    """Read-only summary of a captured event (level, message, user)."""

    level: str = Field("error", description="Severity reported by Sentry")
    message: str | None = Field(None, description="Event message, if any")
    user: dict[str, Any] | None = Field(None, description="Identity attached to the event")

    @classmethod
    def from_event(cls, event: dict[str, Any]) -> "EventSummary":
        """Build a summary from a Sentry event dictionary.

        Messages captured through the logging integration live under
        ``logentry`` rather than ``message``, so both are checked.

        Args:
            event: Sentry event payload

        Returns:
            EventSummary instance
        """
        message = event.get("message")
        if not message:
            message = (event.get("logentry") or {}).get("message")
        return cls(
            level=str(event.get("level") or "error"),
            message=message or None,
            user=event.get("user"),
        )

    @property
    def display_message(self) -> str:
        """Message text for console output."""
        return self.message if self.message is not None else NO_MESSAGE
