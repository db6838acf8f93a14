"""
Newsletter component models.

Data models for broadcasting an issue to confirmed subscribers.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class NewsletterIssue:
    """One newsletter issue: subject line plus HTML and text bodies."""

    title: str
    html: str
    text: str


@dataclass
class PublishReport:
    """
    Outcome of one fan-out.

    Per-recipient failures are recorded here, not raised.
    """

    delivered: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped_invalid: list[str] = field(default_factory=list)  # Stored address no longer parses

    @property
    def attempted(self) -> int:
        return len(self.delivered) + len(self.failed)

    @property
    def all_delivered(self) -> bool:
        return not self.failed
