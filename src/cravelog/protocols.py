"""Protocols for the collaborators the view-models depend on."""

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from cravelog.models import CravingRecord


@runtime_checkable
class CravingRepository(Protocol):
    """Protocol for craving persistence."""

    async def fetch_all(self) -> list[CravingRecord]:
        """Return every active record."""
        ...

    async def save(self, record: CravingRecord) -> CravingRecord:
        """Persist a new record and return it with id/timestamp filled in."""
        ...

    async def archive(self, record: CravingRecord) -> CravingRecord:
        """Hide a record from future fetches."""
        ...


@runtime_checkable
class SpeechToTextService(Protocol):
    """Protocol for dictation services.

    ``on_text_updated`` receives the whole transcript so far, not a delta.
    """

    on_text_updated: Callable[[str], None] | None

    async def request_authorization(self) -> bool:
        """Ask for permission. True if granted."""
        ...

    def start_recording(self) -> bool:
        """Start recognition. Raises SpeechRecognitionError on failure."""
        ...

    def stop_recording(self) -> None:
        """Stop recognition."""
        ...
