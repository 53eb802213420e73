"""Observable view-models behind the craving list and logging screens."""

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any

from loguru import logger

from cravelog.alerts import COLLABORATOR_ERRORS, alert_for_error
from cravelog.config import DEFAULT_RATING
from cravelog.models import AlertInfo, CravingRecord, Emotion, FilterCategory, SortOrder
from cravelog.protocols import CravingRepository, SpeechToTextService
from cravelog.query import empty_state_message, select_cravings
from cravelog.speech import SpeechRecognitionError, merge_transcript

Listener = Callable[[str, Any], None]


class Observable:
    """Notifies subscribers whenever a public attribute changes value."""

    def __init__(self):
        object.__setattr__(self, "_listeners", [])

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener(name, value)``. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def __setattr__(self, name: str, value: Any) -> None:
        changed = getattr(self, name, _MISSING) != value
        object.__setattr__(self, name, value)
        if changed and not name.startswith("_"):
            for listener in list(self._listeners):
                listener(name, value)


_MISSING = object()


class TaskScope:
    """Tasks spawned on behalf of one screen, cancelled together on close."""

    def __init__(self):
        self._tasks: set[asyncio.Task] = set()

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def cancel(self) -> None:
        for task in list(self._tasks):
            task.cancel()


class CravingListViewModel(Observable):
    """State for the craving list: snapshot, search text and filter."""

    def __init__(self, repository: CravingRepository):
        super().__init__()
        self._repository = repository
        self.cravings: list[CravingRecord] = []
        self.is_loading = False
        self.alert_info: AlertInfo | None = None
        self.search_text = ""
        self.selected_filter = FilterCategory.ALL
        self.sort_order: SortOrder | None = None

    @property
    def filtered_cravings(self) -> list[CravingRecord]:
        return select_cravings(self.cravings, self.search_text,
                               self.selected_filter, sort=self.sort_order)

    @property
    def empty_message(self) -> str:
        return empty_state_message(self.search_text)

    def clear_search(self) -> None:
        self.search_text = ""

    def dismiss_alert(self) -> None:
        self.alert_info = None

    async def fetch_cravings(self) -> None:
        self.is_loading = True
        try:
            self.cravings = await self._repository.fetch_all()
            logger.debug(f"Fetched {len(self.cravings)} cravings")
        except COLLABORATOR_ERRORS as e:
            logger.debug(f"Fetch failed: {e!r}")
            self.alert_info = alert_for_error(e)
        finally:
            self.is_loading = False

    async def archive_craving(self, craving: CravingRecord) -> None:
        try:
            await self._repository.archive(craving)
        except COLLABORATOR_ERRORS as e:
            logger.debug(f"Archive failed for {craving.id}: {e!r}")
            self.alert_info = alert_for_error(e)
            return
        self.cravings = [c for c in self.cravings if c.id != craving.id]


class LogCravingViewModel(Observable):
    """Form state for logging a craving, including dictation."""

    def __init__(self, repository: CravingRepository,
                 speech: SpeechToTextService | None = None):
        super().__init__()
        self._repository = repository
        self._speech = speech
        self._dictation_base = ""
        self.craving_description = ""
        self.craving_strength = DEFAULT_RATING
        self.confidence_to_resist = DEFAULT_RATING
        self.selected_emotions: set[Emotion] = set()
        self.is_recording_speech = False
        self.alert_info: AlertInfo | None = None
        if speech is not None:
            speech.on_text_updated = self._on_transcript

    def toggle_emotion(self, emotion: Emotion) -> None:
        # Reassign so subscribers see the change
        self.selected_emotions = self.selected_emotions ^ {emotion}

    def dismiss_alert(self) -> None:
        self.alert_info = None

    def reset(self) -> None:
        self.craving_description = ""
        self.craving_strength = DEFAULT_RATING
        self.confidence_to_resist = DEFAULT_RATING
        self.selected_emotions = set()

    async def request_speech_authorization(self) -> bool:
        if self._speech is None:
            return False
        return await self._speech.request_authorization()

    def toggle_speech_recognition(self) -> None:
        if self._speech is None:
            self.alert_info = AlertInfo("Error", "Speech recognition is not available.")
            return

        if self.is_recording_speech:
            self._speech.stop_recording()
            self.is_recording_speech = False
            return

        self._dictation_base = self.craving_description
        try:
            # Recording flag goes up first; services may deliver text synchronously
            self.is_recording_speech = True
            self.is_recording_speech = self._speech.start_recording()
        except SpeechRecognitionError as e:
            self.is_recording_speech = False
            self.alert_info = alert_for_error(e)

    def _on_transcript(self, transcript: str) -> None:
        if self.is_recording_speech:
            self.craving_description = merge_transcript(self._dictation_base, transcript)

    async def log_craving(self) -> CravingRecord | None:
        """Save the form as a new craving. Returns the saved record, or None on failure."""
        if self.is_recording_speech:
            self.toggle_speech_recognition()

        record = CravingRecord(
            id="",
            timestamp=None,
            description=self.craving_description,
            intensity=float(self.craving_strength),
            resistance=float(self.confidence_to_resist),
            emotions=sorted(self.selected_emotions, key=list(Emotion).index),
        )
        try:
            saved = await self._repository.save(record)
        except COLLABORATOR_ERRORS as e:
            logger.debug(f"Save failed: {e!r}")
            self.alert_info = alert_for_error(e)
            return None

        logger.debug(f"Logged craving {saved.id}")
        self.reset()
        return saved


class LogCravingScreen:
    """Submission flow for the logging form: one save in flight at a time."""

    def __init__(self, view_model: LogCravingViewModel, scope: TaskScope | None = None):
        self.view_model = view_model
        self.scope = scope or TaskScope()
        self.is_submitting = False
        self.description_focused = False
        self.last_saved: CravingRecord | None = None

    def submit(self) -> asyncio.Task | None:
        """Start saving. Returns None when a submission is already pending."""
        if self.is_submitting:
            return None
        self.is_submitting = True
        return self.scope.spawn(self._submit())

    async def _submit(self) -> CravingRecord | None:
        try:
            self.last_saved = await self.view_model.log_craving()
            return self.last_saved
        finally:
            self.is_submitting = False
            self.description_focused = False

    def close(self) -> None:
        """Screen dismissed: cancel pending work."""
        self.scope.cancel()
