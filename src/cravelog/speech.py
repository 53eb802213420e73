"""Speech-to-text errors, transcript merging and a file-backed service."""

from collections.abc import Callable
from pathlib import Path

from loguru import logger

from cravelog.errors import CravelogError


class SpeechRecognitionError(CravelogError):
    pass


class SpeechNotAuthorizedError(SpeechRecognitionError):
    def __init__(self):
        super().__init__("Speech recognition permission not granted.")


class RecognizerUnavailableError(SpeechRecognitionError):
    def __init__(self):
        super().__init__("Speech recognizer is currently unavailable.")


class AudioSessionFailedError(SpeechRecognitionError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class RecognitionFailedError(SpeechRecognitionError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


def merge_transcript(base: str, transcript: str) -> str:
    """Append a transcript to the text that was in the field when dictation began."""
    if not transcript:
        return base
    if not base:
        return transcript
    separator = "" if base.endswith((" ", "\n")) else " "
    return f"{base}{separator}{transcript}"


class FileTranscriptSpeechService:
    """Replays a transcript file as incremental recognition results.

    Each word extends the transcript and is pushed to ``on_text_updated``,
    the way a live recognizer reports partial results.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.on_text_updated: Callable[[str], None] | None = None
        self.is_authorized = False
        self.is_recording = False

    async def request_authorization(self) -> bool:
        # No permission prompt for a file
        self.is_authorized = True
        return self.is_authorized

    def start_recording(self) -> bool:
        if not self.is_authorized:
            raise SpeechNotAuthorizedError()
        if not self.path.exists():
            raise RecognizerUnavailableError()
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise AudioSessionFailedError(f"Cannot read transcript: {e}") from e

        words = text.split()
        if not words:
            raise RecognitionFailedError("No speech detected.")

        self.is_recording = True
        logger.debug(f"Dictating {len(words)} words from {self.path}")
        for i in range(1, len(words) + 1):
            if not self.is_recording:
                break
            if self.on_text_updated:
                self.on_text_updated(" ".join(words[:i]))
        return True

    def stop_recording(self) -> None:
        self.is_recording = False
