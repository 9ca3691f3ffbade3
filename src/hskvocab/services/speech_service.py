"""Pronunciation generation with gTTS."""
import logging
import re
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from gtts import gTTS

from hskvocab import monitoring
from hskvocab.config import settings

logger = logging.getLogger(__name__)


class SpeechService:
    """Creates and caches mp3 pronunciations in the background."""

    def __init__(
        self,
        output_dir: Optional[Path] = None,
        language: Optional[str] = None,
        slow: Optional[bool] = None,
    ):
        self.output_dir = Path(output_dir) if output_dir else settings.paths.pronunciations_dir
        self.language = language or settings.speech.language
        self.slow = settings.speech.slow if slow is None else slow
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="speech")

    @staticmethod
    def _sanitize_filename(text: str) -> str:
        """Turn a word into a safe file name; CJK characters are kept."""
        return re.sub(r"[^\w]+", "_", text.strip()).strip("_") or "word"

    def pronunciation_path(self, text: str) -> Path:
        return self.output_dir / f"{self._sanitize_filename(text)}.mp3"

    def generate_pronunciation(self, text: str) -> Optional[str]:
        """Generate (or reuse) the pronunciation file for a text."""
        path = self.pronunciation_path(text)
        if path.exists():
            return str(path)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tts = gTTS(text=text, lang=self.language, slow=self.slow)
            tts.save(str(path))
            logger.info(f"Pronunciation generated for: {text}, file: {path}")
            return str(path)
        except Exception as e:
            logger.error(f"Error generating pronunciation for: {text}, error: {e}")
            monitoring.pronunciation_errors.inc()
            return None

    def pronounce(self, text: str) -> Future:
        """Generate the pronunciation in the background; the result may be ignored."""
        return self._executor.submit(self.generate_pronunciation, text)

    def close(self) -> None:
        self._executor.shutdown(wait=True)
