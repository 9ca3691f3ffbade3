"""Main application object wiring the word bank, progress store and quiz generator."""
import logging
import random
from datetime import datetime
from typing import Callable, List, Optional

from hskvocab.config import ensure_directories, settings
from hskvocab.models.vocab_models import QuizQuestion, WordProgress
from hskvocab.monitoring import start_monitoring
from hskvocab.services.notification_service import NotificationService
from hskvocab.services.progress_store import ProgressStore
from hskvocab.services.quiz_service import QuizGenerator
from hskvocab.services.speech_service import SpeechService
from hskvocab.services.storage import KeyValueStorage, SqlKeyValueStorage
from hskvocab.services.word_bank import WordBank, get_word_bank


class VocabApp:
    """Main application class."""

    def __init__(
        self,
        word_bank: Optional[WordBank] = None,
        storage: Optional[KeyValueStorage] = None,
        speech: Optional[SpeechService] = None,
        vibrate: Optional[Callable[[bool], None]] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the application."""
        self.logger = logging.getLogger(__name__)
        self.word_bank = word_bank or get_word_bank()
        self.storage = storage or SqlKeyValueStorage()
        self.store = ProgressStore.load(self.word_bank, self.storage, clock=clock, rng=rng)
        self.quiz_generator = QuizGenerator(self.word_bank, rng=rng)
        self.speech = speech or SpeechService()
        self.notifications = NotificationService(self.store)
        self.vibrate = vibrate
        self.logger.info("Application initialized")

    @classmethod
    def create(cls) -> "VocabApp":
        """Create the application with directories and the metrics exporter set up."""
        ensure_directories()
        if settings.monitoring.metrics_port:
            start_monitoring(settings.monitoring.metrics_port)
        return cls()

    def start_quiz(self, count: Optional[int] = None) -> List[QuizQuestion]:
        """Pick words for a quiz and turn them into questions."""
        if count is None:
            count = settings.learning.quiz_count
        word_ids = self.store.get_quiz_words(count)
        return self.quiz_generator.generate_questions(word_ids)

    def answer(self, question: QuizQuestion, option_index: int) -> WordProgress:
        """Record an answer and trigger feedback side effects."""
        is_correct = question.is_correct(option_index)

        if self.vibrate and self.store.settings.vibration_enabled:
            try:
                self.vibrate(is_correct)
            except Exception as e:
                self.logger.warning(f"Vibration feedback failed: {e}")

        if is_correct and self.store.settings.sound_enabled:
            self.speech.pronounce(question.word.hanzi)

        return self.store.update_word_progress(question.word.id, is_correct)

    def close(self) -> None:
        """Flush progress and stop background workers."""
        self.store.close()
        self.speech.close()
        self.logger.info("Application closed")
