"""Multiple-choice question generation."""
import logging
import random
from typing import Iterable, List, Optional, Tuple

from hskvocab.config import settings
from hskvocab.models.vocab_models import QuizQuestion, QuizType, Word
from hskvocab.services.word_bank import WordBank

logger = logging.getLogger(__name__)

# Distractors for these fields must have as many hanzi as the target word
LENGTH_SENSITIVE_FIELDS = ("hanzi", "pinyin")

QUIZ_TYPE_NAMES = {
    QuizType.HANZI_TO_MEANING: "Hanzi → Meaning",
    QuizType.MEANING_TO_HANZI: "Meaning → Hanzi",
    QuizType.HANZI_TO_PINYIN: "Hanzi → Pinyin",
}


class QuizGenerator:
    """Builds quiz questions against a word bank."""

    def __init__(self, word_bank: WordBank, rng: Optional[random.Random] = None):
        """Initialize the generator with a word bank."""
        self.word_bank = word_bank
        self.rng = rng or random.Random()

    def _shuffled(self, items: list) -> list:
        shuffled = list(items)
        self.rng.shuffle(shuffled)
        return shuffled

    def generate_options(
        self,
        word: Word,
        field: str,
        option_count: Optional[int] = None,
    ) -> Tuple[List[str], int]:
        """Pick distractors for a word and return the shuffled options and the correct index."""
        if option_count is None:
            option_count = settings.learning.option_count
        needed = max(0, option_count - 1)
        correct_value = getattr(word, field)
        char_count = len(word.hanzi)
        filter_by_length = field in LENGTH_SENSITIVE_FIELDS

        def matches_length(candidate: Word) -> bool:
            return not filter_by_length or len(candidate.hanzi) == char_count

        same_level = [
            w for w in self.word_bank.get_by_level(word.level)
            if w.id != word.id and matches_length(w)
        ]
        other_levels = [
            w for w in self.word_bank
            if w.level != word.level and w.id != word.id and matches_length(w)
        ]

        distractors: List[str] = []
        for candidate in self._shuffled(same_level + other_levels):
            if len(distractors) >= needed:
                break
            value = getattr(candidate, field)
            if value != correct_value and value not in distractors:
                distractors.append(value)

        if len(distractors) < needed:
            # Not enough words of the same length: take any other word
            logger.debug(
                f"Only {len(distractors)} of {needed} distractors for {word.id} ({field}), "
                "relaxing the length filter"
            )
            fallback = [w for w in self.word_bank if w.id != word.id]
            for candidate in self._shuffled(fallback):
                if len(distractors) >= needed:
                    break
                value = getattr(candidate, field)
                if value != correct_value and value not in distractors:
                    distractors.append(value)

        if len(distractors) < needed:
            logger.warning(f"Word bank too small: only {len(distractors)} distractors for {word.id}")

        options = self._shuffled([correct_value] + distractors)
        return options, options.index(correct_value)

    def generate_question(
        self,
        word_id: str,
        quiz_type: QuizType,
        option_count: Optional[int] = None,
    ) -> Optional[QuizQuestion]:
        """Create a question for a word, or None if the word does not exist."""
        word = self.word_bank.get_by_id(word_id)
        if not word:
            logger.debug(f"Cannot create question: word {word_id} not found")
            return None

        options, correct_index = self.generate_options(word, quiz_type.answer_field, option_count)
        return QuizQuestion(
            word=word,
            quiz_type=quiz_type,
            options=options,
            correct_index=correct_index,
        )

    def generate_questions(self, word_ids: Iterable[str]) -> List[QuizQuestion]:
        """Create one question of a random type per word, skipping unknown words."""
        quiz_types = list(QuizType)
        questions = []
        for word_id in word_ids:
            question = self.generate_question(word_id, self.rng.choice(quiz_types))
            if question:
                questions.append(question)
        return questions


def get_quiz_type_name(quiz_type: QuizType) -> str:
    """Human readable name of a question type."""
    return QUIZ_TYPE_NAMES.get(quiz_type, "Quiz")


def get_question_text(question: QuizQuestion) -> str:
    """Prompt shown above the options."""
    word = question.word
    if question.quiz_type is QuizType.HANZI_TO_MEANING:
        return f'What does "{word.hanzi}" mean?'
    if question.quiz_type is QuizType.MEANING_TO_HANZI:
        return f'Which hanzi means "{word.meaning}"?'
    if question.quiz_type is QuizType.HANZI_TO_PINYIN:
        return f'What is the pinyin of "{word.hanzi}"?'
    return ""


def get_question_display(question: QuizQuestion) -> str:
    """Large text shown as the question itself."""
    if question.quiz_type in (QuizType.HANZI_TO_MEANING, QuizType.HANZI_TO_PINYIN):
        return question.word.hanzi
    if question.quiz_type is QuizType.MEANING_TO_HANZI:
        return question.word.meaning
    return ""
