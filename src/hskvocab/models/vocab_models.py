"""Models for vocabulary, progress and quiz data structures."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class QuizType(Enum):
    """Available multiple-choice question types."""
    HANZI_TO_MEANING = "hanzi_to_meaning"  # Show hanzi, pick the meaning
    MEANING_TO_HANZI = "meaning_to_hanzi"  # Show meaning, pick the hanzi
    HANZI_TO_PINYIN = "hanzi_to_pinyin"  # Show hanzi, pick the pinyin

    @property
    def answer_field(self) -> str:
        """Word attribute used for the correct answer and the distractors."""
        return _ANSWER_FIELDS[self]


_ANSWER_FIELDS = {
    QuizType.HANZI_TO_MEANING: "meaning",
    QuizType.MEANING_TO_HANZI: "hanzi",
    QuizType.HANZI_TO_PINYIN: "pinyin",
}


class DailyStatField(Enum):
    """Counters kept per day in DailyStats."""
    QUESTIONS_ANSWERED = "questions_answered"
    CORRECT_ANSWERS = "correct_answers"
    NEW_WORDS_LEARNED = "new_words_learned"
    WORDS_REVIEWED = "words_reviewed"


@dataclass(frozen=True)
class Word:
    """A single entry of the static word bank."""
    id: str
    level: int
    hanzi: str
    pinyin: str
    meaning: str
    example: Optional[str] = None
    example_pinyin: Optional[str] = None
    example_meaning: Optional[str] = None

    @classmethod
    def from_data(cls, data: Dict[str, Any], level: Optional[int] = None) -> "Word":
        """Create a Word from a catalog record."""
        return cls(
            id=str(data["id"]),
            level=int(data.get("level", level)),
            hanzi=data["hanzi"],
            pinyin=data["pinyin"],
            meaning=data["meaning"],
            example=data.get("example"),
            example_pinyin=data.get("example_pinyin"),
            example_meaning=data.get("example_meaning"),
        )


@dataclass
class WordProgress:
    """SRS state of a word that has been answered at least once."""
    word_id: str
    level: int
    correct_count: int
    wrong_count: int
    next_review: datetime
    last_review: Optional[datetime] = None
    mastered: bool = False

    def to_data(self) -> Dict[str, Any]:
        """Convert to serializable data for storage."""
        return {
            "wordId": self.word_id,
            "level": self.level,
            "correctCount": self.correct_count,
            "wrongCount": self.wrong_count,
            "nextReview": self.next_review.isoformat(),
            "lastReview": self.last_review.isoformat() if self.last_review else None,
            "mastered": self.mastered,
        }

    @classmethod
    def from_data(cls, data: Dict[str, Any]) -> "WordProgress":
        """Create a WordProgress instance from stored data."""
        return cls(
            word_id=str(data["wordId"]),
            level=int(data["level"]),
            correct_count=int(data.get("correctCount", 0)),
            wrong_count=int(data.get("wrongCount", 0)),
            next_review=datetime.fromisoformat(data["nextReview"]),
            last_review=datetime.fromisoformat(data["lastReview"]) if data.get("lastReview") else None,
            mastered=bool(data.get("mastered", False)),
        )


@dataclass
class DailyStats:
    """Aggregated answer counters for one calendar day."""
    date: str  # YYYY-MM-DD
    questions_answered: int = 0
    correct_answers: int = 0
    new_words_learned: int = 0
    words_reviewed: int = 0

    def increment(self, stat: DailyStatField, amount: int = 1) -> None:
        """Increase a single counter."""
        if stat is DailyStatField.QUESTIONS_ANSWERED:
            self.questions_answered += amount
        elif stat is DailyStatField.CORRECT_ANSWERS:
            self.correct_answers += amount
        elif stat is DailyStatField.NEW_WORDS_LEARNED:
            self.new_words_learned += amount
        elif stat is DailyStatField.WORDS_REVIEWED:
            self.words_reviewed += amount

    @property
    def accuracy(self) -> int:
        """Share of correct answers in percent."""
        if self.questions_answered == 0:
            return 0
        return round(self.correct_answers / self.questions_answered * 100)

    def to_data(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "questionsAnswered": self.questions_answered,
            "correctAnswers": self.correct_answers,
            "newWordsLearned": self.new_words_learned,
            "wordsReviewed": self.words_reviewed,
        }

    @classmethod
    def from_data(cls, data: Dict[str, Any]) -> "DailyStats":
        return cls(
            date=str(data["date"]),
            questions_answered=int(data.get("questionsAnswered", 0)),
            correct_answers=int(data.get("correctAnswers", 0)),
            new_words_learned=int(data.get("newWordsLearned", 0)),
            words_reviewed=int(data.get("wordsReviewed", 0)),
        )


@dataclass
class Settings:
    """User preferences."""
    daily_goal: int = 20
    selected_levels: List[int] = field(default_factory=lambda: [1, 2])
    sound_enabled: bool = True
    vibration_enabled: bool = True
    notifications_enabled: bool = True
    show_pinyin: bool = True

    def to_data(self) -> Dict[str, Any]:
        return {
            "dailyGoal": self.daily_goal,
            "selectedLevels": list(self.selected_levels),
            "soundEnabled": self.sound_enabled,
            "vibrationEnabled": self.vibration_enabled,
            "notificationsEnabled": self.notifications_enabled,
            "showPinyin": self.show_pinyin,
        }


# Mapping between stored keys and Settings attributes
SETTINGS_FIELDS = {
    "dailyGoal": "daily_goal",
    "selectedLevels": "selected_levels",
    "soundEnabled": "sound_enabled",
    "vibrationEnabled": "vibration_enabled",
    "notificationsEnabled": "notifications_enabled",
    "showPinyin": "show_pinyin",
}


@dataclass
class QuizQuestion:
    """A generated multiple-choice question."""
    word: Word
    quiz_type: QuizType
    options: List[str]
    correct_index: int

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_index]

    def is_correct(self, option_index: int) -> bool:
        """Check whether the chosen option is the right one."""
        return option_index == self.correct_index


@dataclass
class LevelStats:
    """Progress summary for one HSK level."""
    level: int
    total_words: int
    learned_words: int
    mastered_words: int

    @property
    def percent_learned(self) -> int:
        if self.total_words == 0:
            return 0
        return round(self.learned_words / self.total_words * 100)


@dataclass
class DayActivity:
    """One day of the recent activity chart."""
    date: str
    questions: int
    correct: int


@dataclass
class OverallStats:
    """Totals across all recorded days."""
    words_studied: int
    words_mastered: int
    total_questions: int
    total_correct: int
    accuracy: int
