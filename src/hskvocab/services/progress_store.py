"""Progress store: SRS scheduling, daily statistics, settings and persistence."""
import json
import logging
import random
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, date, datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Tuple

from hskvocab import monitoring
from hskvocab.config import HSK_LEVELS, settings as app_settings
from hskvocab.models.vocab_models import (
    SETTINGS_FIELDS,
    DailyStatField,
    DailyStats,
    DayActivity,
    LevelStats,
    OverallStats,
    Settings,
    Word,
    WordProgress,
)
from hskvocab.services.storage import KeyValueStorage
from hskvocab.services.word_bank import WordBank

logger = logging.getLogger(__name__)

_INVALID = object()


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def clamp_daily_goal(value: Any) -> int:
    """Daily goal limited to the allowed range; non-numeric input gives the lower bound."""
    lower = app_settings.learning.min_daily_goal
    upper = app_settings.learning.max_daily_goal
    try:
        goal = int(value)
    except OverflowError:
        return upper if value > 0 else lower
    except (TypeError, ValueError):
        return lower
    return max(lower, min(goal, upper))


def default_settings() -> Settings:
    """Settings used for a fresh install."""
    return Settings(
        daily_goal=clamp_daily_goal(app_settings.learning.default_daily_goal),
        selected_levels=sorted(set(app_settings.learning.default_levels)),
    )


class ProgressStore:
    """Owns per-word SRS state, daily statistics, settings and excluded words.

    All mutations are applied in memory first and then handed to a single
    background writer, so callers never wait on storage and a failed write
    leaves the in-memory state untouched.
    """

    def __init__(
        self,
        word_bank: WordBank,
        storage: KeyValueStorage,
        key: Optional[str] = None,
        intervals: Optional[List[int]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
    ):
        """Initialize an empty store; use load() to restore saved state."""
        self.word_bank = word_bank
        self.storage = storage
        self.key = key or app_settings.storage.key
        self.intervals = list(intervals or app_settings.learning.srs_intervals)
        self.clock = clock or _utc_now
        self.rng = rng or random.Random()

        self.word_progress: Dict[str, WordProgress] = {}
        self.daily_stats: Dict[str, DailyStats] = {}
        self.settings: Settings = default_settings()
        self.excluded_words: List[str] = []

        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="progress-store")
        self._closed = False

    @property
    def max_level(self) -> int:
        """Highest SRS tier (mastered)."""
        return len(self.intervals) - 1

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, word_bank: WordBank, storage: KeyValueStorage, **kwargs: Any) -> "ProgressStore":
        """Create a store and restore its state from storage."""
        store = cls(word_bank, storage, **kwargs)
        store.hydrate()
        return store

    def hydrate(self) -> None:
        """Replace in-memory state with the saved document, field by field."""
        try:
            raw = self.storage.get_item(self.key)
        except Exception as e:
            logger.error(f"Error reading saved progress under key {self.key}: {e}")
            monitoring.storage_errors.labels(operation="read").inc()
            return

        if raw is None:
            logger.info(f"No saved progress under key {self.key}, starting fresh")
            return

        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Saved progress is not valid JSON, starting fresh: {e}")
            return

        if not isinstance(data, dict):
            logger.warning(f"Saved progress has unexpected type {type(data).__name__}, starting fresh")
            return

        self.word_progress = self._restore_word_progress(data.get("wordProgress"))
        self.daily_stats = self._restore_daily_stats(data.get("dailyStats"))
        self.settings = self._restore_settings(data.get("settings"))
        self.excluded_words = self._restore_excluded_words(data.get("excludedWords"))
        logger.info(
            f"Restored progress for {len(self.word_progress)} words, "
            f"{len(self.daily_stats)} days of stats, {len(self.excluded_words)} excluded words"
        )

    def _restore_word_progress(self, raw: Any) -> Dict[str, WordProgress]:
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring malformed wordProgress section")
            return {}

        restored = {}
        for word_id, entry in raw.items():
            try:
                entry = dict(entry)
                entry.setdefault("wordId", word_id)
                progress = WordProgress.from_data(entry)
            except (KeyError, TypeError, ValueError, OverflowError) as e:
                logger.warning(f"Skipping malformed progress entry for word {word_id}: {e}")
                continue
            progress.level = max(0, min(progress.level, self.max_level))
            progress.mastered = progress.level == self.max_level
            progress.correct_count = max(0, progress.correct_count)
            progress.wrong_count = max(0, progress.wrong_count)
            progress.next_review = _as_utc(progress.next_review)
            if progress.last_review:
                progress.last_review = _as_utc(progress.last_review)
            restored[progress.word_id] = progress
        return restored

    def _restore_daily_stats(self, raw: Any) -> Dict[str, DailyStats]:
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring malformed dailyStats section")
            return {}

        restored = {}
        for date_key, entry in raw.items():
            try:
                entry = dict(entry)
                entry.setdefault("date", date_key)
                stats = DailyStats.from_data(entry)
                date.fromisoformat(stats.date)
            except (KeyError, TypeError, ValueError, OverflowError) as e:
                logger.warning(f"Skipping malformed daily stats for {date_key}: {e}")
                continue
            for stat in DailyStatField:
                setattr(stats, stat.value, max(0, getattr(stats, stat.value)))
            restored[stats.date] = stats
        return restored

    def _restore_settings(self, raw: Any) -> Settings:
        restored = default_settings()
        if raw is None:
            return restored
        if not isinstance(raw, dict):
            logger.warning("Ignoring malformed settings section")
            return restored

        for stored_key, attr in SETTINGS_FIELDS.items():
            if stored_key not in raw:
                continue
            value = self._normalize_setting(attr, raw[stored_key])
            if value is _INVALID:
                logger.warning(f"Ignoring invalid stored setting {stored_key}={raw[stored_key]!r}")
                continue
            setattr(restored, attr, value)
        return restored

    def _restore_excluded_words(self, raw: Any) -> List[str]:
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("Ignoring malformed excludedWords section")
            return []

        restored: List[str] = []
        for word_id in raw:
            if isinstance(word_id, str) and word_id not in restored:
                restored.append(word_id)
        return restored

    def to_data(self) -> Dict[str, Any]:
        """Convert the whole state to a JSON-ready document."""
        return {
            "wordProgress": {word_id: p.to_data() for word_id, p in self.word_progress.items()},
            "dailyStats": {date_key: s.to_data() for date_key, s in self.daily_stats.items()},
            "settings": self.settings.to_data(),
            "excludedWords": list(self.excluded_words),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_data(), ensure_ascii=False)

    def save_state(self) -> None:
        """Queue a write of the current state without waiting for it."""
        payload = self.to_json()
        if self._closed:
            self._write(payload)
            return
        self._executor.submit(self._write, payload)

    def _write(self, payload: str) -> None:
        try:
            self.storage.set_item(self.key, payload)
            monitoring.storage_writes.inc()
        except Exception as e:
            logger.error(f"Error saving progress under key {self.key}: {e}")
            monitoring.storage_errors.labels(operation="write").inc()

    def flush(self) -> None:
        """Block until every queued write has been attempted."""
        if not self._closed:
            self._executor.submit(lambda: None).result()

    def close(self) -> None:
        """Flush pending writes and stop the background writer."""
        if self._closed:
            return
        self.flush()
        self._executor.shutdown(wait=True)
        self._closed = True

    # ------------------------------------------------------------------
    # Answers and daily statistics
    # ------------------------------------------------------------------

    def get_today_key(self) -> str:
        """Today's date key (YYYY-MM-DD, UTC)."""
        return _as_utc(self.clock()).date().isoformat()

    def get_today_stats(self) -> DailyStats:
        """Today's counters; an empty record when nothing was answered yet."""
        today = self.get_today_key()
        return self.daily_stats.get(today) or DailyStats(date=today)

    def _get_or_create_today_stats(self) -> DailyStats:
        today = self.get_today_key()
        if today not in self.daily_stats:
            self.daily_stats[today] = DailyStats(date=today)
        return self.daily_stats[today]

    def increment_daily_stat(self, stat: DailyStatField) -> DailyStats:
        """Increase one of today's counters by one."""
        stats = self._get_or_create_today_stats()
        stats.increment(stat)
        self.save_state()
        return stats

    def _interval_days(self, level: int) -> int:
        return self.intervals[max(0, min(level, self.max_level))]

    def get_progress(self, word_id: str) -> Optional[WordProgress]:
        """Get the SRS state of a word, None if it was never answered."""
        return self.word_progress.get(word_id)

    def update_word_progress(self, word_id: str, was_correct: bool) -> WordProgress:
        """Apply an answer to the word's SRS state and today's statistics."""
        now = _as_utc(self.clock())
        existing = self.word_progress.get(word_id)
        is_new = existing is None or existing.level == 0

        if was_correct:
            new_level = min(existing.level + 1, self.max_level) if existing else 1
            progress = WordProgress(
                word_id=word_id,
                level=new_level,
                correct_count=(existing.correct_count if existing else 0) + 1,
                wrong_count=existing.wrong_count if existing else 0,
                next_review=now + timedelta(days=self._interval_days(new_level)),
                last_review=now,
                mastered=new_level == self.max_level,
            )
        else:
            # Wrong answers drop back to the first review tier, never to 0
            progress = WordProgress(
                word_id=word_id,
                level=1,
                correct_count=existing.correct_count if existing else 0,
                wrong_count=(existing.wrong_count if existing else 0) + 1,
                next_review=now + timedelta(days=1),
                last_review=now,
                mastered=False,
            )

        self.word_progress[word_id] = progress

        stats = self._get_or_create_today_stats()
        stats.increment(DailyStatField.QUESTIONS_ANSWERED)
        if was_correct:
            stats.increment(DailyStatField.CORRECT_ANSWERS)
        if is_new:
            stats.increment(DailyStatField.NEW_WORDS_LEARNED)
        else:
            stats.increment(DailyStatField.WORDS_REVIEWED)

        monitoring.questions_answered.labels(outcome="correct" if was_correct else "wrong").inc()
        if progress.mastered and not (existing and existing.mastered):
            monitoring.words_mastered.inc()
            logger.info(f"Word {word_id} mastered")

        logger.debug(
            f"Word {word_id} answered {'correctly' if was_correct else 'wrongly'}: "
            f"level {existing.level if existing else 0} -> {progress.level}, "
            f"next review {progress.next_review.date().isoformat()}"
        )
        self.save_state()
        return progress

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def _is_selected(self, word: Optional[Word]) -> bool:
        return word is not None and word.level in self.settings.selected_levels

    def _shuffled(self, items: List[str]) -> List[str]:
        shuffled = list(items)
        self.rng.shuffle(shuffled)
        return shuffled

    def get_words_to_review(self) -> List[str]:
        """IDs of learned words whose review date has come."""
        today = _as_utc(self.clock()).date()
        excluded = set(self.excluded_words)

        due = []
        for progress in self.word_progress.values():
            if progress.mastered or progress.level == 0:
                continue
            if progress.word_id in excluded:
                continue
            if not self._is_selected(self.word_bank.get_by_id(progress.word_id)):
                continue
            if _as_utc(progress.next_review).date() <= today:
                due.append(progress.word_id)

        monitoring.due_words.set(len(due))
        return due

    def get_new_words(self, count: int) -> List[str]:
        """Random selection of never-answered words from the selected levels."""
        if count <= 0:
            return []
        excluded = set(self.excluded_words)
        candidates = [
            word.id
            for word in self.word_bank
            if self._is_selected(word)
            and word.id not in self.word_progress
            and word.id not in excluded
        ]
        return self._shuffled(candidates)[:count]

    def get_quiz_words(self, count: int) -> List[str]:
        """Mix of due reviews and new words, reviews first, shuffled."""
        if count <= 0:
            return []
        review_words = self.get_words_to_review()
        new_words = self.get_new_words(max(0, count - len(review_words)))

        quiz_words = self._shuffled(review_words + new_words)[:count]
        monitoring.quiz_batches.inc()
        logger.info(
            f"Quiz batch of {len(quiz_words)} words "
            f"({len(review_words)} due for review, {len(new_words)} new)"
        )
        return quiz_words

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def get_level_stats(self, level: int) -> LevelStats:
        """Learned and mastered counts for one level."""
        learned = 0
        mastered = 0
        for word in self.word_bank.get_by_level(level):
            progress = self.word_progress.get(word.id)
            if progress and progress.level > 0:
                learned += 1
                if progress.mastered:
                    mastered += 1

        return LevelStats(
            level=level,
            total_words=self.word_bank.count(level),
            learned_words=learned,
            mastered_words=mastered,
        )

    def get_most_wrong_words(self) -> List[WordProgress]:
        """Progress entries with mistakes, most mistakes first."""
        wrong = [p for p in self.word_progress.values() if p.wrong_count > 0]
        return sorted(wrong, key=lambda p: p.wrong_count, reverse=True)

    def get_wrong_words(self) -> List[Tuple[Word, WordProgress]]:
        """Most-wrong words resolved against the word bank."""
        resolved = []
        for progress in self.get_most_wrong_words():
            word = self.word_bank.get_by_id(progress.word_id)
            if word:
                resolved.append((word, progress))
        return resolved

    def get_last_days_stats(self, days: int = 7) -> List[DayActivity]:
        """Questions and correct answers per day, oldest first, ending today."""
        today = _as_utc(self.clock()).date()
        activity = []
        for offset in range(days - 1, -1, -1):
            date_key = (today - timedelta(days=offset)).isoformat()
            stats = self.daily_stats.get(date_key)
            activity.append(DayActivity(
                date=date_key,
                questions=stats.questions_answered if stats else 0,
                correct=stats.correct_answers if stats else 0,
            ))
        return activity

    def get_overall_stats(self) -> OverallStats:
        total_questions = sum(s.questions_answered for s in self.daily_stats.values())
        total_correct = sum(s.correct_answers for s in self.daily_stats.values())
        return OverallStats(
            words_studied=len(self.word_progress),
            words_mastered=sum(1 for p in self.word_progress.values() if p.mastered),
            total_questions=total_questions,
            total_correct=total_correct,
            accuracy=round(total_correct / total_questions * 100) if total_questions else 0,
        )

    def get_daily_progress(self) -> int:
        """Today's answered questions as a percentage of the daily goal, capped at 100."""
        answered = self.get_today_stats().questions_answered
        return min(100, round(answered / self.settings.daily_goal * 100))

    # ------------------------------------------------------------------
    # Settings and exclusions
    # ------------------------------------------------------------------

    def _normalize_setting(self, name: str, value: Any) -> Any:
        """Validated value for a setting, or _INVALID."""
        if name == "daily_goal":
            return clamp_daily_goal(value)
        if name == "selected_levels":
            if not isinstance(value, (list, tuple, set)):
                return _INVALID
            levels = sorted({
                level for level in value
                if isinstance(level, int) and not isinstance(level, bool) and level in HSK_LEVELS
            })
            return levels if levels else _INVALID
        if isinstance(value, bool):
            return value
        return _INVALID

    def update_settings(self, **changes: Any) -> Settings:
        """Merge the given fields into the settings."""
        for name, value in changes.items():
            if name not in SETTINGS_FIELDS.values():
                logger.warning(f"Ignoring unknown setting: {name}")
                continue
            normalized = self._normalize_setting(name, value)
            if normalized is _INVALID:
                logger.warning(f"Ignoring invalid value for setting {name}: {value!r}")
                continue
            setattr(self.settings, name, normalized)

        self.save_state()
        return self.settings

    def set_daily_goal(self, value: Any) -> int:
        """Set the daily goal, clamped to the allowed range."""
        self.update_settings(daily_goal=value)
        return self.settings.daily_goal

    def toggle_level(self, level: int) -> bool:
        """Select or deselect a level. Returns False if nothing changed."""
        levels = self.settings.selected_levels
        if level in levels:
            if len(levels) == 1:
                logger.info(f"Refusing to deselect level {level}: at least one level must stay selected")
                return False
            self.update_settings(selected_levels=[lvl for lvl in levels if lvl != level])
            return True

        if level not in HSK_LEVELS:
            logger.warning(f"Ignoring unknown level: {level}")
            return False
        self.update_settings(selected_levels=levels + [level])
        return True

    def toggle_word_exclusion(self, word_id: str) -> bool:
        """Flip a word's exclusion. Returns True if the word is now excluded."""
        if word_id in self.excluded_words:
            self.excluded_words.remove(word_id)
            excluded = False
        else:
            self.excluded_words.append(word_id)
            excluded = True

        self.save_state()
        return excluded

    def is_word_excluded(self, word_id: str) -> bool:
        return word_id in self.excluded_words

    def get_excluded_word_ids(self) -> List[str]:
        return list(self.excluded_words)

    def get_excluded_words(self) -> List[Word]:
        """Excluded words that still exist in the word bank."""
        words = (self.word_bank.get_by_id(word_id) for word_id in self.excluded_words)
        return [word for word in words if word]

    def reset_all_progress(self) -> None:
        """Forget all SRS progress and statistics. Settings and exclusions are kept."""
        self.word_progress = {}
        self.daily_stats = {}
        logger.info("All progress reset")
        self.save_state()
