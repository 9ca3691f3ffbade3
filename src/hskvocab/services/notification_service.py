"""Service for building review reminders and progress summaries."""
from typing import Optional

from hskvocab.services.progress_store import ProgressStore


class NotificationService:
    """Service for building user-facing reminder texts."""

    def __init__(self, store: ProgressStore):
        """Initialize the service with a progress store."""
        self.store = store

    def should_send_review_reminder(self) -> bool:
        """Check if a review reminder is warranted right now."""
        if not self.store.settings.notifications_enabled:
            return False
        return len(self.store.get_words_to_review()) > 0

    def get_review_reminder_message(self) -> Optional[str]:
        """Generate a review reminder, or None when nothing is due."""
        if not self.should_send_review_reminder():
            return None

        due_count = len(self.store.get_words_to_review())
        today = self.store.get_today_stats()
        goal = self.store.settings.daily_goal
        message = f"📚 {due_count} word{'s' if due_count != 1 else ''} waiting for review!\n"
        if today.questions_answered < goal:
            message += f"🎯 {goal - today.questions_answered} questions left to reach today's goal of {goal}."
        else:
            message += "✅ Daily goal reached, a quick review keeps the streak going."
        return message

    def get_daily_progress_message(self) -> str:
        """Generate a summary of today's progress and per-level stats."""
        today = self.store.get_today_stats()
        goal = self.store.settings.daily_goal
        due_count = len(self.store.get_words_to_review())

        message = (
            f"📊 Today ({today.date}):\n"
            f"• Answered: {today.questions_answered}/{goal} ({self.store.get_daily_progress()}%)\n"
            f"• Correct: {today.correct_answers} ({today.accuracy}%)\n"
            f"• New words: {today.new_words_learned}\n"
            f"• Reviewed: {today.words_reviewed}\n"
            f"• Due for review: {due_count}\n"
        )

        for level in self.store.settings.selected_levels:
            stats = self.store.get_level_stats(level)
            message += (
                f"\nHSK {level}: {stats.learned_words}/{stats.total_words} learned "
                f"({stats.percent_learned}%), {stats.mastered_words} mastered"
            )
        return message
