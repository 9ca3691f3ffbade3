"""
Terminal front end for the HSK vocabulary trainer.

Usage:
    python -m hskvocab quiz [--count N]
    python -m hskvocab due
    python -m hskvocab stats
    python -m hskvocab wrong
    python -m hskvocab excluded
    python -m hskvocab exclude <word_id>
    python -m hskvocab levels <level>
    python -m hskvocab goal <n>
    python -m hskvocab reset --yes
"""
import argparse
import logging
import sys
from typing import List, Optional

from hskvocab.app import VocabApp
from hskvocab.logging_config import setup_logging
from hskvocab.services.quiz_service import get_question_display, get_question_text, get_quiz_type_name

logger = logging.getLogger(__name__)


def _terminal_bell(is_correct: bool) -> None:
    if not is_correct:
        sys.stdout.write("\a")
        sys.stdout.flush()


def _ask_option(option_count: int) -> Optional[int]:
    """Read a 1-based option number; None means quit."""
    while True:
        raw = input(f"Your answer (1-{option_count}, q to quit): ").strip().lower()
        if raw in ("q", "quit"):
            return None
        if raw.isdigit() and 1 <= int(raw) <= option_count:
            return int(raw) - 1
        print("Please enter a valid option number.")


def cmd_quiz(app: VocabApp, args) -> None:
    """Run an interactive quiz."""
    reminder = app.notifications.get_review_reminder_message()
    if reminder:
        print(reminder + "\n")

    questions = app.start_quiz(args.count)
    if not questions:
        print("No words available. Select more levels or include excluded words.")
        return

    correct = 0
    answered = 0
    for number, question in enumerate(questions, 1):
        print(f"\n[{number}/{len(questions)}] {get_quiz_type_name(question.quiz_type)}")
        print(f"    {get_question_display(question)}")
        print(get_question_text(question))
        for i, option in enumerate(question.options, 1):
            print(f"  {i}. {option}")

        choice = _ask_option(len(question.options))
        if choice is None:
            break

        progress = app.answer(question, choice)
        answered += 1
        word = question.word
        if question.is_correct(choice):
            correct += 1
            print("✅ Correct!")
        else:
            print(f"❌ Wrong. Answer: {question.correct_option}")
        details = f"{word.hanzi} ({word.pinyin}) - {word.meaning}" if app.store.settings.show_pinyin \
            else f"{word.hanzi} - {word.meaning}"
        print(f"   {details}")
        if word.example:
            print(f"   {word.example}")
            if app.store.settings.show_pinyin and word.example_pinyin:
                print(f"   {word.example_pinyin}")
            if word.example_meaning:
                print(f"   {word.example_meaning}")
        print(f"   SRS level {progress.level}, next review {progress.next_review.date().isoformat()}")

    if answered:
        print(f"\nQuiz finished: {correct}/{answered} correct ({round(correct / answered * 100)}%)")


def cmd_due(app: VocabApp, args) -> None:
    """Show words due for review."""
    due = app.store.get_words_to_review()
    if not due:
        print("No words due today.")
        return
    print(f"{len(due)} word(s) due for review:")
    for word_id in due:
        word = app.word_bank.get_by_id(word_id)
        progress = app.store.get_progress(word_id)
        print(f"  {word.hanzi:<6} {word.pinyin:<14} level={progress.level} due={progress.next_review.date()}")


def cmd_stats(app: VocabApp, args) -> None:
    """Show today's progress, the last week and overall totals."""
    print(app.notifications.get_daily_progress_message())

    print("\nLast 7 days:")
    for day in app.store.get_last_days_stats(7):
        print(f"  {day.date}: {day.correct}/{day.questions}")

    overall = app.store.get_overall_stats()
    print(
        f"\nOverall: {overall.words_studied} words studied, {overall.words_mastered} mastered, "
        f"{overall.total_correct}/{overall.total_questions} correct ({overall.accuracy}%)"
    )


def cmd_wrong(app: VocabApp, args) -> None:
    """List the most frequently missed words."""
    wrong = app.store.get_wrong_words()
    if not wrong:
        print("No mistakes recorded yet.")
        return
    for word, progress in wrong:
        print(f"  {word.hanzi:<6} {word.meaning:<30} wrong={progress.wrong_count} correct={progress.correct_count}")


def cmd_excluded(app: VocabApp, args) -> None:
    """List excluded words."""
    words = app.store.get_excluded_words()
    if not words:
        print("No excluded words.")
        return
    for word in words:
        print(f"  {word.id:<10} {word.hanzi:<6} {word.meaning}")


def cmd_exclude(app: VocabApp, args) -> None:
    """Toggle exclusion of a word."""
    if app.word_bank.get_by_id(args.word_id) is None:
        print(f"Unknown word: {args.word_id}")
        return
    excluded = app.store.toggle_word_exclusion(args.word_id)
    print(f"{args.word_id} {'excluded from' if excluded else 'included in'} quizzes.")


def cmd_levels(app: VocabApp, args) -> None:
    """Toggle a level."""
    if not app.store.toggle_level(args.level):
        print("Level unchanged: at least one valid level must stay selected.")
    print(f"Selected levels: {', '.join(str(level) for level in app.store.settings.selected_levels)}")


def cmd_goal(app: VocabApp, args) -> None:
    """Set the daily goal."""
    goal = app.store.set_daily_goal(args.goal)
    print(f"Daily goal: {goal} questions")


def cmd_reset(app: VocabApp, args) -> None:
    """Delete all progress."""
    if not args.yes:
        print("This deletes all progress and statistics. Re-run with --yes to confirm.")
        return
    app.store.reset_all_progress()
    print("Progress reset.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hskvocab", description="HSK vocabulary trainer")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    quiz = sub.add_parser("quiz", help="Run a quiz")
    quiz.add_argument("--count", type=int, default=None)
    quiz.set_defaults(func=cmd_quiz)

    sub.add_parser("due", help="Show words due for review").set_defaults(func=cmd_due)
    sub.add_parser("stats", help="Show statistics").set_defaults(func=cmd_stats)
    sub.add_parser("wrong", help="Show most missed words").set_defaults(func=cmd_wrong)
    sub.add_parser("excluded", help="Show excluded words").set_defaults(func=cmd_excluded)

    exclude = sub.add_parser("exclude", help="Toggle exclusion of a word")
    exclude.add_argument("word_id")
    exclude.set_defaults(func=cmd_exclude)

    levels = sub.add_parser("levels", help="Toggle an HSK level")
    levels.add_argument("level", type=int)
    levels.set_defaults(func=cmd_levels)

    goal = sub.add_parser("goal", help="Set the daily goal")
    goal.add_argument("goal", type=int)
    goal.set_defaults(func=cmd_goal)

    reset = sub.add_parser("reset", help="Delete all progress")
    reset.add_argument("--yes", action="store_true")
    reset.set_defaults(func=cmd_reset)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level or "WARNING")

    app = VocabApp.create()
    app.vibrate = _terminal_bell
    try:
        args.func(app, args)
    except (KeyboardInterrupt, EOFError):
        print()
        logger.info("Interrupted, saving progress...")
    finally:
        app.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
