"""Tests for the application object and the terminal front end."""
import random
from typing import Generator
from unittest.mock import Mock, patch

import pytest

from hskvocab.__main__ import build_parser, main
from hskvocab.app import VocabApp
from hskvocab.models.vocab_models import QuizType
from hskvocab.services.storage import MemoryStorage
from hskvocab.services.word_bank import WordBank


@pytest.fixture
def speech() -> Mock:
    return Mock()


@pytest.fixture
def vibrate() -> Mock:
    return Mock()


@pytest.fixture
def app(word_bank: WordBank, storage: MemoryStorage, speech: Mock, vibrate: Mock, clock) -> Generator[VocabApp, None, None]:
    """Create an application with in-memory storage and mocked side effects."""
    app = VocabApp(
        word_bank=word_bank,
        storage=storage,
        speech=speech,
        vibrate=vibrate,
        rng=random.Random(5),
        clock=clock,
    )
    yield app
    app.close()


def test_start_quiz(app: VocabApp) -> None:
    """Test that a quiz is built from selected levels."""
    questions = app.start_quiz(4)

    assert len(questions) == 4
    assert len({q.word.id for q in questions}) == 4
    for question in questions:
        assert question.word.level in (1, 2)
        assert question.options[question.correct_index] == getattr(question.word, question.quiz_type.answer_field)


def test_start_quiz_uses_default_count(app: VocabApp) -> None:
    """Test the configured quiz size, limited by the available words."""
    assert len(app.start_quiz()) == 8


def test_start_quiz_with_zero_count(app: VocabApp) -> None:
    """Test that an explicit count of zero gives an empty quiz."""
    assert app.start_quiz(0) == []


def test_correct_answer(app: VocabApp, speech: Mock, vibrate: Mock) -> None:
    """Test feedback and progress for a correct answer."""
    question = app.quiz_generator.generate_question("l1-ai", QuizType.HANZI_TO_MEANING)

    progress = app.answer(question, question.correct_index)

    assert progress.level == 1
    vibrate.assert_called_once_with(True)
    speech.pronounce.assert_called_once_with("爱")
    assert app.store.get_today_stats().correct_answers == 1


def test_wrong_answer(app: VocabApp, speech: Mock, vibrate: Mock) -> None:
    """Test that wrong answers vibrate but are not pronounced."""
    question = app.quiz_generator.generate_question("l1-ba", QuizType.MEANING_TO_HANZI)
    wrong_index = (question.correct_index + 1) % len(question.options)

    progress = app.answer(question, wrong_index)

    assert progress.level == 1
    assert progress.wrong_count == 1
    vibrate.assert_called_once_with(False)
    speech.pronounce.assert_not_called()


def test_disabled_feedback(app: VocabApp, speech: Mock, vibrate: Mock) -> None:
    """Test that sound and vibration settings are honoured."""
    app.store.update_settings(sound_enabled=False, vibration_enabled=False)
    question = app.quiz_generator.generate_question("l1-ai", QuizType.HANZI_TO_PINYIN)

    app.answer(question, question.correct_index)

    vibrate.assert_not_called()
    speech.pronounce.assert_not_called()


def test_vibration_failure_is_tolerated(app: VocabApp, vibrate: Mock) -> None:
    """Test that a failing vibration does not lose the answer."""
    vibrate.side_effect = RuntimeError("no motor")
    question = app.quiz_generator.generate_question("l1-ai", QuizType.HANZI_TO_MEANING)

    progress = app.answer(question, question.correct_index)

    assert progress.level == 1
    assert app.store.get_progress("l1-ai") is progress


def test_close_persists_progress(app: VocabApp, word_bank: WordBank, storage: MemoryStorage, speech: Mock, clock) -> None:
    """Test that closing flushes pending writes."""
    question = app.quiz_generator.generate_question("l1-ai", QuizType.HANZI_TO_MEANING)
    app.answer(question, question.correct_index)
    app.close()

    speech.close.assert_called_once()
    reopened = VocabApp(word_bank=word_bank, storage=storage, speech=Mock(), clock=clock)
    assert reopened.store.get_progress("l1-ai").level == 1
    reopened.close()


def test_parser_requires_command() -> None:
    """Test that a sub-command is mandatory."""
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_parser_arguments() -> None:
    """Test argument parsing for sub-commands."""
    args = build_parser().parse_args(["quiz", "--count", "5"])
    assert args.command == "quiz"
    assert args.count == 5

    args = build_parser().parse_args(["--log-level", "DEBUG", "goal", "30"])
    assert args.log_level == "DEBUG"
    assert args.goal == 30


def test_cli_goal(app: VocabApp, capsys) -> None:
    """Test setting the daily goal from the command line."""
    with patch("hskvocab.__main__.VocabApp.create", return_value=app), \
            patch("hskvocab.__main__.setup_logging"):
        assert main(["goal", "500"]) == 0

    assert "Daily goal: 100 questions" in capsys.readouterr().out
    assert app.store.settings.daily_goal == 100


def test_cli_levels(app: VocabApp, capsys) -> None:
    """Test toggling levels from the command line."""
    with patch("hskvocab.__main__.VocabApp.create", return_value=app), \
            patch("hskvocab.__main__.setup_logging"):
        main(["levels", "3"])

    assert "Selected levels: 1, 2, 3" in capsys.readouterr().out


def test_cli_exclude_unknown_word(app: VocabApp, capsys) -> None:
    """Test that unknown words are reported."""
    with patch("hskvocab.__main__.VocabApp.create", return_value=app), \
            patch("hskvocab.__main__.setup_logging"):
        main(["exclude", "nope"])

    assert "Unknown word: nope" in capsys.readouterr().out
    assert app.store.get_excluded_word_ids() == []


def test_cli_quiz_can_be_quit(app: VocabApp, capsys) -> None:
    """Test that typing q ends the quiz without recording answers."""
    with patch("hskvocab.__main__.VocabApp.create", return_value=app), \
            patch("hskvocab.__main__.setup_logging"), \
            patch("builtins.input", return_value="q"):
        main(["quiz", "--count", "3"])

    output = capsys.readouterr().out
    assert "[1/3]" in output
    assert app.store.word_progress == {}


def test_cli_reset_requires_confirmation(app: VocabApp, capsys) -> None:
    """Test that reset needs --yes."""
    app.store.update_word_progress("l1-ai", True)
    with patch("hskvocab.__main__.VocabApp.create", return_value=app), \
            patch("hskvocab.__main__.setup_logging"):
        main(["reset"])

    assert "--yes" in capsys.readouterr().out
    assert "l1-ai" in app.store.word_progress


if __name__ == "__main__":
    pytest.main([__file__])
