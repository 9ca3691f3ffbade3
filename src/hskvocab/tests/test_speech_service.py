"""Tests for pronunciation generation."""
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from hskvocab.services.speech_service import SpeechService


@pytest.fixture
def speech_service(tmp_path: Path) -> SpeechService:
    """Create a speech service writing into a temporary directory."""
    service = SpeechService(output_dir=tmp_path, language="zh-CN", slow=False)
    yield service
    service.close()


def test_pronunciation_path_keeps_hanzi(speech_service: SpeechService, tmp_path: Path) -> None:
    """Test file name generation."""
    assert speech_service.pronunciation_path("爸爸") == tmp_path / "爸爸.mp3"
    assert speech_service.pronunciation_path("打 电话") == tmp_path / "打_电话.mp3"
    assert speech_service.pronunciation_path("？") == tmp_path / "word.mp3"


def test_generate_pronunciation(speech_service: SpeechService, tmp_path: Path) -> None:
    """Test that gTTS is called with the configured language."""
    with patch("hskvocab.services.speech_service.gTTS") as mock_gtts:
        path = speech_service.generate_pronunciation("爱")

    mock_gtts.assert_called_once_with(text="爱", lang="zh-CN", slow=False)
    mock_gtts.return_value.save.assert_called_once_with(str(tmp_path / "爱.mp3"))
    assert path == str(tmp_path / "爱.mp3")


def test_existing_pronunciation_is_reused(speech_service: SpeechService, tmp_path: Path) -> None:
    """Test that cached files are not generated again."""
    (tmp_path / "水.mp3").write_bytes(b"ID3")

    with patch("hskvocab.services.speech_service.gTTS") as mock_gtts:
        path = speech_service.generate_pronunciation("水")

    mock_gtts.assert_not_called()
    assert path == str(tmp_path / "水.mp3")


def test_generation_errors_are_swallowed(speech_service: SpeechService) -> None:
    """Test that network failures only return None."""
    failing = Mock(side_effect=RuntimeError("network down"))
    with patch("hskvocab.services.speech_service.gTTS", failing):
        assert speech_service.generate_pronunciation("八") is None


def test_pronounce_runs_in_background(speech_service: SpeechService, tmp_path: Path) -> None:
    """Test the fire-and-forget entry point."""
    with patch("hskvocab.services.speech_service.gTTS") as mock_gtts:
        future = speech_service.pronounce("茶")
        assert future.result(timeout=5) == str(tmp_path / "茶.mp3")

    mock_gtts.assert_called_once()


if __name__ == "__main__":
    pytest.main([__file__])
