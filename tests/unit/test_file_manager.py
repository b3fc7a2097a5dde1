"""Unit tests for FileManager class."""

import json
from datetime import datetime
from pathlib import Path

import pytest

from streamscribe.models.session import SessionInfo
from streamscribe.models.transcription import Alternative, TranscriptionUnit, WordInfo
from streamscribe.storage.file_manager import FileManager


def make_session_info(session_id: str) -> SessionInfo:
    return SessionInfo(
        session_id=session_id,
        start_time=datetime(2024, 5, 1, 12, 30, 0),
        duration_seconds=12.5,
        audio_file="speech.flac",
        content_type="audio/flac",
        model="en-US_BroadbandModel",
        total_chunks=10,
        total_results=4,
    )


@pytest.mark.unit
class TestFileManager:
    """Test cases for FileManager class."""

    def test_initialization(self, temp_data_dir):
        fm = FileManager(temp_data_dir)

        assert fm.sessions_dir == Path(temp_data_dir) / "sessions"
        assert fm.sessions_dir.exists()
        assert fm.logs_dir.exists()

    def test_create_session_directory(self, temp_data_dir):
        fm = FileManager(temp_data_dir)

        session_id = fm.create_session_directory()

        # YYYYMMDD_HHMMSS_XXXX
        assert len(session_id) == 20
        assert session_id.count("_") == 2
        assert fm.get_session_path(session_id).is_dir()

    def test_save_and_load_transcript(self, temp_data_dir):
        fm = FileManager(temp_data_dir)
        session_id = fm.create_session_directory()
        word = WordInfo(word="hello", start_time=0.0, end_time=0.4, confidence=0.9)
        transcript = (
            TranscriptionUnit(text="hello ", confidence=0.9, final=True, words=(word,),
                              alternatives=(Alternative(transcript="hello ", confidence=0.9, words=(word,)),)),
            TranscriptionUnit.placeholder(),
            TranscriptionUnit(text="world", confidence=0.5, final=False),
        )

        path = fm.save_transcript(make_session_info(session_id), transcript)

        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
        assert raw["text"] == "hello world"
        assert raw["session"]["start_time"] == "2024-05-01T12:30:00"
        assert len(raw["results"]) == 3

        loaded = fm.load_transcript(session_id)
        assert loaded["session"] == make_session_info(session_id)
        assert loaded["results"] == transcript

    def test_load_missing_transcript(self, temp_data_dir):
        fm = FileManager(temp_data_dir)

        assert fm.load_transcript("20240101_000000_abcd") is None

    def test_list_sessions_only_with_transcripts(self, temp_data_dir):
        fm = FileManager(temp_data_dir)
        fm.save_transcript(make_session_info("20240101_000000_aaaa"), ())
        fm.save_transcript(make_session_info("20230101_000000_bbbb"), ())
        fm.create_session_directory()

        assert fm.list_sessions() == ["20230101_000000_bbbb", "20240101_000000_aaaa"]
