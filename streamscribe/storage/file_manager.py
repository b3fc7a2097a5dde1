"""File management module for saved session transcripts."""

import json
import logging
import random
import string
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..models.session import SessionInfo
from ..models.transcription import Alternative, Transcript, TranscriptionUnit, WordInfo

logger = logging.getLogger(__name__)


class FileManager:
    """Manages storage of session metadata and transcripts."""

    def __init__(self, data_dir: str = "./data"):
        """Initialize file manager with data directory.

        Args:
            data_dir: Base directory for storing all data
        """
        self.data_dir = Path(data_dir)
        self.sessions_dir = self.data_dir / "sessions"
        self.logs_dir = self.data_dir / "logs"

        # Create directory structure
        self._ensure_directories()

        logger.info(f"FileManager initialized with data_dir: {self.data_dir}")

    def _ensure_directories(self) -> None:
        """Ensure all required directories exist."""
        for directory in [self.data_dir, self.sessions_dir, self.logs_dir]:
            directory.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Ensured directory exists: {directory}")

    def create_session_directory(self) -> str:
        """Create new session directory with timestamp and random suffix.

        Returns:
            Session ID (timestamp-based with random suffix)
        """
        # Include random suffix to ensure uniqueness
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        random_suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=4))
        session_id = f"{timestamp}_{random_suffix}"
        session_path = self.sessions_dir / session_id
        session_path.mkdir(exist_ok=True)

        logger.info(f"Created session directory: {session_path}")
        return session_id

    def get_session_path(self, session_id: str) -> Path:
        """Get full path to session directory."""
        return self.sessions_dir / session_id

    def save_transcript(self, session_info: SessionInfo, transcript: Transcript) -> str:
        """Save session information and its transcript to a JSON file.

        Args:
            session_info: Metadata of the session
            transcript: Final transcript of the session

        Returns:
            Path to the saved transcript file
        """
        session_path = self.get_session_path(session_info.session_id)
        session_path.mkdir(parents=True, exist_ok=True)
        transcript_file = session_path / "transcript.json"

        info_dict = asdict(session_info)
        info_dict['start_time'] = session_info.start_time.isoformat()
        data = {
            "session": info_dict,
            "text": " ".join(unit.text.strip() for unit in transcript if unit.text.strip()),
            "results": [asdict(unit) for unit in transcript],
        }

        with open(transcript_file, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        logger.info(f"Transcript saved: {transcript_file} ({len(transcript)} units)")
        return str(transcript_file)

    def load_transcript(self, session_id: str) -> Optional[Dict[str, Any]]:
        """Load a saved transcript.

        Args:
            session_id: Session identifier

        Returns:
            Dict with ``session`` (SessionInfo), ``text`` and ``results``
            (tuple of TranscriptionUnit), or None if the session has no transcript
        """
        transcript_file = self.get_session_path(session_id) / "transcript.json"
        if not transcript_file.exists():
            logger.warning(f"Transcript file not found: {transcript_file}")
            return None

        with open(transcript_file, 'r', encoding='utf-8') as f:
            data = json.load(f)

        info = data['session']
        info['start_time'] = datetime.fromisoformat(info['start_time'])
        return {
            "session": SessionInfo(**info),
            "text": data.get('text', ""),
            "results": tuple(_unit_from_dict(unit) for unit in data.get('results', [])),
        }

    def list_sessions(self) -> List[str]:
        """List all session IDs that have a saved transcript, oldest first."""
        sessions = [path.name for path in self.sessions_dir.iterdir()
                    if path.is_dir() and (path / "transcript.json").exists()]
        sessions.sort()
        logger.debug(f"Found {len(sessions)} sessions")
        return sessions


def _words_from_list(words: List[Dict[str, Any]]):
    return tuple(WordInfo(**word) for word in words)


def _unit_from_dict(data: Dict[str, Any]) -> TranscriptionUnit:
    return TranscriptionUnit(
        text=data['text'],
        confidence=data.get('confidence'),
        final=data.get('final', False),
        words=_words_from_list(data.get('words', [])),
        alternatives=tuple(
            Alternative(transcript=alt['transcript'],
                        confidence=alt.get('confidence'),
                        words=_words_from_list(alt.get('words', [])))
            for alt in data.get('alternatives', [])
        ),
    )
