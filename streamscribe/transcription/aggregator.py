"""Transcript aggregator that keeps the latest snapshot and prints it on shutdown.

Subscribes to a transcript topic, remembers the most recent snapshot and how
many updates arrived, and renders the final transcript to the console with
rich once the session is over.
"""

import logging
import threading
from typing import Any, Dict, Optional

from pubsub import pub
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..models.transcription import Transcript

logger = logging.getLogger(__name__)


class TranscriptAggregator:
    """Tracks the latest transcript published on a topic."""

    def __init__(self, topic: str, console: Optional[Console] = None):
        """Initialize transcript aggregator.

        Args:
            topic: Topic carrying transcript snapshots
            console: Console to print the summary to
        """
        self.topic = topic
        self.console = console or Console()
        self.transcript: Transcript = ()
        self.update_count = 0
        self.lock = threading.RLock()

        pub.subscribe(self._on_transcript, topic)
        logger.info(f"TranscriptAggregator subscribed to {topic}")

    def _on_transcript(self, transcript: Transcript) -> None:
        with self.lock:
            self.transcript = transcript
            self.update_count += 1
        logger.debug(f"Aggregated transcript update #{self.update_count}: {len(transcript)} units")

    def get_summary(self) -> Dict[str, Any]:
        """Get summary of the aggregated transcript.

        Returns:
            Dictionary with unit counts, update count and the joined text
        """
        with self.lock:
            transcript = self.transcript
            updates = self.update_count
        return {
            "units": len(transcript),
            "final_units": sum(1 for unit in transcript if unit.final),
            "updates": updates,
            "text": self.get_full_text(),
        }

    def get_full_text(self) -> str:
        """Join the text of every non-empty unit."""
        with self.lock:
            return " ".join(unit.text.strip() for unit in self.transcript if unit.text.strip())

    def print_summary(self) -> None:
        """Print the transcript with per-unit confidence."""
        summary = self.get_summary()

        table = Table(title="Transcript", show_lines=False)
        table.add_column("#", justify="right")
        table.add_column("Text")
        table.add_column("Confidence", justify="right")
        table.add_column("Final")
        with self.lock:
            for i, unit in enumerate(self.transcript):
                confidence = f"{unit.confidence:.1%}" if unit.confidence is not None else "-"
                table.add_row(str(i), Text(unit.text), confidence, "yes" if unit.final else "no")

        self.console.print(table)
        self.console.print(Panel(Text(summary["text"] or "(no speech recognized)"),
                                 title=f"Full transcription ({summary['final_units']}/"
                                       f"{summary['units']} final, {summary['updates']} updates)"))

    def shutdown(self, print_summary: bool = True) -> None:
        """Unsubscribe and optionally print the final transcript."""
        logger.info("Shutting down TranscriptAggregator...")
        pub.unsubscribe(self._on_transcript, self.topic)
        if print_summary:
            self.print_summary()
