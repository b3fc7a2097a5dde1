"""Index-addressed reconciliation of incremental result batches into a transcript.

The speech service pushes result batches that each start at ``result_index``
and carry the units from that position forward. Positions below the latest
``result_index`` are final; positions at or above it may still be revised.
The reconciler overwrites existing positions in place and appends the rest,
so re-applying a batch is harmless and no position outside a batch's range
ever changes.
"""

import logging
from enum import Enum
from typing import List

from ..models.messages import ResultBatch
from ..models.transcription import Transcript, TranscriptionUnit

logger = logging.getLogger(__name__)


class GapPolicy(Enum):
    """What to do with a batch whose ``result_index`` is past the transcript end."""
    PAD = "pad"          # fill the gap with placeholder units
    REJECT = "reject"    # drop the batch, leave the transcript untouched
    APPEND = "append"    # apply at the current end, ignoring the gap


class ResultReconciler:
    """Owns the authoritative transcript and merges result batches into it."""

    def __init__(self, gap_policy: GapPolicy = GapPolicy.PAD):
        """Initialize an empty transcript.

        Args:
            gap_policy: Handling of batches that skip ahead of the transcript end
        """
        self.gap_policy = gap_policy
        self._units: List[TranscriptionUnit] = []
        self._final_boundary = 0
        self.batches_applied = 0

    def apply(self, batch: ResultBatch) -> bool:
        """Merge a result batch into the transcript.

        Args:
            batch: Decoded result batch

        Returns:
            True if the batch was applied, False if the gap policy rejected it
        """
        start = batch.result_index
        if not batch.results:
            logger.debug(f"Empty batch at index {start}, nothing to apply")
            return True

        if start > len(self._units):
            gap = start - len(self._units)
            if self.gap_policy is GapPolicy.REJECT:
                logger.warning(f"Rejecting batch at index {start}: transcript has only "
                               f"{len(self._units)} units ({gap} missing)")
                return False
            if self.gap_policy is GapPolicy.PAD:
                logger.warning(f"Batch at index {start} skips {gap} units, padding with placeholders")
                self._units.extend(TranscriptionUnit.placeholder() for _ in range(gap))
            else:
                logger.warning(f"Batch at index {start} skips {gap} units, "
                               f"appending at {len(self._units)} instead")
                start = len(self._units)

        local_index = start
        batch_index = 0
        # Overwrite in place while inside the current transcript
        while local_index < len(self._units) and batch_index < len(batch.results):
            self._units[local_index] = batch.results[batch_index]
            local_index += 1
            batch_index += 1
        # Then append whatever is left
        while batch_index < len(batch.results):
            self._units.append(batch.results[batch_index])
            batch_index += 1

        self._final_boundary = start
        self.batches_applied += 1
        logger.debug(f"Applied batch at index {start}: {len(batch.results)} units, "
                     f"transcript now {len(self._units)} units")
        return True

    def snapshot(self) -> Transcript:
        """Immutable copy of the current transcript."""
        return tuple(self._units)

    @property
    def final_boundary(self) -> int:
        """Index below which every unit is final and will not be revised."""
        return self._final_boundary

    def text(self, separator: str = " ") -> str:
        """Join the text of all non-empty units."""
        return separator.join(unit.text.strip() for unit in self._units if unit.text.strip())

    def reset(self) -> None:
        """Drop the transcript and start over."""
        self._units.clear()
        self._final_boundary = 0
        self.batches_applied = 0

    def __len__(self) -> int:
        return len(self._units)

    def __repr__(self) -> str:
        return f"ResultReconciler({len(self._units)} units, final below {self._final_boundary})"
