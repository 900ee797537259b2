#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
KmerTally v0.1.0

Per-unit sequence assembly, window extraction and local deduplication.

A SequenceAssembler owns everything one worker touches while it processes a
work unit: the sequence buffer of the current record, the three local
counters and the local k-mer set. Nothing here is shared between workers.

Author: KmerTally Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .codec import MAX_K, encode_windows

logger = logging.getLogger(__name__)

HEADER_PREFIX = '>'


def _empty_codes() -> np.ndarray:
    return np.empty(0, dtype=np.uint64)


@dataclass
class UnitResult:
    """
    Outcome of processing one work unit.

    Attributes:
        index: Index of the work unit this result belongs to
        total_nucleotides: Sum of sequence lengths (invalid bases included)
        total_windows: Sum of max(0, L - k + 1) over flushed sequences
        valid_windows: Windows made only of A/C/G/T
        num_records: Record headers seen
        kmers: Sorted unique encoded k-mers (empty in count-only mode)
    """
    index: int = 0
    total_nucleotides: int = 0
    total_windows: int = 0
    valid_windows: int = 0
    num_records: int = 0
    kmers: np.ndarray = field(default_factory=_empty_codes)

    @property
    def distinct_kmers(self) -> int:
        """Number of distinct k-mers in this unit alone."""
        return int(self.kmers.size)


class LocalKmerSet:
    """
    Insert-only set of encoded k-mers private to one worker.

    Codes are buffered in batches and deduplicated with numpy. Pending
    batches are compacted into the unique base once they exceed both
    ``compact_threshold`` and the size of that base, so a growing set is
    re-sorted a logarithmic number of times.
    """

    def __init__(self, compact_threshold: int = 1 << 20):
        self.compact_threshold = compact_threshold
        self.compactions = 0
        self._base = _empty_codes()
        self._batches: List[np.ndarray] = []
        self._pending = 0

    def add_many(self, codes: np.ndarray):
        """Insert a batch of encoded k-mers."""
        if codes.size == 0:
            return
        self._batches.append(codes)
        self._pending += int(codes.size)
        if self._pending > max(self.compact_threshold, self._base.size):
            self._compact()

    def _compact(self):
        self._base = self.freeze()
        self._batches = []
        self._pending = 0
        self.compactions += 1

    def freeze(self) -> np.ndarray:
        """Return the sorted unique codes collected so far."""
        if not self._batches:
            return self._base
        return np.unique(np.concatenate([self._base] + self._batches))

    def __len__(self) -> int:
        return int(self.freeze().size)


class SequenceAssembler:
    """
    Accumulate multi-line records and extract their k-mer windows.

    The assembler is idle while its buffer is empty and accumulating once a
    data line has been appended. A header line (or ``finish``) flushes the
    buffered record: every window is counted, valid windows are encoded and
    their codes go to the local set.

    Example:
        >>> assembler = SequenceAssembler(k=4)
        >>> for line in [">seq1", "ACGT", "ACGT"]:
        ...     assembler.feed_line(line)
        >>> result = assembler.finish()
        >>> result.total_windows, result.valid_windows, result.distinct_kmers
        (5, 5, 4)
    """

    def __init__(self, k: int, collect_kmers: bool = True):
        """
        Args:
            k: K-mer size (1-32)
            collect_kmers: Keep encoded k-mers for deduplication. When False
                only the counters are maintained (count-only mode).
        """
        if not 1 <= k <= MAX_K:
            raise ValueError(f"k must be between 1 and {MAX_K}, got {k}")

        self.k = k
        self.collect_kmers = collect_kmers
        self._sequence = bytearray()
        self._kmers: Optional[LocalKmerSet] = LocalKmerSet() if collect_kmers else None

        self.total_nucleotides = 0
        self.total_windows = 0
        self.valid_windows = 0
        self.num_records = 0

    @property
    def is_idle(self) -> bool:
        """True when no sequence data is buffered."""
        return not self._sequence

    @property
    def buffered_length(self) -> int:
        return len(self._sequence)

    def feed_line(self, line: str):
        """Consume one raw FASTA line."""
        if line.startswith(HEADER_PREFIX):
            self.start_record()
        else:
            self.append(line)

    def start_record(self):
        """Record boundary: flush the buffered record and begin a new one."""
        self.flush()
        self.num_records += 1

    def append(self, data: str):
        """Append one line of sequence data to the current record."""
        cleaned = data.strip().encode('ascii', errors='replace').upper()
        if not cleaned:
            return
        self.total_nucleotides += len(cleaned)
        self._sequence.extend(cleaned)

    def add_record(self, sequence: str):
        """Consume a whole record from a source that already joined its lines."""
        self.start_record()
        self.append(sequence)

    def flush(self):
        """Extract all windows of the buffered record, then clear it."""
        if not self._sequence:
            return

        codes, windows = encode_windows(bytes(self._sequence), self.k)
        self.total_windows += windows
        self.valid_windows += int(codes.size)
        if self._kmers is not None:
            self._kmers.add_many(codes)

        self._sequence.clear()

    def finish(self, index: int = 0) -> UnitResult:
        """
        Flush the final record and package the local state.

        Args:
            index: Work unit index to stamp on the result

        Returns:
            UnitResult with local counters and deduplicated k-mers
        """
        self.flush()
        kmers = self._kmers.freeze() if self._kmers is not None else _empty_codes()
        return UnitResult(
            index=index,
            total_nucleotides=self.total_nucleotides,
            total_windows=self.total_windows,
            valid_windows=self.valid_windows,
            num_records=self.num_records,
            kmers=kmers,
        )


__all__ = [
    'UnitResult',
    'LocalKmerSet',
    'SequenceAssembler',
]

# KmerTally v0.1.0
# Any usage is subject to this software's license.
