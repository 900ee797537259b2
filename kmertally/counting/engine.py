#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
KmerTally v0.1.0

Parallel k-mer counting engine.

Work units from the partitioner are processed independently by a bounded
worker pool; each unit deduplicates into its own local set and the result is
merged into one GlobalAggregator as soon as it completes. Statistics are read
once every unit has been merged.

Author: KmerTally Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
import os
import time
from concurrent.futures import (
    FIRST_COMPLETED,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    as_completed,
    wait,
)
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from ..io.io_core_module import read_fasta_lines, read_fasta_records
from .aggregator import GlobalAggregator
from .assembler import SequenceAssembler, UnitResult
from .codec import MAX_K
from .partitioner import (
    DEFAULT_UNIT_SIZE,
    UNIT_RECORDS,
    WorkUnit,
    partition_lines,
    partition_records,
)

logger = logging.getLogger(__name__)

DEFAULT_RESERVE = 3_000_000_000

PARSER_CHOICES = ('lines', 'biopython')
EXECUTOR_CHOICES = ('process', 'thread')


# ============================================================================
# Run configuration
# ============================================================================

@dataclass
class RunConfig:
    """
    Explicit configuration of one counting run.

    Attributes:
        k: K-mer size (1-32)
        only_count: Skip distinct k-mer tracking
        reserve: Expected distinct k-mer count (ignored with only_count)
        max_threads: Maximum concurrent workers, 0 = one per CPU
        unit_size: Lines (or records) per work unit
        parser: 'lines' (raw line stream) or 'biopython' (whole records)
        executor: 'process' or 'thread' worker pool
    """
    k: int
    only_count: bool = False
    reserve: int = DEFAULT_RESERVE
    max_threads: int = 0
    unit_size: int = DEFAULT_UNIT_SIZE
    parser: str = 'lines'
    executor: str = 'process'

    def __post_init__(self):
        if not 1 <= self.k <= MAX_K:
            raise ValueError(f"k must be between 1 and {MAX_K}, got {self.k}")
        if self.reserve < 0:
            raise ValueError(f"reserve must be non-negative, got {self.reserve}")
        if self.max_threads < 0:
            raise ValueError(f"max_threads must be non-negative, got {self.max_threads}")
        if self.unit_size < 1:
            raise ValueError(f"unit_size must be at least 1, got {self.unit_size}")
        if self.parser not in PARSER_CHOICES:
            raise ValueError(f"Unknown parser: {self.parser}")
        if self.executor not in EXECUTOR_CHOICES:
            raise ValueError(f"Unknown executor: {self.executor}")


def resolve_workers(max_threads: int) -> int:
    """Number of workers for a thread limit (0 = number of CPUs)."""
    if max_threads and max_threads > 0:
        return max_threads
    return max(1, os.cpu_count() or 1)


# ============================================================================
# Results
# ============================================================================

@dataclass
class KmerStats:
    """Summary statistics of one run."""
    k: int
    total_nucleotides: int
    total_windows: int
    valid_windows: int
    distinct_kmers: Optional[int] = None
    num_records: int = 0
    num_units: int = 0
    elapsed_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    def format_report(self) -> List[str]:
        """Plain-text report lines; the distinct line is omitted when not tracked."""
        lines = [
            f"Total nucleotides: {self.total_nucleotides}",
            f"Total k-mers: {self.total_windows}",
            f"Valid k-mers: {self.valid_windows}",
        ]
        if self.distinct_kmers is not None:
            lines.append(f"Number of distinct {self.k}-mers: {self.distinct_kmers}")
        return lines


# ============================================================================
# Unit processing (runs inside workers)
# ============================================================================

def process_unit(unit: WorkUnit, k: int, collect_kmers: bool = True) -> UnitResult:
    """
    Process one work unit start to finish with a private assembler.

    Module-level so process pools can pickle it.
    """
    assembler = SequenceAssembler(k, collect_kmers=collect_kmers)

    if unit.kind == UNIT_RECORDS:
        for sequence in unit.items:
            assembler.add_record(sequence)
    else:
        for line in unit.items:
            assembler.feed_line(line)

    return assembler.finish(index=unit.index)


# ============================================================================
# Engine
# ============================================================================

class KmerCounter:
    """
    Count nucleotides, windows, valid windows and distinct k-mers.

    The worker count is fixed at construction and applies to every call,
    so one counter can be re-run on several inputs.

    Example:
        counter = KmerCounter(RunConfig(k=21, max_threads=4))
        stats = counter.count_file('genome.fa.gz')
        print("\\n".join(stats.format_report()))
    """

    def __init__(self, config: RunConfig):
        self.config = config
        self.num_workers = resolve_workers(config.max_threads)
        self.logger = logging.getLogger(f"{__name__}.KmerCounter")

    @property
    def collect_kmers(self) -> bool:
        return not self.config.only_count

    def count_lines(self, lines: Iterable[str]) -> KmerStats:
        """Count over raw FASTA lines."""
        return self._run(partition_lines(lines, self.config.unit_size))

    def count_records(self, records: Iterable[Tuple[str, str]]) -> KmerStats:
        """Count over whole (title, sequence) records."""
        return self._run(partition_records(records, self.config.unit_size))

    def count_text(self, text: str) -> KmerStats:
        """Count over FASTA content held in memory."""
        return self.count_lines(text.splitlines())

    def count_file(self, filepath: Union[str, Path]) -> KmerStats:
        """
        Count over a FASTA file (plain or gzipped).

        Raises:
            FileNotFoundError: If the file does not exist
            OSError: On read or decompression failure
        """
        self.logger.info("Counting %d-mers in %s", self.config.k, filepath)
        if self.config.parser == 'biopython':
            return self.count_records(read_fasta_records(filepath))
        return self.count_lines(read_fasta_lines(filepath))

    def _run(self, units: Iterator[WorkUnit]) -> KmerStats:
        aggregator = GlobalAggregator(
            collect_kmers=self.collect_kmers,
            reserve=self.config.reserve if self.collect_kmers else 0,
        )

        self.logger.info(
            "Starting run: k=%d, workers=%d, executor=%s, mode=%s",
            self.config.k, self.num_workers, self.config.executor,
            'count-only' if self.config.only_count else 'distinct',
        )
        start_time = time.time()

        if self.num_workers == 1:
            # Sequential fallback
            for unit in units:
                aggregator.merge(process_unit(unit, self.config.k, self.collect_kmers))
        else:
            self._run_parallel(units, aggregator)

        elapsed = time.time() - start_time
        snapshot = aggregator.snapshot()
        stats = KmerStats(k=self.config.k, elapsed_seconds=elapsed, **snapshot)

        self.logger.info(
            "Processed %d units (%d records) in %.2fs: %d valid of %d windows",
            stats.num_units, stats.num_records, elapsed,
            stats.valid_windows, stats.total_windows,
        )
        return stats

    def _executor(self):
        if self.config.executor == 'thread':
            return ThreadPoolExecutor(max_workers=self.num_workers)
        return ProcessPoolExecutor(max_workers=self.num_workers)

    def _run_parallel(self, units: Iterator[WorkUnit], aggregator: GlobalAggregator):
        max_pending = self.num_workers * 2

        with self._executor() as executor:
            pending = set()
            # Submit while streaming; bound outstanding futures to 2 * workers
            for unit in units:
                while len(pending) >= max_pending:
                    done, pending = wait(pending, return_when=FIRST_COMPLETED)
                    for future in done:
                        aggregator.merge(future.result())
                pending.add(executor.submit(process_unit, unit, self.config.k, self.collect_kmers))

            for future in as_completed(pending):
                aggregator.merge(future.result())


def count_kmers(lines: Iterable[str], k: int, **options) -> KmerStats:
    """Convenience wrapper: count over raw lines with a one-off RunConfig."""
    return KmerCounter(RunConfig(k=k, **options)).count_lines(lines)


__all__ = [
    'DEFAULT_RESERVE',
    'RunConfig',
    'KmerStats',
    'KmerCounter',
    'process_unit',
    'resolve_workers',
    'count_kmers',
]

# KmerTally v0.1.0
# Any usage is subject to this software's license.
