"""
K-mer counting module for KmerTally.

Parallel k-mer extraction, encoding and deduplication:
- codec.py: 2-bit nucleotide codec, scalar and vectorised k-mer encoders
- assembler.py: per-unit record assembly, local counters and local k-mer set
- partitioner.py: record-aligned work units
- aggregator.py: global distinct set and counters
- engine.py: run configuration, worker pool and statistics
"""

from .codec import (
    MAX_K,
    encode_base,
    encode_window,
    encode_windows,
    decode_kmer,
)
from .assembler import (
    UnitResult,
    LocalKmerSet,
    SequenceAssembler,
)
from .partitioner import (
    DEFAULT_UNIT_SIZE,
    WorkUnit,
    partition_lines,
    partition_records,
)
from .aggregator import GlobalAggregator
from .engine import (
    DEFAULT_RESERVE,
    RunConfig,
    KmerStats,
    KmerCounter,
    process_unit,
    resolve_workers,
    count_kmers,
)

__all__ = [
    # Codec
    "MAX_K",
    "encode_base",
    "encode_window",
    "encode_windows",
    "decode_kmer",

    # Per-unit processing
    "UnitResult",
    "LocalKmerSet",
    "SequenceAssembler",
    "DEFAULT_UNIT_SIZE",
    "WorkUnit",
    "partition_lines",
    "partition_records",

    # Aggregation and engine
    "GlobalAggregator",
    "DEFAULT_RESERVE",
    "RunConfig",
    "KmerStats",
    "KmerCounter",
    "process_unit",
    "resolve_workers",
    "count_kmers",
]
