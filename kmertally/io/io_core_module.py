#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Core I/O module for KmerTally.

Contains:
- File utilities with automatic gzip detection
- Raw FASTA line iteration (feeds the line partitioner)
- Whole-record FASTA iteration via Biopython (feeds the record partitioner)
- FASTA writing for fixtures and test data
"""

# =============================================================================
# SECTION 1: IMPORTS AND DEPENDENCIES
# =============================================================================

import gzip
import itertools
import logging
from pathlib import Path
from typing import Iterable, Iterator, TextIO, Tuple, Union

from Bio.SeqIO.FastaIO import SimpleFastaParser

logger = logging.getLogger(__name__)


# =============================================================================
# SECTION 2: FILE UTILITIES
# =============================================================================
# Helper functions for file handling with automatic gzip detection

def is_gzipped(filepath: Union[str, Path]) -> bool:
    """
    Check if file is gzip compressed.

    Args:
        filepath: Path to file

    Returns:
        True if file is gzipped
    """
    filepath = Path(filepath)
    return filepath.suffix in ('.gz', '.gzip')


def open_file(filepath: Union[str, Path], mode: str = 'r') -> TextIO:
    """
    Open file with automatic gzip detection.

    Args:
        filepath: Path to file
        mode: File mode ('r' or 'w')

    Returns:
        Text file handle
    """
    filepath = Path(filepath)

    if is_gzipped(filepath):
        if 'r' in mode:
            return gzip.open(filepath, 'rt', encoding='utf-8')
        else:
            return gzip.open(filepath, 'wt', encoding='utf-8')
    else:
        return open(filepath, mode, encoding='utf-8')


def _require_file(filepath: Path):
    if not filepath.exists():
        raise FileNotFoundError(f"FASTA file not found: {filepath}")
    if filepath.is_dir():
        raise IsADirectoryError(f"FASTA path is a directory: {filepath}")


# =============================================================================
# SECTION 3: FASTA INPUT
# =============================================================================

def read_fasta_lines(filepath: Union[str, Path]) -> Iterator[str]:
    """
    Stream the raw lines of a FASTA file.

    Lines are yielded with trailing newline characters removed; header
    lines keep their '>' prefix. Decompression and read errors surface
    while iterating.

    Args:
        filepath: Path to FASTA file (can be gzipped)

    Yields:
        Raw text lines
    """
    filepath = Path(filepath)
    _require_file(filepath)

    logger.debug("Reading FASTA lines from %s (gzip=%s)", filepath, is_gzipped(filepath))

    with open_file(filepath, 'r') as handle:
        for line in handle:
            yield line.rstrip('\r\n')


def read_fasta_records(filepath: Union[str, Path]) -> Iterator[Tuple[str, str]]:
    """
    Stream whole FASTA records.

    Uses Biopython's SimpleFastaParser, which joins each record's sequence
    lines and drops spaces. Any text before the first header is skipped,
    with a warning when that text is not blank.

    Args:
        filepath: Path to FASTA file (can be gzipped)

    Yields:
        (title, sequence) tuples
    """
    filepath = Path(filepath)
    _require_file(filepath)

    logger.debug("Reading FASTA records from %s (gzip=%s)", filepath, is_gzipped(filepath))

    with open_file(filepath, 'r') as handle:
        skipped = 0
        for line in handle:
            if line.startswith('>'):
                lines = itertools.chain([line], handle)
                break
            if line.strip():
                skipped += 1
        else:
            lines = iter(())

        if skipped:
            logger.warning("Skipped %d sequence line(s) before the first header in %s",
                           skipped, filepath)

        for title, sequence in SimpleFastaParser(lines):
            yield title, sequence


# =============================================================================
# SECTION 4: FASTA OUTPUT
# =============================================================================

def write_fasta(records: Iterable[Tuple[str, str]],
                filepath: Union[str, Path],
                compress: bool = False,
                line_width: int = 80) -> int:
    """
    Write (title, sequence) records to a FASTA file.

    Args:
        records: Records to write
        filepath: Output FASTA file path
        compress: Whether to gzip compress output
        line_width: Bases per sequence line (0 = single line)

    Returns:
        Number of records written
    """
    filepath = Path(filepath)

    # Add .gz extension if compressing
    if compress and not is_gzipped(filepath):
        filepath = Path(str(filepath) + '.gz')

    filepath.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with open_file(filepath, 'w') as handle:
        for title, sequence in records:
            handle.write(f">{title}\n")
            if line_width and line_width > 0:
                for start in range(0, len(sequence), line_width):
                    handle.write(sequence[start:start + line_width] + "\n")
            elif sequence:
                handle.write(sequence + "\n")
            count += 1

    return count


__all__ = [
    'is_gzipped',
    'open_file',
    'read_fasta_lines',
    'read_fasta_records',
    'write_fasta',
]
