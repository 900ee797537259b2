#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
KmerTally v0.1.0

Work unit partitioning.

Splits an input stream into independently processable units. Unit
boundaries only ever fall between two records: a record's sequence lines
always travel together, so windows spanning line breaks are never lost.

Author: KmerTally Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Tuple

from .assembler import HEADER_PREFIX

logger = logging.getLogger(__name__)

DEFAULT_UNIT_SIZE = 1000

UNIT_LINES = 'lines'
UNIT_RECORDS = 'records'


@dataclass
class WorkUnit:
    """
    Slice of the input assigned to exactly one worker.

    Attributes:
        index: Position of the unit in the input stream
        kind: 'lines' (raw FASTA lines) or 'records' (one joined sequence
            per record)
        items: Lines or record sequences
    """
    index: int
    kind: str = UNIT_LINES
    items: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)


def _check_unit_size(unit_size: int):
    if unit_size < 1:
        raise ValueError(f"unit_size must be at least 1, got {unit_size}")


def partition_lines(lines: Iterable[str], unit_size: int = DEFAULT_UNIT_SIZE) -> Iterator[WorkUnit]:
    """
    Group raw FASTA lines into record-aligned work units.

    A unit is closed once it holds at least ``unit_size`` lines and the next
    line is a header, so a record spanning more lines than ``unit_size``
    produces one oversized unit instead of being split.

    Args:
        lines: Raw lines (trailing newlines allowed)
        unit_size: Target number of lines per unit

    Yields:
        WorkUnit objects of kind 'lines' with consecutive indices
    """
    _check_unit_size(unit_size)

    index = 0
    current: List[str] = []
    for line in lines:
        if len(current) >= unit_size and line.startswith(HEADER_PREFIX):
            yield WorkUnit(index=index, kind=UNIT_LINES, items=current)
            index += 1
            current = []
        current.append(line)

    if current:
        yield WorkUnit(index=index, kind=UNIT_LINES, items=current)
        index += 1

    logger.debug("Partitioned input into %d line units", index)


def partition_records(records: Iterable[Tuple[str, str]],
                      unit_size: int = DEFAULT_UNIT_SIZE) -> Iterator[WorkUnit]:
    """
    Group whole (title, sequence) records into work units.

    Args:
        records: Records as yielded by ``read_fasta_records``
        unit_size: Maximum number of records per unit

    Yields:
        WorkUnit objects of kind 'records'
    """
    _check_unit_size(unit_size)

    index = 0
    current: List[str] = []
    for _title, sequence in records:
        current.append(sequence)
        if len(current) == unit_size:
            yield WorkUnit(index=index, kind=UNIT_RECORDS, items=current)
            index += 1
            current = []

    if current:
        yield WorkUnit(index=index, kind=UNIT_RECORDS, items=current)
        index += 1

    logger.debug("Partitioned input into %d record units", index)


__all__ = [
    'DEFAULT_UNIT_SIZE',
    'WorkUnit',
    'partition_lines',
    'partition_records',
]

# KmerTally v0.1.0
# Any usage is subject to this software's license.
