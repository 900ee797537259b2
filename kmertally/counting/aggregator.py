#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
KmerTally v0.1.0

Global aggregation of per-unit results.

Author: KmerTally Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
import threading
from typing import Any, Dict, Optional, Set

from .assembler import UnitResult

logger = logging.getLogger(__name__)


class GlobalAggregator:
    """
    Shared sink for unit results.

    Holds the global set of distinct k-mers and the three run counters.
    ``merge`` is safe to call from several threads; set union and integer
    addition commute, so the final state does not depend on merge order.
    """

    def __init__(self, collect_kmers: bool = True, reserve: int = 0):
        """
        Args:
            collect_kmers: Maintain the global distinct set. False in
                count-only mode, where the set is never allocated.
            reserve: Expected number of distinct k-mers. Python sets grow on
                demand, so this only triggers a warning once exceeded.
        """
        self._lock = threading.Lock()
        self._kmers: Optional[Set[int]] = set() if collect_kmers else None
        self.reserve = reserve
        self._reserve_warned = False

        self.total_nucleotides = 0
        self.total_windows = 0
        self.valid_windows = 0
        self.num_records = 0
        self.units_merged = 0

    @property
    def collects_kmers(self) -> bool:
        return self._kmers is not None

    @property
    def distinct_kmers(self) -> Optional[int]:
        """Size of the global set, None in count-only mode."""
        if self._kmers is None:
            return None
        with self._lock:
            return len(self._kmers)

    def merge(self, result: UnitResult):
        """Fold one unit's counters and local set into the global state."""
        with self._lock:
            self.total_nucleotides += result.total_nucleotides
            self.total_windows += result.total_windows
            self.valid_windows += result.valid_windows
            self.num_records += result.num_records
            self.units_merged += 1

            if self._kmers is not None and result.kmers.size:
                self._kmers.update(result.kmers.tolist())
                if self.reserve and not self._reserve_warned and len(self._kmers) > self.reserve:
                    logger.warning("Distinct k-mers exceeded reserve hint of %d", self.reserve)
                    self._reserve_warned = True

        logger.debug("Merged unit %d (%d valid windows, %d local k-mers)",
                     result.index, result.valid_windows, result.distinct_kmers)

    def contains(self, code: int) -> bool:
        """Membership test against the global set."""
        if self._kmers is None:
            raise RuntimeError("Distinct k-mers are not tracked in count-only mode")
        with self._lock:
            return int(code) in self._kmers

    def snapshot(self) -> Dict[str, Any]:
        """Read all outputs; call only after every unit has been merged."""
        with self._lock:
            return {
                'total_nucleotides': self.total_nucleotides,
                'total_windows': self.total_windows,
                'valid_windows': self.valid_windows,
                'distinct_kmers': len(self._kmers) if self._kmers is not None else None,
                'num_records': self.num_records,
                'num_units': self.units_merged,
            }


__all__ = ['GlobalAggregator']

# KmerTally v0.1.0
# Any usage is subject to this software's license.
