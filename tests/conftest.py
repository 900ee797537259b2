#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
KmerTally v0.1.0

Pytest configuration and shared fixtures.

Author: KmerTally Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import gzip
import random

import pytest
from pathlib import Path
import tempfile
import shutil


@pytest.fixture
def temp_output_dir():
    """Create temporary output directory for tests."""
    temp_dir = tempfile.mkdtemp(prefix="kmertally_test_")
    yield Path(temp_dir)
    # Cleanup after test
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def simple_fasta():
    """Single record, 8 bases, 4 distinct 4-mers."""
    return ">seq1\nACGTACGT\n"


@pytest.fixture
def ambiguous_fasta():
    """Single record with one N; only the last 4-mer window is valid."""
    return ">s\nACGNACGT\n"


@pytest.fixture
def multi_record_fasta():
    """Several multi-line records with lowercase bases and Ns."""
    return (
        ">chr1 first record\n"
        "ACGTACGTAC\n"
        "gtacgtNNac\n"
        "GGGCCC\n"
        ">chr2\n"
        "TTTTTTTTTT\n"
        "TTTTT\n"
        ">empty\n"
        ">chr3\n"
        "acgtnacgta\n"
        "CCCCGGGGAA\n"
    )


@pytest.fixture
def random_fasta():
    """Deterministic random FASTA: 40 records, 60-base lines, sprinkled Ns."""
    rng = random.Random(1234)
    parts = []
    for i in range(40):
        parts.append(f">read{i}\n")
        length = rng.randint(0, 400)
        seq = ''.join(rng.choice('ACGTACGTACGTn') for _ in range(length))
        for start in range(0, len(seq), 60):
            parts.append(seq[start:start + 60] + "\n")
    return ''.join(parts)


@pytest.fixture
def fasta_file(temp_output_dir, multi_record_fasta):
    """Plain FASTA file on disk."""
    path = temp_output_dir / "input.fa"
    path.write_text(multi_record_fasta)
    return path


@pytest.fixture
def gzipped_fasta_file(temp_output_dir, multi_record_fasta):
    """Gzip-compressed copy of the multi-record FASTA."""
    path = temp_output_dir / "input.fa.gz"
    with gzip.open(path, 'wt') as handle:
        handle.write(multi_record_fasta)
    return path

# KmerTally v0.1.0
# Any usage is subject to this software's license.
