"""
FASTA I/O module for KmerTally.

Handles opening plain or gzip-compressed FASTA files and streaming them
either as raw lines or as whole records.
"""

from .io_core_module import (
    is_gzipped,
    open_file,
    read_fasta_lines,
    read_fasta_records,
    write_fasta,
)

__all__ = [
    "is_gzipped",
    "open_file",
    "read_fasta_lines",
    "read_fasta_records",
    "write_fasta",
]
