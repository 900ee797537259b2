#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
KmerTally v0.1.0

Nucleotide codec and k-mer encoder.

Bases are packed 2 bits each (A=0, C=1, G=2, T=3), most-significant base
first, so any window of up to 32 valid bases fits into one unsigned 64-bit
integer. Anything outside {A, C, G, T} (N and the other ambiguity codes)
cannot be encoded.

Author: KmerTally Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from typing import Optional, Tuple, Union

import numpy as np

MAX_K = 32  # 2 bits per base in a 64-bit word

BASE_TO_CODE = {'A': 0, 'C': 1, 'G': 2, 'T': 3}
CODE_TO_BASE = 'ACGT'

_INVALID_CODE = 255

# Byte -> 2-bit code table used by the vectorised encoder (case-insensitive)
_BYTE_LOOKUP = np.full(256, _INVALID_CODE, dtype=np.uint8)
for _base, _code in BASE_TO_CODE.items():
    _BYTE_LOOKUP[ord(_base)] = _code
    _BYTE_LOOKUP[ord(_base.lower())] = _code

_EMPTY = np.empty(0, dtype=np.uint64)


def encode_base(base: Union[str, int]) -> Optional[int]:
    """
    Map a single nucleotide to its 2-bit code.

    Args:
        base: One-character string or a byte value (as yielded when
            iterating over ``bytes``)

    Returns:
        Code 0-3 for A/C/G/T (any case), None for anything else

    Example:
        >>> encode_base('g')
        2
        >>> encode_base('N') is None
        True
    """
    if isinstance(base, int):
        if not 0 <= base < 256:
            return None
        return BASE_TO_CODE.get(chr(base).upper())
    return BASE_TO_CODE.get(base.upper())


def encode_window(bases: Union[str, bytes], k: int) -> Optional[int]:
    """
    Pack a window of exactly k bases into one integer.

    Args:
        bases: Window content (str or bytes), length must equal k
        k: Window length

    Returns:
        Encoded k-mer, or None if k > 32 or the window holds a base
        outside {A, C, G, T}

    Raises:
        ValueError: If len(bases) != k

    Example:
        >>> encode_window("ACGT", 4)
        27
    """
    if len(bases) != k:
        raise ValueError(f"Window length {len(bases)} does not match k={k}")
    if k > MAX_K:
        return None

    encoded = 0
    for base in bases:
        code = encode_base(base)
        if code is None:
            return None
        encoded = (encoded << 2) | code
    return encoded


def decode_kmer(code: int, k: int) -> str:
    """
    Reconstruct the uppercase bases of an encoded k-mer.

    Args:
        code: Encoded k-mer
        k: K-mer size the code was produced with

    Returns:
        Base string of length k
    """
    if not 1 <= k <= MAX_K:
        raise ValueError(f"k must be between 1 and {MAX_K}, got {k}")

    code = int(code)
    bases = []
    for _ in range(k):
        bases.append(CODE_TO_BASE[code & 3])
        code >>= 2
    return ''.join(reversed(bases))


def encode_windows(sequence: bytes, k: int) -> Tuple[np.ndarray, int]:
    """
    Encode every sliding window of a sequence in one pass.

    Vectorised equivalent of calling ``encode_window`` on each of the
    ``max(0, len(sequence) - k + 1)`` windows: a window is valid when none
    of its k bases is outside {A, C, G, T}.

    Args:
        sequence: Raw sequence bytes (case-insensitive)
        k: Window length (1-32)

    Returns:
        Tuple of (uint64 codes of the valid windows in window order,
        total number of windows)
    """
    if k < 1:
        raise ValueError(f"k must be positive, got {k}")

    total_windows = max(0, len(sequence) - k + 1)
    if total_windows == 0 or k > MAX_K:
        return _EMPTY, total_windows

    codes = _BYTE_LOOKUP[np.frombuffer(sequence, dtype=np.uint8)]
    invalid = codes == _INVALID_CODE

    # A window is valid iff it covers zero invalid positions
    invalid_prefix = np.concatenate(([0], np.cumsum(invalid, dtype=np.int64)))
    valid = (invalid_prefix[k:] - invalid_prefix[:-k]) == 0
    if not valid.any():
        return _EMPTY, total_windows

    values = codes.astype(np.uint64)
    values[invalid] = 0

    encoded = np.zeros(total_windows, dtype=np.uint64)
    shift = np.uint64(2)
    for offset in range(k):
        encoded <<= shift
        encoded |= values[offset:offset + total_windows]

    return encoded[valid], total_windows


__all__ = [
    'MAX_K',
    'encode_base',
    'encode_window',
    'decode_kmer',
    'encode_windows',
]

# KmerTally v0.1.0
# Any usage is subject to this software's license.
