#!/usr/bin/env python3
"""
bit_decoder.py - Extract named fields from a recording filename's hex payload

The payload is stored most-significant chunk first, but every field is
addressed from the bit-reversed payload and then reversed again within its
own width. Both reversals are required; dropping either one corrupts every
flag.

Usage:
    from bit_decoder import decode_fields
    from recording_schema import DeviceFamily, default_registry

    schema = default_registry().get(DeviceFamily.CAMERA, 2)
    fields = decode_fields('6D28808', schema)   # {'resolution_index': 54, ...}
"""

import string
from typing import Dict

from recording_schema import Schema

_HEX_DIGITS = set(string.hexdigits)


def is_hex(token: str) -> bool:
    return bool(token) and all(c in _HEX_DIGITS for c in token)


def reverse_bits(value: int, width: int) -> int:
    """Reverse the low ``width`` bits of ``value``."""
    if width <= 0:
        return 0
    return int(format(value, f'0{width}b')[::-1], 2)


def decode_fields(payload_hex: str, schema: Schema) -> Dict[str, int]:
    """
    Decode every field of ``schema`` from ``payload_hex``.

    A payload shorter than the schema expects yields zero bits for anything
    past its end; a longer one has its trailing characters ignored. A payload
    that is not hexadecimal decodes as all zero bits.
    """
    total_bits = 4 * len(payload_hex)
    raw = int(payload_hex, 16) if is_hex(payload_hex) else 0
    raw_rev = reverse_bits(raw, total_bits)

    values = {}
    for spec in schema.fields:
        mask = ((1 << spec.bit_width) - 1) << spec.bit_offset
        segment_rev = (raw_rev & mask) >> spec.bit_offset
        values[spec.name] = reverse_bits(segment_rev, spec.bit_width)
    return values
