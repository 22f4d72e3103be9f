#!/usr/bin/env python3
"""
filename_tokenizer.py - Split NVR recording filenames into their tokens

Two shapes are known:

    RecM01_20201222_075939_080140_6D28808_1A468F9.mp4
        header, start date, start time, end time, hex payload, file size
        -> camera

    RecM02_DST20240827_090302_090334_0_800_800_033C820000_61B6F0.mp4
        header, start date, start time, end time, category, width, height,
        hex payload, file size
        -> hub

The header is ``Rec`` + two characters + the schema version digit. Timestamps
are passed through untouched, including any ``DST`` prefix on the date. The
version and payload are not validated here: an unreadable version digit is
left as None and a non-hex payload is kept verbatim, both for the decoder to
report as warnings.
"""

import string
from dataclasses import dataclass
from typing import Optional

from bit_decoder import is_hex
from recording_schema import DeviceFamily

HEADER_PREFIX = 'Rec'
HEADER_LENGTH = 6
CAMERA_TOKEN_COUNT = 6
HUB_TOKEN_COUNT = 9


class DecodeError(ValueError):
    """Base class for filename decoding failures."""


class UnrecognizedFormat(DecodeError):
    """The filename cannot be segmented into a known shape."""

    def __init__(self, filename: str, reason: str):
        super().__init__(f"{filename}: {reason}")
        self.filename = filename
        self.reason = reason


@dataclass(frozen=True)
class FilenameTokens:
    """Raw tokens recovered from one filename."""
    name: str
    version: Optional[int]
    device_family: DeviceFamily
    start_date: str
    start_time: str
    end_time: str
    payload_hex: str
    file_size_token: str
    category: Optional[str] = None
    width: Optional[str] = None
    height: Optional[str] = None

    @property
    def file_size(self) -> Optional[int]:
        """File size in bytes, or None if the token is not hexadecimal."""
        if not is_hex(self.file_size_token):
            return None
        return int(self.file_size_token, 16)

    def to_dict(self) -> dict:
        data = {
            'name': self.name,
            'version': self.version,
            'device_family': self.device_family.value,
            'start_date': self.start_date,
            'start_time': self.start_time,
            'end_time': self.end_time,
            'payload_hex': self.payload_hex,
            'file_size_token': self.file_size_token,
        }
        if self.device_family == DeviceFamily.HUB:
            data.update(category=self.category, width=self.width, height=self.height)
        return data


def _stem(filename: str) -> str:
    """Base name after the last '/' or '\\', without its extension."""
    base = filename.replace('\\', '/').rsplit('/', 1)[-1]
    stem, dot, _ext = base.rpartition('.')
    if not dot or not stem:
        return base
    return stem


def tokenize(filename: str) -> FilenameTokens:
    """
    Split ``filename`` into FilenameTokens.

    Raises UnrecognizedFormat for a bad header shape or an unknown token
    count.
    """
    name = _stem(filename)
    split = name.split('_')

    header = split[0]
    if not header.startswith(HEADER_PREFIX) or len(header) != HEADER_LENGTH:
        raise UnrecognizedFormat(filename, "does not match known formats, could not find version")
    version = int(header[5]) if header[5] in string.digits else None

    if len(split) == CAMERA_TOKEN_COUNT:
        _, start_date, start_time, end_time, payload_hex, file_size = split
        tokens = FilenameTokens(
            name=name,
            version=version,
            device_family=DeviceFamily.CAMERA,
            start_date=start_date,
            start_time=start_time,
            end_time=end_time,
            payload_hex=payload_hex,
            file_size_token=file_size,
        )
    elif len(split) == HUB_TOKEN_COUNT:
        _, start_date, start_time, end_time, category, width, height, payload_hex, file_size = split
        tokens = FilenameTokens(
            name=name,
            version=version,
            device_family=DeviceFamily.HUB,
            start_date=start_date,
            start_time=start_time,
            end_time=end_time,
            payload_hex=payload_hex,
            file_size_token=file_size,
            category=category,
            width=width,
            height=height,
        )
    else:
        raise UnrecognizedFormat(filename, f"does not match known formats, unknown length {len(split)}")

    return tokens
