"""
pytest configuration and fixtures for recording filename decoder tests.

Provides reusable fixtures for:
- The shared schema registry
- Sample filenames captured from camera and hub storage listings
- Hypothesis property-based testing configuration
"""

import os
import sys
from pathlib import Path

import pytest
from hypothesis import settings

# Add project paths
sys.path.insert(0, str(Path(__file__).parent.parent / "tools"))

from recording_schema import default_registry


# Default profile: balanced speed and coverage
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
)

# Dev profile: fast iteration
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
)

settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "default"))


CAMERA_FILENAME = "Mp4Record/2020-12-22/RecM01_20201222_075939_080140_6D28808_1A468F9.mp4"
CAMERA_V2_FILENAME = "Mp4Record/2023-04-26/RecS02_DST20230426_145918_150032_2B14808_32F1DF.mp4"
HUB_FILENAME = ("/mnt/sda/UID-Front/Mp4Record/2024-08-27/"
                "RecM02_DST20240827_090302_090334_0_800_800_033C820000_61B6F0.mp4")


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def sample_filenames():
    return {
        'camera_v1': CAMERA_FILENAME,
        'camera_v2': CAMERA_V2_FILENAME,
        'hub_v2': HUB_FILENAME,
    }
