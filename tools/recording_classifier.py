#!/usr/bin/env python3
"""
recording_classifier.py - Map decoded recording flags to detection labels

Only five flags take part in classification (ai_pd, ai_vd, ai_ad,
is_motion_record, package_event). Classes are additive and listed in a
fixed order; a recording with none of them is reported as motion.
"""

from enum import Enum, IntFlag
from typing import Dict, Tuple

from recording_schema import Flag


class DetectionClass(Enum):
    PERSON = 'person'
    VEHICLE = 'vehicle'
    ANIMAL = 'animal'
    MOTION = 'motion'
    PACKAGE = 'package'


class RecordingTrigger(IntFlag):
    """Bitmask of what caused the recorder to start recording."""
    NONE = 0
    TIMER = 1 << 0
    MOTION = 1 << 1
    VEHICLE = 1 << 2
    ANIMAL = 1 << 3
    PERSON = 1 << 4
    DOORBELL = 1 << 5
    PACKAGE = 1 << 6


CLASS_RULES = (
    (Flag.AI_PD, DetectionClass.PERSON),
    (Flag.AI_VD, DetectionClass.VEHICLE),
    (Flag.AI_AD, DetectionClass.ANIMAL),
    (Flag.IS_MOTION_RECORD, DetectionClass.MOTION),
    (Flag.PACKAGE_EVENT, DetectionClass.PACKAGE),
)

TRIGGER_RULES = (
    (Flag.IS_SCHEDULE_RECORD, RecordingTrigger.TIMER),
    (Flag.IS_MOTION_RECORD, RecordingTrigger.MOTION),
    (Flag.AI_VD, RecordingTrigger.VEHICLE),
    (Flag.AI_AD, RecordingTrigger.ANIMAL),
    (Flag.AI_PD, RecordingTrigger.PERSON),
    (Flag.IS_DOORBELL_RECORD, RecordingTrigger.DOORBELL),
    (Flag.PACKAGE_EVENT, RecordingTrigger.PACKAGE),
)


def classify(fields: Dict[str, int]) -> Tuple[DetectionClass, ...]:
    """Detection classes for ``fields``; missing flags count as zero."""
    classes = []
    for flag, detection in CLASS_RULES:
        if fields.get(flag.value, 0) and detection not in classes:
            classes.append(detection)

    if not classes:
        classes.append(DetectionClass.MOTION)
    return tuple(classes)


def triggers(fields: Dict[str, int]) -> RecordingTrigger:
    result = RecordingTrigger.NONE
    for flag, trigger in TRIGGER_RULES:
        if fields.get(flag.value, 0):
            result |= trigger
    return result
