#!/usr/bin/env python3
"""
recording_schema.py - Versioned bit-layout registry for NVR recording filenames

Recording filenames carry a packed hexadecimal bitfield whose layout depends
on the device family (camera or hub) and the schema version digit in the
filename header. The layouts have no self-describing header, so they live
here as static tables, authored in YAML and parsed once.

Usage:
    from recording_schema import DeviceFamily, default_registry

    registry = default_registry()
    schema = registry.get(DeviceFamily.CAMERA, 2)
    schema, used_version, warnings = registry.resolve(DeviceFamily.CAMERA, 7, 'ABCDEF0')
"""

import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import yaml


class DeviceFamily(Enum):
    CAMERA = 'cam'
    HUB = 'hub'


class Flag(Enum):
    """Every field name a layout may use."""
    RESOLUTION_INDEX = 'resolution_index'
    TV_SYSTEM = 'tv_system'
    FRAMERATE = 'framerate'
    AUDIO_INDEX = 'audio_index'
    AI_PD = 'ai_pd'
    AI_FD = 'ai_fd'
    AI_VD = 'ai_vd'
    AI_AD = 'ai_ad'
    AI_OTHER = 'ai_other'
    ENCODER_TYPE_INDEX = 'encoder_type_index'
    IS_SCHEDULE_RECORD = 'is_schedule_record'
    IS_MOTION_RECORD = 'is_motion_record'
    IS_RF_RECORD = 'is_rf_record'
    IS_DOORBELL_RECORD = 'is_doorbell_record'
    IS_AI_OTHER_RECORD = 'is_ai_other_record'
    PICTURE_LAYOUT_INDEX = 'picture_layout_index'
    PACKAGE_DELIVERED = 'package_delivered'
    PACKAGE_TAKENAWAY = 'package_takenaway'
    PACKAGE_EVENT = 'package_event'
    UPLOAD_FLAG = 'upload_flag'


@dataclass(frozen=True)
class FieldSpec:
    """One named bit range, addressed from the start of the payload."""
    name: str
    bit_offset: int
    bit_width: int

    @property
    def bit_end(self) -> int:
        return self.bit_offset + self.bit_width


@dataclass(frozen=True)
class Schema:
    family: DeviceFamily
    version: int
    fields: Tuple[FieldSpec, ...]
    expected_hex_length: int

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]


# Layouts recovered empirically from recorder firmware. Camera versions 2-9
# share one layout and differ only in payload length.
RECORDING_SCHEMAS = """
version: 1

layouts:
  cam_v2:
    resolution_index: [0, 7]
    tv_system: [7, 1]
    framerate: [8, 7]
    audio_index: [15, 2]
    ai_pd: [17, 1]
    ai_fd: [18, 1]
    ai_vd: [19, 1]
    ai_ad: [20, 1]
    encoder_type_index: [21, 2]
    is_schedule_record: [23, 1]
    is_motion_record: [24, 1]
    is_rf_record: [25, 1]
    is_doorbell_record: [26, 1]
    ai_other: [27, 1]

  hub_v0: &hub_v0
    resolution_index: [0, 7]
    tv_system: [7, 1]
    framerate: [8, 7]
    audio_index: [15, 2]
    ai_pd: [17, 1]
    ai_fd: [18, 1]
    ai_vd: [19, 1]
    ai_ad: [20, 1]
    encoder_type_index: [21, 2]
    is_schedule_record: [23, 1]
    is_motion_record: [24, 1]
    is_rf_record: [25, 1]
    is_doorbell_record: [26, 1]
    is_ai_other_record: [27, 1]
    picture_layout_index: [28, 7]
    package_delivered: [35, 1]
    package_takenaway: [36, 1]

  hub_v1:
    <<: *hub_v0
    package_event: [37, 1]

  hub_v2:
    resolution_index: [0, 7]
    tv_system: [7, 1]
    framerate: [8, 7]
    audio_index: [15, 2]
    ai_pd: [17, 1]
    ai_fd: [18, 1]
    ai_vd: [19, 1]
    ai_ad: [20, 1]
    ai_other: [21, 2]
    encoder_type_index: [23, 1]
    is_schedule_record: [24, 1]
    is_motion_record: [25, 1]
    is_rf_record: [26, 1]
    is_doorbell_record: [27, 1]
    picture_layout_index: [28, 7]
    package_delivered: [35, 1]
    package_takenaway: [36, 1]
    package_event: [37, 1]
    upload_flag: [38, 1]

families:
  cam:
    2: {layout: cam_v2, hex_length: 7}
    3: {layout: cam_v2, hex_length: 7}
    4: {layout: cam_v2, hex_length: 9}
    9: {layout: cam_v2, hex_length: 14}
  hub:
    0: {layout: hub_v0, hex_length: 10}
    1: {layout: hub_v1, hex_length: 10}
    2: {layout: hub_v2, hex_length: 10}
"""

_FLAG_NAMES = {f.value for f in Flag}


def _parse_layout(layout_name: str, layout: Dict) -> Tuple[FieldSpec, ...]:
    """Convert a YAML ``name: [offset, width]`` mapping into FieldSpecs."""
    if not isinstance(layout, dict) or not layout:
        raise ValueError(f"Layout '{layout_name}' must be a non-empty mapping")

    fields = []
    for name, bits in layout.items():
        if name not in _FLAG_NAMES:
            raise ValueError(f"Layout '{layout_name}': unknown field name '{name}'")
        if not isinstance(bits, (list, tuple)) or len(bits) != 2:
            raise ValueError(f"Layout '{layout_name}': field '{name}' needs [offset, width]")
        offset, width = bits
        if not isinstance(offset, int) or offset < 0:
            raise ValueError(f"Layout '{layout_name}': field '{name}' has invalid offset {offset!r}")
        if not isinstance(width, int) or width < 1:
            raise ValueError(f"Layout '{layout_name}': field '{name}' has invalid width {width!r}")
        fields.append(FieldSpec(name, offset, width))
    return tuple(fields)


class SchemaRegistry:
    """
    Immutable lookup of ``(DeviceFamily, version) -> Schema``.

    Field ranges are trusted data and are not checked for overlap here;
    use ``find_overlaps`` to audit a table.
    """

    def __init__(self, schemas: Dict[Tuple[DeviceFamily, int], Schema]):
        self._schemas = dict(schemas)

    @classmethod
    def from_dict(cls, document: Dict) -> 'SchemaRegistry':
        if not isinstance(document, dict):
            raise ValueError("Registry document must be a mapping")

        raw_layouts = document.get('layouts')
        raw_families = document.get('families')
        if not isinstance(raw_layouts, dict) or not isinstance(raw_families, dict):
            raise ValueError("Registry document needs 'layouts' and 'families' mappings")

        layouts = {name: _parse_layout(name, body) for name, body in raw_layouts.items()}

        schemas = {}
        for family_key, versions in raw_families.items():
            try:
                family = DeviceFamily(family_key)
            except ValueError:
                raise ValueError(f"Unknown device family '{family_key}'") from None
            if not isinstance(versions, dict) or not versions:
                raise ValueError(f"Family '{family_key}' has no versions")

            for version, entry in versions.items():
                if not isinstance(version, int) or version < 0:
                    raise ValueError(f"Family '{family_key}': invalid version {version!r}")
                if not isinstance(entry, dict):
                    raise ValueError(f"Family '{family_key}' v{version}: entry must be a mapping")
                layout_name = entry.get('layout')
                if layout_name not in layouts:
                    raise ValueError(
                        f"Family '{family_key}' v{version}: unknown layout '{layout_name}'")
                hex_length = entry.get('hex_length')
                if not isinstance(hex_length, int) or hex_length < 1:
                    raise ValueError(
                        f"Family '{family_key}' v{version}: invalid hex_length {hex_length!r}")
                schemas[(family, version)] = Schema(
                    family=family,
                    version=version,
                    fields=layouts[layout_name],
                    expected_hex_length=hex_length,
                )

        return cls(schemas)

    @classmethod
    def from_yaml(cls, text: str) -> 'SchemaRegistry':
        return cls.from_dict(yaml.safe_load(text))

    def __contains__(self, key: Tuple[DeviceFamily, int]) -> bool:
        return key in self._schemas

    def __iter__(self):
        return iter(self._schemas.values())

    def __len__(self) -> int:
        return len(self._schemas)

    def get(self, family: DeviceFamily, version: int) -> Schema:
        try:
            return self._schemas[(family, version)]
        except KeyError:
            raise KeyError(f"No schema for {family.value} v{version}") from None

    def versions(self, family: DeviceFamily) -> List[int]:
        return sorted(v for (f, v) in self._schemas if f == family)

    def latest(self, family: DeviceFamily) -> Schema:
        versions = self.versions(family)
        if not versions:
            raise KeyError(f"No schemas registered for {family.value}")
        return self._schemas[(family, versions[-1])]

    def resolve(self, family: DeviceFamily, version: Optional[int],
                payload_hex: str = '') -> Tuple[Schema, int, List[str]]:
        """
        Pick the schema for a filename.

        Unknown versions fall back to the highest registered version of the
        family; a version of None (unreadable digit) counts as unknown.
        Fallback and payload length mismatch are reported as warnings, never
        raised. Only a family with no schemas at all raises KeyError.

        Returns: (schema, used_version, warnings)
        """
        warnings = []

        if (family, version) in self._schemas:
            schema = self._schemas[(family, version)]
        else:
            schema = self.latest(family)
            shown = '?' if version is None else version
            warnings.append(
                f"Unknown {family.value} version {shown} with hex length "
                f"{len(payload_hex)}, using version {schema.version} instead "
                f"(expected hex length {schema.expected_hex_length})"
            )

        if len(payload_hex) != schema.expected_hex_length:
            warnings.append(
                f"{family.value} version {schema.version} has unexpected hex length "
                f"{len(payload_hex)}, expected {schema.expected_hex_length}"
            )

        return schema, schema.version, warnings


def find_overlaps(schema: Schema) -> List[str]:
    """Return a description of every pair of fields whose bit ranges overlap."""
    problems = []
    ordered = sorted(schema.fields, key=lambda f: (f.bit_offset, f.bit_width))
    for i, first in enumerate(ordered):
        for second in ordered[i + 1:]:
            if second.bit_offset >= first.bit_end:
                break
            problems.append(
                f"{schema.family.value} v{schema.version}: '{first.name}' "
                f"[{first.bit_offset}, {first.bit_end}) overlaps '{second.name}' "
                f"[{second.bit_offset}, {second.bit_end})"
            )
    return problems


def load_registry(path: Union[str, Path]) -> SchemaRegistry:
    """Load a registry from a YAML file with the same shape as RECORDING_SCHEMAS."""
    return SchemaRegistry.from_yaml(Path(path).read_text())


_default_registry: Optional[SchemaRegistry] = None
_default_lock = threading.Lock()


def default_registry() -> SchemaRegistry:
    """Shared registry built from RECORDING_SCHEMAS on first use."""
    global _default_registry
    if _default_registry is None:
        with _default_lock:
            if _default_registry is None:
                _default_registry = SchemaRegistry.from_yaml(RECORDING_SCHEMAS)
    return _default_registry


def resolve_schema(family: DeviceFamily, version: Optional[int],
                   payload_hex: str = '') -> Tuple[Schema, int, List[str]]:
    """Convenience wrapper around ``default_registry().resolve``."""
    return default_registry().resolve(family, version, payload_hex)
