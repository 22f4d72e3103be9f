#!/usr/bin/env python3
"""
recording_decoder.py - Decode NVR recording filenames into metadata

Runs tokenizer -> schema resolution -> bit decoding -> classification.
Only a filename that cannot be segmented is an error; unknown schema
versions and unexpected payload lengths decode with the best known schema
and are reported as warnings.

Usage:
    python tools/recording_decoder.py RecM01_20201222_075939_080140_6D28808_1A468F9.mp4
    python tools/recording_decoder.py --json Mp4Record/2024-08-27/*.mp4
    python tools/recording_decoder.py --registry my_schemas.yaml --strict NAME...
    python tools/recording_decoder.py --check-registry

    from recording_decoder import decode_filename

    result = decode_filename('RecM01_20201222_075939_080140_6D28808_1A468F9.mp4')
    result.classes     # (DetectionClass.MOTION,)
"""

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

import yaml

from bit_decoder import decode_fields, is_hex
from filename_tokenizer import DecodeError, FilenameTokens, UnrecognizedFormat, tokenize
from recording_classifier import DetectionClass, RecordingTrigger, classify, triggers
from recording_schema import SchemaRegistry, default_registry, find_overlaps, load_registry

logger = logging.getLogger(__name__)


@dataclass
class DecodeResult:
    """Result of decoding one recording filename."""
    tokens: FilenameTokens
    fields: Dict[str, int]
    classes: Tuple[DetectionClass, ...]
    used_version: int
    triggers: RecordingTrigger = RecordingTrigger.NONE
    warnings: List[str] = field(default_factory=list)

    @property
    def version_fallback(self) -> bool:
        return self.used_version != self.tokens.version

    def to_dict(self) -> Dict[str, Any]:
        return {
            'tokens': self.tokens.to_dict(),
            'used_version': self.used_version,
            'fields': dict(self.fields),
            'classes': [c.value for c in self.classes],
            'triggers': [t.name.lower() for t in RecordingTrigger
                         if t and t in self.triggers],
            'warnings': list(self.warnings),
        }


class RecordingDecoder:
    """
    Filename decoder bound to a schema registry and a diagnostic logger.

    Holds no per-call state, so one instance can serve any number of
    concurrent callers.
    """

    def __init__(self, registry: Optional[SchemaRegistry] = None,
                 log: Optional[logging.Logger] = None):
        self.registry = registry if registry is not None else default_registry()
        self.log = log if log is not None else logger

    def decode(self, filename: str) -> DecodeResult:
        """
        Decode one filename.

        Raises UnrecognizedFormat if the filename has no known shape or the
        registry has no schemas for its device family.
        """
        tokens = tokenize(filename)

        family = tokens.device_family
        if not self.registry.versions(family):
            raise UnrecognizedFormat(filename, f"no schemas registered for {family.value}")

        schema, used_version, warnings = self.registry.resolve(
            family, tokens.version, tokens.payload_hex)
        if not is_hex(tokens.payload_hex):
            warnings.append(
                f"payload '{tokens.payload_hex}' is not hexadecimal, decoding as zero bits")
        for warning in warnings:
            self.log.debug("%s: %s", filename, warning)

        fields = decode_fields(tokens.payload_hex, schema)
        self.log.debug("%s: %s v%d %s", filename, tokens.device_family.value,
                       used_version, fields)

        return DecodeResult(
            tokens=tokens,
            fields=fields,
            classes=classify(fields),
            used_version=used_version,
            triggers=triggers(fields),
            warnings=warnings,
        )

    def decode_many(self, filenames: Iterable[str]) -> Tuple[List[DecodeResult], List[str]]:
        """
        Decode a storage listing, skipping names that are not recordings.

        Returns: (results, rejected_filenames)
        """
        results = []
        rejected = []
        for filename in filenames:
            try:
                results.append(self.decode(filename))
            except DecodeError as e:
                self.log.debug("Skipping %s", e)
                rejected.append(filename)
        return results, rejected


def decode_filename(filename: str) -> DecodeResult:
    """Convenience function using the default registry."""
    return RecordingDecoder().decode(filename)


def print_result(result: DecodeResult, verbose: bool = False):
    """Print a human-readable summary of one decode."""
    tokens = result.tokens
    print(f"{tokens.name}")
    version = '?' if tokens.version is None else tokens.version
    print(f"  Family:   {tokens.device_family.value} v{version}"
          + (f" (decoded as v{result.used_version})" if result.version_fallback else ""))
    print(f"  Date:     {tokens.start_date} {tokens.start_time}-{tokens.end_time}")
    print(f"  Payload:  {tokens.payload_hex}")
    print(f"  Classes:  {', '.join(c.value for c in result.classes)}")

    if verbose:
        for name, value in result.fields.items():
            print(f"    {name}: {value}")

    for warning in result.warnings:
        print(f"  WARNING: {warning}")


def check_registry(registry: SchemaRegistry) -> List[str]:
    problems = []
    for schema in registry:
        problems.extend(find_overlaps(schema))
    return problems


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description='Decode NVR recording filenames into detection metadata'
    )
    parser.add_argument('filenames', nargs='*', help='Recording filenames or paths')
    parser.add_argument('--registry', help='YAML file with schema layouts to use instead of the built-in tables')
    parser.add_argument('--json', action='store_true',
                        help='Output results as JSON')
    parser.add_argument('--strict', action='store_true',
                        help='Exit non-zero if any decode produced warnings')
    parser.add_argument('--check-registry', action='store_true',
                        help='Report overlapping fields in the schema tables and exit')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Show all decoded fields and debug logging')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    try:
        registry = load_registry(args.registry) if args.registry else default_registry()
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error loading registry: {e}", file=sys.stderr)
        return 2

    if args.check_registry:
        problems = check_registry(registry)
        for problem in problems:
            print(problem)
        if not problems:
            print(f"OK: {len(registry)} schemas, no overlapping fields")
        return 1 if problems else 0

    if not args.filenames:
        parser.error('at least one filename is required')

    decoder = RecordingDecoder(registry)
    results, rejected = decoder.decode_many(args.filenames)

    if args.json:
        print(json.dumps({
            'results': [r.to_dict() for r in results],
            'rejected': rejected,
        }, indent=2))
    else:
        for result in results:
            print_result(result, args.verbose)
        for filename in rejected:
            print(f"{filename}\n  ERROR: unrecognized filename format")

    if rejected:
        return 1
    if args.strict and any(r.warnings for r in results):
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
