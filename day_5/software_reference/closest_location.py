#!/usr/bin/env python3
"""
Closest Location - Command Line Entry Point

Reads an almanac and prints the lowest location for the discrete seeds
(Part 1) and for the seed ranges (Part 2).

Usage:
    python3 -m software_reference.closest_location [input_file] [-v]

Default input file: testcases/default_input.txt
"""

import os
import sys

from software_reference.almanac_parser import ParseError, read_input
from software_reference.range_resolver import minimum_of_resolved, minimum_over_seeds

DEFAULT_INPUT = os.path.join(
    os.path.dirname(os.path.abspath(__file__)), "..", "testcases", "default_input.txt"
)


def format_result(value):
    return "no result" if value is None else str(value)


def get_statistics(seed_spec, pipeline, final_ranges):
    """Return pipeline and seed statistics."""
    return {
        'stages': len(pipeline),
        'mappings': pipeline.mapping_count(),
        'seeds': len(seed_spec.seeds),
        'seed_ranges': len(seed_spec.ranges),
        'final_ranges': len(final_ranges),
    }


def main(argv=None):
    """Command-line interface for the closest location queries."""
    import argparse

    parser = argparse.ArgumentParser(
        description='Find the lowest location reachable from almanac seeds'
    )
    parser.add_argument('input_file', nargs='?', default=DEFAULT_INPUT,
                        help='Almanac input file (default: bundled example)')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Print pipeline statistics')
    args = parser.parse_args(argv)

    try:
        seed_spec, pipeline = read_input(args.input_file)
    except (OSError, ParseError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.verbose:
        print(f"Processing almanac {args.input_file}", file=sys.stderr)

    final_ranges = pipeline.resolve_ranges(seed_spec.ranges)
    part_one = minimum_over_seeds(seed_spec.seeds, pipeline)
    part_two = minimum_of_resolved(final_ranges)

    print(f"Part 1: {format_result(part_one)}")
    print(f"Part 2: {format_result(part_two)}")

    if args.verbose:
        stats = get_statistics(seed_spec, pipeline, final_ranges)
        print(f"\nStatistics:", file=sys.stderr)
        print(f"  Stages: {stats['stages']}", file=sys.stderr)
        print(f"  Mappings: {stats['mappings']}", file=sys.stderr)
        print(f"  Seeds: {stats['seeds']}", file=sys.stderr)
        print(f"  Seed ranges: {stats['seed_ranges']}", file=sys.stderr)
        print(f"  Ranges at last stage: {stats['final_ranges']}", file=sys.stderr)
        print(f"\nSeed traces:", file=sys.stderr)
        for seed in seed_spec.seeds:
            trail = " -> ".join(str(v) for v in pipeline.trace(seed))
            print(f"  {trail}", file=sys.stderr)

    return 0


if __name__ == '__main__':
    sys.exit(main())
