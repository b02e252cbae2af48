"""
Range Resolver - Closest Location Queries

Part One: minimum location over discrete seeds.
Part Two: minimum location over seed ranges, computed by splitting ranges
through the pipeline. Every mapped piece is a pure shift of its source
interval, so the smallest value of a resolved range is its start.

Both queries return None when there is nothing to resolve. An empty seed set
has no closest location, and callers must handle that case explicitly.
"""

from typing import Iterable, List, Optional, Tuple

from software_reference.almanac import Pipeline, Range, SeedSpec


def minimum_over_seeds(seeds: Iterable[int], pipeline: Pipeline) -> Optional[int]:
    locations = [pipeline.resolve(seed) for seed in seeds]
    if not locations:
        return None
    return min(locations)


def minimum_over_ranges(seed_ranges: Iterable[Range], pipeline: Pipeline) -> Optional[int]:
    """
    Find the lowest location reachable from any seed in the given ranges.

    Args:
        seed_ranges: (start, end) half-open seed ranges
        pipeline: Stages to resolve through

    Returns:
        int or None: Lowest location, or None if the ranges cover no seeds

    Time Complexity: O(S * M * R log R) where S is the stage count, M the
    mappings per stage and R the number of ranges alive at a stage. Range
    sizes do not matter.
    """
    return minimum_of_resolved(pipeline.resolve_ranges(seed_ranges))


def minimum_of_resolved(resolved_ranges: List[Range]) -> Optional[int]:
    """Lowest value of ranges already resolved through the pipeline."""
    if not resolved_ranges:
        return None
    # resolve_ranges returns merged ranges sorted by start
    return resolved_ranges[0][0]


def closest_locations(seed_spec: SeedSpec, pipeline: Pipeline) -> Tuple[Optional[int], Optional[int]]:
    """Return (part one, part two) answers for a parsed almanac."""
    return (
        minimum_over_seeds(seed_spec.seeds, pipeline),
        minimum_over_ranges(seed_spec.ranges, pipeline),
    )
