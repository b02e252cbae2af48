"""
Almanac - Seed to Location Remapping Pipeline

Software reference for the multi-stage range remapping problem. A seed
number is pushed through an ordered chain of rule sets (seed-to-soil,
soil-to-fertilizer, ..., humidity-to-location). Each rule set is a list of
piecewise mappings; values not covered by any mapping pass through unchanged.

Ranges are (start, end) tuples with half-open semantics [start, end).

Range resolution splits every input range against each mapping's source
interval instead of enumerating values, so seed ranges spanning billions of
numbers resolve in time proportional to the number of mappings.
"""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Tuple

from software_reference.range_merger import merge_all_ranges

Range = Tuple[int, int]


@dataclass(frozen=True)
class Mapping:
    """One translation rule: [source_start, source_start + length) -> dest_start."""

    source_start: int
    dest_start: int
    length: int

    def __post_init__(self):
        if self.source_start < 0 or self.dest_start < 0:
            raise ValueError(f"Mapping bounds must be non-negative: {self}")
        if self.length <= 0:
            raise ValueError(f"Mapping length must be positive: {self}")

    @classmethod
    def from_line(cls, line: str, line_number: int = 1) -> "Mapping":
        """Build a Mapping from a 'destination source length' line."""
        # Imported here, the parser module depends on this one
        from software_reference.almanac_parser import parse_mapping
        return parse_mapping(line_number, line)

    @property
    def source_end(self) -> int:
        return self.source_start + self.length

    @property
    def offset(self) -> int:
        return self.dest_start - self.source_start

    def apply(self, value: int) -> Optional[int]:
        if self.source_start <= value < self.source_end:
            return value + self.offset
        return None

    def apply_range(self, value_range: Range) -> List[Tuple[Range, bool]]:
        """
        Split a range against this mapping's source interval.

        Args:
            value_range: (start, end) half-open range

        Returns:
            list: Up to three ((start, end), mapped) pieces in ascending source
                  order. The piece inside the source interval is returned
                  already shifted to the destination and flagged True; the
                  pieces before and after it are returned untouched and
                  flagged False. Empty pieces are omitted.
        """
        start, end = value_range
        if end <= start:
            return []

        pieces = []

        before_end = min(end, self.source_start)
        if start < before_end:
            pieces.append(((start, before_end), False))

        inside_start = max(start, self.source_start)
        inside_end = min(end, self.source_end)
        if inside_start < inside_end:
            pieces.append(((inside_start + self.offset, inside_end + self.offset), True))

        after_start = max(start, self.source_end)
        if after_start < end:
            pieces.append(((after_start, end), False))

        return pieces


@dataclass(frozen=True)
class RuleSet:
    """One pipeline stage. Uncovered values map to themselves."""

    mappings: Tuple[Mapping, ...]
    title: str = ""

    def __post_init__(self):
        object.__setattr__(self, "mappings", tuple(self.mappings))

    def __len__(self):
        return len(self.mappings)

    def resolve(self, value: int) -> int:
        # Source intervals are disjoint, so the first match is the only match
        for mapping in self.mappings:
            mapped = mapping.apply(value)
            if mapped is not None:
                return mapped
        return value

    def resolve_ranges(self, ranges: Iterable[Range]) -> List[Range]:
        """
        Push a set of ranges through this stage.

        Every pending range is split against each mapping in order. Mapped
        pieces are final for this stage; unmapped pieces stay pending for the
        next mapping. Whatever is still pending after the last mapping passes
        through unchanged.

        Returns:
            list: Merged, sorted ranges covering exactly the image of the input
        """
        pending = [r for r in ranges if r[1] > r[0]]
        resolved = []

        for mapping in self.mappings:
            if not pending:
                break
            remaining = []
            for value_range in pending:
                for piece, mapped in mapping.apply_range(value_range):
                    if mapped:
                        resolved.append(piece)
                    else:
                        remaining.append(piece)
            pending = remaining

        resolved.extend(pending)
        return merge_all_ranges(resolved)


@dataclass(frozen=True)
class Pipeline:
    """Ordered chain of stages; output domain of stage i feeds stage i+1."""

    stages: Tuple[RuleSet, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "stages", tuple(self.stages))

    def __len__(self):
        return len(self.stages)

    def __iter__(self) -> Iterator[RuleSet]:
        return iter(self.stages)

    def resolve(self, value: int) -> int:
        for stage in self.stages:
            value = stage.resolve(value)
        return value

    def resolve_ranges(self, ranges: Iterable[Range]) -> List[Range]:
        current = merge_all_ranges(ranges)
        for stage in self.stages:
            current = stage.resolve_ranges(current)
        return current

    def trace(self, value: int) -> List[int]:
        """Value at every stage boundary, from the seed to the location."""
        trail = [value]
        for stage in self.stages:
            value = stage.resolve(value)
            trail.append(value)
        return trail

    def mapping_count(self) -> int:
        return sum(len(stage) for stage in self.stages)


@dataclass(frozen=True)
class SeedSpec:
    """
    Seed tokens from the almanac header line.

    The same numbers are read two ways: as independent seeds, or as
    consecutive (start, length) pairs describing seed ranges.
    """

    values: Tuple[int, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "values", tuple(self.values))

    @property
    def seeds(self) -> Tuple[int, ...]:
        return self.values

    @property
    def ranges(self) -> List[Range]:
        # A trailing unpaired token is ignored
        pairs = zip(self.values[0::2], self.values[1::2])
        return [(start, start + length) for start, length in pairs if length > 0]
