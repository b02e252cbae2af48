"""
Property-based tests for the almanac pipeline using Hypothesis.

This module verifies the range-splitting resolver against brute-force
per-value resolution on small synthetic inputs, and checks the invariant
properties of mappings, rule sets, pipelines and the range merger.
"""

import pytest
from hypothesis import given, strategies as st, assume, settings
from hypothesis.strategies import lists, tuples, integers

from software_reference.almanac import Mapping, RuleSet, Pipeline, SeedSpec
from software_reference.almanac_parser import MalformedInteger, MappingArityError, parse_almanac
from software_reference.range_merger import merge_all_ranges, calculate_total_coverage
from software_reference.range_resolver import minimum_over_ranges, minimum_over_seeds


# Strategy for generating a single mapping
@st.composite
def mapping_strategy(draw):
    """Generate a mapping with a small source and destination."""
    source = draw(integers(min_value=0, max_value=200))
    dest = draw(integers(min_value=0, max_value=200))
    length = draw(integers(min_value=1, max_value=50))
    return Mapping(source_start=source, dest_start=dest, length=length)


# Strategy for generating a rule set with disjoint source intervals
@st.composite
def rule_set_strategy(draw):
    """Generate disjoint mappings laid out left to right, then shuffled."""
    specs = draw(lists(
        tuples(
            integers(min_value=0, max_value=20),   # gap before the mapping
            integers(min_value=1, max_value=30),   # length
            integers(min_value=0, max_value=250),  # destination
        ),
        min_size=0, max_size=6,
    ))
    mappings = []
    cursor = 0
    for gap, length, dest in specs:
        cursor += gap
        mappings.append(Mapping(source_start=cursor, dest_start=dest, length=length))
        cursor += length
    order = draw(st.permutations(mappings))
    return RuleSet(order, title="synthetic map:")


pipeline_strategy = lists(rule_set_strategy(), min_size=0, max_size=5).map(Pipeline)


# Strategy for generating small half-open ranges (possibly empty)
@st.composite
def small_range(draw):
    """Generate a range [start, end) with end >= start."""
    start = draw(integers(min_value=0, max_value=300))
    length = draw(integers(min_value=0, max_value=60))
    return (start, start + length)


ranges_strategy = lists(small_range(), min_size=0, max_size=6)


def ranges_to_set(ranges):
    """Convert a list of half-open ranges to the set of integers covered."""
    result = set()
    for start, end in ranges:
        result.update(range(start, end))
    return result


def render_almanac(values, pipeline):
    """Render seeds and a pipeline back into almanac text."""
    lines = ["seeds: " + " ".join(str(v) for v in values)]
    for rule_set in pipeline:
        lines.append("")
        lines.append(rule_set.title)
        for m in rule_set.mappings:
            lines.append(f"{m.dest_start} {m.source_start} {m.length}")
    return "\n".join(lines) + "\n"


# Property 1: apply maps exactly the source interval, as a pure shift
@given(mapping_strategy(), integers(min_value=0, max_value=400))
def test_mapping_apply_contract(mapping, value):
    """
    Property: apply(v) is not None iff v is in [source_start, source_start + length),
    and the relative position inside the interval is kept.
    """
    result = mapping.apply(value)
    inside = mapping.source_start <= value < mapping.source_start + mapping.length

    assert (result is not None) == inside
    if inside:
        assert result - mapping.dest_start == value - mapping.source_start


# Property 2: apply_range partitions its input and agrees with apply
@given(mapping_strategy(), small_range())
def test_apply_range_partition(mapping, value_range):
    """
    Property: Splitting a range keeps every value exactly once, shifting
    precisely the values apply() would shift.
    """
    pieces = mapping.apply_range(value_range)
    start, end = value_range

    assert len(pieces) <= 3
    assert sum(e - s for (s, e), _ in pieces) == end - start
    assert all(e > s for (s, e), _ in pieces)

    mapped_values = ranges_to_set(r for r, mapped in pieces if mapped)
    unmapped_values = ranges_to_set(r for r, mapped in pieces if not mapped)

    expected_mapped = {mapping.apply(v) for v in range(start, end) if mapping.apply(v) is not None}
    expected_unmapped = {v for v in range(start, end) if mapping.apply(v) is None}

    assert mapped_values == expected_mapped
    assert unmapped_values == expected_unmapped


# Property 3: Identity fallback for uncovered values
@given(rule_set_strategy(), integers(min_value=0, max_value=400))
def test_rule_set_identity_fallback(rule_set, value):
    """
    Property: A value outside every source interval resolves to itself.
    """
    assume(all(m.apply(value) is None for m in rule_set.mappings))
    assert rule_set.resolve(value) == value


# Property 4: Rule set range resolution matches per-value resolution
@given(rule_set_strategy(), ranges_strategy)
@settings(max_examples=300)
def test_rule_set_range_value_equivalence(rule_set, ranges):
    """
    Property: The resolved ranges cover exactly {resolve(v)} for v in the input.
    """
    expected = {rule_set.resolve(v) for v in ranges_to_set(ranges)}
    assert ranges_to_set(rule_set.resolve_ranges(ranges)) == expected


# Property 5: Pipeline range resolution matches per-value resolution
@given(pipeline_strategy, small_range())
@settings(max_examples=300)
def test_pipeline_range_value_equivalence(pipeline, value_range):
    """
    Property: Every seed in R resolves to a value inside resolve_ranges([R]),
    and the output covers nothing else.
    """
    resolved = pipeline.resolve_ranges([value_range])
    expected = {pipeline.resolve(v) for v in range(*value_range)}

    for v in range(*value_range):
        location = pipeline.resolve(v)
        assert any(start <= location < end for start, end in resolved), \
            f"Seed {v} -> {location} missing from {resolved}"

    assert ranges_to_set(resolved) == expected


# Property 6: Range minimum equals brute-force minimum
@given(pipeline_strategy, ranges_strategy)
@settings(max_examples=300)
def test_minimum_over_ranges_matches_brute_force(pipeline, ranges):
    """
    Property: minimum_over_ranges equals min(resolve(v)) over every seed.
    """
    seeds = ranges_to_set(ranges)
    result = minimum_over_ranges(ranges, pipeline)

    if not seeds:
        assert result is None
    else:
        assert result == min(pipeline.resolve(v) for v in seeds)
        assert result == minimum_over_seeds(seeds, pipeline)


# Property 7: Re-parsing yields pipelines with identical behaviour
@given(lists(integers(min_value=0, max_value=300), min_size=1, max_size=8), pipeline_strategy)
def test_reparse_idempotence(values, pipeline):
    """
    Property: Parsing the same text twice gives identical seeds and outputs.
    """
    text = render_almanac(values, pipeline)
    seeds_a, pipeline_a = parse_almanac(text)
    seeds_b, pipeline_b = parse_almanac(text)

    assert seeds_a == seeds_b == SeedSpec(values)
    assert pipeline_a == pipeline_b == pipeline
    for v in range(0, 400, 7):
        assert pipeline_a.resolve(v) == pipeline_b.resolve(v)
    assert pipeline_a.resolve_ranges(seeds_a.ranges) == pipeline_b.resolve_ranges(seeds_b.ranges)


# Property 8: Merging preserves coverage and is idempotent
@given(ranges_strategy)
def test_merge_preserves_coverage(ranges):
    """
    Property: Merged ranges cover the same integers, are sorted, and
    neither overlap nor touch.
    """
    merged = merge_all_ranges(ranges)

    assert ranges_to_set(merged) == ranges_to_set(ranges)
    assert calculate_total_coverage(ranges) == len(ranges_to_set(ranges))
    assert merge_all_ranges(merged) == merged
    for (_, first_end), (second_start, _) in zip(merged, merged[1:]):
        assert first_end < second_start


# Property 9: Range resolution never invents values
@given(pipeline_strategy, ranges_strategy)
def test_resolution_never_grows_coverage(pipeline, ranges):
    """
    Property: Mapping is a function, so the image is never larger than the input.
    """
    assert calculate_total_coverage(pipeline.resolve_ranges(ranges)) <= calculate_total_coverage(ranges)


# Concrete test cases for edge cases
def test_seed_to_soil_scenario():
    """Test the seed-to-soil mapping 50 98 2."""
    mapping = Mapping.from_line("50 98 2")
    assert mapping == Mapping(source_start=98, dest_start=50, length=2)
    assert mapping.apply(98) == 50
    assert mapping.apply(99) == 51
    assert mapping.apply(10) is None
    assert mapping.apply(100) is None


def test_single_stage_identity_scenario():
    """Test that seed 79 passes untouched through [98,100) -> [50,52)."""
    pipeline = Pipeline([RuleSet([Mapping(source_start=98, dest_start=50, length=2)])])
    assert [pipeline.resolve(s) for s in SeedSpec([79, 14, 55, 13]).seeds] == [79, 14, 55, 13]


def test_range_minimum_scenario():
    """Test that [79, 93) through [79,93) -> [81,95) has minimum 81."""
    pipeline = Pipeline([RuleSet([Mapping(source_start=79, dest_start=81, length=14)])])
    assert pipeline.resolve_ranges([(79, 93)]) == [(81, 95)]
    assert minimum_over_ranges([(79, 93)], pipeline) == 81


def test_apply_range_three_way_split():
    """Test a range straddling both ends of the source interval."""
    mapping = Mapping(source_start=10, dest_start=100, length=5)
    assert mapping.apply_range((5, 20)) == [
        ((5, 10), False),
        ((100, 105), True),
        ((15, 20), False),
    ]


def test_apply_range_disjoint_and_empty():
    """Test ranges entirely outside the source interval, and empty ranges."""
    mapping = Mapping(source_start=10, dest_start=100, length=5)
    assert mapping.apply_range((0, 10)) == [((0, 10), False)]
    assert mapping.apply_range((15, 30)) == [((15, 30), False)]
    assert mapping.apply_range((12, 12)) == []


def test_overlapping_mappings_first_wins():
    """Test that overlapping source intervals resolve to the first listed."""
    rule_set = RuleSet([
        Mapping(source_start=0, dest_start=100, length=10),
        Mapping(source_start=5, dest_start=200, length=10),
    ])
    assert rule_set.resolve(7) == 107
    assert rule_set.resolve(12) == 207
    assert rule_set.resolve_ranges([(0, 15)]) == [(100, 110), (205, 210)]


def test_empty_inputs_have_no_result():
    """Test that empty seed sets yield None rather than a default."""
    pipeline = Pipeline([RuleSet([Mapping(source_start=0, dest_start=5, length=3)])])
    assert minimum_over_ranges([], pipeline) is None
    assert minimum_over_ranges([(4, 4)], pipeline) is None
    assert minimum_over_seeds([], pipeline) is None


def test_billion_scale_range():
    """Test that huge ranges resolve without enumeration."""
    pipeline = Pipeline([
        RuleSet([Mapping(source_start=1_000_000_000, dest_start=7, length=3_000_000_000)]),
        RuleSet([Mapping(source_start=0, dest_start=10**12, length=10)]),
    ])
    # Locations 7..9 from the first stage are pushed far away by the second
    assert minimum_over_ranges([(500_000_000, 4_000_000_000)], pipeline) == 10


def test_seed_spec_ranges():
    """Test pairing of seed tokens into ranges."""
    spec = SeedSpec([79, 14, 55, 13, 10, 0, 99])
    assert spec.seeds == (79, 14, 55, 13, 10, 0, 99)
    assert spec.ranges == [(79, 93), (55, 68)]


def test_invalid_mapping_rejected():
    """Test that zero lengths and negative bounds are refused."""
    with pytest.raises(ValueError):
        Mapping(source_start=0, dest_start=0, length=0)
    with pytest.raises(ValueError):
        Mapping(source_start=-1, dest_start=0, length=3)
    with pytest.raises(ValueError):
        Mapping.from_line("1 2")


def test_from_line_matches_parser_rules():
    """Test that single lines follow the same integer and arity rules as files."""
    assert Mapping.from_line("50 98 2") == Mapping(source_start=98, dest_start=50, length=2)
    with pytest.raises(MalformedInteger):
        Mapping.from_line("50 +98 2")
    with pytest.raises(MalformedInteger):
        Mapping.from_line("1_0 98 2")
    with pytest.raises(MalformedInteger):
        Mapping.from_line("50 98 0")
    with pytest.raises(MappingArityError) as excinfo:
        Mapping.from_line("1 2", line_number=9)
    assert excinfo.value.line_number == 9


def test_merge_touching_ranges():
    """Test that touching half-open ranges merge but gapped ones do not."""
    assert merge_all_ranges([(5, 10), (1, 5), (11, 15), (3, 3)]) == [(1, 10), (11, 15)]


if __name__ == "__main__":
    # Run pytest
    pytest.main([__file__, "-v", "--tb=short"])
