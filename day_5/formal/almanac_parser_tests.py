"""
Concrete tests for the almanac parser and the closest location CLI.

Covers the bundled example end to end, section splitting quirks, and every
parse error kind.
"""

import os

import pytest

from software_reference.almanac import Mapping, Pipeline, RuleSet
from software_reference.almanac_parser import (
    MalformedInteger,
    MappingArityError,
    MissingField,
    ParseError,
    parse_almanac,
    read_input,
)
from software_reference.closest_location import DEFAULT_INPUT, get_statistics, main
from software_reference.range_resolver import closest_locations


def test_default_input_answers():
    """Test the bundled example: Part 1 = 35, Part 2 = 46."""
    seed_spec, pipeline = read_input(DEFAULT_INPUT)

    assert seed_spec.seeds == (79, 14, 55, 13)
    assert seed_spec.ranges == [(79, 93), (55, 68)]
    assert len(pipeline) == 7
    assert [stage.title for stage in pipeline][0] == "seed-to-soil map:"
    assert [stage.title for stage in pipeline][-1] == "humidity-to-location map:"
    assert closest_locations(seed_spec, pipeline) == (35, 46)


def test_default_input_locations():
    """Test per-seed locations of the bundled example."""
    seed_spec, pipeline = read_input(DEFAULT_INPUT)
    assert [pipeline.resolve(s) for s in seed_spec.seeds] == [82, 43, 86, 35]
    assert pipeline.trace(79) == [79, 81, 81, 81, 74, 78, 78, 82]


def test_mapping_line_order():
    """Test that lines read as destination, source, length."""
    _, pipeline = parse_almanac("seeds: 1\n\nseed-to-soil map:\n50 98 2\n52 50 48\n")
    assert pipeline.stages[0] == RuleSet(
        [
            Mapping(source_start=98, dest_start=50, length=2),
            Mapping(source_start=50, dest_start=52, length=48),
        ],
        title="seed-to-soil map:",
    )


def test_sections_tolerate_extra_blank_lines_and_crlf():
    """Test blank-line runs, whitespace-only lines and Windows line endings."""
    text = "seeds: 5 2\r\n\r\n   \r\n\r\na map:\r\n10 5 1\r\n\r\n\r\nb map:\r\n0 10 1\r\n"
    seed_spec, pipeline = parse_almanac(text)

    assert seed_spec.seeds == (5, 2)
    assert len(pipeline) == 2
    assert pipeline.resolve(5) == 0
    assert pipeline.resolve(6) == 6


def test_wrapped_seed_line():
    """Test that the seed list may continue onto following lines."""
    seed_spec, pipeline = parse_almanac("seeds: 1 2\n3 4\n")
    assert seed_spec.seeds == (1, 2, 3, 4)
    assert len(pipeline) == 0
    assert pipeline.resolve(3) == 3


def test_title_only_section_is_identity():
    """Test that a stage without mapping lines passes values through."""
    _, pipeline = parse_almanac("seeds: 1\n\nempty map:\n")
    assert len(pipeline.stages[0]) == 0
    assert pipeline.resolve_ranges([(4, 9)]) == [(4, 9)]


def test_empty_input_is_missing_field():
    with pytest.raises(MissingField):
        parse_almanac("")
    with pytest.raises(MissingField):
        parse_almanac("\n  \n\n")


def test_seed_line_without_label():
    with pytest.raises(MissingField):
        parse_almanac("79 14 55 13\n\nmap:\n1 2 3\n")


@pytest.mark.parametrize("text, line_number", [
    ("seeds: 98 99\n\n50 98 2\n", 3),
    ("seeds: 1\n\n50 98\n1 2 3\n", 3),
    ("seeds: 1\n\na map:\n1 2 3\n\n\n7\n", 7),
])
def test_rule_set_without_title(text, line_number):
    """Test that a mapping line in the title position is an error, not a title."""
    with pytest.raises(MissingField, match=f"line {line_number}:"):
        parse_almanac(text)


def test_largest_u64_token_accepted():
    top = 2**64 - 1
    seed_spec, pipeline = parse_almanac(f"seeds: {top}\n\nmap:\n0 {top} 1\n")
    assert seed_spec.seeds == (top,)
    assert pipeline.resolve(top) == 0


@pytest.mark.parametrize("text, token, line_number", [
    ("seeds: 79 x4 55\n", "x4", 1),
    ("seeds: 79 -14\n", "-14", 1),
    ("seeds: 1\n\nmap:\n50 98 2\n50 +98 2\n", "+98", 5),
    ("seeds: 1\n\nmap:\n50 9.8 2\n", "9.8", 4),
    ("seeds: 1\n\nmap:\n50 98 0\n", "0", 4),
    ("seeds: 18446744073709551616\n", "18446744073709551616", 1),
    ("seeds: 1\n\nmap:\n50 18446744073709551616 2\n", "18446744073709551616", 4),
])
def test_malformed_integer(text, token, line_number):
    with pytest.raises(MalformedInteger) as excinfo:
        parse_almanac(text)
    assert excinfo.value.token == token
    assert excinfo.value.line_number == line_number


@pytest.mark.parametrize("line, field_count", [
    ("50 98", 2),
    ("50 98 2 7", 4),
])
def test_mapping_arity(line, field_count):
    with pytest.raises(MappingArityError) as excinfo:
        parse_almanac(f"seeds: 1\n\nmap:\n{line}\n")
    assert excinfo.value.field_count == field_count
    assert excinfo.value.line_number == 4


def test_parse_errors_share_base_class():
    """Test that every parse failure can be caught as ParseError / ValueError."""
    for text in ("", "seeds: a\n", "seeds: 1\n\nmap:\n1 2\n"):
        with pytest.raises(ParseError):
            parse_almanac(text)
        with pytest.raises(ValueError):
            parse_almanac(text)


def test_cli_prints_both_parts(capsys):
    assert main([DEFAULT_INPUT]) == 0
    out = capsys.readouterr().out
    assert out.splitlines() == ["Part 1: 35", "Part 2: 46"]


def test_cli_verbose_statistics(capsys):
    assert main([DEFAULT_INPUT, "-v"]) == 0
    err = capsys.readouterr().err
    assert "Stages: 7" in err
    assert "Seed ranges: 2" in err
    assert "79 -> 81 -> 81 -> 81 -> 74 -> 78 -> 78 -> 82" in err


def test_cli_resolves_seed_ranges_once(monkeypatch, capsys):
    """Test that the verbose run reuses the resolved ranges for its statistics."""
    calls = []
    resolve_ranges = Pipeline.resolve_ranges

    def counting_resolve_ranges(self, ranges):
        calls.append(ranges)
        return resolve_ranges(self, ranges)

    monkeypatch.setattr(Pipeline, "resolve_ranges", counting_resolve_ranges)

    assert main([DEFAULT_INPUT, "-v"]) == 0
    assert len(calls) == 1
    assert capsys.readouterr().out.splitlines() == ["Part 1: 35", "Part 2: 46"]


def test_statistics_count_given_final_ranges():
    seed_spec, pipeline = read_input(DEFAULT_INPUT)
    stats = get_statistics(seed_spec, pipeline, [(1, 2)])
    assert stats == {
        "stages": 7,
        "mappings": pipeline.mapping_count(),
        "seeds": 4,
        "seed_ranges": 2,
        "final_ranges": 1,
    }


def test_cli_reports_no_result(tmp_path, capsys):
    almanac = tmp_path / "almanac.txt"
    almanac.write_text("seeds:\n\nmap:\n1 2 3\n")

    assert main([str(almanac)]) == 0
    assert capsys.readouterr().out.splitlines() == ["Part 1: no result", "Part 2: no result"]


def test_cli_parse_failure(tmp_path, capsys):
    almanac = tmp_path / "almanac.txt"
    almanac.write_text("seeds: 1\n\nmap:\n1 2\n")

    assert main([str(almanac)]) == 1
    assert capsys.readouterr().err.startswith("Error: line 4")


def test_cli_missing_file(tmp_path, capsys):
    assert main([os.path.join(str(tmp_path), "absent.txt")]) == 1
    assert "Error:" in capsys.readouterr().err


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
