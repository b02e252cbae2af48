"""
Almanac Parser

Input layout (blank-line separated sections):

    seeds: 79 14 55 13

    seed-to-soil map:
    50 98 2
    52 50 48

    soil-to-fertilizer map:
    ...

The first section holds a label token followed by the seed numbers. Every
following section is one pipeline stage: a title line, then one
'destination source length' line per mapping. Stages are kept in the order
they appear; titles are informational only.
"""

from typing import List, Tuple

from software_reference.almanac import Mapping, Pipeline, RuleSet, SeedSpec


class ParseError(ValueError):
    """Base class for malformed almanac input."""


class MissingField(ParseError):
    """A required section or line is absent."""


class MalformedInteger(ParseError):
    """A token that should be an unsigned integer is not."""

    def __init__(self, token, line_number, reason="not an unsigned integer"):
        self.token = token
        self.line_number = line_number
        super().__init__(f"line {line_number}: {token!r} is {reason}")


class MappingArityError(ParseError):
    """A mapping line does not have exactly three fields."""

    def __init__(self, line_number, field_count):
        self.line_number = line_number
        self.field_count = field_count
        super().__init__(
            f"line {line_number}: mapping needs 3 fields "
            f"(destination source length), got {field_count}"
        )


U64_LIMIT = 1 << 64


def is_unsigned_token(token: str) -> bool:
    # int() alone would accept signs, underscores and non-ASCII digits
    return token.isascii() and token.isdigit()


def parse_unsigned(token: str, line_number: int) -> int:
    if not is_unsigned_token(token):
        raise MalformedInteger(token, line_number)
    value = int(token)
    if value >= U64_LIMIT:
        raise MalformedInteger(token, line_number, reason="wider than 64 bits")
    return value


def split_sections(text: str) -> List[List[Tuple[int, str]]]:
    """
    Group non-blank lines into sections.

    Returns:
        list: Sections, each a list of (line_number, stripped_line) pairs.
              Line numbers are 1-based. Runs of blank lines count as one
              separator.
    """
    sections = []
    current = []

    for line_number, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if line:
            current.append((line_number, line))
        elif current:
            sections.append(current)
            current = []

    if current:
        sections.append(current)

    return sections


def parse_seeds(section: List[Tuple[int, str]]) -> SeedSpec:
    first_number, first_line = section[0]
    label, *tokens = first_line.split()
    if is_unsigned_token(label):
        raise MissingField(f"line {first_number}: seed line has no label")

    values = [parse_unsigned(token, first_number) for token in tokens]
    # The seed list may wrap onto following lines
    for line_number, line in section[1:]:
        values.extend(parse_unsigned(token, line_number) for token in line.split())

    return SeedSpec(values)


def parse_mapping(line_number: int, line: str) -> Mapping:
    fields = line.split()
    if len(fields) != 3:
        raise MappingArityError(line_number, len(fields))

    destination, source, length = (parse_unsigned(f, line_number) for f in fields)
    if length == 0:
        raise MalformedInteger(fields[2], line_number, reason="a zero mapping length")

    return Mapping(source_start=source, dest_start=destination, length=length)


def parse_rule_set(section: List[Tuple[int, str]]) -> RuleSet:
    title_number, title = section[0]
    # A bare mapping line where the title belongs would otherwise vanish as the title
    if all(is_unsigned_token(token) for token in title.split()):
        raise MissingField(f"line {title_number}: rule set section has no title line")
    mappings = [parse_mapping(line_number, line) for line_number, line in section[1:]]
    return RuleSet(mappings, title=title)


def parse_almanac(text: str) -> Tuple[SeedSpec, Pipeline]:
    """
    Parse almanac text into seeds and an ordered pipeline.

    Args:
        text: Full almanac contents

    Returns:
        tuple: (SeedSpec, Pipeline)

    Raises:
        MissingField: No seed line, or a rule set section without a title
        MalformedInteger: Non-numeric, signed or wider than 64 bits token, or
                          zero mapping length
        MappingArityError: Mapping line with a field count other than three
    """
    sections = split_sections(text)
    if not sections:
        raise MissingField("input is empty: seed line not found")

    seed_spec = parse_seeds(sections[0])
    pipeline = Pipeline(parse_rule_set(section) for section in sections[1:])

    return seed_spec, pipeline


def read_input(filename):
    """
    Read and parse an almanac file.

    Args:
        filename: Path to input file

    Returns:
        tuple: (SeedSpec, Pipeline)
    """
    with open(filename, encoding="utf-8") as f:
        return parse_almanac(f.read())
