"""
Tests for the line-level field extractors.
"""

import pytest

from cwm.extraction import (
    MapParseError,
    extract_decorators,
    extract_label,
    extract_url_ref,
    find_pipeline_blocks,
    keyword_body,
    parse_element,
    parse_number,
    parse_numbers,
    pipeline_block_indexes,
    split_position,
    starts_with_reserved_keyword,
)
from cwm.model import ElementKind, LabelOffset


class TestKeywordBody:
    """Test keyword recognition."""

    def test_keyword_followed_by_text(self):
        """The body is everything after the keyword."""
        assert keyword_body("component Tea [0.5, 0.5]", "component") == "Tea [0.5, 0.5]"

    def test_leading_whitespace_ignored(self):
        """Indentation and trailing spaces are trimmed."""
        assert keyword_body("   title My Map  ", "title") == "My Map"

    def test_bare_keyword(self):
        """A keyword alone gives an empty body."""
        assert keyword_body("title", "title") == ""

    def test_longer_word_does_not_match(self):
        """annotation must not claim annotations lines."""
        assert keyword_body("annotations [0.1, 0.2]", "annotation") is None

    def test_link_is_not_a_keyword_line(self):
        """build->Tea is a link, not a build statement."""
        assert keyword_body("build->Tea", "build") is None

    def test_other_keyword(self):
        """A different keyword gives None."""
        assert keyword_body("anchor User [0.9, 0.5]", "component") is None

    def test_reserved_keyword_detection(self):
        """Only whole reserved words count."""
        assert starts_with_reserved_keyword("evolve Tea 0.8")
        assert not starts_with_reserved_keyword("Tea->Water")
        assert not starts_with_reserved_keyword("components->Tea")


class TestNumbers:
    """Test numeric parsing."""

    def test_plain_and_signed(self):
        """Signed and leading-dot numbers are accepted."""
        assert parse_number("0.5") == 0.5
        assert parse_number("-12") == -12.0
        assert parse_number(".25") == 0.25

    def test_invalid_number(self):
        """Words are not numbers."""
        with pytest.raises(MapParseError, match="Invalid coordinate"):
            parse_number("abc")

    def test_list_of_expected_length(self):
        """Any of the expected counts is accepted."""
        assert parse_numbers("0.1, 0.2", (2,)) == [0.1, 0.2]
        assert parse_numbers("1,2,3,4", (2, 4)) == [1.0, 2.0, 3.0, 4.0]

    def test_wrong_count(self):
        """Too many values is an error."""
        with pytest.raises(MapParseError, match="Expected 2 values"):
            parse_numbers("0.1, 0.2, 0.3", (2,))

    def test_empty_brackets(self):
        """Empty brackets hold zero values."""
        with pytest.raises(MapParseError):
            parse_numbers("", (2,))


class TestClauseExtractors:
    """Test label, url and decorator clauses."""

    def test_label(self):
        """label [dx, dy] is pulled out of the body."""
        label, rest = extract_label("Tea [0.5, 0.5] label [10, -4]")
        assert label == LabelOffset(x=10, y=-4)
        assert rest == "Tea [0.5, 0.5]"

    def test_no_label(self):
        """Without a label clause the body is unchanged."""
        label, rest = extract_label("Tea [0.5, 0.5]")
        assert label is None
        assert rest == "Tea [0.5, 0.5]"

    def test_bad_label(self):
        """A non-numeric offset is an error."""
        with pytest.raises(MapParseError):
            extract_label("Tea label [x, 1]")

    def test_url_reference(self):
        """url(name) is pulled out of the body."""
        url, rest = extract_url_ref("Staff [0.5, 0.5] url(staffUrl)")
        assert url == "staffUrl"
        assert rest == "Staff [0.5, 0.5]"

    def test_single_decorator(self):
        """(buy) sets buy and nothing else."""
        decorators, inertia, rest = extract_decorators("Tea [0.5, 0.5] (buy)")
        assert decorators.buy
        assert not decorators.build
        assert not decorators.outsource
        assert not inertia
        assert rest == "Tea [0.5, 0.5]"

    def test_grouped_decorators_and_inertia(self):
        """Comma groups and (inertia) are both read."""
        decorators, inertia, _ = extract_decorators("Tea (market, build) (inertia)")
        assert decorators.market
        assert decorators.build
        assert inertia

    def test_non_decorator_parentheses_kept(self):
        """Parentheses that are part of a name stay in the name."""
        decorators, _, rest = extract_decorators("Compute (GPU) [0.5, 0.5]")
        assert decorators is None
        assert rest == "Compute (GPU) [0.5, 0.5]"


class TestSplitPosition:
    """Test name / coordinates split."""

    def test_with_coordinates(self):
        """Name, position and the remaining text are separated."""
        assert split_position("Hot Water [0.52, 0.80] inertia") == ("Hot Water", (0.52, 0.80), "inertia")

    def test_without_coordinates(self):
        """No brackets means no position."""
        assert split_position("Hot Water") == ("Hot Water", None, "")

    def test_unbalanced(self):
        """An unclosed bracket is an error."""
        with pytest.raises(MapParseError, match="Unbalanced"):
            split_position("Hot Water [0.52, 0.80")


class TestParseElement:
    """Test full element declarations."""

    def test_full_declaration(self):
        """Every clause of the element grammar is read."""
        element = parse_element(
            "Kettle [0.43, 0.35] label [-57, 4] (build) inertia", "component", ElementKind.COMPONENT, 7
        )
        assert element.name == "Kettle"
        assert element.visibility == 0.43
        assert element.maturity == 0.35
        assert element.label == LabelOffset(x=-57, y=4)
        assert element.decorators.build
        assert element.inertia
        assert element.line == 7

    def test_sketched_element_uses_defaults(self):
        """An element without a position sits at 0.1 / 0.9."""
        element = parse_element("Kettle", "component", ElementKind.COMPONENT, 1)
        assert element.maturity == 0.1
        assert element.visibility == 0.9
        assert element.decorators is None
        assert element.label == LabelOffset()

    def test_sketched_element_with_inertia(self):
        """A trailing inertia word is not part of the name."""
        element = parse_element("Kettle inertia", "component", ElementKind.COMPONENT, 1)
        assert element.name == "Kettle"
        assert element.inertia

    def test_first_brackets_are_the_position(self):
        """A name containing the word label keeps its coordinates."""
        element = parse_element("Shipping label [0.5, 0.6]", "component", ElementKind.COMPONENT, 1)
        assert element.name == "Shipping label"
        assert (element.visibility, element.maturity) == (0.5, 0.6)
        assert element.label == LabelOffset()

    def test_label_after_position(self):
        """The label clause is read from the text after the position."""
        element = parse_element("Shipping label [0.5, 0.6] label [3, 4]", "component", ElementKind.COMPONENT, 1)
        assert (element.visibility, element.maturity) == (0.5, 0.6)
        assert element.label == LabelOffset(x=3, y=4)

    def test_coordinates_not_clamped(self):
        """Out of range coordinates are kept."""
        element = parse_element("Far [1.5, -0.2]", "component", ElementKind.COMPONENT, 1)
        assert element.visibility == 1.5
        assert element.maturity == -0.2

    def test_missing_name(self):
        """A position without a name is an error."""
        with pytest.raises(MapParseError, match="Missing component name"):
            parse_element("[0.5, 0.5]", "component", ElementKind.COMPONENT, 1)


class TestPipelineBlocks:
    """Test pipeline brace block discovery."""

    def test_brace_on_next_line(self):
        """The { may sit on the line after the header."""
        lines = ["pipeline Kettle", "{", "  component A [0.3]", "}", "Kettle->Power"]
        assert find_pipeline_blocks(lines) == {0: (1, 3)}
        assert pipeline_block_indexes(lines) == {1, 2, 3}

    def test_brace_on_header_line(self):
        """The { may sit on the header line."""
        lines = ["pipeline Kettle {", "  component A [0.3]", "}"]
        assert find_pipeline_blocks(lines) == {0: (0, 2)}

    def test_one_line_block(self):
        """A block opened and closed on the header line."""
        lines = ["pipeline Kettle { component A [0.3] }", "Kettle->Power"]
        assert find_pipeline_blocks(lines) == {0: (0, 0)}

    def test_header_without_block(self):
        """A legacy range header has no block."""
        assert find_pipeline_blocks(["pipeline Kettle [0.2, 0.6]", "component A [0.3, 0.3]"]) == {}

    def test_unterminated_block_runs_to_end(self):
        """A block without } ends with the input."""
        lines = ["pipeline Kettle", "{", "  component A [0.3]"]
        assert find_pipeline_blocks(lines) == {0: (1, 3)}
        assert pipeline_block_indexes(lines) == {1, 2}
