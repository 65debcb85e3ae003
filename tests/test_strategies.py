"""
Tests for the extraction strategies.

Each strategy is applied on its own to cleaned text and must return a
StrategyResult for exactly one key, with per-line diagnostics.
"""

import pytest

from cwm.config import FeatureSwitches
from cwm.strategies import (
    STRATEGY_CLASSES,
    AcceleratorExtractionStrategy,
    AnchorExtractionStrategy,
    AnnotationExtractionStrategy,
    AttitudeExtractionStrategy,
    ComponentExtractionStrategy,
    EvolutionLabelsExtractionStrategy,
    EvolveExtractionStrategy,
    KeywordStrategyRunner,
    LinksExtractionStrategy,
    MethodExtractionStrategy,
    NoteExtractionStrategy,
    PipelineExtractionStrategy,
    PresentationExtractionStrategy,
    SubMapExtractionStrategy,
    TitleExtractionStrategy,
    UrlExtractionStrategy,
    build_strategies,
)
from cwm.model import ElementKind


class TestStrategyRegistry:
    """Test the declared strategy set."""

    def test_keys_are_unique(self):
        """No two strategies own the same key."""
        keys = [cls.key for cls in STRATEGY_CLASSES]
        assert len(keys) == len(set(keys))

    def test_build_strategies_in_declaration_order(self):
        """Every strategy is built over the same text, in order."""
        strategies = build_strategies("title T")
        assert [type(s) for s in strategies] == list(STRATEGY_CLASSES)
        assert all(s.text == "title T" for s in strategies)


class TestTitleStrategy:
    """Test title extraction."""

    def test_first_title_wins(self):
        """A second title line is ignored."""
        result = TitleExtractionStrategy("title First\ntitle Second").apply()
        assert result.key == "title"
        assert result.value == "First"

    def test_default_title(self):
        """Without a title line the default is used."""
        assert TitleExtractionStrategy("component A [0.5, 0.5]").apply().value == "Untitled Map"

    def test_empty_title_reported(self):
        """A bare title keyword is a diagnostic."""
        result = TitleExtractionStrategy("title\ntitle Real").apply()
        assert result.value == "Real"
        assert [d.line for d in result.errors] == [1]


class TestEvolutionLabelsStrategy:
    """Test evolution axis labels."""

    def test_four_labels_with_second_line(self):
        """& splits a stage into two label lines."""
        result = EvolutionLabelsExtractionStrategy("evolution A->B->C&(+x)->D").apply()
        assert [e.line1 for e in result.value] == ["A", "B", "C", "D"]
        assert result.value[2].line2 == "(+x)"

    def test_wrong_count_ignored(self):
        """Three stages are ignored without a diagnostic."""
        result = EvolutionLabelsExtractionStrategy("evolution A->B->C").apply()
        assert result.value == []
        assert result.errors == []

    def test_last_valid_line_wins(self):
        """A later valid line replaces an earlier one."""
        text = "evolution A->B->C->D\nevolution W->X->Y->Z\nevolution bad->line"
        result = EvolutionLabelsExtractionStrategy(text).apply()
        assert [e.line1 for e in result.value] == ["W", "X", "Y", "Z"]


class TestPresentationStrategy:
    """Test style, annotations and size."""

    def test_all_settings(self):
        """style, annotations and size are all read."""
        text = "style wardley\nannotations [0.72, 0.03]\nsize [800, 600]"
        result = PresentationExtractionStrategy(text).apply()
        assert result.value.style == "wardley"
        assert result.value.annotations.visibility == 0.72
        assert result.value.annotations.maturity == 0.03
        assert result.value.size.width == 800
        assert result.value.size.height == 600

    def test_last_style_wins(self):
        """The last style line is kept."""
        result = PresentationExtractionStrategy("style plain\nstyle handwritten").apply()
        assert result.value.style == "handwritten"

    def test_errors_in_line_order(self):
        """Diagnostics of different settings are sorted by line."""
        text = "size [abc, 1]\nannotations 0.3"
        result = PresentationExtractionStrategy(text).apply()
        assert [d.line for d in result.errors] == [1, 2]


class TestNoteStrategy:
    """Test notes."""

    def test_note(self):
        """Text and trailing position are read."""
        result = NoteExtractionStrategy("note Mind the gap [0.3, 0.4]").apply()
        assert result.value[0].text == "Mind the gap"
        assert result.value[0].visibility == 0.3
        assert result.value[0].maturity == 0.4

    def test_note_without_position(self):
        """A note needs a position."""
        result = NoteExtractionStrategy("note Mind the gap").apply()
        assert result.value == []
        assert result.errors[0].line == 1


class TestAnnotationStrategy:
    """Test annotations in both position forms."""

    def test_single_position(self):
        """annotation N [v, m] text."""
        result = AnnotationExtractionStrategy("annotation 2 [0.48, 0.85] Hot water").apply()
        annotation = result.value[0]
        assert annotation.number == 2
        assert annotation.text == "Hot water"
        assert len(annotation.occurrences) == 1

    def test_multiple_positions(self):
        """annotation N [[v, m], [v, m]] text gives several occurrences."""
        text = "annotation 1 [[0.43, 0.49], [0.08, 0.79]] Two places"
        annotation = AnnotationExtractionStrategy(text).apply().value[0]
        assert [(o.visibility, o.maturity) for o in annotation.occurrences] == [(0.43, 0.49), (0.08, 0.79)]
        assert annotation.text == "Two places"

    def test_fractional_number_rejected(self):
        """Annotation numbers must be whole."""
        result = AnnotationExtractionStrategy("annotation 1.5 [0.4, 0.4] Half").apply()
        assert result.value == []
        assert "whole" in result.errors[0].message

    def test_annotations_position_line_ignored(self):
        """The annotations setting is not an annotation."""
        result = AnnotationExtractionStrategy("annotations [0.72, 0.03]").apply()
        assert result.value == []
        assert result.errors == []


class TestComponentStrategy:
    """Test component / market / ecosystem lines."""

    def test_keywords(self):
        """Each keyword gives its own kind."""
        text = "component A [0.5, 0.5]\nmarket M [0.4, 0.4]\necosystem E [0.3, 0.3]"
        result = ComponentExtractionStrategy(text).apply()
        assert result.key == "elements"
        assert [(e.name, e.kind) for e in result.value] == [
            ("A", ElementKind.COMPONENT),
            ("M", ElementKind.MARKET),
            ("E", ElementKind.ECOSYSTEM),
        ]

    def test_pipeline_children_skipped(self):
        """Children inside a pipeline block are not top-level components."""
        text = "component Kettle [0.4, 0.3]\npipeline Kettle\n{\n  component Electric [0.6]\n}"
        result = ComponentExtractionStrategy(text).apply()
        assert [e.name for e in result.value] == ["Kettle"]
        assert result.errors == []

    def test_pipeline_children_skipped_without_new_pipelines(self):
        """Block lines are skipped even when blocks are not read."""
        text = "pipeline Kettle\n{\n  component Electric [0.6]\n}"
        switches = FeatureSwitches(enable_new_pipelines=False)
        result = ComponentExtractionStrategy(text, switches).apply()
        assert result.value == []

    def test_bad_line_reported_and_others_kept(self):
        """A malformed line costs only itself."""
        text = "component A [0.5, 0.5]\ncomponent B [x, 0.5]\ncomponent C [0.2, 0.2]"
        result = ComponentExtractionStrategy(text).apply()
        assert [e.name for e in result.value] == ["A", "C"]
        assert [d.line for d in result.errors] == [2]


class TestAnchorAndSubmapStrategies:
    """Test anchor and submap lines."""

    def test_anchor(self):
        """anchor lines give anchors."""
        result = AnchorExtractionStrategy("anchor User [0.95, 0.6]").apply()
        assert result.value[0].kind == ElementKind.ANCHOR

    def test_submap_with_url(self):
        """A submap keeps its url reference name."""
        result = SubMapExtractionStrategy("submap Staff [0.6, 0.45] url(staffUrl)").apply()
        assert result.value[0].kind == ElementKind.SUBMAP
        assert result.value[0].url == "staffUrl"


class TestPipelineStrategy:
    """Test both pipeline forms."""

    def test_block_form(self):
        """Children share the visibility of the same-named element."""
        text = (
            "component Kettle [0.43, 0.35]\n"
            "pipeline Kettle\n"
            "{\n"
            "  component Campfire [0.35] label [-60, 35]\n"
            "  component Electric [0.53]\n"
            "}"
        )
        pipeline = PipelineExtractionStrategy(text).apply().value[0]
        assert pipeline.name == "Kettle"
        assert pipeline.visibility == 0.43
        assert [(c.name, c.maturity, c.visibility) for c in pipeline.components] == [
            ("Campfire", 0.35, 0.43),
            ("Electric", 0.53, 0.43),
        ]
        assert pipeline.components[0].label.x == -60
        assert not pipeline.hidden

    def test_one_line_block(self):
        """Children written between braces on the header line are read."""
        text = "component K [0.5, 0.5]\npipeline K { component A [0.3] component B [0.6] label [1, 2] }"
        result = PipelineExtractionStrategy(text).apply()
        pipeline = result.value[0]
        assert [(c.name, c.maturity) for c in pipeline.components] == [("A", 0.3), ("B", 0.6)]
        assert pipeline.components[1].label.x == 1
        assert all(c.line == 2 for c in pipeline.components)
        assert result.errors == []

    def test_children_on_brace_lines(self):
        """A child may share a line with { or }."""
        text = "pipeline K\n{ component A [0.3]\n  component B [0.6]\n  component C [0.9] }"
        pipeline = PipelineExtractionStrategy(text).apply().value[0]
        assert [(c.name, c.line) for c in pipeline.components] == [("A", 2), ("B", 3), ("C", 4)]

    def test_legacy_range_form(self):
        """pipeline Name [m1, m2] keeps its declared range."""
        pipeline = PipelineExtractionStrategy("pipeline Kettle [0.2, 0.7]").apply().value[0]
        assert (pipeline.maturity1, pipeline.maturity2) == (0.2, 0.7)
        assert pipeline.components == []
        assert not pipeline.hidden

    def test_bare_pipeline_is_hidden(self):
        """Neither range nor block means hidden."""
        pipeline = PipelineExtractionStrategy("pipeline Kettle").apply().value[0]
        assert pipeline.hidden
        assert pipeline.visibility == 0.9

    def test_block_ignored_when_disabled(self):
        """With new pipelines off the block is not read."""
        text = "pipeline Kettle\n{\n  component Electric [0.53]\n}"
        switches = FeatureSwitches(enable_new_pipelines=False)
        pipeline = PipelineExtractionStrategy(text, switches).apply().value[0]
        assert pipeline.components == []
        assert pipeline.hidden

    def test_bad_child_reported(self):
        """A child with two coordinates is a diagnostic."""
        text = "pipeline Kettle\n{\n  component Electric [0.5, 0.5]\n  component Gas [0.2]\n}"
        result = PipelineExtractionStrategy(text).apply()
        assert [c.name for c in result.value[0].components] == ["Gas"]
        assert [d.line for d in result.errors] == [3]

    def test_bad_child_on_brace_line_reported(self):
        """A malformed child next to { is reported, not dropped."""
        text = "pipeline K\n{ component A\n}"
        result = PipelineExtractionStrategy(text).apply()
        assert result.value[0].components == []
        assert [d.line for d in result.errors] == [2]


class TestEvolveStrategy:
    """Test evolve lines."""

    def test_plain_evolve(self):
        """evolve Name maturity label [x, y]."""
        evolved = EvolveExtractionStrategy("evolve Power 0.89 label [-12, 21]").apply().value[0]
        assert evolved.name == "Power"
        assert evolved.maturity == 0.89
        assert evolved.override is None
        assert evolved.label.y == 21

    def test_override(self):
        """Name->Override renames only the projection."""
        evolved = EvolveExtractionStrategy("evolve Kettle->Electric Kettle 0.62").apply().value[0]
        assert evolved.name == "Kettle"
        assert evolved.override == "Electric Kettle"
        assert evolved.display_name == "Electric Kettle"

    def test_decorators(self):
        """Decorators on an evolve are kept."""
        evolved = EvolveExtractionStrategy("evolve Power 0.9 (outsource)").apply().value[0]
        assert evolved.decorators.outsource

    def test_missing_maturity(self):
        """An evolve needs a target maturity."""
        result = EvolveExtractionStrategy("evolve Power").apply()
        assert result.value == []
        assert result.errors[0].line == 1


class TestLinksStrategy:
    """Test link operators."""

    def parse_links(self, text, switches=None):
        return LinksExtractionStrategy(text, switches).apply().value

    def test_plain_link(self):
        """A->B is a structural link."""
        link = self.parse_links("Cup of Tea->Hot Water")[0]
        assert (link.start, link.end) == ("Cup of Tea", "Hot Water")
        assert not link.flow

    @pytest.mark.parametrize("operator,future,past", [
        ("+>", True, False),
        ("+<", False, True),
        ("+<>", True, True),
    ])
    def test_flow_directions(self, operator, future, past):
        """Each flow operator sets its direction flags."""
        link = self.parse_links(f"A{operator}B")[0]
        assert link.flow
        assert (link.future, link.past) == (future, past)
        assert (link.start, link.end) == ("A", "B")

    def test_flow_value(self):
        """A quoted value is kept on the flow."""
        link = self.parse_links("Suppliers+'bulk'>Tea")[0]
        assert link.flow_value == "bulk"
        assert link.future

    def test_context(self):
        """Text after ; is the link context."""
        link = self.parse_links("A->B; only when boiling")[0]
        assert link.end == "B"
        assert link.context == "only when boiling"

    def test_context_dropped_when_disabled(self):
        """With context off the text is removed from the end name and dropped."""
        link = self.parse_links("A->B; only when boiling", FeatureSwitches(enable_link_context=False))[0]
        assert link.end == "B"
        assert link.context is None

    def test_keyword_lines_are_not_links(self):
        """Reserved keyword lines are never links."""
        text = "evolve A->B 0.5\nevolution a->b->c->d\nbuild A"
        assert self.parse_links(text) == []

    def test_dangling_link_kept(self):
        """Links to undeclared names are kept verbatim."""
        links = self.parse_links("Ghost->Nowhere")
        assert [(l.start, l.end) for l in links] == [("Ghost", "Nowhere")]

    def test_line_numbers(self):
        """Line numbers are 1-based source lines."""
        links = self.parse_links("\nA->B\n\nC->D")
        assert [l.line for l in links] == [2, 4]


class TestUrlStrategy:
    """Test url declarations."""

    def test_url(self):
        """url name [address]."""
        url = UrlExtractionStrategy("url staffUrl [https://example.com/staff]").apply().value[0]
        assert url.name == "staffUrl"
        assert url.url == "https://example.com/staff"

    def test_url_without_address(self):
        """A url needs an address."""
        result = UrlExtractionStrategy("url staffUrl").apply()
        assert result.value == []
        assert result.errors[0].line == 1


class TestKeywordStrategyRunner:
    """Test the shared keyword runner."""

    def test_corner_and_size(self):
        """[v, m] width height."""
        elements, errors = KeywordStrategyRunner("pioneers [0.9, 0.05] 120 40", "pioneers").apply()
        assert errors == []
        assert (elements[0].width, elements[0].height) == (120, 40)

    def test_four_corner_form(self):
        """[v1, m1, v2, m2] sets the second corner."""
        elements, _ = KeywordStrategyRunner("settlers [0.5, 0.4, 0.3, 0.6]", "settlers").apply()
        assert (elements[0].visibility2, elements[0].maturity2) == (0.3, 0.6)

    def test_required_name(self):
        """A missing required name is a diagnostic."""
        _, errors = KeywordStrategyRunner("accelerator [0.3, 0.4]", "accelerator", require_name=True).apply()
        assert "Missing accelerator name" in errors[0].message

    def test_too_many_size_numbers(self):
        """At most width and height may follow the coordinates."""
        _, errors = KeywordStrategyRunner("pioneers [0.9, 0.05] 1 2 3", "pioneers").apply()
        assert errors[0].line == 1


class TestForceStrategies:
    """Test attitudes, accelerators and methods."""

    def test_attitudes_in_line_order(self):
        """Attitudes of different keywords keep source order."""
        text = "settlers [0.5, 0.4] 10 10\npioneers [0.9, 0.1] 10 10\ntownplanners [0.2, 0.8] 10 10"
        result = AttitudeExtractionStrategy(text).apply()
        assert [a.attitude for a in result.value] == ["settlers", "pioneers", "townplanners"]

    def test_accelerators(self):
        """deaccelerator sets the flag, accelerator does not."""
        text = "deaccelerator Habit [0.7, 0.7]\naccelerator Regulation [0.3, 0.4]"
        result = AcceleratorExtractionStrategy(text).apply()
        assert [(a.name, a.deaccelerator) for a in result.value] == [("Habit", True), ("Regulation", False)]

    def test_accelerators_disabled(self):
        """Disabled accelerators give an empty result."""
        switches = FeatureSwitches(enable_accelerators=False)
        result = AcceleratorExtractionStrategy("accelerator Regulation [0.3, 0.4]", switches).apply()
        assert result.value == []
        assert result.errors == []

    def test_methods(self):
        """Each method keyword sets its own decorator."""
        result = MethodExtractionStrategy("build Tea\nbuy Cup\noutsource Power").apply()
        assert [(m.name, m.decorators.build, m.decorators.buy, m.decorators.outsource) for m in result.value] == [
            ("Tea", True, False, False),
            ("Cup", False, True, False),
            ("Power", False, False, True),
        ]

    def test_method_without_target(self):
        """A method keyword needs a name."""
        result = MethodExtractionStrategy("build").apply()
        assert result.value == []
        assert result.errors[0].line == 1
