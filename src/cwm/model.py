"""
Core Wardley Map Model Objects

Defines the fundamental data structures of the Canonical Wardley Map.

These are pure data classes representing:
    - Elements (components, anchors, submaps, markets, ecosystems)
    - Links (dependencies between elements, by name)
    - Evolved elements (projected future positions)
    - Pipelines (groups of interchangeable variants)
    - Annotations, notes, attitudes, accelerators, urls
    - WardleyMap (root container)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about SVG, geometry or themes
        - Are built fresh by every parse
        - Are fully serializable
        - Represent structure, not behavior
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


DEFAULT_TITLE = "Untitled Map"

# A component written without a position is "just sketched" here.
DEFAULT_MATURITY = 0.1
DEFAULT_VISIBILITY = 0.9

# Extent used for a pipeline that has no children to measure.
DEFAULT_PIPELINE_EXTENT = (0.2, 0.8)


class ElementKind(Enum):
    """
    Classification of a positioned element.

    In the canonical map each kind has its own collection and an element
    belongs to exactly one of them.
    """
    COMPONENT = "component"
    ANCHOR = "anchor"
    SUBMAP = "submap"
    MARKET = "market"
    ECOSYSTEM = "ecosystem"


@dataclass
class LabelOffset:
    """Offset of an element label from its marker, in pixels."""
    x: float = 5
    y: float = -10


@dataclass
class Decorators:
    """
    Sourcing and role annotations attached to an element.

    Flags are independent: nothing here enforces that an element is
    bought OR built. Writing (buy) sets buy and nothing else.
    """

    ecosystem: bool = False
    market: bool = False
    buy: bool = False
    build: bool = False
    outsource: bool = False


@dataclass
class MapElement:
    """
    A positioned element (the common shape produced by most strategies).

    Properties:
        name:
            Display name, also the key links and evolutions refer to

        kind:
            Declaration keyword the element was written with. The
            unification layer may reclassify it from its decorators.

        maturity:
            Horizontal position, genesis (0) to commodity (1)

        visibility:
            Vertical position, invisible (0) to user-facing (1)

        decorators:
            None in the legacy record when nothing was written;
            always set in the canonical map

        url:
            Name of a `url` declaration (submaps), not the address itself

        evolving / evolve_maturity:
            Set by unification when an `evolve` names this element

        pipeline:
            Set by unification when a pipeline of the same name exists

    IMPORTANT:
        Coordinates are NOT clamped. Values outside [0, 1] are kept and
        simply extrapolate off the map.
    """

    name: str
    kind: ElementKind = ElementKind.COMPONENT
    maturity: float = DEFAULT_MATURITY
    visibility: float = DEFAULT_VISIBILITY
    label: LabelOffset = field(default_factory=LabelOffset)
    line: Optional[int] = None
    decorators: Optional[Decorators] = None
    inertia: bool = False
    pseudo: bool = False
    url: Optional[str] = None
    evolving: bool = False
    evolve_maturity: Optional[float] = None
    pipeline: bool = False


@dataclass
class Link:
    """
    Directed dependency between two elements, stored by name.

    ARCHITECTURAL RULE:
        Links are never validated against existing elements at parse
        time. A link naming an element that does not exist is kept
        verbatim; resolution happens in the consumer.

    Properties:
        flow: material flow (`+>`, `+<`, `+<>`) rather than structure (`->`)
        future / past: direction of the flow arrow
        context: trailing `; text`, only when link context is enabled
        flow_value: quoted value of a `+'value'>` flow
    """

    start: str
    end: str
    flow: bool = False
    future: bool = False
    past: bool = False
    context: Optional[str] = None
    flow_value: Optional[str] = None
    line: Optional[int] = None


@dataclass
class EvolvedElement:
    """
    Projected future position of an existing element.

    `name` is the ORIGINAL element name (used for link resolution);
    `override` is the optional display name of the projection. The
    visibility is inherited from the source element and is not stored.
    """

    name: str
    maturity: float
    override: Optional[str] = None
    label: LabelOffset = field(default_factory=LabelOffset)
    line: Optional[int] = None
    decorators: Optional[Decorators] = None

    @property
    def display_name(self) -> str:
        return self.override or self.name


@dataclass
class PipelineComponent:
    """A variant inside a pipeline; it shares the pipeline's visibility."""
    name: str
    maturity: float
    visibility: float = DEFAULT_VISIBILITY
    label: LabelOffset = field(default_factory=LabelOffset)
    line: Optional[int] = None


@dataclass
class Pipeline:
    """
    Groups interchangeable variants of one value chain position.

    Properties:
        maturity1 / maturity2:
            Min and max maturity among the children, computed by the
            unification layer. In the legacy record they only hold a
            declared range from the `pipeline Name [m1, m2]` form.

        hidden:
            True for a bare `pipeline Name` with neither range nor block
    """

    name: str
    visibility: float = DEFAULT_VISIBILITY
    components: List[PipelineComponent] = field(default_factory=list)
    maturity1: Optional[float] = None
    maturity2: Optional[float] = None
    hidden: bool = False
    inertia: bool = False
    line: Optional[int] = None


@dataclass
class AnnotationOccurrence:
    visibility: float
    maturity: float


@dataclass
class Annotation:
    """A numbered annotation marking one or more positions on the map."""
    number: int
    text: str
    occurrences: List[AnnotationOccurrence] = field(default_factory=list)
    line: Optional[int] = None


@dataclass
class Note:
    text: str
    visibility: float
    maturity: float
    line: Optional[int] = None


@dataclass
class Url:
    """A named address that submaps reference with url(name)."""
    name: str
    url: str
    line: Optional[int] = None


@dataclass
class Attitude:
    """
    A pioneers / settlers / townplanners region.

    Written either as a corner plus size (`[v, m] width height`) or as
    two corners (`[v1, m1, v2, m2]`).
    """

    attitude: str
    visibility: float
    maturity: float
    visibility2: Optional[float] = None
    maturity2: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    line: Optional[int] = None


@dataclass
class Accelerator:
    """A point force; `deaccelerator` is set by the keyword alone."""
    name: str
    visibility: float
    maturity: float
    deaccelerator: bool = False
    line: Optional[int] = None


@dataclass
class Method:
    """A standalone `build X` / `buy X` / `outsource X` statement."""
    name: str
    decorators: Decorators = field(default_factory=Decorators)
    line: Optional[int] = None


@dataclass
class EvolutionLabel:
    line1: str
    line2: str = ""


DEFAULT_EVOLUTION_LABELS = (
    ("Genesis", ""),
    ("Custom-Built", ""),
    ("Product", "(+rental)"),
    ("Commodity", "(+utility)"),
)


def default_evolution_labels() -> List[EvolutionLabel]:
    return [EvolutionLabel(line1, line2) for line1, line2 in DEFAULT_EVOLUTION_LABELS]


@dataclass
class Point:
    visibility: float = 0
    maturity: float = 0


@dataclass
class Size:
    width: float = 0
    height: float = 0


@dataclass
class Presentation:
    """Map-wide presentation settings (`style`, `annotations`, `size`)."""
    style: str = ""
    annotations: Point = field(default_factory=Point)
    size: Size = field(default_factory=Size)


@dataclass
class Diagnostic:
    """
    A recorded parse problem.

    Diagnostics are appended, never raised. The line the diagnostic names
    contributed nothing to the model.
    """

    line: int
    message: str


@dataclass
class WardleyMap:
    """
    Root container for the canonical map.

    This is THE primary artifact crossing into rendering. Everything the
    renderer draws MUST be derivable from this object alone.

    INVARIANTS:
        - Every collection is a list (possibly empty), never None
        - components / anchors / submaps / markets / ecosystems are disjoint
        - Every element carries a Decorators value
        - evolution holds exactly four labels
        - Link endpoints are NOT guaranteed to name an element

    The map is a plain value owned by whoever called parse(); no stage of
    the pipeline keeps a reference to it.
    """

    title: str = DEFAULT_TITLE
    presentation: Presentation = field(default_factory=Presentation)
    evolution: List[EvolutionLabel] = field(default_factory=default_evolution_labels)
    components: List[MapElement] = field(default_factory=list)
    anchors: List[MapElement] = field(default_factory=list)
    submaps: List[MapElement] = field(default_factory=list)
    markets: List[MapElement] = field(default_factory=list)
    ecosystems: List[MapElement] = field(default_factory=list)
    evolved: List[EvolvedElement] = field(default_factory=list)
    pipelines: List[Pipeline] = field(default_factory=list)
    links: List[Link] = field(default_factory=list)
    annotations: List[Annotation] = field(default_factory=list)
    notes: List[Note] = field(default_factory=list)
    methods: List[Method] = field(default_factory=list)
    urls: List[Url] = field(default_factory=list)
    attitudes: List[Attitude] = field(default_factory=list)
    accelerators: List[Accelerator] = field(default_factory=list)
    errors: List[Diagnostic] = field(default_factory=list)

    def all_elements(self) -> List[MapElement]:
        """All positioned elements, in collection order."""
        return [
            *self.components,
            *self.anchors,
            *self.submaps,
            *self.markets,
            *self.ecosystems,
        ]

    def get_element(self, name: str) -> Optional[MapElement]:
        """
        Retrieve the first positioned element with this name.

        Args:
            name: Element name

        Returns:
            MapElement or None if not found
        """
        for element in self.all_elements():
            if element.name == name:
                return element
        return None

    def get_pipeline(self, name: str) -> Optional[Pipeline]:
        for pipeline in self.pipelines:
            if pipeline.name == name:
                return pipeline
        return None

    def get_url(self, name: str) -> Optional[Url]:
        for url in self.urls:
            if url.name == name:
                return url
        return None
