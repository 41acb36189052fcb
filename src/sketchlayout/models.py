from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union


# ── Geometry ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in canvas space (origin top-left, pixels)."""

    x0: float
    y0: float
    x1: float
    y1: float

    @classmethod
    def from_xywh(cls, x: float, y: float, w: float, h: float) -> "Rect":
        return cls(x, y, x + w, y + h)

    def width(self) -> float:
        """Horizontal extent in pixels."""
        return self.x1 - self.x0

    def height(self) -> float:
        """Vertical extent in pixels."""
        return self.y1 - self.y0

    def area(self) -> float:
        """Area in square pixels, clamped to zero."""
        return max(0.0, self.width()) * max(0.0, self.height())

    def bbox(self) -> Tuple[float, float, float, float]:
        """Bounding box as ``(x0, y0, x1, y1)``."""
        return (self.x0, self.y0, self.x1, self.y1)

    def mid_x(self) -> float:
        return (self.x0 + self.x1) * 0.5

    def mid_y(self) -> float:
        return (self.y0 + self.y1) * 0.5

    def center(self) -> Tuple[float, float]:
        return (self.mid_x(), self.mid_y())

    def aspect_ratio(self) -> float:
        """Width over height; ``0.0`` for degenerate rectangles."""
        h = self.height()
        return self.width() / h if h > 0 else 0.0

    def intersection_area(self, other: "Rect") -> float:
        iw = min(self.x1, other.x1) - max(self.x0, other.x0)
        ih = min(self.y1, other.y1) - max(self.y0, other.y0)
        if iw <= 0 or ih <= 0:
            return 0.0
        return iw * ih

    def edge_distance(self, other: "Rect") -> float:
        """Edge-to-edge distance; zero when the rectangles touch or overlap."""
        dx = max(0.0, other.x0 - self.x1, self.x0 - other.x1)
        dy = max(0.0, other.y0 - self.y1, self.y0 - other.y1)
        return (dx * dx + dy * dy) ** 0.5

    def union(self, other: "Rect") -> "Rect":
        return Rect(
            min(self.x0, other.x0),
            min(self.y0, other.y0),
            max(self.x1, other.x1),
            max(self.y1, other.y1),
        )

    def matches(self, other: "Rect", tolerance: float) -> bool:
        """True when every edge lies within *tolerance* of *other*'s."""
        return (
            abs(self.x0 - other.x0) <= tolerance
            and abs(self.y0 - other.y0) <= tolerance
            and abs(self.x1 - other.x1) <= tolerance
            and abs(self.y1 - other.y1) <= tolerance
        )

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "x0": round(self.x0, 3),
            "y0": round(self.y0, 3),
            "x1": round(self.x1, 3),
            "y1": round(self.y1, 3),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Rect":
        """Deserialize from a dict produced by :meth:`to_dict`."""
        return cls(x0=d["x0"], y0=d["y0"], x1=d["x1"], y1=d["y1"])


def bounding_rect(rects: List[Rect]) -> Rect:
    """Union of *rects*; ``Rect(0, 0, 0, 0)`` when empty."""
    if not rects:
        return Rect(0.0, 0.0, 0.0, 0.0)
    return Rect(
        min(r.x0 for r in rects),
        min(r.y0 for r in rects),
        max(r.x1 for r in rects),
        max(r.y1 for r in rects),
    )


@dataclass(frozen=True)
class NormalizedRect:
    """Detector-space rectangle: fractions of the image, origin bottom-left."""

    x: float
    y: float
    width: float
    height: float

    def max_y(self) -> float:
        return self.y + self.height

    def area(self) -> float:
        return max(0.0, self.width) * max(0.0, self.height)


# ── Detector observations ──────────────────────────────────────────────


@dataclass(frozen=True)
class RawObservation:
    """A rectangle reported by the shape detector."""

    rect: NormalizedRect
    confidence: float


@dataclass(frozen=True)
class TextObservation:
    """A recognised text fragment reported by the text detector."""

    text: str
    rect: NormalizedRect


@dataclass(frozen=True)
class Annotation:
    """User-written text matched to components by positional overlap."""

    text: str
    position: Rect

    def to_dict(self) -> dict:
        return {"text": self.text, "position": self.position.to_dict()}


# ── Pattern signals ────────────────────────────────────────────────────


class PatternType(str, Enum):
    """Sketching conventions the pattern recognizer can report."""

    hamburger_menu = "hamburger_menu"
    image_placeholder = "image_placeholder"
    form_field = "form_field"
    checkbox = "checkbox"
    radio_button = "radio_button"
    icon_symbol = "icon_symbol"
    card_with_elements = "card_with_elements"
    text_lines = "text_lines"
    dropdown_arrow = "dropdown_arrow"
    button_icon = "button_icon"
    progress_bar = "progress_bar"
    tab_indicator = "tab_indicator"


PATTERN_DISPLAY_NAMES: Dict[PatternType, str] = {
    PatternType.hamburger_menu: "Hamburger Menu",
    PatternType.image_placeholder: "Image Placeholder",
    PatternType.form_field: "Form Field",
    PatternType.checkbox: "Checkbox",
    PatternType.radio_button: "Radio Button",
    PatternType.icon_symbol: "Icon",
    PatternType.card_with_elements: "Card with Elements",
    PatternType.text_lines: "Text Lines",
    PatternType.dropdown_arrow: "Dropdown Arrow",
    PatternType.button_icon: "Button Icon",
    PatternType.progress_bar: "Progress Bar",
    PatternType.tab_indicator: "Tab Indicator",
}


@dataclass(frozen=True)
class SketchedPattern:
    """A confidence-scored hint that a region follows a UI sketch convention."""

    id: str
    type: PatternType
    bounding_box: Rect
    confidence: float
    associated_rectangle: Optional[Rect] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "bounding_box": self.bounding_box.to_dict(),
            "confidence": round(self.confidence, 4),
            "associated_rectangle": (
                self.associated_rectangle.to_dict()
                if self.associated_rectangle is not None
                else None
            ),
        }


# ── Component taxonomy ─────────────────────────────────────────────────


class UIComponentType(str, Enum):
    """Fixed taxonomy of UI elements used for classification and code generation."""

    alert = "alert"
    badge = "badge"
    breadcrumb = "breadcrumb"
    button = "button"
    button_group = "button_group"
    carousel = "carousel"
    collapse = "collapse"
    dropdown = "dropdown"
    form = "form"
    form_control = "form_control"
    icon = "icon"
    image = "image"
    label = "label"
    list_group = "list_group"
    media_object = "media_object"
    modal = "modal"
    navbar = "navbar"
    navs = "navs"
    pagination = "pagination"
    progress_bar = "progress_bar"
    table = "table"
    tab = "tab"
    textarea = "textarea"
    thumbnail = "thumbnail"
    tooltip = "tooltip"
    well = "well"
    container = "container"


UI_DISPLAY_NAMES: Dict[UIComponentType, str] = {
    UIComponentType.alert: "Alert",
    UIComponentType.badge: "Badge",
    UIComponentType.breadcrumb: "Breadcrumb",
    UIComponentType.button: "Button",
    UIComponentType.button_group: "Button Group",
    UIComponentType.carousel: "Carousel",
    UIComponentType.collapse: "Collapse",
    UIComponentType.dropdown: "Dropdown",
    UIComponentType.form: "Form",
    UIComponentType.form_control: "Form Control",
    UIComponentType.icon: "Icon",
    UIComponentType.image: "Image",
    UIComponentType.label: "Label",
    UIComponentType.list_group: "List Group",
    UIComponentType.media_object: "Media Object",
    UIComponentType.modal: "Modal",
    UIComponentType.navbar: "Navigation Bar",
    UIComponentType.navs: "Navigation",
    UIComponentType.pagination: "Pagination",
    UIComponentType.progress_bar: "Progress Bar",
    UIComponentType.table: "Table",
    UIComponentType.tab: "Tab",
    UIComponentType.textarea: "Text Area",
    UIComponentType.thumbnail: "Thumbnail",
    UIComponentType.tooltip: "Tooltip",
    UIComponentType.well: "Well",
    UIComponentType.container: "Container",
}

# UI kind each pattern stands for when group rules test type classes.
PATTERN_UI_EQUIVALENTS: Dict[PatternType, UIComponentType] = {
    PatternType.hamburger_menu: UIComponentType.navbar,
    PatternType.image_placeholder: UIComponentType.image,
    PatternType.form_field: UIComponentType.form_control,
    PatternType.checkbox: UIComponentType.form_control,
    PatternType.radio_button: UIComponentType.form_control,
    PatternType.icon_symbol: UIComponentType.icon,
    PatternType.card_with_elements: UIComponentType.media_object,
    PatternType.text_lines: UIComponentType.label,
    PatternType.dropdown_arrow: UIComponentType.dropdown,
    PatternType.button_icon: UIComponentType.button,
    PatternType.progress_bar: UIComponentType.progress_bar,
    PatternType.tab_indicator: UIComponentType.tab,
}


@dataclass(frozen=True)
class ComponentType:
    """Tagged union: a taxonomy kind (``"ui"``) or a raw pattern kind (``"pattern"``)."""

    kind: str
    value: Union[UIComponentType, PatternType]

    @classmethod
    def ui(cls, value: UIComponentType) -> "ComponentType":
        return cls(kind="ui", value=value)

    @classmethod
    def pattern(cls, value: PatternType) -> "ComponentType":
        return cls(kind="pattern", value=value)

    @property
    def display_name(self) -> str:
        if self.kind == "pattern":
            return PATTERN_DISPLAY_NAMES[self.value]  # type: ignore[index]
        return UI_DISPLAY_NAMES[self.value]  # type: ignore[index]

    def ui_equivalent(self) -> UIComponentType:
        """Taxonomy kind used when testing group-rule type classes."""
        if self.kind == "pattern":
            return PATTERN_UI_EQUIVALENTS[self.value]  # type: ignore[index]
        return self.value  # type: ignore[return-value]

    def __str__(self) -> str:
        return self.value.value

    def to_dict(self) -> dict:
        return {"kind": self.kind, "value": self.value.value}


@dataclass(frozen=True)
class DetectedComponent:
    """One classified, labeled UI element; treated as a value downstream."""

    id: str
    rect: Rect
    type: ComponentType
    label: str

    def with_rect(self, rect: Rect) -> "DetectedComponent":
        return replace(self, rect=rect)

    def with_label(self, label: str) -> "DetectedComponent":
        return replace(self, label=label)

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "id": self.id,
            "rect": self.rect.to_dict(),
            "type": self.type.to_dict(),
            "label": self.label,
        }


# ── Layout groups ──────────────────────────────────────────────────────


class GroupType(str, Enum):
    """Semantic role of a layout group."""

    header = "header"
    navigation = "navigation"
    hero_section = "hero_section"
    card_grid = "card_grid"
    form_section = "form_section"
    button_group = "button_group"
    footer = "footer"
    standalone = "standalone"


GROUP_DISPLAY_NAMES: Dict[GroupType, str] = {
    GroupType.header: "Header",
    GroupType.navigation: "Navigation",
    GroupType.hero_section: "Hero Section",
    GroupType.card_grid: "Card Grid",
    GroupType.form_section: "Form Section",
    GroupType.button_group: "Button Group",
    GroupType.footer: "Footer",
    GroupType.standalone: "Standalone",
}


class FlexDirection(str, Enum):
    row = "row"
    column = "column"
    grid = "grid"


DIRECTION_DISPLAY_NAMES: Dict[FlexDirection, str] = {
    FlexDirection.row: "horizontal",
    FlexDirection.column: "vertical",
    FlexDirection.grid: "grid",
}


class Alignment(str, Enum):
    start = "start"
    center = "center"
    end = "end"
    space_between = "space_between"
    space_around = "space_around"


ALIGNMENT_CSS: Dict[Alignment, str] = {
    Alignment.start: "flex-start",
    Alignment.center: "center",
    Alignment.end: "flex-end",
    Alignment.space_between: "space-between",
    Alignment.space_around: "space-around",
}


@dataclass
class LayoutGroup:
    """Components sharing one row/cluster and a single layout rule."""

    id: str
    type: GroupType
    components: List[DetectedComponent] = field(default_factory=list)
    direction: FlexDirection = FlexDirection.column
    alignment: Alignment = Alignment.start
    spacing: float = 0.0
    bounding_rect: Rect = field(default_factory=lambda: Rect(0.0, 0.0, 0.0, 0.0))

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "id": self.id,
            "type": self.type.value,
            "direction": self.direction.value,
            "alignment": self.alignment.value,
            "spacing": round(self.spacing, 3),
            "bounding_rect": self.bounding_rect.to_dict(),
            "components": [c.id for c in self.components],
        }
