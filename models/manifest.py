from dataclasses import dataclass, field
from typing import Dict, List

from models.tokens import OrderedTokenSet

# Origin-set fields shared by every collector, in merge order
ORIGIN_FIELDS = (
    "external_script_origins",
    "external_style_origins",
    "image_origins",
    "font_origins",
    "connect_origins",
)


@dataclass
class DataUriCounts:
    """Informational counters for data: resources. Never used for directives."""
    scripts: int = 0
    images: int = 0
    styles: int = 0

    def add(self, other: "DataUriCounts") -> None:
        self.scripts += other.scripts
        self.images += other.images
        self.styles += other.styles

    def to_dict(self) -> Dict[str, int]:
        return {"scripts": self.scripts, "images": self.images, "styles": self.styles}


@dataclass(eq=False)
class ResourceManifest:
    """Resources discovered on one or more pages.

    Append-only while collecting. Inline code keeps every occurrence in
    document order; origins are unique. Equality compares inline code in
    order and origins as sets, so merge order of origins does not matter.
    """
    inline_scripts: List[str] = field(default_factory=list)
    inline_styles: List[str] = field(default_factory=list)
    external_script_origins: OrderedTokenSet = field(default_factory=OrderedTokenSet)
    external_style_origins: OrderedTokenSet = field(default_factory=OrderedTokenSet)
    image_origins: OrderedTokenSet = field(default_factory=OrderedTokenSet)
    font_origins: OrderedTokenSet = field(default_factory=OrderedTokenSet)
    connect_origins: OrderedTokenSet = field(default_factory=OrderedTokenSet)
    data_uri_counts: DataUriCounts = field(default_factory=DataUriCounts)

    def merge(self, other: "ResourceManifest") -> "ResourceManifest":
        """Fold another manifest into this one in place and return self.

        Inline sequences are concatenated, origin sets unioned and data URI
        counters summed.
        """
        self.inline_scripts.extend(other.inline_scripts)
        self.inline_styles.extend(other.inline_styles)
        for name in ORIGIN_FIELDS:
            getattr(self, name).update(getattr(other, name))
        self.data_uri_counts.add(other.data_uri_counts)
        return self

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResourceManifest):
            return NotImplemented
        if self.inline_scripts != other.inline_scripts or self.inline_styles != other.inline_styles:
            return False
        if self.data_uri_counts != other.data_uri_counts:
            return False
        return all(set(getattr(self, name)) == set(getattr(other, name)) for name in ORIGIN_FIELDS)

    def origin_count(self) -> int:
        return sum(len(getattr(self, name)) for name in ORIGIN_FIELDS)

    def to_dict(self) -> Dict[str, object]:
        data: Dict[str, object] = {
            "inline_scripts": list(self.inline_scripts),
            "inline_styles": list(self.inline_styles),
        }
        for name in ORIGIN_FIELDS:
            data[name] = getattr(self, name).as_list()
        data["data_uri_counts"] = self.data_uri_counts.to_dict()
        return data
