"""
Widget catalog: the read-only set of optional panels a user can add.

The catalog is supplied by the environment. The session engine looks entries
up by type tag and never mutates them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, Iterator, List, Optional

import config


class WidgetSize(Enum):
    """Display size of a widget in the overview grid."""
    SMALL = config.WIDGET_SIZE_SMALL
    MEDIUM = config.WIDGET_SIZE_MEDIUM
    LARGE = config.WIDGET_SIZE_LARGE

    @property
    def height(self) -> int:
        """Rendered height in pixels."""
        return config.WIDGET_HEIGHTS[self.value]


@dataclass(frozen=True)
class WidgetDescriptor:
    """
    A catalog entry.

    Attributes:
        type: Unique type tag (also the persisted key).
        title: Human-readable name shown in the customizer.
        size: Default display size.
        factory: Zero-argument callable that builds a widget instance.
            Never serialized.
        description: One-line blurb for the customizer.
    """
    type: str
    title: str
    size: WidgetSize
    factory: Callable[[], object]
    description: str = ""


class WidgetCatalog:
    """Read-only lookup of widget descriptors keyed by type tag."""

    def __init__(self, descriptors: Iterable[WidgetDescriptor]):
        """
        Build the catalog.

        Args:
            descriptors: Catalog entries; order is kept for display.

        Raises:
            ValueError: If two entries share a type tag.
        """
        self._entries: Dict[str, WidgetDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.type in self._entries:
                raise ValueError(f"Duplicate widget type in catalog: {descriptor.type!r}")
            self._entries[descriptor.type] = descriptor

    def get(self, widget_type: str) -> Optional[WidgetDescriptor]:
        """Look up a descriptor, or None if the type is unknown."""
        return self._entries.get(widget_type)

    def types(self) -> List[str]:
        return list(self._entries)

    def __contains__(self, widget_type: object) -> bool:
        return widget_type in self._entries

    def __iter__(self) -> Iterator[WidgetDescriptor]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)
