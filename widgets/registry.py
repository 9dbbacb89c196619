"""
Widget registry: the user's chosen subset of catalog widgets.

The active set is rehydrated once at startup and written through to disk
after every mutation. Only {id, type, size} is persisted; widget factories
are re-attached on load by joining on type against the live catalog, and
records whose type is no longer in the catalog are dropped.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import config
from core.errors import PersistenceError, UnresolvableWidget
from core.storage import MISSING, read_json, write_json_atomic
from widgets.catalog import WidgetCatalog, WidgetDescriptor, WidgetSize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActiveWidget:
    """A widget the user added to their overview."""
    id: str
    type: str
    size: WidgetSize

    def to_dict(self) -> Dict[str, str]:
        """Serializable form (no factory)."""
        return {"id": self.id, "type": self.type, "size": self.size.value}


class WidgetRegistryManager:
    """
    Owns the active widget set and its persistence.

    Persistence failures never roll back the in-memory set: the UI keeps
    showing what the user asked for, and the caller gets a PersistenceError
    to surface as a warning.
    """

    def __init__(self, catalog: WidgetCatalog, storage_path: Optional[Path] = None):
        """
        Initialize the registry.

        Args:
            catalog: Widget catalog to resolve type tags against.
            storage_path: JSON file for the active set (default: config.WIDGETS_FILE)
        """
        self.catalog = catalog
        self.storage_path = storage_path or config.WIDGETS_FILE
        self._widgets: List[ActiveWidget] = []
        self.persistence_degraded = False  # True while the last write failed

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> List[ActiveWidget]:
        """
        Restore the active set from storage.

        Missing or corrupt storage yields an empty set. Malformed records,
        duplicate ids and unresolvable types are skipped.

        Returns:
            The restored active widgets.
        """
        data = read_json(self.storage_path)
        widgets: List[ActiveWidget] = []

        if data is MISSING:
            logger.debug("No stored widgets found")
        elif not isinstance(data, list):
            logger.warning(f"Ignoring widget storage: expected a list, got {type(data).__name__}")
        else:
            seen_ids = set()
            for record in data:
                widget = self._record_to_widget(record)
                if widget is None:
                    continue
                if widget.id in seen_ids:
                    logger.warning(f"Skipping duplicate widget id: {widget.id}")
                    continue
                seen_ids.add(widget.id)
                widgets.append(widget)

        self._widgets = widgets
        logger.info(f"Loaded {len(widgets)} active widget(s)")
        return list(widgets)

    def _record_to_widget(self, record: Any) -> Optional[ActiveWidget]:
        """Convert a stored record, or None if it cannot be used."""
        if not isinstance(record, dict):
            logger.debug(f"Skipping malformed widget record: {record!r}")
            return None

        widget_id = record.get("id")
        widget_type = record.get("type")
        if not isinstance(widget_id, str) or not isinstance(widget_type, str):
            logger.debug(f"Skipping widget record without id/type: {record!r}")
            return None

        descriptor = self.catalog.get(widget_type)
        if descriptor is None:
            logger.debug(f"Dropping unresolvable widget {widget_id} (type {widget_type!r})")
            return None

        try:
            size = WidgetSize(record.get("size"))
        except ValueError:
            size = descriptor.size

        return ActiveWidget(id=widget_id, type=widget_type, size=size)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(
        self,
        widget_type: str,
        size: Optional[Union[WidgetSize, str]] = None,
        now: Optional[datetime] = None,
    ) -> ActiveWidget:
        """
        Add a new widget of the given catalog type and persist the set.

        Args:
            widget_type: Catalog type tag.
            size: Size override (WidgetSize or its value). Defaults to the
                descriptor's size.
            now: Creation time used for the id (defaults to now).

        Returns:
            The new active widget.

        Raises:
            UnresolvableWidget: If widget_type is not in the catalog.
            ValueError: If size is not a valid widget size.
            PersistenceError: If the write failed. The widget was still added.
        """
        descriptor = self.catalog.get(widget_type)
        if descriptor is None:
            raise UnresolvableWidget(widget_type)

        if size is None:
            widget_size = descriptor.size
        else:
            widget_size = size if isinstance(size, WidgetSize) else WidgetSize(size)

        widget = ActiveWidget(
            id=self._generate_id(widget_type, now or datetime.now()),
            type=widget_type,
            size=widget_size,
        )
        self._widgets.append(widget)
        logger.info(f"Added widget {widget.id} ({widget_size.value})")

        self._persist()
        return widget

    def remove(self, widget_id: str) -> bool:
        """
        Remove a widget by id and persist the set.

        Removing an id that is not present is a no-op (still persisted).

        Returns:
            True if a widget was removed.

        Raises:
            PersistenceError: If the write failed. The removal still applies.
        """
        before = len(self._widgets)
        self._widgets = [w for w in self._widgets if w.id != widget_id]
        removed = len(self._widgets) != before

        if removed:
            logger.info(f"Removed widget {widget_id}")
        else:
            logger.debug(f"Remove ignored, no widget with id {widget_id}")

        self._persist()
        return removed

    def clear(self) -> None:
        """Remove every active widget and persist the empty set."""
        self._widgets = []
        logger.info("Cleared all widgets")
        self._persist()

    def _generate_id(self, widget_type: str, created_at: datetime) -> str:
        """Id from type and creation time in ms; bumped until unique."""
        millis = int(created_at.timestamp() * 1000)
        existing = {w.id for w in self._widgets}
        candidate = f"{widget_type}-{millis}"
        while candidate in existing:
            millis += 1
            candidate = f"{widget_type}-{millis}"
        return candidate

    def _persist(self) -> None:
        """Write the full set through to storage."""
        records = [w.to_dict() for w in self._widgets]
        try:
            write_json_atomic(self.storage_path, records, prefix="widgets_")
        except (IOError, OSError, TypeError, ValueError) as e:
            self.persistence_degraded = True
            logger.error(f"Failed to save widgets: {e}")
            raise PersistenceError(f"Widgets could not be saved: {e}") from e

        if self.persistence_degraded:
            logger.info("Widget storage writable again")
        self.persistence_degraded = False
        logger.debug(f"Saved {len(records)} widget(s)")

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def active_widgets(self) -> List[ActiveWidget]:
        return list(self._widgets)

    def available_widgets(self) -> List[WidgetDescriptor]:
        """Catalog entries a customizer can offer."""
        return list(self.catalog)

    def get(self, widget_id: str) -> Optional[ActiveWidget]:
        for widget in self._widgets:
            if widget.id == widget_id:
                return widget
        return None

    def resolved(self) -> List[Tuple[ActiveWidget, WidgetDescriptor]]:
        """Active widgets paired with their catalog descriptors, in display order."""
        pairs = []
        for widget in self._widgets:
            descriptor = self.catalog.get(widget.type)
            if descriptor is not None:
                pairs.append((widget, descriptor))
        return pairs

    def instantiate(self, widget_id: str) -> object:
        """
        Build a live widget instance via its catalog factory.

        Raises:
            KeyError: If no active widget has this id.
        """
        widget = self.get(widget_id)
        if widget is None:
            raise KeyError(widget_id)
        descriptor = self.catalog.get(widget.type)
        if descriptor is None:
            raise UnresolvableWidget(widget.type)
        return descriptor.factory()
