"""
Widgets package: catalog of optional dashboard panels and the
persisted registry of the ones a user has added.
"""

from widgets.catalog import WidgetCatalog, WidgetDescriptor, WidgetSize
from widgets.registry import ActiveWidget, WidgetRegistryManager
from widgets.builtin import default_catalog

__all__ = [
    "WidgetCatalog",
    "WidgetDescriptor",
    "WidgetSize",
    "ActiveWidget",
    "WidgetRegistryManager",
    "default_catalog",
]
