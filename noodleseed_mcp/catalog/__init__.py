"""
Catalog of tools and widget resources exposed by the server
"""

from .catalog import Catalog, CatalogEntry, WIDGET_MIME_TYPE
from .widgets import (
    BusinessTypeArguments,
    SearchArguments,
    default_entries,
    load_default_catalog,
    load_widget_markup,
    widget_files
)

__all__ = [
    "Catalog",
    "CatalogEntry",
    "WIDGET_MIME_TYPE",
    "BusinessTypeArguments",
    "SearchArguments",
    "default_entries",
    "load_default_catalog",
    "load_widget_markup",
    "widget_files"
]
