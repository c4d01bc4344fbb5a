"""
Immutable catalog of invocable entries (tools and the widget resources
they render into), indexed by id for command routing and by uri for
content routing.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Type

from pydantic import BaseModel

from ..core import CatalogError, ToolOutput

WIDGET_MIME_TYPE = "text/html+skybridge"


@dataclass(frozen=True)
class CatalogEntry:
    """One tool/resource pair known to the server"""
    id: str
    uri: str
    title: str
    invoking_label: str
    invoked_label: str
    response_text: str
    arguments_model: Type[BaseModel]
    response_builder: Callable[[BaseModel], ToolOutput]
    payload: str = ""
    description: Optional[str] = None
    mime_type: str = WIDGET_MIME_TYPE

    def presentation_metadata(self) -> Dict[str, Any]:
        """Widget hints attached to tool descriptors, resources and results"""
        return {
            "openai/outputTemplate": self.uri,
            "openai/toolInvocation/invoking": self.invoking_label,
            "openai/toolInvocation/invoked": self.invoked_label,
            "openai/widgetAccessible": True,
            "openai/resultCanProduceWidget": True,
        }

    def input_schema(self) -> Dict[str, Any]:
        return self.arguments_model.model_json_schema()


class Catalog:
    """
    Read-only lookup over catalog entries.

    Both indexes are built once in the constructor; an entry appears in
    exactly one slot of each, and ids and uris are unique across entries.
    """

    def __init__(self, entries: Iterable[CatalogEntry]):
        self._entries: List[CatalogEntry] = []
        self._by_id: Dict[str, CatalogEntry] = {}
        self._by_uri: Dict[str, CatalogEntry] = {}

        for entry in entries:
            if entry.id in self._by_id:
                raise CatalogError(f"Duplicate catalog id: {entry.id}")
            if entry.uri in self._by_uri:
                raise CatalogError(f"Duplicate catalog uri: {entry.uri}")
            self._by_id[entry.id] = entry
            self._by_uri[entry.uri] = entry
            self._entries.append(entry)

    def get_by_id(self, entry_id: str) -> Optional[CatalogEntry]:
        return self._by_id.get(entry_id)

    def get_by_uri(self, uri: str) -> Optional[CatalogEntry]:
        return self._by_uri.get(uri)

    def list(self) -> List[CatalogEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._by_id

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self._entries)
