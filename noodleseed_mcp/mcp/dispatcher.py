"""
Command dispatch: catalog lookup, argument validation, response building.
"""

from typing import Any

from pydantic import BaseModel, ValidationError

from ..catalog import Catalog, CatalogEntry
from ..core import (
    InvalidArguments,
    MCPServerError,
    Result,
    ToolExecutionError,
    UnknownTool
)
from ..logging import get_logger


class CommandDispatcher:
    """
    Stateless dispatcher over a read-only catalog.

    Safe to share between sessions; every call works only on its own
    arguments and the immutable catalog.
    """

    def __init__(self, catalog: Catalog):
        self.catalog = catalog
        self.logger = get_logger(__name__)

    def dispatch(self, tool_id: str, arguments: Any) -> Result:
        """
        Invoke a catalog entry.

        Raises:
            UnknownTool: no entry with ``tool_id``
            InvalidArguments: arguments do not match the entry's declared shape
            ToolExecutionError: the entry's response builder failed
        """
        entry = self.catalog.get_by_id(tool_id)
        if entry is None:
            raise UnknownTool(tool_id)

        args = self.validate_arguments(entry, arguments)

        try:
            output = entry.response_builder(args)
        except MCPServerError:
            raise
        except Exception as e:
            self.logger.exception(f"Response builder for {tool_id} failed")
            raise ToolExecutionError(f"Tool {tool_id} failed: {e}") from e

        self.logger.info(f"Tool invoked: {entry.id}")

        return Result(
            display_text=output.display_text or entry.response_text,
            structured_payload=output.structured_payload,
            presentation_metadata=entry.presentation_metadata(),
        )

    @staticmethod
    def validate_arguments(entry: CatalogEntry, arguments: Any) -> BaseModel:
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise InvalidArguments("arguments must be an object", field="arguments")

        try:
            return entry.arguments_model.model_validate(arguments)
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or "arguments"
            raise InvalidArguments(f"Invalid value for '{field}': {first['msg']}", field=field) from e
