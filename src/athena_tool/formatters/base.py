"""Formatter protocol and registry for output formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterator

    from athena_tool.core.models import QueryResponse

SERIES_HEADERS = ["series", "timestamp", "value", "tags"]


@runtime_checkable
class Formatter(Protocol):
    """Protocol for output formatters.

    Each formatter transforms a QueryResponse into lines of formatted text.
    Yielding strings (rather than returning a single string) enables
    streaming output for large result sets without buffering everything
    in memory.
    """

    def format(self, response: QueryResponse) -> Iterator[str]:
        """Transform a QueryResponse into formatted output lines."""
        ...


def format_tags(tags: dict[str, str]) -> str:
    return ",".join(f"{k}={v}" for k, v in sorted(tags.items()))


def flatten(response: QueryResponse) -> tuple[list[str], list[list[str]]]:
    """Headers and text rows for a response.

    Table responses keep each cell's original text; series responses become
    one row per point.
    """
    if response.tables:
        table = response.tables[0]
        headers = [col.name for col in table.columns]
        rows = [[v.string_value for v in row.values] for row in table.rows]
        return headers, rows

    rows = [
        [serie.name, str(point.timestamp), repr(point.value), format_tags(serie.tags)]
        for serie in response.series
        for point in serie.points
    ]
    return list(SERIES_HEADERS), rows


class FormatterRegistry:
    """Registry for looking up formatters by name."""

    def __init__(self) -> None:
        self._formatters: dict[str, type[Formatter]] = {}

    def register(self, name: str, formatter_class: type[Formatter]) -> None:
        self._formatters[name] = formatter_class

    def get(self, name: str, **kwargs: object) -> Formatter:
        """Return a formatter instance by name.

        Raises KeyError if the format name is not registered.
        """
        if name not in self._formatters:
            available = ", ".join(sorted(self._formatters))
            msg = f"Unknown format {name!r}. Available: {available}"
            raise KeyError(msg)
        return self._formatters[name](**kwargs)

    @property
    def available(self) -> list[str]:
        return sorted(self._formatters)


# Global registry instance populated by formatter modules.
registry = FormatterRegistry()
