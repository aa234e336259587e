"""Remote table query description.

A ``TableQuery`` is the pass-through read request a domain query sends to
the remote data service. It renders to PostgREST query parameters.
"""

from dataclasses import dataclass, field
from typing import Any, Literal

FilterOp = Literal["eq", "neq", "gt", "gte", "lt", "lte", "in", "is", "like"]


def _format_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True)
class Filter:
    """A single column filter, e.g. ``user_id=eq.42``."""

    column: str
    op: FilterOp
    value: Any

    def render(self) -> str:
        if self.op == "in":
            values = ",".join(_format_value(v) for v in self.value)
            return f"in.({values})"
        return f"{self.op}.{_format_value(self.value)}"


@dataclass(frozen=True)
class Order:
    """Ordering on one column."""

    column: str
    ascending: bool = True

    def render(self) -> str:
        return f"{self.column}.{'asc' if self.ascending else 'desc'}"


@dataclass(frozen=True)
class TableQuery:
    """Read query against one remote table.

    Attributes:
        table: Table name
        columns: Select expression, may embed joins (``*,profiles(id,username)``)
        filters: Column filters, all of which must hold
        or_filter: Raw PostgREST ``or`` expression without parentheses
        order: Optional ordering
        range_start: First row (inclusive) when paginating
        range_end: Last row (inclusive) when paginating
        single: Expect exactly one record instead of a list
    """

    table: str
    columns: str = "*"
    filters: tuple[Filter, ...] = field(default_factory=tuple)
    or_filter: str | None = None
    order: Order | None = None
    range_start: int | None = None
    range_end: int | None = None
    single: bool = False

    def __post_init__(self) -> None:
        if (self.range_start is None) != (self.range_end is None):
            raise ValueError("range_start and range_end must be given together")
        if self.range_start is not None and self.range_end < self.range_start:
            raise ValueError("range_end must not be before range_start")

    def to_params(self) -> list[tuple[str, str]]:
        """Render the query as ordered PostgREST query parameters."""
        params: list[tuple[str, str]] = [("select", "".join(self.columns.split()))]
        for f in self.filters:
            params.append((f.column, f.render()))
        if self.or_filter:
            params.append(("or", f"({self.or_filter})"))
        if self.order is not None:
            params.append(("order", self.order.render()))
        if self.range_start is not None:
            params.append(("offset", str(self.range_start)))
            params.append(("limit", str(self.range_end - self.range_start + 1)))
        return params
