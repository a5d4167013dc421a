"""Schema describing important fields for CLI table rendering."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

Row = Mapping[str, Any]
ValueExtractor = Callable[[Row], Any]
ValueFormatter = Callable[[Any], str]
SortKey = Callable[[Row], Any]


@dataclass(frozen=True)
class Column:
    """Describe how to pull and format a column for Rich tables."""

    header: str
    keys: tuple[str, ...] = ()
    extractor: ValueExtractor | None = None
    formatter: ValueFormatter | None = None
    justify: str = "left"

    def render(self, row: Row) -> str:
        value: Any | None = None
        if self.keys:
            for key in self.keys:
                if key in row:
                    value = row.get(key)
                    if value is not None:
                        break
        if value is None and self.extractor:
            value = self.extractor(row)
        if value is None:
            return ""
        if self.formatter:
            formatted = self.formatter(value)
            return "" if formatted is None else str(formatted)
        return str(value)


@dataclass(frozen=True)
class TableView:
    """Describe a Rich table for a CLI command."""

    title: str
    columns: tuple[Column, ...]
    sort_key: SortKey | None = None


def _bool_formatter(value: Any) -> str:
    if value is None:
        return ""
    return "Yes" if bool(value) else "No"


def _list_formatter(*, max_chars: int = 24, sep: str = ", ") -> ValueFormatter:
    def _formatter(value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, (list, tuple)):
            s = sep.join(str(v) for v in value)
        else:
            s = str(value)
        return s if len(s) <= max_chars else s[: max_chars - 1] + "…"

    return _formatter


def _rdf_mode(row: Row) -> str:
    """Summarize the replication mode of an RDF group row.

    Metro groups report ``metro`` and async groups ``async``; otherwise the
    explicit ``modes`` list is shown.
    """
    if row.get("metro"):
        return "Metro"
    if row.get("async"):
        return "Async"
    modes = row.get("modes")
    if isinstance(modes, (list, tuple)) and modes:
        return ", ".join(str(mode) for mode in modes)
    return ""


def _int_sort(*keys: str) -> SortKey:
    def _key(row: Row) -> Any:
        for key in keys:
            value = row.get(key)
            if isinstance(value, int):
                return value
        return 0

    return _key


CLI_TABLE_VIEWS: dict[str, TableView] = {
    "rdf-groups": TableView(
        title="RDF Groups",
        columns=(
            Column("RDFG", keys=("rdfgNumber",), justify="right"),
            Column("Label", keys=("label",)),
            Column("Remote Array", keys=("remoteSymmetrix",)),
            Column("Remote RDFG", keys=("remoteRdfgNumber",), justify="right"),
            Column("Devices", keys=("numDevices",), justify="right"),
            Column("Mode", extractor=_rdf_mode),
            Column("Witness", keys=("witnessEffective",), formatter=_bool_formatter, justify="center"),
        ),
        sort_key=_int_sort("rdfgNumber"),
    ),
    "rdf-pairs": TableView(
        title="RDF Device Pairs",
        columns=(
            Column("Local Volume", keys=("localVolumeName",)),
            Column("Remote Volume", keys=("remoteVolumeName",)),
            Column("Local RDFG", keys=("localRdfGroupNumber",), justify="right"),
            Column("Remote Array", keys=("remoteSymmetrixId",)),
            Column("Mode", keys=("rdfMode",)),
            Column("Pair State", keys=("rdfpairState",)),
            Column("Config", keys=("volumeConfig",)),
        ),
        sort_key=lambda row: str(row.get("localVolumeName") or ""),
    ),
    "sg-rdf": TableView(
        title="Storage Group Replication",
        columns=(
            Column("Storage Group", keys=("storageGroupName",)),
            Column("Array", keys=("symmetrixId",)),
            Column("RDFG", keys=("rdfGroupNumber",), justify="right"),
            Column("Types", keys=("volumeRdfTypes",), formatter=_list_formatter()),
            Column("States", keys=("states",), formatter=_list_formatter()),
            Column("Modes", keys=("modes",), formatter=_list_formatter()),
        ),
        sort_key=lambda row: str(row.get("storageGroupName") or "").lower(),
    ),
}
