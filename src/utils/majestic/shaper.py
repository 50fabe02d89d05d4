"""
Pull the relevant data table out of a Majestic response envelope.

Every command answers with the same envelope::

    {"Code": "OK", "ErrorMessage": "", "DataTables": {"Results": {"Data": [...]}}}

A lookup either finds the table (``Table``) or does not (``Unrecognized``), in
which case callers get the whole envelope back so there is always something
to inspect.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Union

TABLES_KEY = "DataTables"


@dataclass(frozen=True)
class Table:
    rows: Any


@dataclass(frozen=True)
class Unrecognized:
    envelope: Dict[str, Any]


Located = Union[Table, Unrecognized]


def locate(envelope: Dict[str, Any], path: Sequence[str]) -> Located:
    """Walk DataTables along path"""
    node: Any = envelope.get(TABLES_KEY)
    for key in path:
        if not isinstance(node, dict) or node.get(key) is None:
            return Unrecognized(envelope)
        node = node[key]

    if node is None:
        return Unrecognized(envelope)
    return Table(node)


def extract(envelope: Dict[str, Any], path: Optional[Sequence[str]]) -> Any:
    """Return the table at path, or the envelope itself when it is absent"""
    if path is None:
        return envelope

    located = locate(envelope, path)
    if isinstance(located, Table):
        return located.rows
    return located.envelope


def first_row(envelope: Dict[str, Any], path: Sequence[str]) -> Optional[Dict[str, Any]]:
    located = locate(envelope, path)
    if isinstance(located, Table) and isinstance(located.rows, list) and located.rows:
        row = located.rows[0]
        if isinstance(row, dict):
            return row
    return None
