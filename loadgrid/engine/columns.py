"""Column catalog: stable keys and display labels for the visible course-slot columns.

Column ids are written as ``{group}_{name tokens}``, for example ``CCW6_CCW_E_6``
for the ``CCW(E)6`` slot of group ``CCW6``. Labels are derived by stripping the
group prefix and reassembling the remaining tokens; an id that cannot be parsed
keeps its raw form as the label.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import AbstractSet, Dict, Iterable, List, Optional, Sequence, Tuple

from loadgrid.config import COLUMN_ID_SEPARATOR, COLUMN_KEY_PREFIX, OTHER_GROUP_ID, OTHER_LABEL_SUFFIX
from loadgrid.domain.errors import MalformedColumnId
from loadgrid.domain.models import ColumnStat, GroupDefinition
from loadgrid.engine.visibility import visible_columns

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GridColumn:
    key: str
    group_id: str
    column_id: str
    label: str  # Matches AssignmentRecord.course_name for cells in this column
    display_label: str
    color: str
    stat: Optional[ColumnStat] = None


def _assemble(tokens: Sequence[str]) -> str:
    if len(tokens) == 1:
        return tokens[0]
    base, middle, suffix = tokens[0], tokens[1:-1], tokens[-1]
    if middle:
        return f"{base}({''.join(middle)}){suffix}"
    return f"{base}{suffix}"


def _strict_label(column_id: str, group_id: str) -> str:
    if not column_id:
        raise MalformedColumnId(column_id, group_id)

    prefix = f"{group_id}{COLUMN_ID_SEPARATOR}"
    if column_id.startswith(prefix):
        tokens = column_id[len(prefix):].split(COLUMN_ID_SEPARATOR)
        if not all(tokens):
            raise MalformedColumnId(column_id, group_id)
        # "CCW_E_6" is a section variant; "Community_Service" is a plain multi-word name.
        if len(tokens) > 1 and tokens[-1].isdigit():
            return _assemble(tokens)
        return " ".join(tokens)

    if COLUMN_ID_SEPARATOR not in column_id:
        return column_id

    # Legacy ids whose first token is a group token that differs from the group id.
    tokens = column_id.split(COLUMN_ID_SEPARATOR)[1:]
    if not all(tokens):
        raise MalformedColumnId(column_id, group_id)
    return _assemble(tokens)


def parse_column_label(column_id: str, group_id: str) -> str:
    """Human label for a column id, falling back to the raw id when it cannot be parsed."""
    try:
        return _strict_label(column_id, group_id)
    except MalformedColumnId as exc:
        logger.debug("%s; using raw id", exc)
        return column_id


def column_id_for(group_id: str, course_name: str) -> str:
    """Inverse of parse_column_label for catalog-generated ids."""
    return f"{group_id}{COLUMN_ID_SEPARATOR}{re.sub(r'[^A-Za-z0-9]', COLUMN_ID_SEPARATOR, course_name)}"


def column_key(group_id: str, column_id: str) -> str:
    return f"{COLUMN_KEY_PREFIX}-{group_id}-{column_id}"


def display_label(label: str, group_id: str) -> str:
    if group_id == OTHER_GROUP_ID:
        return f"{label}{OTHER_LABEL_SUFFIX}"
    return label


def build_catalog(groups: Iterable[GroupDefinition], collapsed_groups: AbstractSet[str]) -> Tuple[GridColumn, ...]:
    columns: List[GridColumn] = []
    for group, column_id in visible_columns(groups, collapsed_groups):
        label = parse_column_label(column_id, group.id)
        columns.append(
            GridColumn(
                key=column_key(group.id, column_id),
                group_id=group.id,
                column_id=column_id,
                label=label,
                display_label=display_label(label, group.id),
                color=group.color,
                stat=group.stat_for(column_id),
            )
        )
    return tuple(columns)


def index_catalog(catalog: Iterable[GridColumn]) -> Dict[Tuple[str, str], GridColumn]:
    """Map (group id, label) to column. The first column wins when two ids share a label."""
    index: Dict[Tuple[str, str], GridColumn] = {}
    for column in catalog:
        index.setdefault((column.group_id, column.label), column)
    return index


def resolve_column(catalog: Iterable[GridColumn], group_id: str, course_name: str) -> Optional[GridColumn]:
    return index_catalog(catalog).get((group_id, course_name))


def find_column(groups: Iterable[GroupDefinition], group_id: str, column_id: str) -> Optional[GridColumn]:
    """Look up a column across every group, collapsed or not."""
    for column in build_catalog(groups, frozenset()):
        if column.group_id == group_id and column.column_id == column_id:
            return column
    return None
