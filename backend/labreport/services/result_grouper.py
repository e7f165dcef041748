"""Result grouping service.

Builds the Category -> TestType -> Parameter tree a report is rendered from,
out of the flat rows returned by the result-value join query. The tree is
rebuilt on every state change, so grouping is deterministic: the same rows
and the same custom category order always produce the same tree.

Default ordering:
- parameters by display order, then name
- test types by name
- categories by name, unless the caller supplies a custom order
"""

import logging
import unicodedata
from collections.abc import Iterable, Sequence
from typing import Any, TypeVar

from pydantic import ValidationError

from labreport.schemas.results import (
    CategoryGroup,
    GroupedTree,
    ParameterResult,
    ResultJoinRow,
    TestTypeGroup,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def locale_sort_key(name: str) -> tuple[str, str]:
    """Sort key comparing names the way a French-locale collation would.

    Accents and case only break ties: "Éosinophiles" sorts between
    "Basophiles" and "Lymphocytes", not after "Z".
    """
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(c for c in decomposed if not unicodedata.combining(c))
    return base.casefold(), name


# =============================================================================
# Boundary validation
# =============================================================================


def validate_rows(raw_rows: Iterable[Any]) -> list[ResultJoinRow]:
    """Validate loosely typed join rows into ResultJoinRow records.

    Rows that do not conform to the join shape are dropped with a warning
    instead of failing the whole report.
    """
    rows: list[ResultJoinRow] = []
    for index, raw in enumerate(raw_rows):
        if isinstance(raw, ResultJoinRow):
            rows.append(raw)
            continue
        try:
            rows.append(ResultJoinRow.model_validate(raw))
        except ValidationError as e:
            logger.warning(
                "Dropping malformed result row %d: %d validation error(s)",
                index,
                e.error_count(),
            )
    return rows


# =============================================================================
# Grouping
# =============================================================================


def group(
    rows: Iterable[ResultJoinRow],
    custom_order: Sequence[str] | None = None,
) -> GroupedTree:
    """Group result rows into an ordered category/test type/parameter tree.

    Args:
        rows: Validated join rows.
        custom_order: Category ids in the order the user arranged them. When
            given, it is used verbatim instead of the alphabetical order.
            Categories missing from it follow, alphabetically; ids with no
            results are ignored.

    Returns:
        List of CategoryGroup, each holding its ordered TestTypeGroups.
    """
    categories: dict[str, CategoryGroup] = {}
    test_types: dict[tuple[str, str], TestTypeGroup] = {}
    dropped = 0

    for row in rows:
        parameter = row.parameter
        test_type = parameter.test_type if parameter else None
        category = test_type.category if test_type else None
        if parameter is None or test_type is None or category is None:
            dropped += 1
            logger.warning(
                "Missing parameter/test type/category data for result value %r (parameter %s)",
                row.value,
                parameter.id if parameter else None,
            )
            continue

        category_group = categories.get(category.id)
        if category_group is None:
            category_group = CategoryGroup(category_id=category.id, name=category.name)
            categories[category.id] = category_group

        key = (category.id, test_type.id)
        test_type_group = test_types.get(key)
        if test_type_group is None:
            test_type_group = TestTypeGroup(test_type_id=test_type.id, name=test_type.name)
            test_types[key] = test_type_group
            category_group.test_types.append(test_type_group)

        test_type_group.parameters.append(
            ParameterResult(
                parameter_id=parameter.id,
                name=parameter.name,
                unit=parameter.unit,
                reference_range=parameter.reference_range,
                order=parameter.order,
                value=row.value,
            )
        )

    for category_group in categories.values():
        for test_type_group in category_group.test_types:
            test_type_group.parameters.sort(
                key=lambda p: (p.order, locale_sort_key(p.name), p.parameter_id)
            )
        category_group.test_types.sort(
            key=lambda t: (locale_sort_key(t.name), t.test_type_id)
        )

    tree = _order_categories(list(categories.values()), custom_order)
    logger.debug(
        "Grouped %d categories, %d test types (%d rows dropped)",
        len(tree),
        len(test_types),
        dropped,
    )
    return tree


def _order_categories(
    groups: list[CategoryGroup],
    custom_order: Sequence[str] | None,
) -> GroupedTree:
    alphabetical = sorted(groups, key=lambda c: (locale_sort_key(c.name), c.category_id))
    if custom_order is None:
        return alphabetical

    by_id = {c.category_id: c for c in groups}
    ordered: GroupedTree = []
    seen: set[str] = set()
    for category_id in custom_order:
        key = str(category_id)
        if key in by_id and key not in seen:
            ordered.append(by_id[key])
            seen.add(key)
    ordered.extend(c for c in alphabetical if c.category_id not in seen)
    return ordered


def category_order(tree: GroupedTree) -> list[str]:
    """Return the category ids of a tree, in display order."""
    return [c.category_id for c in tree]


# =============================================================================
# Reordering
# =============================================================================


def reorder(ids: Sequence[T], from_index: int, to_index: int) -> list[T]:
    """Move the item at from_index to to_index, returning a new list.

    Indices outside the list leave the order unchanged.
    """
    items = list(ids)
    if not (0 <= from_index < len(items) and 0 <= to_index < len(items)):
        return items
    items.insert(to_index, items.pop(from_index))
    return items


def move_category(ids: Sequence[str], active_id: str, over_id: str | None) -> list[str]:
    """Apply a drag-end: move active_id to the position of over_id."""
    items = [str(i) for i in ids]
    if over_id is None or str(active_id) == str(over_id):
        return items
    try:
        from_index = items.index(str(active_id))
        to_index = items.index(str(over_id))
    except ValueError:
        return items
    return reorder(items, from_index, to_index)
