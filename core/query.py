"""
OCAPI order_search query construction.

Term queries are emitted in a fixed order: the status exclusion first, then
one equality predicate per configured filter field, in field enumeration
order. Request keys that are not configured filter fields never reach the
query.
"""
from typing import Any, Dict, List, Mapping, Sequence

from core.config import FilterField

EXCLUDED_STATUSES = ["created", "failed"]


def term_query(field: str, operator: str, values: Sequence[str]) -> Dict[str, Any]:
    """Single OCAPI term_query predicate."""
    return {
        "term_query": {
            "fields": [field],
            "operator": operator,
            "values": list(values),
        }
    }


def status_exclusion() -> Dict[str, Any]:
    """Orders still in checkout or failed are never reported."""
    return term_query("status", "not_in", EXCLUDED_STATUSES)


def _clean(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def build_term_queries(
    filters: Mapping[str, Any],
    fields: Sequence[FilterField],
) -> List[Dict[str, Any]]:
    """
    Translate request filters into term predicates.

    Args:
        filters: Request-side filter values keyed by field name (e.g. orderType)
        fields: Configured filter fields, in enumeration order

    Returns:
        Status exclusion followed by one ``is`` predicate per non-blank field
    """
    predicates = [status_exclusion()]

    for field in fields:
        value = _clean(filters.get(field.name)) or field.default
        if value:
            predicates.append(term_query(field.remote_field, "is", [value]))

    return predicates


def build_search_query(
    start_date: str,
    end_date: str,
    term_queries: List[Dict[str, Any]],
) -> Dict[str, Any]:
    """Wrap predicates in a creation_date range-filtered bool query."""
    return {
        "filtered_query": {
            "filter": {
                "range_filter": {
                    "field": "creation_date",
                    "from": start_date,
                    "to": end_date,
                }
            },
            "query": {
                "bool_query": {
                    "must": term_queries,
                }
            },
        }
    }


def build_search_payload(
    query: Dict[str, Any],
    start: int = 0,
    count: int = 200,
) -> Dict[str, Any]:
    """Full order_search body for one page, most recently modified first."""
    return {
        "query": query,
        "count": count,
        "start": start,
        "select": "(**)",
        "sorts": [
            {"field": "last_modified", "sort_order": "desc"},
        ],
    }
