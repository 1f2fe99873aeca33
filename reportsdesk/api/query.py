"""
Query-string helpers and list filters shared by the domain services.
"""

from dataclasses import dataclass, fields, is_dataclass
from typing import Any, Mapping, Optional, Union
from urllib.parse import urlencode, quote


def to_camel(name: str) -> str:
    """start_date -> startDate"""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_query(params: Union[Mapping[str, Any], Any, None]) -> str:
    """
    Build "?key=value&..." from a filters dataclass or a mapping.

    None and empty-string values are dropped; snake_case keys become camelCase.
    Returns "" when nothing is left.
    """
    if params is None:
        return ""

    if is_dataclass(params):
        items = [(f.name, getattr(params, f.name)) for f in fields(params)]
    else:
        items = list(params.items())

    pairs = [
        (to_camel(key), _format_value(value))
        for key, value in items
        if value is not None and value != ""
    ]
    if not pairs:
        return ""
    return "?" + urlencode(pairs)


def path_segment(value: Any) -> str:
    """Percent-encode one path segment (region names contain spaces and Arabic)"""
    return quote(str(value), safe="")


def date_range(start_date: Optional[str] = None, end_date: Optional[str] = None) -> str:
    return build_query({"start_date": start_date, "end_date": end_date})


@dataclass
class ListFilters:
    """Pagination and sorting common to every list endpoint"""
    page: Optional[int] = None
    limit: Optional[int] = None
    sort_by: Optional[str] = None
    sort_direction: Optional[str] = None  # asc, desc


@dataclass
class ReportFilters(ListFilters):
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    report_type: Optional[str] = None  # morning, evening
    status: Optional[str] = None
    governorate: Optional[str] = None


@dataclass
class EventFilters(ListFilters):
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    event_type: Optional[str] = None
    status: Optional[str] = None
    severity: Optional[str] = None
    governorate: Optional[str] = None
    region: Optional[str] = None


@dataclass
class CoordinationFilters(ListFilters):
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    department: Optional[str] = None
    status: Optional[str] = None
    governorate: Optional[str] = None


@dataclass
class MemoFilters(ListFilters):
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    type: Optional[str] = None  # memo, release
    status: Optional[str] = None
    governorate: Optional[str] = None
    search: Optional[str] = None


@dataclass
class UserFilters:
    role: Optional[str] = None
    status: Optional[str] = None
    governorate: Optional[str] = None
    page: Optional[int] = None
    limit: Optional[int] = None
