"""Data models for Hotaru users, changes, queries and responses."""

from pyhotaru.models._base import HotaruBaseModel
from pyhotaru.models.changelog import ChangeKind, Changelog, UserChange, fresh_id
from pyhotaru.models.query import (
    ComparisonSelector,
    ContainmentSelector,
    EqualitySelector,
    ModSelector,
    Query,
    RegexSelector,
    Selector,
    SortOperator,
    WhereSelector,
)
from pyhotaru.models.responses import AuthResponse, LogOutResult, QueryResponse, SyncResponse, UserDataResponse
from pyhotaru.models.user import HotaruUser

__all__ = [
    "AuthResponse",
    "ChangeKind",
    "Changelog",
    "ComparisonSelector",
    "ContainmentSelector",
    "EqualitySelector",
    "HotaruBaseModel",
    "HotaruUser",
    "LogOutResult",
    "ModSelector",
    "Query",
    "QueryResponse",
    "RegexSelector",
    "Selector",
    "SortOperator",
    "SyncResponse",
    "UserChange",
    "UserDataResponse",
    "WhereSelector",
    "fresh_id",
]
