"""Query builder for the ``_runQuery`` endpoint.

A :class:`Query` accumulates selectors and sort operators over one
collection. The engine does not interpret it; :meth:`Query.serialize`
produces the plain record that is forwarded to the server as
``queryData``.

Usage::

    query = Query("users").greater_than("age", 18).descending("createdAt")
    query.limit = 10
    rows = await client.run_query(query)
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import ConfigDict, Field

from pyhotaru.models._base import HotaruBaseModel

PrimitiveValue = bool | int | float | str
OrderedPrimitiveValue = int | float | str


class EqualitySelector(HotaruBaseModel):
    type: Literal["equalTo", "notEqualTo"]
    key: str
    value: PrimitiveValue


class ComparisonSelector(HotaruBaseModel):
    type: Literal["lessThan", "lessThanOrEqual", "greaterThan", "greaterThanOrEqual"]
    key: str
    value: OrderedPrimitiveValue


class ContainmentSelector(HotaruBaseModel):
    type: Literal["containedIn", "notContainedIn"]
    key: str
    value: list[PrimitiveValue]


class ModSelector(HotaruBaseModel):
    type: Literal["mod"] = "mod"
    key: str
    divisor: int
    remainder: int


class RegexSelector(HotaruBaseModel):
    type: Literal["regex"] = "regex"
    key: str
    regex: str
    options: str = ""


class WhereSelector(HotaruBaseModel):
    type: Literal["where"] = "where"
    expression_string: str


Selector = Annotated[
    EqualitySelector | ComparisonSelector | ContainmentSelector | ModSelector | RegexSelector | WhereSelector,
    Field(discriminator="type"),
]


class SortOperator(HotaruBaseModel):
    type: Literal["ascending", "descending"]
    key: str


class Query(HotaruBaseModel):
    """Selectors, sort operators and paging over a single collection."""

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    class_name: str
    selectors: list[Selector] = Field(default_factory=list)
    sort_operators: list[SortOperator] = Field(default_factory=list)
    limit: int | None = Field(default=None, ge=0)
    skip: int | None = Field(default=None, ge=0)

    def __init__(self, class_name: str | None = None, /, **data: Any) -> None:
        # Validation from a record passes every field by keyword ("className").
        if class_name is not None:
            data["class_name"] = class_name
        super().__init__(**data)

    def serialize(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    @classmethod
    def deserialize(cls, data: dict[str, Any]) -> Query:
        return cls.model_validate(data)

    # ------------------------------------------------------------------
    # Selectors
    # ------------------------------------------------------------------

    def equal_to(self, key: str, value: PrimitiveValue) -> Query:
        self.selectors.append(EqualitySelector(type="equalTo", key=key, value=value))
        return self

    def not_equal_to(self, key: str, value: PrimitiveValue) -> Query:
        self.selectors.append(EqualitySelector(type="notEqualTo", key=key, value=value))
        return self

    def less_than(self, key: str, value: OrderedPrimitiveValue) -> Query:
        self.selectors.append(ComparisonSelector(type="lessThan", key=key, value=value))
        return self

    def less_than_or_equal(self, key: str, value: OrderedPrimitiveValue) -> Query:
        self.selectors.append(ComparisonSelector(type="lessThanOrEqual", key=key, value=value))
        return self

    def greater_than(self, key: str, value: OrderedPrimitiveValue) -> Query:
        self.selectors.append(ComparisonSelector(type="greaterThan", key=key, value=value))
        return self

    def greater_than_or_equal(self, key: str, value: OrderedPrimitiveValue) -> Query:
        self.selectors.append(ComparisonSelector(type="greaterThanOrEqual", key=key, value=value))
        return self

    def contained_in(self, key: str, value: list[PrimitiveValue]) -> Query:
        self.selectors.append(ContainmentSelector(type="containedIn", key=key, value=list(value)))
        return self

    def not_contained_in(self, key: str, value: list[PrimitiveValue]) -> Query:
        self.selectors.append(ContainmentSelector(type="notContainedIn", key=key, value=list(value)))
        return self

    def mod(self, key: str, divisor: int, remainder: int) -> Query:
        self.selectors.append(ModSelector(key=key, divisor=divisor, remainder=remainder))
        return self

    def regex(self, key: str, regex: str, options: str = "") -> Query:
        self.selectors.append(RegexSelector(key=key, regex=regex, options=options))
        return self

    def where(self, expression_string: str) -> Query:
        self.selectors.append(WhereSelector(expression_string=expression_string))
        return self

    # ------------------------------------------------------------------
    # Sorting
    # ------------------------------------------------------------------

    def ascending(self, key: str) -> Query:
        self.sort_operators.append(SortOperator(type="ascending", key=key))
        return self

    def descending(self, key: str) -> Query:
        self.sort_operators.append(SortOperator(type="descending", key=key))
        return self
