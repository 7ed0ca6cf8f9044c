"""
Statement assemblers: INSERT / UPDATE / DELETE / SELECT from declarative
clause descriptions.

Clause records are pydantic models; plain dicts in the same shape are accepted
everywhere and validated on the way in. A malformed record is a
``TypeMismatch`` (an unknown ``type`` tag an ``UnknownPlaceholderType``):
reported, raised in strict mode, otherwise the term is skipped.

Example::

    b = StatementBuilder()
    b.select({
        "fields": ["id", "name"],
        "from": "users u",
        "joins": {"left": {"orders o": "o.user_id = u.id"}},
        "where": [
            {"name": "age", "type": "integer", "value": 21},
            {"name": "city", "type": "string", "value": "Oslo", "conn": "or"},
        ],
        "order": [{"name": "name", "direction": "desc"}],
    })
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from simplemysql.core.errors import SQLBuildError, TypeMismatch
from simplemysql.sql.filters import ValueFormatter, ValueType

_M = TypeVar("_M", bound=BaseModel)


class Connector(str, Enum):
    AND = "AND"
    OR = "OR"


class SortDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class JoinKind(str, Enum):
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    INNER = "INNER"


class Value(BaseModel):
    """One ``name = value`` term with a declared type."""

    model_config = ConfigDict(extra="ignore")

    name: str
    type: ValueType
    value: Any = None
    decimals: int = Field(default=0, ge=0)

    @field_validator("type", mode="before")
    @classmethod
    def _resolve_type(cls, v: Any) -> ValueType:
        return ValueType.from_tag(v)

    @field_validator("decimals", mode="before")
    @classmethod
    def _none_decimals(cls, v: Any) -> Any:
        return 0 if v is None else v


class Condition(Value):
    """A WHERE/HAVING term. ``conn`` joins it to the previous term (ignored for the first)."""

    conn: Connector = Connector.AND

    @field_validator("conn", mode="before")
    @classmethod
    def _parse_conn(cls, v: Any) -> Connector:
        if isinstance(v, str) and v.strip().upper() == "OR":
            return Connector.OR
        return Connector.AND


class OrderBy(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str
    direction: SortDirection = Field(
        default=SortDirection.ASC,
        validation_alias=AliasChoices("direction", "type", "dir"),
    )

    @field_validator("direction", mode="before")
    @classmethod
    def _parse_direction(cls, v: Any) -> SortDirection:
        if isinstance(v, str) and v.strip().upper() == "DESC":
            return SortDirection.DESC
        return SortDirection.ASC


class Join(BaseModel):
    kind: JoinKind
    table: str
    # Raw ON condition, inserted verbatim.
    on: str

    @field_validator("kind", mode="before")
    @classmethod
    def _upper_kind(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v


class Select(BaseModel):
    """
    SELECT description.

    - joins: list of Join, or {kind: {table: on}}; ``left_joins`` /
      ``right_joins`` / ``inner_joins`` ({table: on}) are appended after it in
      that order.
    - where / having: list of Condition records, or {name: scalar} pairs
      (always string literals, always AND). Both forms may be mixed in a dict.
    - order: list of names, OrderBy records or (name, direction) pairs, or
      {name: direction}.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    fields: list[str] = Field(default_factory=list)
    from_: str | None = Field(default=None, alias="from")
    joins: list[Join] = Field(default_factory=list)
    where: dict[str, Any] | list[Any] | None = None
    group: list[str] = Field(default_factory=list)
    having: dict[str, Any] | list[Any] | None = None
    order: dict[str, Any] | list[Any] | None = None

    @model_validator(mode="before")
    @classmethod
    def _collect_joins(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        joins, problems = _join_entries(data)
        if problems:
            raise TypeMismatch(problems[0])
        data = {k: v for k, v in data.items() if not (isinstance(k, str) and k.endswith("_joins"))}
        data["joins"] = joins
        return data


def _join_entries(data: Mapping[str, Any]) -> tuple[list[Any], list[str]]:
    """
    Flatten ``joins`` and the legacy ``<kind>_joins`` keys into raw join
    records. The second item lists the parts that had the wrong shape.
    """
    entries: list[Any] = []
    problems: list[str] = []
    joins = data.get("joins")
    if isinstance(joins, Mapping):
        for kind, tables in joins.items():
            if isinstance(tables, Mapping):
                entries.extend({"kind": kind, "table": t, "on": on} for t, on in tables.items())
            elif tables:
                problems.append(f"Expected {{table: on}} for {kind!r} joins, got {type(tables).__name__}")
    elif isinstance(joins, (list, tuple)):
        entries.extend(joins)
    elif joins:
        problems.append(f"Expected joins list or mapping, got {type(joins).__name__}")
    for kind in ("left", "right", "inner"):
        legacy = data.get(f"{kind}_joins")
        if isinstance(legacy, Mapping):
            entries.extend({"kind": kind, "table": t, "on": on} for t, on in legacy.items())
        elif legacy:
            problems.append(f"Expected {{table: on}} for {kind}_joins, got {type(legacy).__name__}")
    return entries, problems


def _build_error(e: ValidationError) -> SQLBuildError:
    """Surface our own error kind when a validator raised one, else TypeMismatch."""
    for err in e.errors():
        cause = (err.get("ctx") or {}).get("error")
        if isinstance(cause, SQLBuildError):
            return cause
    return TypeMismatch(f"Malformed clause description: {e.error_count()} error(s): {e.errors()[0]['msg']}")


class StatementBuilder:
    """Builds INSERT/UPDATE/DELETE/SELECT strings. Stateless between calls."""

    def __init__(self, formatter: ValueFormatter | None = None, *, strict_types: bool | None = None) -> None:
        if formatter is None:
            formatter = ValueFormatter(strict_types=strict_types)
        elif strict_types is not None:
            formatter.strict_types = strict_types
        self.formatter = formatter

    # -- records ---------------------------------------------------------

    def _record(self, model: type[_M], data: Any) -> _M | None:
        if isinstance(data, model):
            return data
        try:
            return model.model_validate(data)
        except ValidationError as e:
            self.formatter.fail(_build_error(e))
            return None

    def _assignment(self, record: Value) -> str:
        f = self.formatter
        return f"{f.format_name(record.name)} = {f.format_value(record.value, record.type, record.decimals)}"

    def _assignments(self, values: Any) -> list[str] | None:
        if not isinstance(values, (list, tuple)):
            self.formatter.fail(TypeMismatch(f"Expected a list of values, got {type(values).__name__}"))
            return None
        terms = []
        for entry in values:
            record = self._record(Value, entry)
            if record is not None:
                terms.append(self._assignment(record))
        return terms

    def _conditions(self, conditions: Any, *, connectors: bool = True) -> str:
        """
        Render condition terms joined by their connectors (AND only when
        ``connectors`` is False). No connector precedes the first term.
        """
        if isinstance(conditions, Mapping):
            entries = list(conditions.items())
        elif isinstance(conditions, (list, tuple)):
            entries = [(None, c) for c in conditions]
        else:
            self.formatter.fail(TypeMismatch(f"Expected conditions list, got {type(conditions).__name__}"))
            return ""

        f = self.formatter
        out: list[str] = []
        for key, entry in entries:
            if isinstance(entry, (Value, Mapping)):
                if isinstance(entry, Value) and not isinstance(entry, Condition):
                    entry = entry.model_dump()
                record = self._record(Condition, entry)
                if record is None:
                    continue
                term = self._assignment(record)
                conn = record.conn if connectors else Connector.AND
            elif key is not None:
                term = f"{f.format_name(key)} = {f.format_string(entry)}"
                conn = Connector.AND
            elif isinstance(entry, tuple) and len(entry) == 2:
                term = f"{f.format_name(entry[0])} = {f.format_string(entry[1])}"
                conn = Connector.AND
            else:
                f.fail(TypeMismatch(f"Malformed condition: {entry!r}"))
                continue
            out.append(term if not out else f"{conn.value} {term}")
        return " ".join(out)

    def _order_term(self, entry: Any) -> str | None:
        if isinstance(entry, str):
            return self.formatter.format_name(entry)
        if isinstance(entry, tuple) and len(entry) == 2:
            entry = {"name": entry[0], "direction": entry[1]}
        record = self._record(OrderBy, entry)
        if record is None:
            return None
        return f"{self.formatter.format_name(record.name)} {record.direction.value}"

    def _names(self, clause: str, names: Any) -> list[str]:
        """Quoted identifiers for a field list; non-string entries are reported and skipped."""
        f = self.formatter
        if not isinstance(names, (list, tuple)):
            f.fail(TypeMismatch(f"Expected a list of names for {clause}, got {type(names).__name__}"))
            return []
        out = []
        for name in names:
            if isinstance(name, str):
                out.append(f.format_name(name))
            else:
                f.fail(TypeMismatch(f"Malformed {clause} entry: {name!r}"))
        return out

    def _joins(self, clauses: Mapping[str, Any]) -> list[str]:
        entries, problems = _join_entries(clauses)
        for problem in problems:
            self.formatter.fail(TypeMismatch(problem))
        out = []
        for entry in entries:
            join = self._record(Join, entry)
            if join is not None:
                out.append(f"{join.kind.value} JOIN {self.formatter.format_name(join.table)} ON ({join.on})")
        return out

    def _order(self, order: Any) -> list[str]:
        if isinstance(order, Mapping):
            entries: list[Any] = list(order.items())
        elif isinstance(order, (list, tuple)):
            entries = list(order)
        else:
            self.formatter.fail(TypeMismatch(f"Expected order list or mapping, got {type(order).__name__}"))
            return []
        return [t for t in (self._order_term(e) for e in entries) if t]

    # -- statements ------------------------------------------------------

    def insert(self, table: str, values: Any) -> str:
        """``INSERT INTO `t` SET `a` = 1, `b` = 'x'``"""
        result = f"INSERT INTO {self.formatter.format_name(table)}"
        terms = self._assignments(values)
        if terms is None:
            return result
        if not terms:
            self.formatter.fail(TypeMismatch(f"No values to insert into {table!r}"), sql=result)
            return result
        return f"{result} SET {', '.join(terms)}"

    def update(self, table: str, values: Any, conditions: Any = None) -> str:
        """``UPDATE `t` SET ... [WHERE a AND b]``; conditions are always AND-joined."""
        result = f"UPDATE {self.formatter.format_name(table)}"
        terms = self._assignments(values)
        if terms is None:
            return result
        if not terms:
            self.formatter.fail(TypeMismatch(f"No values to update in {table!r}"), sql=result)
            return result
        result = f"{result} SET {', '.join(terms)}"
        if conditions:
            where = self._conditions(conditions, connectors=False)
            if where:
                result = f"{result} WHERE {where}"
        return result

    def delete(self, table: str, conditions: Any = None) -> str:
        """
        ``DELETE FROM `t` [WHERE ...]``. A non-empty string ``conditions`` is
        appended verbatim after ``WHERE``.
        """
        result = f"DELETE FROM {self.formatter.format_name(table)}"
        if isinstance(conditions, str):
            if conditions.strip():
                result = f"{result} WHERE {conditions}"
            return result
        if conditions:
            where = self._conditions(conditions, connectors=False)
            if where:
                result = f"{result} WHERE {where}"
        return result

    def select(self, description: Select | Mapping[str, Any]) -> str:
        """
        Assemble SELECT ... FROM ... JOIN ... WHERE ... GROUP BY ... HAVING ... ORDER BY ...

        Each clause is checked on its own: a malformed clause (or list entry)
        is reported and left out, the rest of the statement is still built.
        """
        f = self.formatter
        if isinstance(description, Select):
            clauses: Mapping[str, Any] = {
                "fields": description.fields,
                "from": description.from_,
                "joins": description.joins,
                "where": description.where,
                "group": description.group,
                "having": description.having,
                "order": description.order,
            }
        elif isinstance(description, Mapping):
            clauses = description
        else:
            f.fail(TypeMismatch(f"Expected a select description, got {type(description).__name__}"))
            return ""

        parts: list[str] = []
        if clauses.get("fields"):
            names = self._names("fields", clauses["fields"])
            if names:
                parts.append("SELECT " + ", ".join(names))
        source = clauses.get("from", clauses.get("from_"))
        if isinstance(source, str) and source:
            parts.append("FROM " + f.format_name(source))
        elif source:
            f.fail(TypeMismatch(f"Expected a table name for from, got {type(source).__name__}"))
        parts.extend(self._joins(clauses))
        if clauses.get("where"):
            where = self._conditions(clauses["where"])
            if where:
                parts.append("WHERE " + where)
        if clauses.get("group"):
            names = self._names("group", clauses["group"])
            if names:
                parts.append("GROUP BY " + ", ".join(names))
        if clauses.get("having"):
            having = self._conditions(clauses["having"])
            if having:
                parts.append("HAVING " + having)
        if clauses.get("order"):
            terms = self._order(clauses["order"])
            if terms:
                parts.append("ORDER BY " + ", ".join(terms))
        return " ".join(parts)
