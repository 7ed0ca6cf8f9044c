"""
Placeholder substitution: template + positional arguments -> SQL string.

Arguments are consumed strictly left to right, one per placeholder, through a
cursor over the (unchanged) argument tuple. Running out of arguments is an
``ArgumentCountMismatch``: reported always, raised in strict mode, otherwise
the placeholder renders empty. Unused trailing arguments are ignored unless
strict mode is on.

Performance: token lists are cached in an LRU dict keyed by template source
hash so repeated calls with the same template skip tokenizing.
"""

import hashlib
import threading
from collections import OrderedDict
from collections.abc import Callable
from typing import Any

from simplemysql.core.config import settings
from simplemysql.core.errors import ArgumentCountMismatch
from simplemysql.sql.filters import SqlSafe, ValueFormatter
from simplemysql.sql.parser import Literal, Placeholder, PlaceholderKind, Token, tokenize

_template_cache: OrderedDict[str, tuple[Token, ...]] = OrderedDict()
_cache_lock = threading.Lock()


def _tokenize_cached(source: str, max_size: int) -> tuple[Token, ...]:
    """Return tokens for ``source`` from cache or tokenize & cache them."""
    if max_size <= 0:
        return tuple(tokenize(source))
    key = hashlib.md5(source.encode(), usedforsecurity=False).hexdigest()
    with _cache_lock:
        tokens = _template_cache.get(key)
        if tokens is not None:
            _template_cache.move_to_end(key)
            return tokens
    tokens = tuple(tokenize(source))
    with _cache_lock:
        _template_cache[key] = tokens
        while len(_template_cache) > max_size:
            _template_cache.popitem(last=False)
    return tokens


def clear_template_cache() -> None:
    with _cache_lock:
        _template_cache.clear()


class SQLTemplateEngine:
    """Renders ``?x`` placeholder templates with positional arguments."""

    def __init__(
        self,
        formatter: ValueFormatter | None = None,
        *,
        strict_types: bool | None = None,
        cache_size: int | None = None,
    ) -> None:
        if formatter is None:
            formatter = ValueFormatter(strict_types=strict_types)
        elif strict_types is not None:
            formatter.strict_types = strict_types
        self.formatter = formatter
        self.cache_size = settings.TEMPLATE_CACHE_SIZE if cache_size is None else cache_size

    @property
    def strict_types(self) -> bool:
        return self.formatter.strict_types

    def _dispatch(self) -> dict[PlaceholderKind, Callable[..., SqlSafe]]:
        f = self.formatter
        return {
            PlaceholderKind.INTEGER: f.format_int,
            PlaceholderKind.STRING: f.format_string,
            PlaceholderKind.IDENTIFIER: f.format_name,
            PlaceholderKind.SET_ARRAY: f.format_set,
            PlaceholderKind.FIELD_MAP: f.format_field_map,
            PlaceholderKind.RAW: f.format_raw,
        }

    def render(self, template: str, *args: Any) -> str:
        """Substitute ``args`` into ``template`` and return the SQL string."""
        tokens = _tokenize_cached(template, self.cache_size)
        handlers = self._dispatch()
        out: list[str] = []
        cursor = 0
        for token in tokens:
            if isinstance(token, Literal):
                out.append(token.text)
                continue
            if cursor >= len(args):
                out.append(self._missing_argument(template, token, cursor))
                continue
            value = args[cursor]
            cursor += 1
            if token.kind is PlaceholderKind.FLOAT:
                out.append(self.formatter.format_float(value, token.precision))
            else:
                out.append(handlers[token.kind](value))
        if cursor < len(args) and self.strict_types:
            self.formatter.fail(
                ArgumentCountMismatch(
                    f"{len(args) - cursor} unused argument(s): template has {cursor} placeholder(s), "
                    f"got {len(args)} argument(s)"
                ),
                sql=template,
            )
        return "".join(out)

    def _missing_argument(self, template: str, token: Placeholder, position: int) -> str:
        return self.formatter.fail(
            ArgumentCountMismatch(
                f"No argument for placeholder #{position + 1} ({token.text}): "
                f"only {position} argument(s) supplied"
            ),
            sql=template,
        )
