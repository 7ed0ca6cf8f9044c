"""
Static analysis for ``?x`` templates.

Flags raw passthrough placeholders (``?p``), whose argument is inserted with
no escaping, and ``?`` triggers that are not a recognized marker (they stay
literal text, which is usually a typo such as ``?d`` or ``?2i``).

Usage::

    warnings = check_sql_template_safety(template)
    # [{"placeholder": "?p", "line": 3, "message": "..."}]
"""

import re
from typing import Any

from simplemysql.sql.parser import Literal, Placeholder, PlaceholderKind, tokenize

_TRIGGER = re.compile(r"\?\S{0,3}")


def check_sql_template_safety(template: str) -> list[dict[str, Any]]:
    """Return warnings for raw and unrecognized placeholders; empty list means no issues."""
    warnings: list[dict[str, Any]] = []

    for line_no, line_text in enumerate(template.split("\n"), start=1):
        for token in tokenize(line_text):
            if isinstance(token, Placeholder) and token.kind is PlaceholderKind.RAW:
                warnings.append(
                    {
                        "placeholder": token.text,
                        "line": line_no,
                        "message": (
                            f"'{token.text}' inserts its argument without escaping. "
                            "Only pass trusted SQL fragments; use ?s, ?i, ?n or ?a for user input."
                        ),
                    }
                )
            elif isinstance(token, Literal):
                for match in _TRIGGER.finditer(token.text):
                    warnings.append(
                        {
                            "placeholder": match.group(),
                            "line": line_no,
                            "message": (
                                f"'{match.group()}' is not a placeholder and is kept as literal text. "
                                "Known markers: ?n ?s ?i ?u ?a ?p ?f ?<digits>f."
                            ),
                        }
                    )

    return warnings
