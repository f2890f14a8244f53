"""Match engine for flat equality expressions.

Evaluates expressions like::

    payload.action == "opened"
    payload.repository.private == false
    payload.pull_request.number == 42

Both sides are normalized to text before comparing, so ``42``, ``42.0`` and
``"42"`` are all equal, and ``true`` equals ``"true"``. A path that does not
resolve never equals a literal.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping, Sequence
from typing import Any

from spritehooks.engine.paths import MISSING, resolve

logger = logging.getLogger(__name__)

# != is tried first so that it is never read as "!" followed by ==
_NEQ_RE = re.compile(r"^(.+?)\s*!=\s*(.+)$", re.DOTALL)
_EQ_RE = re.compile(r"^(.+?)\s*==\s*(.+)$", re.DOTALL)


def parse_literal(value: str) -> str | int | float | bool:
    """Parse the right-hand side of an expression.

    Supports booleans (true/false), quoted strings, numbers and falls back
    to the bare token as a string.
    """
    trimmed = value.strip()

    if trimmed == "true":
        return True
    if trimmed == "false":
        return False

    if len(trimmed) >= 2 and trimmed[0] == trimmed[-1] and trimmed[0] in ("'", '"'):
        return trimmed[1:-1]

    # Python accepts digit separators; they are not numbers here
    if "_" in trimmed:
        return trimmed

    try:
        return int(trimmed)
    except ValueError:
        pass
    try:
        number = float(trimmed)
    except ValueError:
        return trimmed
    if math.isnan(number):
        return trimmed
    return number


def _normalize(value: Any) -> str | None:
    """Canonical text form used for comparisons; None when not comparable."""
    if value is MISSING or value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (Mapping, Sequence)) and not isinstance(value, str):
        return None
    return str(value)


def values_equal(actual: Any, expected: Any) -> bool:
    left = _normalize(actual)
    right = _normalize(expected)
    if left is None or right is None:
        return False
    return left == right


def evaluate_expression(expression: str, context: Mapping[str, Any]) -> bool:
    """Evaluate one ``path == literal`` or ``path != literal`` expression."""
    if not isinstance(expression, str):
        logger.warning("Invalid match expression (not a string): %r", expression)
        return False

    neq = _NEQ_RE.match(expression.strip())
    if neq:
        path, literal = neq.groups()
        return not values_equal(resolve(context, path.strip()), parse_literal(literal))

    eq = _EQ_RE.match(expression.strip())
    if eq:
        path, literal = eq.groups()
        return values_equal(resolve(context, path.strip()), parse_literal(literal))

    logger.warning("Invalid match expression (missing == or !=): %s", expression)
    return False


def evaluate_matches(expressions: Sequence[str] | None, payload: Any) -> bool:
    """Return True when every expression holds for ``payload``.

    An empty or missing expression list always matches. Paths are written
    from the ``payload`` root, e.g. ``payload.action``.
    """
    if not expressions:
        return True

    context = {"payload": payload}
    return all(evaluate_expression(expr, context) for expr in expressions)
