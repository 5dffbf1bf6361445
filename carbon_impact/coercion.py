# -*- coding: utf-8 -*-
"""
Numeric coercion and the shared input guard.

Every calculator reads request fields through this module:

- ``coerce_number`` turns an arbitrary value into a finite float, falling
  back to a caller-supplied default when the value is missing, blank,
  non-numeric or non-finite.
- ``parse_number`` is the permissive variant used for required fields in
  legacy mode: anything that is not a number becomes NaN and propagates.
- ``guard_positive_inputs`` is the single validation guard. It rejects
  missing fields, non-numeric values and values ``<= 0`` with a
  ``ValidationError``.

Example:
    >>> coerce_number("2500", 2000.0)
    2500.0
    >>> coerce_number("n/a", 2000.0)
    2000.0
    >>> import math
    >>> math.isnan(parse_number("abc"))
    True
"""

from __future__ import annotations

import logging
import math
import numbers
from typing import Any, Dict, Mapping, Optional, Sequence

from carbon_impact.exceptions import ValidationError

logger = logging.getLogger(__name__)

#: Messages returned to API clients, one per guard stage.
MISSING_FIELDS_MESSAGE = "All fields are required."
NON_NUMERIC_MESSAGE = "Inputs must be valid numbers."
NON_POSITIVE_MESSAGE = "Inputs must be positive values."


def coerce_number(value: Any, default: float) -> float:
    """Return ``value`` as a finite float, or ``default`` if it is not one.

    Booleans are not treated as numbers. Strings are stripped before
    parsing; blank strings fall back to the default.

    Args:
        value: Raw input (number, numeric string, None, anything else).
        default: Value returned when ``value`` is not a finite number.

    Returns:
        The parsed finite number or ``default``.
    """
    if value is None or isinstance(value, bool):
        return default

    if isinstance(value, numbers.Real):
        try:
            number = float(value)
        except OverflowError:
            # Integers beyond float range are as unusable as infinity.
            return default
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return default
        try:
            number = float(text)
        except ValueError:
            return default
    else:
        return default

    if not math.isfinite(number):
        return default
    return number


def parse_number(value: Any) -> float:
    """Parse ``value`` permissively, returning NaN when it is not numeric."""
    return coerce_number(value, math.nan)


def finite_or_none(value: Any) -> Any:
    """Recursively replace NaN and infinities with None."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: finite_or_none(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [finite_or_none(v) for v in value]
    return value


def as_text(value: Any) -> Optional[str]:
    """Return free-form request text as ``str``, keeping ``None`` as is."""
    if value is None:
        return None
    return str(value)


def is_missing(value: Any) -> bool:
    """Return True for values a request treats as absent.

    ``None``, blank strings, ``False`` and numeric zero all count as
    missing, so a zero quantity fails the presence check before the
    positivity check is reached.
    """
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, numbers.Real):
        return value == 0
    return False


def guard_positive_inputs(
    payload: Mapping[str, Any],
    required_fields: Sequence[str],
    numeric_fields: Sequence[str],
    calculator: Optional[str] = None,
) -> Dict[str, float]:
    """Validate a request payload and return its parsed numeric fields.

    Checks run in three stages, each raising on its first failure:
    presence of every required field, numeric parse of every numeric
    field, and strict positivity of every numeric field.

    Args:
        payload: Raw request fields.
        required_fields: Fields that must be present and non-empty.
        numeric_fields: Fields that must parse to numbers ``> 0``.
        calculator: Calculator name attached to the raised error.

    Returns:
        Mapping of numeric field name to parsed float.

    Raises:
        ValidationError: If any stage fails.
    """
    missing = [f for f in required_fields if is_missing(payload.get(f))]
    if missing:
        logger.debug("Validation failed for %s: missing %s", calculator, missing)
        raise ValidationError(
            MISSING_FIELDS_MESSAGE,
            calculator=calculator,
            context={"reason": "missing"},
            invalid_fields={f: "missing" for f in missing},
        )

    parsed = {f: parse_number(payload.get(f)) for f in numeric_fields}

    non_numeric = [f for f, v in parsed.items() if math.isnan(v)]
    if non_numeric:
        raise ValidationError(
            NON_NUMERIC_MESSAGE,
            calculator=calculator,
            context={"reason": "non_numeric"},
            invalid_fields={f: "not a number" for f in non_numeric},
        )

    non_positive = [f for f, v in parsed.items() if v <= 0]
    if non_positive:
        raise ValidationError(
            NON_POSITIVE_MESSAGE,
            calculator=calculator,
            context={"reason": "non_positive"},
            invalid_fields={f: "must be > 0" for f in non_positive},
        )

    return parsed


__all__ = [
    "MISSING_FIELDS_MESSAGE",
    "NON_NUMERIC_MESSAGE",
    "NON_POSITIVE_MESSAGE",
    "coerce_number",
    "parse_number",
    "finite_or_none",
    "as_text",
    "is_missing",
    "guard_positive_inputs",
]
