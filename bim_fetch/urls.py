"""URL resolution and query-string encoding.

Query strings use PHP-style array keys (``tags[]=a&tags[]=b``) and the same
escaping as JavaScript's encodeURIComponent, so servers that already accept
browser-built queries see identical bytes.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Any, Mapping
from urllib.parse import quote

_ABSOLUTE_URL = re.compile(r"^https?:", re.IGNORECASE)

# Characters encodeURIComponent leaves untouched besides alphanumerics.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def resolve_url(target: str, base: str) -> str:
    """Return the URL to request for ``target``.

    Absolute (http/https) and root-relative targets pass through unchanged.
    Anything else is joined to ``base`` with a single "/". No slash
    normalization is applied: ``resolve_url("a", "https://x/")`` gives
    ``https://x//a``.
    """
    if _ABSOLUTE_URL.match(target) or target.startswith("/"):
        return target
    return f"{base}/{target}"


def encode_query(params: Mapping[str, Any]) -> str:
    """Serialize a parameter mapping into a query string.

    Args:
        params: Keys in insertion order. Values are scalars or lists/tuples
            of scalars; each list element becomes its own ``key[]=value``.

    Returns:
        ``""`` for an empty mapping, otherwise ``"?"`` followed by the
        ``&``-joined parts.
    """
    if not params:
        return ""

    parts: list[str] = []
    for key, value in params.items():
        encoded_key = percent_encode(str(key))
        if isinstance(value, (list, tuple)):
            for item in value:
                parts.append(f"{encoded_key}[]={percent_encode(_stringify(item))}")
        else:
            parts.append(f"{encoded_key}={percent_encode(_stringify(value))}")
    return "?" + "&".join(parts)


def percent_encode(value: str) -> str:
    """Percent-encode a URI component (UTF-8, encodeURIComponent semantics)."""
    return quote(value, safe=_URI_COMPONENT_SAFE)


def _stringify(value: Any) -> str:
    """Render a scalar the way a browser would put it in a URL."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, (list, tuple)):
        return ",".join(_stringify(item) for item in value)
    return str(value)


def _format_float(value: float) -> str:
    """Format a float like JavaScript's Number.prototype.toString.

    Uses the shortest round-trip digits from ``repr``. Fixed notation covers
    decimal exponents from -6 to 20; anything else uses ``1.5e+21`` form.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    parsed = Decimal(repr(abs(value))).normalize().as_tuple()
    digits = "".join(str(d) for d in parsed.digits)
    # Position of the decimal point relative to the first digit.
    point = parsed.exponent + len(digits)

    if len(digits) <= point <= 21:
        text = digits + "0" * (point - len(digits))
    elif 0 < point <= 21:
        text = f"{digits[:point]}.{digits[point:]}"
    elif -6 < point <= 0:
        text = "0." + "0" * -point + digits
    else:
        exponent = point - 1
        mantissa = digits if len(digits) == 1 else f"{digits[0]}.{digits[1:]}"
        text = f"{mantissa}e{'+' if exponent > 0 else '-'}{abs(exponent)}"
    return sign + text
