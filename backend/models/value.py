"""Attribute value model shared by the GML and GraphML front ends.

A value is one of:

* ``int`` / ``float`` -- a number
* ``str``             -- text
* ``list``            -- produced when an attribute name repeats in a block
* ``dict``            -- produced by a bracketed GML sub-block

GraphML has no nested value syntax, so lists and dicts cross into it as
compact JSON text and are decoded back on the way out.
"""

import json
import re
from typing import Any, Dict, List, Optional, Union

Scalar = Union[int, float, str]
Value = Union[int, float, str, List[Any], Dict[str, Any]]

UINT32_MAX = 0xFFFFFFFF

# GraphML attr.type values written by the key registry
TYPE_INT = "int"
TYPE_FLOAT = "float"
TYPE_STRING = "string"

_UINT_RE = re.compile(r"\+?\d+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)


def parse_uint32(token: str) -> Optional[int]:
    """Return ``token`` as an int if it is an unsigned 32-bit integer."""
    if _UINT_RE.fullmatch(token):
        number = int(token)
        if number <= UINT32_MAX:
            return number
    return None


def parse_float(token: str) -> Optional[float]:
    """Return ``token`` as a float if it is a 64-bit float literal."""
    if _FLOAT_RE.fullmatch(token):
        return float(token)
    return None


def infer_scalar(token: str) -> Scalar:
    """Infer a number or text from an unquoted token.

    Integer is tried before float, so ``"3"`` is ``3`` and ``"3.14"`` is
    ``3.14``. Anything else stays text.
    """
    number = parse_uint32(token)
    if number is not None:
        return number
    real = parse_float(token)
    if real is not None:
        return real
    return token


def is_missing(value: Any) -> bool:
    """True for values exporters write when an attribute has no content."""
    if isinstance(value, str):
        return value == "" or value == '""'
    if isinstance(value, float):
        return value != value  # NaN
    return False


def type_of(value: Value) -> str:
    """GraphML ``attr.type`` a value would be declared with."""
    if isinstance(value, bool):
        return TYPE_INT
    if isinstance(value, int):
        return TYPE_INT if 0 <= value <= UINT32_MAX else TYPE_FLOAT
    if isinstance(value, float):
        return TYPE_FLOAT
    return TYPE_STRING


def widen_type(current: str, observed: str) -> str:
    """Smallest type able to hold values of both ``current`` and ``observed``."""
    if current == observed:
        return current
    if {current, observed} == {TYPE_INT, TYPE_FLOAT}:
        return TYPE_FLOAT
    return TYPE_STRING


def format_number(value: Union[int, float]) -> str:
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, int):
        return str(value)
    return repr(value)


def encode_structured(value: Union[list, dict]) -> str:
    """Serialize a list or dict as compact JSON, e.g. ``{"a":1,"b":2}``."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def looks_structured(text: str) -> bool:
    candidate = _strip_embedding_quotes(text.strip())
    return (candidate[:1], candidate[-1:]) in (("{", "}"), ("[", "]"))


def decode_structured(text: str) -> Optional[Value]:
    """Decode JSON object/array text back into a dict or list.

    Quotes directly around the embedded ``{``/``[`` are stripped first, since
    some exporters wrap the JSON in a quoted string. Returns None when the
    text is not a JSON object or array, in which case callers keep it as text.
    """
    candidate = _strip_embedding_quotes(text.strip())
    if not looks_structured(candidate):
        return None
    try:
        decoded = json.loads(candidate)
    except ValueError:
        return None
    return _coerce_json(decoded)


def _strip_embedding_quotes(text: str) -> str:
    if (
        len(text) >= 4
        and text[0] == '"'
        and text[-1] == '"'
        and text[1] in "{["
        and text[-2] in "}]"
    ):
        return text[1:-1]
    return text


def _coerce_json(obj: Any) -> Any:
    # JSON booleans become 0/1 and nulls are dropped: GML has neither.
    if isinstance(obj, bool):
        return int(obj)
    if isinstance(obj, dict):
        return {
            str(k): _coerce_json(v) for k, v in obj.items() if v is not None
        }
    if isinstance(obj, list):
        return [_coerce_json(v) for v in obj if v is not None]
    return obj
