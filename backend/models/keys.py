"""GraphML attribute keys.

``KeyRegistry`` is used while writing GraphML: it hands out ``d<N>`` ids in
first-seen order per (attribute name, element kind) and infers the declared
type. ``KeyTable`` is the read side: the ``<key>`` declarations of a parsed
document, indexed by id. Each conversion owns its own instance.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from exceptions import KeyNotFoundError
from .value import TYPE_FLOAT, TYPE_INT, TYPE_STRING, Value, type_of, widen_type

logger = logging.getLogger(__name__)

TYPE_BOOLEAN = "boolean"

# attr.type spellings accepted on read, mapped to the types we handle
GRAPHML_TYPE_ALIASES = {
    "string": TYPE_STRING,
    "int": TYPE_INT,
    "long": TYPE_INT,
    "float": TYPE_FLOAT,
    "double": TYPE_FLOAT,
    "boolean": TYPE_BOOLEAN,
}


@dataclass
class Key:
    """One ``<key>`` declaration."""

    id: str
    attr_name: str
    for_kind: str
    attr_type: str = TYPE_STRING
    default: Optional[str] = None

    @property
    def number(self) -> int:
        """Numeric part of a ``d<N>`` id, used for ordering."""
        try:
            return int(self.id[1:])
        except ValueError:
            return -1


class KeyRegistry:
    """Key ids and inferred types for the GraphML writer."""

    def __init__(self):
        self._keys: Dict[Tuple[str, str], Key] = {}

    def observe(self, attr_name: str, for_kind: str, value: Value) -> Key:
        """Return the key for an attribute, allocating it on first sight.

        The type is inferred from the first value. Later values that do not
        fit widen it (int to float, anything else to string); list and dict
        values are always stored as JSON text and so force string.
        """
        key = self._keys.get((attr_name, for_kind))
        observed = type_of(value)
        if key is None:
            key = Key(
                id=f"d{len(self._keys)}",
                attr_name=attr_name,
                for_kind=for_kind,
                attr_type=observed,
            )
            self._keys[(attr_name, for_kind)] = key
            logger.debug(
                f"Allocated key {key.id} for {for_kind}.{attr_name} ({observed})"
            )
            return key

        widened = widen_type(key.attr_type, observed)
        if widened != key.attr_type:
            logger.debug(
                f"Widening key {key.id} ({for_kind}.{attr_name}) "
                f"from {key.attr_type} to {widened}"
            )
            key.attr_type = widened
        return key

    def get(self, attr_name: str, for_kind: str) -> Optional[Key]:
        return self._keys.get((attr_name, for_kind))

    def keys(self) -> List[Key]:
        """All keys, sorted by numeric id."""
        return sorted(self._keys.values(), key=lambda k: k.number)

    def __len__(self) -> int:
        return len(self._keys)


class KeyTable:
    """``<key>`` declarations of a GraphML document being read."""

    def __init__(self):
        self._keys: Dict[str, Key] = {}

    def declare(self, key: Key) -> None:
        if key.id in self._keys:
            logger.warning(f"Key {key.id} declared twice, keeping the last one")
        self._keys[key.id] = key

    def lookup(self, key_id: str) -> Key:
        try:
            return self._keys[key_id]
        except KeyError:
            raise KeyNotFoundError(key_id) from None

    def __contains__(self, key_id: str) -> bool:
        return key_id in self._keys

    def __len__(self) -> int:
        return len(self._keys)
