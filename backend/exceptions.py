"""Exception hierarchy for graph conversion.

Every error raised by a parser or writer derives from ``ConversionError`` so
callers (the conversion service, the CLI and the API) can catch one type.
All of them abort the current conversion; there is no partial output.
"""

from typing import Optional


class ConversionError(Exception):
    """Base class for all conversion failures."""

    def to_dict(self) -> dict:
        return {"error": type(self).__name__, "detail": str(self)}


class ParseError(ConversionError):
    """Input could not be tokenized as GML or GraphML.

    ``line``/``column`` locate the fault when known. For GraphML, ``offset``
    is the absolute byte offset of the fault in the input, or None when it
    lies outside the last two chunks fed.
    """

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        offset: Optional[int] = None,
        text: Optional[str] = None,
    ):
        self.message = message
        self.line = line
        self.column = column
        self.offset = offset
        self.text = text
        super().__init__(self._format())

    def _format(self) -> str:
        location = []
        if self.line is not None:
            location.append(f"line {self.line}")
        if self.column is not None:
            location.append(f"column {self.column}")
        if self.offset is not None:
            location.append(f"offset {self.offset}")
        msg = self.message
        if location:
            msg = f"{msg} ({', '.join(location)})"
        if self.text is not None:
            msg = f"{msg}: {self.text!r}"
        return msg

    def to_dict(self) -> dict:
        data = super().to_dict()
        for field in ("line", "column", "offset"):
            value = getattr(self, field)
            if value is not None:
                data[field] = value
        return data


class UnsupportedTagError(ConversionError):
    """A GraphML element outside the supported vocabulary."""

    def __init__(self, tag: str):
        self.tag = tag
        super().__init__(f"Unsupported GraphML tag: <{tag}>")


class KeyNotFoundError(ConversionError):
    """A GraphML ``<data>`` element references an undeclared key id."""

    def __init__(self, key_id: str):
        self.key_id = key_id
        super().__init__(f"GraphML data references undeclared key '{key_id}'")


class TypeMismatchError(ConversionError):
    """A value does not parse as the type its key declares."""

    def __init__(self, attr_name: str, attr_type: str, value: str):
        self.attr_name = attr_name
        self.attr_type = attr_type
        self.value = value
        super().__init__(
            f"Value {value!r} for attribute '{attr_name}' is not a valid {attr_type}"
        )


class UnsupportedFormatError(ConversionError):
    """The file extension or requested format is not GML or GraphML."""


class InvalidAttributeNameError(ConversionError):
    """An attribute name cannot be written as a GML key.

    GML keys are bare identifiers, and ``id``/``source``/``target`` (or
    ``directed`` and the block keywords at graph level) already carry the
    element's own fields.
    """

    def __init__(self, attr_name: str, reason: str):
        self.attr_name = attr_name
        self.reason = reason
        super().__init__(f"Attribute name {attr_name!r} cannot be written to GML: {reason}")
