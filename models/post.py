"""
models/post.py
--------------
Domain model for post records, and its JSON codec.
"""

from dataclasses import dataclass
from typing import Any

# JSON key for each attribute, in column order.
JSON_FIELDS = {
    "id": "ID",
    "imagen": "Imagen",
    "nombre": "Nombre",
    "descripcion": "Descripcion",
}
_ATTR_BY_FOLDED_KEY = {key.lower(): attr for attr, key in JSON_FIELDS.items()}


class InvalidPostError(ValueError):
    """Raised when a request payload cannot be turned into a Post."""


@dataclass
class Post:
    """
    Represents a single post row.

    Attributes:
        id: Caller-assigned primary key. The store never generates IDs.
        imagen: Opaque image reference.
        nombre: Display name.
        descripcion: Free text.
    """
    id: str = ""
    imagen: str = ""
    nombre: str = ""
    descripcion: str = ""

    @classmethod
    def from_dict(cls, payload: Any) -> "Post":
        """
        Decode a JSON object into a Post.

        Keys match case-insensitively; when several keys fold to the same
        field the last one wins. Absent keys and ``null`` values leave the
        field empty; unknown keys are ignored.

        Raises:
            InvalidPostError: If the payload is not an object or a known
                field holds something other than a string.
        """
        if not isinstance(payload, dict):
            raise InvalidPostError("request body must be a JSON object")
        values = {}
        for key, value in payload.items():
            attr = _ATTR_BY_FOLDED_KEY.get(key.lower())
            if attr is None or value is None:
                continue
            if not isinstance(value, str):
                raise InvalidPostError(f"field '{key}' must be a string")
            values[attr] = value
        return cls(**values)

    @classmethod
    def from_row(cls, row: tuple) -> "Post":
        """Convert a ``(ID, Imagen, Nombre, Descripcion)`` row. NULL columns become ''."""
        return cls(*(value if value is not None else "" for value in row))

    def to_dict(self) -> dict:
        return {key: getattr(self, attr) for attr, key in JSON_FIELDS.items()}
