"""
models/response.py
------------------
The uniform reply wrapper returned by every endpoint:
``{"Estado": <bool>, "Respuesta": <payload>}``.
"""

from dataclasses import dataclass
from typing import Union

from models.post import Post

Payload = Union[str, Post, list[Post]]


@dataclass(frozen=True)
class Envelope:
    """
    A success flag plus a payload.

    Build instances through the constructors below, one per payload kind:
    a success message, a single record, a record list, or an error message.
    """
    success: bool
    payload: Payload

    @classmethod
    def message(cls, text: str) -> "Envelope":
        return cls(True, text)

    @classmethod
    def record(cls, post: Post) -> "Envelope":
        return cls(True, post)

    @classmethod
    def records(cls, posts: list[Post]) -> "Envelope":
        return cls(True, list(posts))

    @classmethod
    def error(cls, text: str) -> "Envelope":
        return cls(False, text)

    def to_dict(self) -> dict:
        if isinstance(self.payload, Post):
            payload = self.payload.to_dict()
        elif isinstance(self.payload, list):
            payload = [post.to_dict() for post in self.payload]
        else:
            payload = self.payload
        return {"Estado": self.success, "Respuesta": payload}
