"""Error types raised by the classify engine.

``ConfigurationError``
    A schema mistake: an unsupported dictionary key type, a follow-id
    member that is not ``Deferred[T]``, an unsupported declared type, or a
    follow-id member used without an object store.  Always raised eagerly.
``ConstructionError``
    The resolved class could not be instantiated.
``FormatError``
    A *present* node does not parse against its declared type.  Carries
    the path of node names from the root to the offending node.  An
    *absent* node is never an error; the member keeps its default.
``UnknownEnumValueError``
    A ``FormatError`` for an enum name that the enum does not declare.
"""
from __future__ import annotations


class ClassifyError(Exception):
    """Base class of every error raised by treeclassify."""


class ConfigurationError(ClassifyError, TypeError):
    """Raised when a type or member declaration cannot be classified."""


class ConstructionError(ClassifyError):
    """Raised when an instance of the resolved type cannot be created."""

    def __init__(self, type_name: str, cause: BaseException) -> None:
        self.type_name = type_name
        self.cause = cause
        super().__init__(f"An object of type {type_name} could not be created: {cause}")


class FormatError(ClassifyError, ValueError):
    """Raised when the text of a node does not parse as its declared type.

    Parameters
    ----------
    message:
        Human-readable description of the problem.
    path:
        Node names from the root of the tree down to the offending node.
    """

    def __init__(self, message: str, path: tuple[str, ...] = ()) -> None:
        self.message = message
        self.path = path
        super().__init__(self._render())

    def _render(self) -> str:
        if not self.path:
            return self.message
        return f"{'/'.join(self.path)}: {self.message}"

    def within(self, name: str) -> "FormatError":
        """Prefix ``name`` to the path and return the error.

        Used by the walker while the error unwinds through enclosing nodes.
        """
        self.path = (name, *self.path)
        self.args = (self._render(),)
        return self


class UnknownEnumValueError(FormatError):
    """Raised when an enum name is not declared by the target enum."""

    def __init__(self, enum_type: type, value: str, path: tuple[str, ...] = ()) -> None:
        self.enum_type = enum_type
        self.value = value
        super().__init__(
            f"{value!r} is not a member of enum {enum_type.__qualname__}", path
        )
