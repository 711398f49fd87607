"""
Quark Type Vocabulary
=====================

This module defines the closed set of types a Quark program can name and
their mapping onto C.

Supported Types
---------------
| Quark    | C       | Notes                                   |
|----------|---------|-----------------------------------------|
| int      | int     |                                         |
| float    | float   |                                         |
| string   | char*   |                                         |
| bool     | int     | C99 without <stdbool.h>                 |
| void     | void    | function return type only               |
| [T]      | C(T)*   | decays to a pointer, length is lost     |
| unknown  | -       | sentinel, must never reach code output  |

Type Representation
-------------------
Types are immutable QuarkType values. Scalars are shared module
constants; array types own their element type:

    TYPE_INT                 : QuarkType(INT)
    array_of(TYPE_STRING)    : QuarkType(ARRAY, element=QuarkType(STRING))
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


# =============================================================================
# Type Kinds
# =============================================================================

class TypeKind(Enum):
    """Fundamental Quark type kinds."""
    INT = auto()
    FLOAT = auto()
    STRING = auto()
    BOOL = auto()
    VOID = auto()       # Function declared to return nothing
    ARRAY = auto()      # One-dimensional array of an element type
    UNKNOWN = auto()    # No annotation / unresolved

    def __str__(self) -> str:
        return self.name.lower()


# =============================================================================
# Type Representation
# =============================================================================

@dataclass(frozen=True)
class QuarkType:
    """
    A Quark type.

    Attributes:
        kind: The type kind
        element: Element type for ARRAY, None otherwise
    """
    kind: TypeKind
    element: Optional["QuarkType"] = None

    def __str__(self) -> str:
        """Render in Quark source syntax: int, [string], [[int]]."""
        if self.kind == TypeKind.ARRAY:
            return f"[{self.element}]"
        return str(self.kind)

    @property
    def is_array(self) -> bool:
        return self.kind == TypeKind.ARRAY

    @property
    def is_unknown(self) -> bool:
        """True if this type or any element type is UNKNOWN."""
        if self.kind == TypeKind.UNKNOWN:
            return True
        return self.element is not None and self.element.is_unknown


TYPE_INT = QuarkType(TypeKind.INT)
TYPE_FLOAT = QuarkType(TypeKind.FLOAT)
TYPE_STRING = QuarkType(TypeKind.STRING)
TYPE_BOOL = QuarkType(TypeKind.BOOL)
TYPE_VOID = QuarkType(TypeKind.VOID)
TYPE_UNKNOWN = QuarkType(TypeKind.UNKNOWN)

# Names accepted in type position
SCALAR_TYPES: dict[str, QuarkType] = {
    "int": TYPE_INT,
    "float": TYPE_FLOAT,
    "string": TYPE_STRING,
    "bool": TYPE_BOOL,
    "void": TYPE_VOID,
}

# C spelling of each scalar kind
C_TYPE_NAMES: dict[TypeKind, str] = {
    TypeKind.INT: "int",
    TypeKind.FLOAT: "float",
    TypeKind.STRING: "char*",
    TypeKind.BOOL: "int",
    TypeKind.VOID: "void",
}


def array_of(element: QuarkType) -> QuarkType:
    """Create an array type with the given element type."""
    return QuarkType(TypeKind.ARRAY, element)


def type_from_name(name: str) -> Optional[QuarkType]:
    """Look up a scalar type by its source name, or None."""
    return SCALAR_TYPES.get(name)
