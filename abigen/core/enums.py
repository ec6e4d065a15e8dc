import enum
import sys

if sys.version_info < (3, 11):

    class StrEnum(str, enum.Enum):
        def __str__(self) -> str:
            return self.value

else:
    StrEnum = enum.StrEnum


class AbiItemType(StrEnum):
    FUNCTION = "function"
    EVENT = "event"
    ERROR = "error"
    CONSTRUCTOR = "constructor"
    FALLBACK = "fallback"
    RECEIVE = "receive"


class StateMutability(StrEnum):
    """
    State mutability of an ABI function entry.

    [NONPAYABLE][abigen.core.enums.StateMutability.NONPAYABLE] and [PAYABLE][abigen.core.enums.StateMutability.PAYABLE]
    functions are bound as write methods, all others as read methods.
    """

    PAYABLE = "payable"
    PURE = "pure"
    NONPAYABLE = "nonpayable"
    VIEW = "view"


class AbiTypeKind(StrEnum):
    """
    Base-type variant of an ABI parameter.
    """

    ELEMENTARY = "elementary"
    ARRAY = "array"
    TUPLE = "tuple"
