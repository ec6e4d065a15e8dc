from __future__ import annotations

from typing import Any, Iterable, List, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from abigen.core import get_logger
from abigen.core.enums import AbiItemType, AbiTypeKind, StateMutability

logger = get_logger(__name__)

TUPLE_ABI_TYPE = "tuple"


class InvalidAbiError(ValueError):
    """
    The ABI JSON value does not have the shape of a contract ABI.
    """


class AbiModel(BaseModel):
    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )


class AbiParameter(AbiModel):
    """
    Input, output or event parameter of an ABI entry.

    Attributes:
        name: Declared name, empty for unnamed parameters.
        type: Canonical ABI type string, e.g. `uint256`, `address[]` or `tuple[2]`.
        internal_type: Compiler provided type, carries the struct name (`struct Foo`).
        components: Nested parameters, present iff the ultimate base type is a tuple.
        indexed: Whether the event parameter is stored in a topic.
        escaped_name: Collision-free identifier assigned during generation.
    """

    name: str = ""
    type: str
    internal_type: Optional[str] = Field(default=None, alias="internalType")
    components: Optional[List[AbiParameter]] = None
    indexed: bool = False
    escaped_name: Optional[str] = Field(default=None, exclude=True)

    @field_validator("name", mode="before")
    def validate_name(cls, v: Any) -> Any:
        # some compilers emit `null` for unnamed parameters
        return "" if v is None else v

    @property
    def kind(self) -> AbiTypeKind:
        if self.type.endswith("]"):
            return AbiTypeKind.ARRAY
        if self.type == TUPLE_ABI_TYPE:
            return AbiTypeKind.TUPLE
        return AbiTypeKind.ELEMENTARY

    @property
    def is_tuple(self) -> bool:
        bracket = self.type.find("[")
        base = self.type if bracket == -1 else self.type[:bracket]
        return base == TUPLE_ABI_TYPE

    @property
    def identifier(self) -> str:
        """
        Name to use in generated code; the escaped name once resolved, the declared name before.
        """
        return self.escaped_name if self.escaped_name is not None else self.name

    def with_escaped_name(self, escaped_name: str) -> AbiParameter:
        return self.model_copy(update={"escaped_name": escaped_name})


class AbiItem(AbiModel):
    """
    Single entry of a contract ABI.
    """

    type: str = AbiItemType.FUNCTION.value
    name: str = ""
    state_mutability: Optional[StateMutability] = Field(
        default=None, alias="stateMutability"
    )
    inputs: List[AbiParameter] = Field(default_factory=list)
    outputs: List[AbiParameter] = Field(default_factory=list)
    anonymous: bool = False

    @field_validator("name", mode="before")
    def validate_name(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("state_mutability", mode="before")
    def validate_state_mutability(cls, v: Any) -> Any:
        if v is None or isinstance(v, StateMutability):
            return v
        try:
            return StateMutability(v)
        except ValueError:
            logger.warning(
                f"Unknown state mutability `{v}`, the function is bound as a read."
            )
            return None

    @model_validator(mode="before")
    def legacy_state_mutability(cls, data: Any) -> Any:
        # ABIs emitted before solc 0.4.16 only carry the `constant` and `payable` flags
        if (
            not isinstance(data, dict)
            or "stateMutability" in data
            or "state_mutability" in data
        ):
            return data
        if data.get("payable"):
            return {**data, "stateMutability": StateMutability.PAYABLE.value}
        if data.get("constant"):
            return {**data, "stateMutability": StateMutability.VIEW.value}
        if data.get("type", AbiItemType.FUNCTION.value) == AbiItemType.FUNCTION:
            return {**data, "stateMutability": StateMutability.NONPAYABLE.value}
        return data

    @property
    def is_function(self) -> bool:
        return self.type == AbiItemType.FUNCTION

    @property
    def is_event(self) -> bool:
        return self.type == AbiItemType.EVENT

    @property
    def is_write(self) -> bool:
        return self.state_mutability in {
            StateMutability.NONPAYABLE,
            StateMutability.PAYABLE,
        }

    @property
    def is_payable(self) -> bool:
        return self.state_mutability == StateMutability.PAYABLE


_abi_adapter = TypeAdapter(List[AbiItem])


def parse_abi(abi: Union[Iterable[Any], Any]) -> List[AbiItem]:
    """
    Validate a parsed ABI JSON value into the internal model.

    Args:
        abi: List of ABI entries, either raw dictionaries or already validated [AbiItem][abigen.abi.data_model.AbiItem] instances.

    Returns:
        Validated ABI entries in the original order.
    """
    if isinstance(abi, (str, bytes, dict)) or not isinstance(abi, Iterable):
        raise InvalidAbiError(
            f"Expected a list of ABI entries, got {type(abi).__name__}."
        )

    try:
        return _abi_adapter.validate_python(list(abi))
    except ValidationError as e:
        raise InvalidAbiError(str(e)) from e
