from __future__ import annotations

from typing import TYPE_CHECKING, Dict

from abigen.abi import AbiParameter, canonical_type
from abigen.core import get_logger
from abigen.core.enums import AbiTypeKind

from . import array_handler
from .constants import (
    LIB_VALUE_TYPES,
    NATIVE_INTEGER_TYPES,
    UNKNOWN_TYPE,
    AssemblyType,
    LibSymbol,
)
from .import_registry import ImportRegistry

if TYPE_CHECKING:
    from .tuple_registry import TupleRegistry

logger = get_logger(__name__)


def _generate_abi_type_map() -> Dict[str, str]:
    # only the 8-bit tier fits a native integer, every wider width is arbitrary precision
    mapping: Dict[str, str] = {
        "address": LibSymbol.ADDRESS,
        "bool": AssemblyType.BOOL,
        "string": AssemblyType.STRING,
        "bytes": LibSymbol.BYTES,
        "int": LibSymbol.BIG_INT,
        "uint": LibSymbol.BIG_INT,
        "int8": AssemblyType.I8,
        "uint8": AssemblyType.U8,
    }
    for bits in range(16, 257, 8):
        mapping[f"int{bits}"] = LibSymbol.BIG_INT
        mapping[f"uint{bits}"] = LibSymbol.BIG_INT
    for size in range(1, 33):
        mapping[f"bytes{size}"] = LibSymbol.BYTES
    return {k: str(v) for k, v in mapping.items()}


ABI_TYPE_MAP: Dict[str, str] = _generate_abi_type_map()


class TypeMapper:
    """
    Maps canonical ABI types to AssemblyScript types and builds the expressions converting values
    between the two representations.
    """

    __imports: ImportRegistry
    __tuples: TupleRegistry

    def __init__(self, imports: ImportRegistry, tuples: TupleRegistry):
        self.__imports = imports
        self.__tuples = tuples

    def map_abi_type(self, param: AbiParameter) -> str:
        abi_type = param.type

        if param.kind == AbiTypeKind.ARRAY:
            depth = array_handler.get_array_depth(abi_type)
            base_param = param.model_copy(
                update={
                    "type": array_handler.get_ultimate_base_type(abi_type),
                    "internal_type": array_handler.get_ultimate_base_type(
                        param.internal_type
                    )
                    if param.internal_type
                    else None,
                }
            )
            return self.map_abi_type(base_param) + "[]" * depth

        if param.kind == AbiTypeKind.TUPLE:
            class_name = self.__tuples.class_name_for(param)
            if class_name is not None:
                return class_name
            logger.warning(
                f"Tuple class name not found for type `{param.type}` (internal type `{param.internal_type}`), using `{UNKNOWN_TYPE}`."
            )
            return UNKNOWN_TYPE

        mapped = ABI_TYPE_MAP.get(abi_type)
        if mapped is None:
            logger.warning(f"Unknown ABI type `{abi_type}`, using `{UNKNOWN_TYPE}`.")
            return UNKNOWN_TYPE

        if mapped in LIB_VALUE_TYPES:
            self.__imports.add_type(mapped)
        return mapped

    def to_lib_type(self, mapped_type: str, value: str) -> str:
        if array_handler.is_array_type(mapped_type):
            return value

        if mapped_type == AssemblyType.BOOL:
            self.__imports.add_type(LibSymbol.BYTES)
            return f"{LibSymbol.BYTES}.fromBool({value})"
        elif mapped_type in NATIVE_INTEGER_TYPES:
            self.__imports.add_type(LibSymbol.BIG_INT)
            return f"{LibSymbol.BIG_INT}.from{mapped_type.capitalize()}({value})"
        elif mapped_type == AssemblyType.STRING:
            self.__imports.add_type(LibSymbol.BYTES)
            return f"{LibSymbol.BYTES}.fromUTF8({value})"
        return value

    def generate_type_conversion(
        self,
        mapped_type: str,
        value: str,
        is_map_function: bool,
        include_return: bool = True,
    ) -> str:
        if mapped_type in (LibSymbol.BIG_INT, LibSymbol.ADDRESS):
            conversion = f"{mapped_type}.fromString({value})"
        elif mapped_type == LibSymbol.BYTES:
            conversion = f"{mapped_type}.fromHexString({value})"
        elif mapped_type in NATIVE_INTEGER_TYPES:
            conversion = f"{mapped_type}.parse({value})"
        elif mapped_type == AssemblyType.BOOL:
            conversion = f"{AssemblyType.U8}.parse({value}) as {AssemblyType.BOOL}"
        elif self.__tuples.is_tuple_class_name(mapped_type):
            conversion = f"{mapped_type}.parse({value})"
        else:
            conversion = value

        if is_map_function:
            return f"({value}: {AssemblyType.STRING}) => {conversion}"
        if include_return:
            return f"return {conversion}"
        return conversion

    def build_decode_expression(
        self, mapped_type: str, value: str, depth: int = 0
    ) -> str:
        """
        Build the expression converting a decoded string into `mapped_type`, arrays are decoded level by level
        from JSON string arrays.
        """
        if not array_handler.is_array_type(mapped_type):
            return self.generate_type_conversion(mapped_type, value, False, False)

        self.__imports.add_type(LibSymbol.JSON)
        element_type = array_handler.get_base_type(mapped_type)
        item = f"item{depth}"
        element_conversion = self.build_decode_expression(
            element_type, item, depth + 1
        )
        return (
            f"{value} === '' ? [] : {LibSymbol.JSON}.parse<{AssemblyType.STRING}[]>({value})"
            f".map<{element_type}>(({item}: {AssemblyType.STRING}) => {element_conversion})"
        )

    def build_encode_param(
        self, value: str, param: AbiParameter, depth: int = 0
    ) -> str:
        """
        Build the `EvmEncodeParam` expression passing `value` of the ABI type described by `param` to the encoder.
        """
        self.__imports.add_type(LibSymbol.EVM_ENCODE_PARAM)
        if param.is_tuple:
            abi_type = self.__tuples.map_tuple_type(param.type)
        else:
            abi_type = canonical_type(param.type)

        if param.kind == AbiTypeKind.ARRAY:
            element_param = param.model_copy(
                update={
                    "type": array_handler.get_base_type(param.type),
                    "internal_type": array_handler.get_base_type(param.internal_type)
                    if param.internal_type
                    else None,
                }
            )
            element = f"s{depth}"
            element_type = self.map_abi_type(element_param)
            nested = self.build_encode_param(element, element_param, depth + 1)
            return (
                f"{LibSymbol.EVM_ENCODE_PARAM}.fromValues('{abi_type}', "
                f"{value}.map<{LibSymbol.EVM_ENCODE_PARAM}>(({element}: {element_type}) => {nested}))"
            )

        if param.kind == AbiTypeKind.TUPLE:
            return (
                f"{LibSymbol.EVM_ENCODE_PARAM}.fromValues('{abi_type}', "
                f"{value}.toEvmEncodeParams())"
            )

        converted = self.to_lib_type(self.map_abi_type(param), value)
        return f"{LibSymbol.EVM_ENCODE_PARAM}.fromValue('{abi_type}', {converted})"
