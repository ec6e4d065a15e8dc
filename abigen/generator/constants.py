from abigen.core.enums import StrEnum

# indentation width of the generated AssemblyScript
TAB_WIDTH = 2

LIB_MODULE = "@mimicprotocol/lib-ts"

UNKNOWN_TYPE = "unknown"
VOID_TYPE = "void"


class LibSymbol(StrEnum):
    """
    Symbols exported by the runtime support library that generated bindings may import.
    """

    ADDRESS = "Address"
    BIG_INT = "BigInt"
    BYTES = "Bytes"
    CHAIN_ID = "ChainId"
    ENVIRONMENT = "environment"
    EVM = "evm"
    EVM_CALL_BUILDER = "EvmCallBuilder"
    EVM_DECODE_PARAM = "EvmDecodeParam"
    EVM_ENCODE_PARAM = "EvmEncodeParam"
    JSON = "JSON"
    RESULT = "Result"
    TOKEN_AMOUNT = "TokenAmount"


class AssemblyType(StrEnum):
    BOOL = "bool"
    STRING = "string"
    I8 = "i8"
    U8 = "u8"
    DATE = "Date"


# value types of the support library, the only library symbols a mapped ABI type can resolve to
LIB_VALUE_TYPES = frozenset(
    str(t) for t in (LibSymbol.ADDRESS, LibSymbol.BIG_INT, LibSymbol.BYTES)
)

NATIVE_INTEGER_TYPES = frozenset(str(t) for t in (AssemblyType.I8, AssemblyType.U8))
