from typing import Any, Dict

from eth_utils.abi import (
    collapse_if_tuple,
    event_abi_to_log_topic,
    function_abi_to_4byte_selector,
)

from .data_model import TUPLE_ABI_TYPE, AbiItem, AbiParameter

# types that may be written without their default size
_DECAYED_TYPES: Dict[str, str] = {
    "uint": "uint256",
    "int": "int256",
    "fixed": "fixed128x18",
    "ufixed": "ufixed128x18",
}


def canonical_type(abi_type: str) -> str:
    """
    Decay an elementary ABI type (optionally followed by array suffixes) into its canonical form,
    e.g. `uint[2][]` -> `uint256[2][]`.
    """
    bracket = abi_type.find("[")
    if bracket == -1:
        base, suffix = abi_type, ""
    else:
        base, suffix = abi_type[:bracket], abi_type[bracket:]
    return _DECAYED_TYPES.get(base, base) + suffix


def _normalized(param: AbiParameter) -> Dict[str, Any]:
    ret: Dict[str, Any] = {"type": canonical_type(param.type)}
    if param.components is not None:
        ret["components"] = [_normalized(c) for c in param.components]
    return ret


def _normalized_item(item: AbiItem) -> Dict[str, Any]:
    return {
        "type": item.type,
        "name": item.name,
        "inputs": [_normalized(p) for p in item.inputs],
    }


def canonical_parameter_type(param: AbiParameter) -> str:
    """
    Canonical type of a parameter as used in signatures, tuples are expanded into `(t1,t2,...)`.
    """
    if param.is_tuple and not param.components:
        return "()" + param.type[len(TUPLE_ABI_TYPE) :]
    return collapse_if_tuple(_normalized(param))


def function_signature(item: AbiItem) -> str:
    return f"{item.name}({','.join(canonical_parameter_type(p) for p in item.inputs)})"


def function_selector(item: AbiItem) -> str:
    return "0x" + function_abi_to_4byte_selector(_normalized_item(item)).hex()


def event_signature(item: AbiItem) -> str:
    # same shape as a function signature, `indexed` does not take part in it
    return function_signature(item)


def event_topic(item: AbiItem) -> str:
    return "0x" + event_abi_to_log_topic(_normalized_item(item)).hex()
