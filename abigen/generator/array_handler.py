"""
String helpers over ABI array-type syntax. All functions are total: input that is not an array type is returned as is.
"""


def is_array_type(abi_or_mapped_type: str) -> bool:
    return abi_or_mapped_type.endswith("]")


def get_base_type(abi_type: str) -> str:
    """
    Strip exactly one array level, e.g. `uint256[2][]` -> `uint256[2]`.
    """
    if not is_array_type(abi_type):
        return abi_type
    last_bracket = abi_type.rfind("[")
    if last_bracket == -1:
        return abi_type
    return abi_type[:last_bracket]


def get_array_depth(abi_type: str) -> int:
    depth = 0
    while is_array_type(abi_type):
        stripped = get_base_type(abi_type)
        if stripped == abi_type:
            break
        abi_type = stripped
        depth += 1
    return depth


def get_ultimate_base_type(abi_type: str) -> str:
    """
    Strip all array levels, e.g. `tuple[][3]` -> `tuple`.
    """
    while is_array_type(abi_type):
        stripped = get_base_type(abi_type)
        if stripped == abi_type:
            break
        abi_type = stripped
    return abi_type


def get_array_suffix(abi_type: str) -> str:
    """
    Return all array levels of the type, e.g. `uint256[2][]` -> `[2][]`.
    """
    return abi_type[len(get_ultimate_base_type(abi_type)) :]
