from .data_model import (
    TUPLE_ABI_TYPE,
    AbiItem,
    AbiParameter,
    InvalidAbiError,
    parse_abi,
)
from .signatures import (
    canonical_parameter_type,
    canonical_type,
    event_signature,
    event_topic,
    function_selector,
    function_signature,
)
