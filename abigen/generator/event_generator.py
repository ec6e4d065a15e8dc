from __future__ import annotations

from typing import List

from abigen.abi import (
    TUPLE_ABI_TYPE,
    AbiItem,
    AbiParameter,
    canonical_parameter_type,
    event_signature,
    event_topic,
)
from abigen.core import get_logger
from abigen.core.enums import AbiTypeKind

from .code_builder import CodeBuilder
from .constants import AssemblyType, LibSymbol
from .import_registry import ImportRegistry
from .name_resolver import NameContext, NameResolver, NameScope
from .tuple_registry import TupleRegistry
from .type_mapper import TypeMapper

logger = get_logger(__name__)

# indexed values of dynamic types are stored as their keccak256 hash
_HASHED_ELEMENTARY_TYPES = frozenset({"string", "bytes"})


def is_hashed_topic(param: AbiParameter) -> bool:
    if not param.indexed:
        return False
    if param.kind in (AbiTypeKind.ARRAY, AbiTypeKind.TUPLE):
        return True
    return param.type in _HASHED_ELEMENTARY_TYPES


class EventCodeGenerator:
    """
    Generates one decoder class per ABI event. Indexed parameters are decoded from topics,
    the remaining ones from the log data.
    """

    __type_mapper: TypeMapper
    __tuples: TupleRegistry
    __imports: ImportRegistry
    __name_resolver: NameResolver
    __class_names: NameScope

    def __init__(
        self,
        type_mapper: TypeMapper,
        tuples: TupleRegistry,
        imports: ImportRegistry,
        name_resolver: NameResolver,
        class_names: NameScope,
    ):
        self.__type_mapper = type_mapper
        self.__tuples = tuples
        self.__imports = imports
        self.__name_resolver = name_resolver
        self.__class_names = class_names

    def map_field_type(self, param: AbiParameter) -> str:
        if is_hashed_topic(param):
            self.__imports.add_type(LibSymbol.BYTES)
            return str(LibSymbol.BYTES)
        return self.__type_mapper.map_abi_type(param)

    def generate_events_code(self, abi: List[AbiItem]) -> str:
        return "\n\n".join(
            self.generate_event_class(item) for item in abi if item.is_event
        )

    def generate_event_class(self, item: AbiItem) -> str:
        logger.debug(f"Generating event class for `{event_signature(item)}`")
        class_name = self.__class_names.claim(f"{item.name}Event")
        fields = self.__name_resolver.resolve_parameter_names(
            item.inputs, NameContext.CLASS_PROPERTY, "param"
        )
        types = [self.map_field_type(field) for field in fields]

        code = CodeBuilder()
        code.add(0, f"export class {class_name} {{")
        if not item.anonymous:
            code.add(
                1,
                f"static readonly TOPIC: {AssemblyType.STRING} = '{event_topic(item)}'",
            )
            code.add_blank()

        for field, field_type in zip(fields, types):
            code.add(1, f"readonly {field.identifier}: {field_type}")
        if fields:
            code.add_blank()

        params = ", ".join(f"{f.identifier}: {t}" for f, t in zip(fields, types))
        code.add(1, f"constructor({params}) {{")
        for field in fields:
            code.add(2, f"this.{field.identifier} = {field.identifier}")
        code.add(1, "}")
        code.add_blank()

        code.add(
            1,
            f"static decode(topics: {AssemblyType.STRING}[], data: {AssemblyType.STRING}): {class_name} {{",
        )
        code.extend(2, self.__generate_decode_body(item, fields, types, class_name))
        code.add(1, "}")
        code.add(0, "}")
        return code.build()

    def __decode_call(self, abi_type: str, value: str) -> str:
        self.__imports.add_type(LibSymbol.EVM)
        self.__imports.add_type(LibSymbol.EVM_DECODE_PARAM)
        return f"{LibSymbol.EVM}.decode(new {LibSymbol.EVM_DECODE_PARAM}('{abi_type}', {value}))"

    def __generate_decode_body(
        self,
        item: AbiItem,
        fields: List[AbiParameter],
        types: List[str],
        class_name: str,
    ) -> str:
        locals_ = self.__name_resolver.resolve_names(
            [field.identifier for field in fields],
            NameContext.LOCAL_VARIABLE,
            self.__class_names.names,
        )
        code = CodeBuilder()

        # anonymous events do not reserve the first topic for the signature hash
        topic_index = 0 if item.anonymous else 1
        for field, field_type, local in zip(fields, types, locals_):
            if not field.indexed:
                continue
            abi_type = (
                "bytes32" if is_hashed_topic(field) else canonical_parameter_type(field)
            )
            decoded = self.__decode_call(abi_type, f"topics[{topic_index}]")
            conversion = self.__type_mapper.generate_type_conversion(
                field_type, decoded, False, False
            )
            code.add(0, f"const {local}: {field_type} = {conversion}")
            topic_index += 1

        data_fields = [
            (field, field_type, local)
            for field, field_type, local in zip(fields, types, locals_)
            if not field.indexed
        ]
        if len(data_fields) == 1:
            field, field_type, local = data_fields[0]
            code.add(
                0,
                f"const decoded = {self.__decode_call(canonical_parameter_type(field), 'data')}",
            )
            conversion = self.__type_mapper.build_decode_expression(
                field_type, "decoded"
            )
            code.add(0, f"const {local}: {field_type} = {conversion}")
        elif len(data_fields) > 1:
            abi_type = self.__tuples.generate_tuple_type_string(
                TUPLE_ABI_TYPE, [field for field, _, _ in data_fields]
            )
            self.__imports.add_type(LibSymbol.JSON)
            code.add(0, f"const decoded = {self.__decode_call(abi_type, 'data')}")
            code.add(
                0,
                f"const parts = {LibSymbol.JSON}.parse<{AssemblyType.STRING}[]>(decoded)",
            )
            code.add(
                0,
                f"if (parts.length !== {len(data_fields)}) throw new Error('Invalid data for event parsing')",
            )
            for index, (field, field_type, local) in enumerate(data_fields):
                conversion = self.__type_mapper.build_decode_expression(
                    field_type, f"parts[{index}]"
                )
                code.add(0, f"const {local}: {field_type} = {conversion}")

        code.add(0, f"return new {class_name}({', '.join(locals_)})")
        return code.build()
