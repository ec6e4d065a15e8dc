from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional

from abigen.abi import (
    TUPLE_ABI_TYPE,
    AbiItem,
    AbiParameter,
    canonical_parameter_type,
)
from abigen.core import get_logger

from . import array_handler
from .code_builder import CodeBuilder
from .constants import AssemblyType, LibSymbol
from .name_resolver import NameContext, NameResolver, NameScope

if TYPE_CHECKING:
    from .import_registry import ImportRegistry
    from .type_mapper import TypeMapper

logger = get_logger(__name__)

STRUCT_NAME_RE = re.compile(r"^struct\s+(?:\w+\.)*(\w+)")


def pascal_case(name: str) -> str:
    sanitized = re.sub(r"[^a-zA-Z0-9_]", "", name)
    if not sanitized:
        return "UnnamedFunction"
    return sanitized[0].upper() + sanitized[1:]


@dataclass(frozen=True)
class TupleDefinition:
    key: str
    class_name: str
    components: List[AbiParameter]


class TupleRegistry:
    """
    Assigns a class name to every distinct tuple shape found in an ABI and generates the classes.

    Tuples are identified by the struct name carried in `internalType` and, if missing or ambiguous,
    by their structure. Functions with more than one output get a synthetic `<Function>Outputs` tuple.
    """

    __definitions: Dict[str, TupleDefinition]
    __name_resolver: NameResolver
    __class_names: NameScope
    __counter: int

    def __init__(self, name_resolver: NameResolver, class_names: NameScope):
        self.__definitions = {}
        self.__name_resolver = name_resolver
        self.__class_names = class_names
        self.__counter = 0

    @property
    def definitions(self) -> List[TupleDefinition]:
        return list(self.__definitions.values())

    @staticmethod
    def is_tuple_type(abi_type: str) -> bool:
        return array_handler.get_ultimate_base_type(abi_type) == TUPLE_ABI_TYPE

    def is_tuple_class_name(self, name: str) -> bool:
        return any(d.class_name == name for d in self.__definitions.values())

    @staticmethod
    def map_tuple_type(abi_type: str) -> str:
        """
        ABI type string the encoder expects for a tuple (or an array of tuples).
        """
        return "()" + array_handler.get_array_suffix(abi_type)

    @staticmethod
    def generate_tuple_type_string(
        abi_type: str, components: List[AbiParameter]
    ) -> str:
        """
        Expand a tuple type into the `(t1,t2,...)` form used for decoding, e.g. `(uint256,string)[]`.
        """
        return canonical_parameter_type(
            AbiParameter(type=abi_type, components=components)
        )

    @staticmethod
    def __lookup_key(param: AbiParameter) -> Optional[str]:
        if param.internal_type is None:
            return None
        base = array_handler.get_ultimate_base_type(param.internal_type)
        if STRUCT_NAME_RE.match(base) is None:
            return None
        return base

    @staticmethod
    def __components_match(
        expected: List[AbiParameter], actual: List[AbiParameter]
    ) -> bool:
        if len(expected) != len(actual):
            return False
        for e, a in zip(expected, actual):
            if canonical_parameter_type(e) != canonical_parameter_type(a):
                return False
            if e.name and a.name and e.name != a.name:
                return False
        return True

    def find_matching_definition(
        self, components: List[AbiParameter]
    ) -> Optional[TupleDefinition]:
        for definition in self.__definitions.values():
            if self.__components_match(definition.components, components):
                return definition
        return None

    def find_definition(self, param: AbiParameter) -> Optional[TupleDefinition]:
        if not param.is_tuple or not param.components:
            return None

        key = self.__lookup_key(param)
        if key is not None:
            definition = self.__definitions.get(key)
            if definition is not None and self.__components_match(
                definition.components, param.components
            ):
                return definition
        return self.find_matching_definition(param.components)

    def class_name_for(self, param: AbiParameter) -> Optional[str]:
        definition = self.find_definition(param)
        return definition.class_name if definition is not None else None

    def get_output_tuple_class_name(self, function_name: str) -> str:
        return f"{pascal_case(function_name)}Outputs"

    def __register(self, param: AbiParameter) -> None:
        if not param.is_tuple or not param.components:
            return
        if self.find_definition(param) is not None:
            return

        key = self.__lookup_key(param)
        match = STRUCT_NAME_RE.match(key) if key is not None else None
        if match is not None:
            preferred = match.group(1)
        else:
            preferred = f"Tuple{self.__counter}"
            self.__counter += 1
        class_name = self.__class_names.claim(preferred)

        if key is None:
            key = class_name
        elif key in self.__definitions:
            # same struct name with a different layout, e.g. two libraries declaring `Foo`
            key = f"{key}#{class_name}"

        components = self.__name_resolver.resolve_parameter_names(
            param.components, NameContext.CLASS_PROPERTY, "field"
        )
        self.__definitions[key] = TupleDefinition(key, class_name, components)
        logger.debug(f"Registered tuple class `{class_name}` for `{key}`")

        for component in param.components:
            self.__register(component)

    def extract_definitions(self, abi: List[AbiItem]) -> None:
        for item in abi:
            if item.is_function:
                for param in item.inputs:
                    self.__register(param)
                for param in item.outputs:
                    self.__register(param)

                if len(item.outputs) > 1:
                    class_name = self.get_output_tuple_class_name(item.name)
                    self.__register(
                        AbiParameter(
                            name=class_name,
                            type=TUPLE_ABI_TYPE,
                            internal_type=f"struct {class_name}",
                            components=item.outputs,
                        )
                    )
            elif item.is_event:
                for param in item.inputs:
                    self.__register(param)

    def generate_classes_code(
        self, type_mapper: TypeMapper, imports: ImportRegistry
    ) -> str:
        if not self.__definitions:
            return ""
        return "\n\n".join(
            self.__generate_class_code(definition, type_mapper, imports)
            for definition in self.__definitions.values()
        )

    def __generate_class_code(
        self,
        definition: TupleDefinition,
        type_mapper: TypeMapper,
        imports: ImportRegistry,
    ) -> str:
        class_name = definition.class_name
        fields = [
            (component, type_mapper.map_abi_type(component))
            for component in definition.components
        ]
        locals_ = self.__name_resolver.resolve_names(
            [component.identifier for component in definition.components],
            NameContext.LOCAL_VARIABLE,
            self.__class_names.names,
        )
        imports.add_type(LibSymbol.JSON)
        imports.add_type(LibSymbol.EVM_ENCODE_PARAM)

        code = CodeBuilder()
        code.add(0, f"export class {class_name} {{")
        for component, mapped in fields:
            code.add(1, f"readonly {component.identifier}: {mapped}")
        code.add_blank()

        params = ", ".join(f"{c.identifier}: {mapped}" for c, mapped in fields)
        code.add(1, f"constructor({params}) {{")
        for component, _ in fields:
            code.add(2, f"this.{component.identifier} = {component.identifier}")
        code.add(1, "}")
        code.add_blank()

        code.add(1, f"static parse(data: {AssemblyType.STRING}): {class_name} {{")
        code.add(
            2,
            f"const parts = {LibSymbol.JSON}.parse<{AssemblyType.STRING}[]>(data)",
        )
        code.add(
            2,
            f"if (parts.length !== {len(fields)}) throw new Error('Invalid data for tuple parsing')",
        )
        for index, ((component, mapped), local) in enumerate(zip(fields, locals_)):
            decoded = type_mapper.build_decode_expression(mapped, f"parts[{index}]")
            code.add(2, f"const {local}: {mapped} = {decoded}")
        code.add(2, f"return new {class_name}({', '.join(locals_)})")
        code.add(1, "}")
        code.add_blank()

        code.add(1, f"toEvmEncodeParams(): {LibSymbol.EVM_ENCODE_PARAM}[] {{")
        code.add(2, "return [")
        for component, _ in fields:
            encoded = type_mapper.build_encode_param(
                f"this.{component.identifier}", component
            )
            code.add(3, f"{encoded},")
        code.add(2, "]")
        code.add(1, "}")
        code.add(0, "}")
        return code.build()
