from __future__ import annotations

from typing import Any, Iterable, List, Union

from abigen.abi import AbiItem, parse_abi
from abigen.core import get_logger

from .code_builder import CodeBuilder
from .constants import AssemblyType, LibSymbol
from .event_generator import EventCodeGenerator
from .function_generator import FunctionBinding, FunctionCodeGenerator
from .import_registry import ImportRegistry
from .name_resolver import NameContext, NameResolver
from .tuple_registry import TupleRegistry
from .type_mapper import TypeMapper

logger = get_logger(__name__)


class ContractBindingGenerator:
    """
    Generates the AssemblyScript bindings of a single contract ABI.

    All registries are owned by the instance, a generator is meant to be used for a single `generate` call.
    """

    __abi: List[AbiItem]
    __contract_name: str
    __utils_class_name: str
    __name_resolver: NameResolver
    __imports: ImportRegistry
    __tuples: TupleRegistry
    __type_mapper: TypeMapper
    __functions: FunctionCodeGenerator
    __events: EventCodeGenerator

    def __init__(self, abi: List[AbiItem], contract_name: str):
        self.__abi = abi
        self.__name_resolver = NameResolver()
        self.__imports = ImportRegistry()

        class_names = self.__name_resolver.scope(NameContext.CLASS_NAME)
        self.__contract_name = class_names.claim(contract_name)
        if self.__contract_name != contract_name:
            logger.warning(
                f"Contract name `{contract_name}` collides with a reserved name, using `{self.__contract_name}`."
            )
        self.__utils_class_name = class_names.claim(f"{self.__contract_name}Utils")

        self.__tuples = TupleRegistry(self.__name_resolver, class_names)
        self.__tuples.extract_definitions(abi)
        self.__type_mapper = TypeMapper(self.__imports, self.__tuples)
        self.__functions = FunctionCodeGenerator(
            self.__utils_class_name,
            self.__type_mapper,
            self.__tuples,
            self.__imports,
            self.__name_resolver,
            class_names,
        )
        self.__events = EventCodeGenerator(
            self.__type_mapper,
            self.__tuples,
            self.__imports,
            self.__name_resolver,
            class_names,
        )

    @property
    def contract_name(self) -> str:
        return self.__contract_name

    @property
    def utils_class_name(self) -> str:
        return self.__utils_class_name

    def generate(self) -> str:
        functions = [item for item in self.__abi if item.is_function]
        has_events = any(item.is_event for item in self.__abi)
        if not functions and not has_events:
            logger.debug(f"Nothing to generate for `{self.__contract_name}`")
            return ""

        bindings = self.__functions.bind(functions)
        sections = [self.__generate_contract_class(bindings)]
        if bindings:
            sections.append(self.__functions.generate_utils_class(bindings))

        tuple_classes = self.__tuples.generate_classes_code(
            self.__type_mapper, self.__imports
        )
        if tuple_classes:
            sections.append(tuple_classes)

        event_classes = self.__events.generate_events_code(self.__abi)
        if event_classes:
            sections.append(event_classes)

        # imports are known only after every other section is generated
        sections.insert(0, self.__imports.generate_imports_code())
        return "\n\n".join(sections)

    def __generate_contract_class(self, bindings: List[FunctionBinding]) -> str:
        self.__imports.add_type(LibSymbol.ADDRESS)
        self.__imports.add_type(LibSymbol.CHAIN_ID)
        self.__imports.add_type(LibSymbol.TOKEN_AMOUNT)

        code = CodeBuilder()
        code.add(0, f"export class {self.__contract_name} {{")
        code.add(1, f"private address: {LibSymbol.ADDRESS}")
        code.add(1, f"private chainId: {LibSymbol.CHAIN_ID}")
        code.add(1, f"private timestamp: {AssemblyType.DATE} | null")
        code.add(1, f"private feeAmount: {LibSymbol.TOKEN_AMOUNT} | null")
        code.add_blank()
        code.add(
            1,
            f"constructor(address: {LibSymbol.ADDRESS}, chainId: {LibSymbol.CHAIN_ID}, "
            f"timestamp: {AssemblyType.DATE} | null = null, feeAmount: {LibSymbol.TOKEN_AMOUNT} | null = null) {{",
        )
        code.add(2, "this.address = address")
        code.add(2, "this.chainId = chainId")
        code.add(2, "this.timestamp = timestamp")
        code.add(2, "this.feeAmount = feeAmount")
        code.add(1, "}")

        for binding in bindings:
            code.add_blank()
            code.extend(0, self.__functions.generate_method(binding))
        code.add(0, "}")
        return code.build()


def generate(abi: Union[Iterable[Any], List[AbiItem]], contract_name: str) -> str:
    """
    Generate AssemblyScript bindings for a contract ABI.

    Args:
        abi: Parsed ABI JSON (list of entries) or already validated ABI items.
        contract_name: Name of the generated contract class.

    Returns:
        Source text of the bindings, empty string if the ABI contains no functions and no events.
    """
    return ContractBindingGenerator(parse_abi(abi), contract_name).generate()
