from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from abigen.abi import (
    TUPLE_ABI_TYPE,
    AbiItem,
    AbiParameter,
    canonical_parameter_type,
    function_selector,
    function_signature,
)
from abigen.core import get_logger

from .code_builder import CodeBuilder
from .constants import UNKNOWN_TYPE, VOID_TYPE, AssemblyType, LibSymbol
from .import_registry import ImportRegistry
from .name_resolver import NameContext, NameResolver, NameScope
from .tuple_registry import TupleRegistry
from .type_mapper import TypeMapper

logger = get_logger(__name__)


def capitalize(name: str) -> str:
    return name[:1].upper() + name[1:]


@dataclass(frozen=True)
class FunctionBinding:
    """
    Names assigned to a single ABI function in the generated contract and utils classes.

    Attributes:
        item: ABI function entry.
        method_name: Method name in the contract class.
        encoder_name: Name of the static calldata encoder in the utils class.
        decoder_name: Name of the static response decoder in the utils class, `None` for functions
            without a decoder (write functions and reads with no outputs).
        inputs: Inputs with collision-free parameter names.
    """

    item: AbiItem
    method_name: str
    encoder_name: str
    decoder_name: Optional[str]
    inputs: List[AbiParameter]


class FunctionCodeGenerator:
    __utils_class_name: str
    __type_mapper: TypeMapper
    __tuples: TupleRegistry
    __imports: ImportRegistry
    __name_resolver: NameResolver
    __class_names: Optional[NameScope]

    def __init__(
        self,
        utils_class_name: str,
        type_mapper: TypeMapper,
        tuples: TupleRegistry,
        imports: ImportRegistry,
        name_resolver: NameResolver,
        class_names: Optional[NameScope] = None,
    ):
        self.__utils_class_name = utils_class_name
        self.__type_mapper = type_mapper
        self.__tuples = tuples
        self.__imports = imports
        self.__name_resolver = name_resolver
        self.__class_names = class_names

    @staticmethod
    def is_write_function(item: AbiItem) -> bool:
        return item.is_write

    def bind(self, functions: List[AbiItem]) -> List[FunctionBinding]:
        """
        Assign method, encoder and decoder names to the functions in ABI order.

        Args:
            functions: ABI entries of type `function`.

        Returns:
            One binding per function, overloaded functions are numbered in ABI order.
        """
        method_names = self.__name_resolver.resolve_overloads(
            [item.name for item in functions], NameContext.CLASS_PROPERTY
        )
        utils_names = self.__name_resolver.scope(NameContext.CLASS_PROPERTY)
        class_names = (
            self.__class_names.names if self.__class_names is not None else frozenset()
        )

        bindings = []
        for item, method_name in zip(functions, method_names):
            encoder_name = utils_names.claim(f"encode{capitalize(method_name)}")
            decoder_name = None
            if not self.is_write_function(item) and len(item.outputs) > 0:
                decoder_name = utils_names.claim(f"decode{capitalize(method_name)}")

            bindings.append(
                FunctionBinding(
                    item=item,
                    method_name=method_name,
                    encoder_name=encoder_name,
                    decoder_name=decoder_name,
                    inputs=self.__name_resolver.resolve_parameter_names(
                        item.inputs,
                        NameContext.FUNCTION_PARAMETER,
                        "param",
                        class_names,
                    ),
                )
            )
        return bindings

    def get_return_type(self, item: AbiItem) -> str:
        """
        Type of the decoded response, `void` if the function has no outputs.
        """
        if len(item.outputs) == 0:
            return VOID_TYPE
        if len(item.outputs) == 1:
            return self.__type_mapper.map_abi_type(item.outputs[0])

        class_name = self.__tuples.class_name_for(self.__outputs_tuple(item))
        if class_name is not None:
            return class_name
        logger.warning(
            f"Could not determine tuple class name for outputs of function `{item.name}`, using `{UNKNOWN_TYPE}`."
        )
        return UNKNOWN_TYPE

    def get_decode_abi_type(self, item: AbiItem) -> str:
        if len(item.outputs) == 1:
            return canonical_parameter_type(item.outputs[0])
        return self.__tuples.generate_tuple_type_string(TUPLE_ABI_TYPE, item.outputs)

    def __outputs_tuple(self, item: AbiItem) -> AbiParameter:
        class_name = self.__tuples.get_output_tuple_class_name(item.name)
        return AbiParameter(
            name=class_name,
            type=TUPLE_ABI_TYPE,
            internal_type=f"struct {class_name}",
            components=item.outputs,
        )

    def __method_params(self, inputs: List[AbiParameter]) -> List[str]:
        return [
            f"{param.identifier}: {self.__type_mapper.map_abi_type(param)}"
            for param in inputs
        ]

    def generate_method(self, binding: FunctionBinding) -> str:
        logger.debug(
            f"Generating method `{binding.method_name}` for `{function_signature(binding.item)}`"
        )
        if self.is_write_function(binding.item):
            return self.__generate_write_method(binding)
        return self.__generate_read_method(binding)

    def __generate_read_method(self, binding: FunctionBinding) -> str:
        return_type = self.get_return_type(binding.item)
        result_type = AssemblyType.BOOL if return_type == VOID_TYPE else return_type
        result_generics = f"<{result_type}, {AssemblyType.STRING}>"
        args = ", ".join(param.identifier for param in binding.inputs)

        self.__imports.add_type(LibSymbol.ENVIRONMENT)
        self.__imports.add_type(LibSymbol.RESULT)

        code = CodeBuilder()
        code.add(
            1,
            f"{binding.method_name}({', '.join(self.__method_params(binding.inputs))}): {LibSymbol.RESULT}{result_generics} {{",
        )
        code.add(
            2,
            f"const encodedData = {self.__utils_class_name}.{binding.encoder_name}({args})",
        )
        code.add(
            2,
            f"const response = {LibSymbol.ENVIRONMENT}.evmCallQuery(this.address, this.chainId, encodedData.toHexString(), this.timestamp)",
        )
        code.add(
            2,
            f"if (response.isError) return {LibSymbol.RESULT}.err{result_generics}(response.error)",
        )
        if binding.decoder_name is None:
            code.add(2, f"return {LibSymbol.RESULT}.ok{result_generics}(true)")
        else:
            code.add(
                2,
                f"const decodedResponse = {self.__utils_class_name}.{binding.decoder_name}(response.unwrap())",
            )
            code.add(
                2, f"return {LibSymbol.RESULT}.ok{result_generics}(decodedResponse)"
            )
        code.add(1, "}")
        return code.build()

    def __generate_write_method(self, binding: FunctionBinding) -> str:
        params = self.__method_params(binding.inputs)
        args = ", ".join(param.identifier for param in binding.inputs)
        add_call_args = "this.address, encodedData"
        if binding.item.is_payable:
            self.__imports.add_type(LibSymbol.BIG_INT)
            params.append(f"value: {LibSymbol.BIG_INT}")
            add_call_args += ", value"

        self.__imports.add_type(LibSymbol.EVM_CALL_BUILDER)

        code = CodeBuilder()
        code.add(
            1,
            f"{binding.method_name}({', '.join(params)}): {LibSymbol.EVM_CALL_BUILDER} {{",
        )
        code.add(
            2,
            f"const encodedData = {self.__utils_class_name}.{binding.encoder_name}({args})",
        )
        code.add(
            2,
            f"const callBuilder = {LibSymbol.EVM_CALL_BUILDER}.forChain(this.chainId).addCall({add_call_args})",
        )
        code.add(2, "const feeAmount = this.feeAmount")
        code.add(2, "if (feeAmount !== null) callBuilder.addMaxFee(feeAmount)")
        code.add(2, "return callBuilder")
        code.add(1, "}")
        return code.build()

    def generate_encoder(self, binding: FunctionBinding) -> str:
        self.__imports.add_type(LibSymbol.BYTES)
        selector = function_selector(binding.item)
        encode_params = [
            self.__type_mapper.build_encode_param(param.identifier, param)
            for param in binding.inputs
        ]

        if encode_params:
            self.__imports.add_type(LibSymbol.EVM)
            encoded_call = (
                f"'{selector}' + {LibSymbol.EVM}.encode([{', '.join(encode_params)}])"
            )
        else:
            encoded_call = f"'{selector}'"

        code = CodeBuilder()
        code.add(
            1,
            f"static {binding.encoder_name}({', '.join(self.__method_params(binding.inputs))}): {LibSymbol.BYTES} {{",
        )
        code.add(2, f"return {LibSymbol.BYTES}.fromHexString({encoded_call})")
        code.add(1, "}")
        return code.build()

    def generate_decoder(self, binding: FunctionBinding) -> Optional[str]:
        if binding.decoder_name is None:
            return None

        return_type = self.get_return_type(binding.item)
        self.__imports.add_type(LibSymbol.EVM)
        self.__imports.add_type(LibSymbol.EVM_DECODE_PARAM)

        code = CodeBuilder()
        code.add(
            1,
            f"static {binding.decoder_name}(encodedResponse: {AssemblyType.STRING}): {return_type} {{",
        )
        code.add(
            2,
            f"const decodedResponse = {LibSymbol.EVM}.decode(new {LibSymbol.EVM_DECODE_PARAM}('{self.get_decode_abi_type(binding.item)}', encodedResponse))",
        )
        code.add(
            2,
            f"return {self.__type_mapper.build_decode_expression(return_type, 'decodedResponse')}",
        )
        code.add(1, "}")
        return code.build()

    def generate_utils_class(self, bindings: List[FunctionBinding]) -> str:
        methods = []
        for binding in bindings:
            methods.append(self.generate_encoder(binding))
            decoder = self.generate_decoder(binding)
            if decoder is not None:
                methods.append(decoder)

        code = CodeBuilder()
        code.add(0, f"export class {self.__utils_class_name} {{")
        code.extend(0, "\n\n".join(methods))
        code.add(0, "}")
        return code.build()
