from abigen.abi import AbiParameter, parse_abi
from abigen.generator.import_registry import ImportRegistry
from abigen.generator.name_resolver import NameContext, NameResolver
from abigen.generator.tuple_registry import TupleRegistry, pascal_case
from abigen.generator.type_mapper import TypeMapper


def struct(name, *components, type="tuple", internal_type=None):
    param = {"name": name, "type": type, "components": list(components)}
    if internal_type is not None:
        param["internalType"] = internal_type
    return param


def view(name, inputs=(), outputs=()):
    return {
        "type": "function",
        "name": name,
        "stateMutability": "view",
        "inputs": list(inputs),
        "outputs": list(outputs),
    }


def make_registry(abi):
    resolver = NameResolver()
    registry = TupleRegistry(resolver, resolver.scope(NameContext.CLASS_NAME))
    registry.extract_definitions(parse_abi(abi))
    return registry


DATA = struct(
    "",
    {"name": "a", "type": "uint256"},
    {"name": "b", "type": "string"},
    internal_type="struct Data",
)


def test_struct_names_from_internal_type():
    registry = make_registry([view("getData", outputs=[DATA])])
    assert [d.class_name for d in registry.definitions] == ["Data"]
    assert [c.identifier for c in registry.definitions[0].components] == ["a", "b"]


def test_same_struct_registered_once():
    registry = make_registry(
        [
            view("getData", outputs=[DATA]),
            view("check", inputs=[{**DATA, "name": "data"}]),
        ]
    )
    assert len(registry.definitions) == 1


def test_structural_match_without_internal_type():
    first = struct("", {"name": "a", "type": "uint256"}, {"name": "", "type": "bool"})
    second = struct("", {"name": "", "type": "uint"}, {"name": "ok", "type": "bool"})
    registry = make_registry([view("f", outputs=[first]), view("g", inputs=[second])])

    assert [d.class_name for d in registry.definitions] == ["Tuple0"]
    assert registry.class_name_for(AbiParameter.model_validate(second)) == "Tuple0"


def test_differently_named_fields_not_merged():
    first = struct("", {"name": "a", "type": "uint256"})
    second = struct("", {"name": "b", "type": "uint256"})
    registry = make_registry([view("f", outputs=[first]), view("g", outputs=[second])])
    assert [d.class_name for d in registry.definitions] == ["Tuple0", "Tuple1"]


def test_same_name_different_structure():
    first = struct("", {"name": "x", "type": "uint256"}, internal_type="struct A.Foo")
    second = struct("", {"name": "x", "type": "address"}, internal_type="struct B.Foo")
    third = struct("", {"name": "x", "type": "bool"}, internal_type="struct A.Foo")
    registry = make_registry(
        [
            view("f", outputs=[first]),
            view("g", outputs=[second]),
            view("h", outputs=[third]),
        ]
    )

    assert [d.class_name for d in registry.definitions] == ["Foo", "Foo1", "Foo2"]
    assert registry.class_name_for(AbiParameter.model_validate(first)) == "Foo"
    assert registry.class_name_for(AbiParameter.model_validate(second)) == "Foo1"
    assert registry.class_name_for(AbiParameter.model_validate(third)) == "Foo2"


def test_nested_structs_registered():
    leg = struct(
        "legs",
        {"name": "token", "type": "address"},
        {"name": "amount", "type": "int128"},
        type="tuple[]",
        internal_type="struct Lib.Leg[]",
    )
    position = struct(
        "",
        {"name": "id", "type": "uint256"},
        leg,
        type="tuple[]",
        internal_type="struct Lib.Position[]",
    )
    registry = make_registry([view("positions", outputs=[position])])

    assert [d.class_name for d in registry.definitions] == ["Position", "Leg"]
    assert (
        registry.generate_tuple_type_string(
            position["type"], registry.definitions[0].components
        )
        == "(uint256,(address,int128)[])[]"
    )


def test_multiple_outputs_get_synthetic_tuple():
    registry = make_registry(
        [
            view(
                "getReserves",
                outputs=[
                    {"name": "reserve0", "type": "uint112"},
                    {"name": "reserve1", "type": "uint112"},
                ],
            ),
            view("single", outputs=[{"name": "", "type": "uint256"}]),
        ]
    )
    assert [d.class_name for d in registry.definitions] == ["GetReservesOutputs"]
    assert registry.get_output_tuple_class_name("getReserves") == "GetReservesOutputs"
    assert pascal_case("get-reserves") == "Getreserves"
    assert pascal_case("") == "UnnamedFunction"


def test_event_structs_registered():
    event = {
        "type": "event",
        "name": "Moved",
        "inputs": [
            {
                **struct(
                    "point",
                    {"name": "x", "type": "int256"},
                    {"name": "y", "type": "int256"},
                    internal_type="struct Point",
                ),
                "indexed": False,
            }
        ],
    }
    registry = make_registry([event])
    assert registry.is_tuple_class_name("Point")
    assert not registry.is_tuple_class_name("Moved")


def test_class_names_avoid_library_symbols():
    registry = make_registry(
        [
            view(
                "f",
                outputs=[
                    struct(
                        "", {"name": "v", "type": "bytes"}, internal_type="struct Bytes"
                    )
                ],
            )
        ]
    )
    assert [d.class_name for d in registry.definitions] == ["Bytes1"]


def test_map_tuple_type():
    assert TupleRegistry.map_tuple_type("tuple") == "()"
    assert TupleRegistry.map_tuple_type("tuple[2][]") == "()[2][]"
    assert TupleRegistry.is_tuple_type("tuple[]")
    assert not TupleRegistry.is_tuple_type("uint256[]")


def test_generate_classes_code():
    registry = make_registry([view("getData", outputs=[DATA])])
    imports = ImportRegistry()
    mapper = TypeMapper(imports, registry)

    assert registry.generate_classes_code(mapper, imports) == "\n".join(
        [
            "export class Data {",
            "  readonly a: BigInt",
            "  readonly b: string",
            "",
            "  constructor(a: BigInt, b: string) {",
            "    this.a = a",
            "    this.b = b",
            "  }",
            "",
            "  static parse(data: string): Data {",
            "    const parts = JSON.parse<string[]>(data)",
            "    if (parts.length !== 2) throw new Error('Invalid data for tuple parsing')",
            "    const a: BigInt = BigInt.fromString(parts[0])",
            "    const b: string = parts[1]",
            "    return new Data(a, b)",
            "  }",
            "",
            "  toEvmEncodeParams(): EvmEncodeParam[] {",
            "    return [",
            "      EvmEncodeParam.fromValue('uint256', this.a),",
            "      EvmEncodeParam.fromValue('string', Bytes.fromUTF8(this.b)),",
            "    ]",
            "  }",
            "}",
        ]
    )
    assert (
        imports.generate_imports_code()
        == "import { BigInt, Bytes, EvmEncodeParam, JSON } from '@mimicprotocol/lib-ts'"
    )


def test_field_names_escaped():
    reserved = struct(
        "",
        {"name": "data", "type": "uint8"},
        {"name": "parse", "type": "bool"},
        {"name": "", "type": "address"},
        internal_type="struct Weird",
    )
    registry = make_registry([view("f", outputs=[reserved])])
    imports = ImportRegistry()
    code = registry.generate_classes_code(TypeMapper(imports, registry), imports)

    assert "  readonly data: u8" in code
    assert "  readonly parse_prop: bool" in code
    assert "  readonly field2: Address" in code
    assert "    const data_var: u8 = u8.parse(parts[0])" in code
    assert "    const parse_prop: bool = u8.parse(parts[1]) as bool" in code
    assert "    return new Weird(data_var, parse_prop, field2)" in code
    assert "      EvmEncodeParam.fromValue('uint8', BigInt.fromU8(this.data))," in code
    assert (
        "      EvmEncodeParam.fromValue('bool', Bytes.fromBool(this.parse_prop)),"
        in code
    )


def test_locals_do_not_shadow_struct_classes():
    inner = struct(
        "Inner",
        {"name": "x", "type": "uint256"},
        internal_type="struct Inner",
    )
    outer = struct(
        "",
        inner,
        {"name": "Bytes", "type": "bytes"},
        internal_type="struct Outer",
    )
    registry = make_registry([view("f", outputs=[outer])])
    imports = ImportRegistry()
    code = registry.generate_classes_code(TypeMapper(imports, registry), imports)

    assert "    const Inner_var: Inner = Inner.parse(parts[0])" in code
    assert "    const Bytes_var: Bytes = Bytes.fromHexString(parts[1])" in code
    assert "    return new Outer(Inner_var, Bytes_var)" in code
