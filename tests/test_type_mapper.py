import logging

import pytest

from abigen.abi import AbiParameter, parse_abi
from abigen.generator.import_registry import ImportRegistry
from abigen.generator.name_resolver import NameContext, NameResolver
from abigen.generator.tuple_registry import TupleRegistry
from abigen.generator.type_mapper import TypeMapper

POINT = {
    "name": "point",
    "type": "tuple",
    "internalType": "struct Point",
    "components": [
        {"name": "x", "type": "int256"},
        {"name": "y", "type": "int256"},
    ],
}


def make_mapper(abi=()):
    resolver = NameResolver()
    tuples = TupleRegistry(resolver, resolver.scope(NameContext.CLASS_NAME))
    tuples.extract_definitions(parse_abi(abi))
    imports = ImportRegistry()
    return TypeMapper(imports, tuples), imports


@pytest.mark.parametrize(
    "abi_type,mapped",
    [
        ("address", "Address"),
        ("bool", "bool"),
        ("string", "string"),
        ("bytes", "Bytes"),
        ("bytes1", "Bytes"),
        ("bytes32", "Bytes"),
        ("int", "BigInt"),
        ("uint", "BigInt"),
        ("int8", "i8"),
        ("uint8", "u8"),
        ("int16", "BigInt"),
        ("uint32", "BigInt"),
        ("uint64", "BigInt"),
        ("int128", "BigInt"),
        ("uint256", "BigInt"),
    ],
)
def test_elementary_types(abi_type, mapped):
    mapper, _ = make_mapper()
    assert mapper.map_abi_type(AbiParameter(type=abi_type)) == mapped


def test_library_types_imported():
    mapper, imports = make_mapper()
    for abi_type in ("bool", "string", "uint8", "int8"):
        mapper.map_abi_type(AbiParameter(type=abi_type))
    assert imports.generate_imports_code() == ""

    mapper.map_abi_type(AbiParameter(type="address"))
    mapper.map_abi_type(AbiParameter(type="uint256[]"))
    mapper.map_abi_type(AbiParameter(type="bytes4"))
    assert (
        imports.generate_imports_code()
        == "import { Address, BigInt, Bytes } from '@mimicprotocol/lib-ts'"
    )


def test_array_depth_preserved():
    mapper, _ = make_mapper()
    assert mapper.map_abi_type(AbiParameter(type="uint256[][]")) == "BigInt[][]"
    assert mapper.map_abi_type(AbiParameter(type="bool[3][]")) == "bool[][]"
    assert mapper.map_abi_type(AbiParameter(type="address[2]")) == "Address[]"


def test_struct_types():
    abi = [
        {
            "type": "function",
            "name": "move",
            "stateMutability": "nonpayable",
            "inputs": [POINT],
        }
    ]
    mapper, _ = make_mapper(abi)
    point = AbiParameter.model_validate(POINT)
    assert mapper.map_abi_type(point) == "Point"

    points = AbiParameter.model_validate(
        {**POINT, "type": "tuple[][]", "internalType": "struct Point[][]"}
    )
    assert mapper.map_abi_type(points) == "Point[][]"


def test_unknown_types_degrade(caplog):
    mapper, _ = make_mapper()
    with caplog.at_level(logging.WARNING):
        assert mapper.map_abi_type(AbiParameter(type="fixed128x18")) == "unknown"
        assert mapper.map_abi_type(AbiParameter(type="function[]")) == "unknown[]"
        assert (
            mapper.map_abi_type(AbiParameter.model_validate(POINT)) == "unknown"
        )
    assert len(caplog.records) == 3
    assert all(r.levelno == logging.WARNING for r in caplog.records)


def test_to_lib_type():
    mapper, imports = make_mapper()
    assert mapper.to_lib_type("bool", "flag") == "Bytes.fromBool(flag)"
    assert mapper.to_lib_type("u8", "v") == "BigInt.fromU8(v)"
    assert mapper.to_lib_type("i8", "v") == "BigInt.fromI8(v)"
    assert mapper.to_lib_type("string", "s") == "Bytes.fromUTF8(s)"
    assert mapper.to_lib_type("Address", "a") == "a"
    assert mapper.to_lib_type("BigInt", "a") == "a"
    assert mapper.to_lib_type("Bytes", "a") == "a"
    assert mapper.to_lib_type("BigInt[]", "a") == "a"
    assert "Bytes" in imports
    assert "BigInt" in imports


def test_type_conversion():
    abi = [
        {
            "type": "function",
            "name": "move",
            "stateMutability": "nonpayable",
            "inputs": [POINT],
        }
    ]
    mapper, _ = make_mapper(abi)
    assert (
        mapper.generate_type_conversion("BigInt", "v", False, False)
        == "BigInt.fromString(v)"
    )
    assert (
        mapper.generate_type_conversion("Address", "v", False)
        == "return Address.fromString(v)"
    )
    assert (
        mapper.generate_type_conversion("Bytes", "v", False, False)
        == "Bytes.fromHexString(v)"
    )
    assert mapper.generate_type_conversion("u8", "v", False, False) == "u8.parse(v)"
    assert mapper.generate_type_conversion("i8", "v", False, False) == "i8.parse(v)"
    assert (
        mapper.generate_type_conversion("bool", "v", False, False)
        == "u8.parse(v) as bool"
    )
    assert (
        mapper.generate_type_conversion("Point", "v", False, False) == "Point.parse(v)"
    )
    assert mapper.generate_type_conversion("string", "v", False, False) == "v"
    assert mapper.generate_type_conversion("unknown", "v", False, False) == "v"
    assert (
        mapper.generate_type_conversion("BigInt", "item", True)
        == "(item: string) => BigInt.fromString(item)"
    )


def test_decode_expression():
    mapper, imports = make_mapper()
    assert mapper.build_decode_expression("BigInt", "x") == "BigInt.fromString(x)"
    assert (
        mapper.build_decode_expression("BigInt[]", "decodedResponse")
        == "decodedResponse === '' ? [] : JSON.parse<string[]>(decodedResponse)"
        ".map<BigInt>((item0: string) => BigInt.fromString(item0))"
    )
    assert (
        mapper.build_decode_expression("bool[][]", "x")
        == "x === '' ? [] : JSON.parse<string[]>(x).map<bool[]>((item0: string) => "
        "item0 === '' ? [] : JSON.parse<string[]>(item0).map<bool>((item1: string) => u8.parse(item1) as bool))"
    )
    assert "JSON" in imports


def test_encode_param():
    abi = [
        {
            "type": "function",
            "name": "move",
            "stateMutability": "nonpayable",
            "inputs": [POINT],
        }
    ]
    mapper, imports = make_mapper(abi)

    assert (
        mapper.build_encode_param("owner", AbiParameter(type="address"))
        == "EvmEncodeParam.fromValue('address', owner)"
    )
    assert (
        mapper.build_encode_param("amount", AbiParameter(type="uint"))
        == "EvmEncodeParam.fromValue('uint256', amount)"
    )
    assert (
        mapper.build_encode_param("ids", AbiParameter(type="uint8[]"))
        == "EvmEncodeParam.fromValues('uint8[]', ids.map<EvmEncodeParam>((s0: u8) => "
        "EvmEncodeParam.fromValue('uint8', BigInt.fromU8(s0))))"
    )
    assert (
        mapper.build_encode_param("names", AbiParameter(type="string[2][]"))
        == "EvmEncodeParam.fromValues('string[2][]', names.map<EvmEncodeParam>((s0: string[]) => "
        "EvmEncodeParam.fromValues('string[2]', s0.map<EvmEncodeParam>((s1: string) => "
        "EvmEncodeParam.fromValue('string', Bytes.fromUTF8(s1))))))"
    )

    point = AbiParameter.model_validate(POINT)
    assert (
        mapper.build_encode_param("p", point)
        == "EvmEncodeParam.fromValues('()', p.toEvmEncodeParams())"
    )
    points = AbiParameter.model_validate(
        {**POINT, "type": "tuple[]", "internalType": "struct Point[]"}
    )
    assert (
        mapper.build_encode_param("ps", points)
        == "EvmEncodeParam.fromValues('()[]', ps.map<EvmEncodeParam>((s0: Point) => "
        "EvmEncodeParam.fromValues('()', s0.toEvmEncodeParams())))"
    )
    assert "EvmEncodeParam" in imports
