from abigen.generator.constants import LibSymbol
from abigen.generator.import_registry import ImportRegistry


def test_empty_registry():
    assert ImportRegistry().generate_imports_code() == ""


def test_imports_sorted_and_deduplicated():
    imports = ImportRegistry()
    imports.add_type(LibSymbol.EVM)
    imports.add_type(LibSymbol.BYTES)
    imports.add_type(LibSymbol.ADDRESS)
    imports.add_type("Address")

    assert len(imports) == 3
    assert LibSymbol.ADDRESS in imports
    assert "JSON" not in imports
    assert (
        imports.generate_imports_code()
        == "import { Address, Bytes, evm } from '@mimicprotocol/lib-ts'"
    )
