from typing import Set

from .constants import LIB_MODULE


class ImportRegistry:
    """
    Collects the runtime library symbols referenced by generated code.
    """

    __symbols: Set[str]

    def __init__(self):
        self.__symbols = set()

    def __contains__(self, symbol: str) -> bool:
        return str(symbol) in self.__symbols

    def __len__(self) -> int:
        return len(self.__symbols)

    def add_type(self, symbol: str) -> None:
        self.__symbols.add(str(symbol))

    def generate_imports_code(self) -> str:
        if not self.__symbols:
            return ""
        return f"import {{ {', '.join(sorted(self.__symbols))} }} from '{LIB_MODULE}'"
