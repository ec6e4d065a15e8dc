from typing import List

from .constants import TAB_WIDTH


class CodeBuilder:
    """
    Line buffer for generated AssemblyScript.
    """

    __lines: List[str]

    def __init__(self):
        self.__lines = []

    def add(self, num_of_indentation: int, string: str) -> None:
        self.__lines.append(num_of_indentation * TAB_WIDTH * " " + string)

    def add_blank(self) -> None:
        self.__lines.append("")

    def extend(self, num_of_indentation: int, code: str) -> None:
        for line in code.split("\n"):
            if line:
                self.add(num_of_indentation, line)
            else:
                self.add_blank()

    def __len__(self) -> int:
        return len(self.__lines)

    def build(self) -> str:
        return "\n".join(self.__lines)
