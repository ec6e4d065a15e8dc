from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple

from rich_click import Context, Parameter, ParamType


class AbiSpec(ParamType):
    """
    `NAME=PATH` pair assigning a contract name to an ABI JSON file.
    """

    name = "abi spec"

    def convert(
        self, value, param: Optional[Parameter], ctx: Optional[Context]
    ) -> Tuple[str, Path]:
        if isinstance(value, tuple):
            return value

        contract_name, sep, path = value.partition("=")
        contract_name = contract_name.strip()
        path = path.strip()
        if not sep or not contract_name or not path:
            self.fail(f"Expected NAME=PATH, got `{value}`.", param, ctx)
        if not contract_name.isidentifier():
            self.fail(
                f"Contract name `{contract_name}` is not a valid identifier.",
                param,
                ctx,
            )
        return contract_name, Path(path)
