from pathlib import Path
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.functional_validators import BeforeValidator
from typing_extensions import Annotated

# relative paths are resolved against the current working directory,
# which is set to the directory of the config file being parsed
ResolvedPath = Annotated[Path, BeforeValidator(lambda p: Path(p).resolve())]


class AbigenConfigModel(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
    )


class CodegenConfig(AbigenConfigModel):
    output_dir: ResolvedPath = Field(default_factory=lambda: Path("types").resolve())
    """
    Directory the generated bindings are written to.
    """
    extension: str = "ts"
    """
    File extension of the generated bindings, without the leading dot.
    """

    @field_validator("extension")
    def validate_extension(cls, v: str) -> str:
        v = v.lstrip(".")
        if not v:
            raise ValueError("Extension must not be empty.")
        return v


class TopLevelConfig(AbigenConfigModel):
    subconfigs: List[ResolvedPath] = []
    codegen: CodegenConfig = Field(default_factory=CodegenConfig)
    abis: Dict[str, ResolvedPath] = {}
    """
    Contract name to ABI JSON file mapping, one bindings file is generated per entry.
    """

    @field_validator("abis")
    def validate_contract_names(cls, v: Dict[str, Path]) -> Dict[str, Path]:
        for name in v:
            if not name.isidentifier():
                raise ValueError(f"Contract name `{name}` is not a valid identifier.")
        return v
