from __future__ import annotations

import re
from typing import (
    AbstractSet,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Sequence,
    Set,
    Tuple,
)

from abigen.abi import AbiParameter
from abigen.core.enums import StrEnum

from .constants import AssemblyType, LibSymbol


class NameContext(StrEnum):
    FUNCTION_PARAMETER = "function_parameter"
    LOCAL_VARIABLE = "local_variable"
    CLASS_PROPERTY = "class_property"
    CLASS_NAME = "class_name"


# words that cannot be used as identifiers in the generated AssemblyScript
RESERVED_WORDS: FrozenSet[str] = frozenset(
    {
        "abstract",
        "as",
        "async",
        "await",
        "break",
        "case",
        "catch",
        "class",
        "const",
        "continue",
        "debugger",
        "declare",
        "default",
        "delete",
        "do",
        "else",
        "enum",
        "export",
        "extends",
        "false",
        "finally",
        "for",
        "function",
        "if",
        "implements",
        "import",
        "in",
        "instanceof",
        "interface",
        "let",
        "module",
        "namespace",
        "new",
        "null",
        "package",
        "private",
        "protected",
        "public",
        "readonly",
        "return",
        "static",
        "super",
        "switch",
        "this",
        "throw",
        "true",
        "try",
        "type",
        "typeof",
        "var",
        "void",
        "while",
        "with",
        "yield",
        # AssemblyScript builtin types
        "i8",
        "i16",
        "i32",
        "i64",
        "u8",
        "u16",
        "u32",
        "u64",
        "f32",
        "f64",
        "isize",
        "usize",
        "bool",
        "string",
        "never",
        "any",
        "unknown",
    }
)


# runtime identifiers referenced from generated method and decoder bodies
RUNTIME_IDENTIFIERS: FrozenSet[str] = frozenset(
    {symbol.value for symbol in LibSymbol} | {"Error"}
)


class NameResolver:
    """
    Resolves identifier collisions inside a naming context.

    A name conflicts if it is a reserved word, a temporary introduced by the generator in the given context,
    or it matches a pattern of generated lambda variables. Conflicting and duplicate names are escaped by appending
    a context specific suffix and, if still not unique, an incrementing counter.
    """

    __reserved: Dict[NameContext, FrozenSet[str]] = {
        NameContext.FUNCTION_PARAMETER: frozenset(
            {
                "response",
                "decodedResponse",
                "encodedData",
                "encodedResponse",
                "callBuilder",
                "feeAmount",
                "value",
                "selector",
            }
        )
        | RUNTIME_IDENTIFIERS,
        NameContext.LOCAL_VARIABLE: frozenset(
            {
                "data",
                "topics",
                "parts",
                "decoded",
                "response",
                "decodedResponse",
                "encodedResponse",
            }
        )
        | RUNTIME_IDENTIFIERS,
        NameContext.CLASS_PROPERTY: frozenset(
            {
                "constructor",
                "prototype",
                "parse",
                "decode",
                "toEvmEncodeParams",
                "address",
                "chainId",
                "timestamp",
                "feeAmount",
                "TOPIC",
            }
        ),
        NameContext.CLASS_NAME: frozenset(
            {symbol.value for symbol in LibSymbol}
            | {t.value for t in AssemblyType}
            | {"Array", "Error", "Map", "Math", "Object", "Set", "String"}
        ),
    }
    __suffixes: Dict[NameContext, str] = {
        NameContext.FUNCTION_PARAMETER: "_param",
        NameContext.LOCAL_VARIABLE: "_var",
        NameContext.CLASS_PROPERTY: "_prop",
        NameContext.CLASS_NAME: "",
    }
    __internal_patterns: Tuple[re.Pattern, ...] = (
        re.compile(r"^item\d+$"),
        re.compile(r"^s\d+$"),
    )

    def suffix_for(self, context: NameContext) -> str:
        return self.__suffixes.get(context, "_safe")

    def has_conflict(self, name: str, context: NameContext) -> bool:
        return (
            name in RESERVED_WORDS
            or name in self.__reserved.get(context, frozenset())
            or any(pattern.match(name) for pattern in self.__internal_patterns)
        )

    def escape_name(self, name: str, context: NameContext, used: Set[str]) -> str:
        suffix = self.suffix_for(context)
        if suffix:
            candidate = name + suffix
            if not self.has_conflict(candidate, context) and candidate not in used:
                return candidate

        counter = 1
        candidate = f"{name}{suffix}{counter}"
        while self.has_conflict(candidate, context) or candidate in used:
            counter += 1
            candidate = f"{name}{suffix}{counter}"
        return candidate

    def __keep_first(
        self, names: Sequence[str], context: NameContext, taken: AbstractSet[str]
    ) -> Tuple[List[bool], Set[str]]:
        # names that are valid and seen for the first time are kept before any escaping happens,
        # so an escaped name can never take the place of a name the input already uses
        keep: List[bool] = []
        kept: Set[str] = set()
        for name in names:
            k = (
                name not in kept
                and name not in taken
                and not self.has_conflict(name, context)
            )
            if k:
                kept.add(name)
            keep.append(k)
        return keep, kept

    def resolve_names(
        self,
        names: Sequence[str],
        context: NameContext,
        taken: AbstractSet[str] = frozenset(),
    ) -> List[str]:
        """
        Args:
            names: Names in declaration order.
            context: Naming context the names are declared in.
            taken: Names declared in an enclosing scope (e.g. generated class names) that must not be shadowed.

        Returns:
            Unique, non-conflicting names in the same order.
        """
        keep, kept = self.__keep_first(names, context, taken)

        used = kept | taken
        resolved = []
        for name, k in zip(names, keep):
            if not k:
                name = self.escape_name(name, context, used)
                used.add(name)
            resolved.append(name)
        return resolved

    def resolve_overloads(
        self, names: Sequence[str], context: NameContext
    ) -> List[str]:
        """
        Like [resolve_names][abigen.generator.name_resolver.NameResolver.resolve_names], but repeated
        names are numbered (`foo`, `foo1`, `foo2`) instead of receiving the context suffix.
        """
        keep, kept = self.__keep_first(names, context, frozenset())

        used = set(kept)
        resolved = []
        for name, k in zip(names, keep):
            if not k:
                if self.has_conflict(name, context):
                    name = self.escape_name(name, context, used)
                else:
                    counter = 1
                    while (
                        self.has_conflict(f"{name}{counter}", context)
                        or f"{name}{counter}" in used
                    ):
                        counter += 1
                    name = f"{name}{counter}"
                used.add(name)
            resolved.append(name)
        return resolved

    def resolve_parameter_names(
        self,
        parameters: Iterable[AbiParameter],
        context: NameContext,
        default_prefix: str = "param",
        taken: AbstractSet[str] = frozenset(),
    ) -> List[AbiParameter]:
        parameters = list(parameters)
        original_names = [
            param.name if param.name else f"{default_prefix}{index}"
            for index, param in enumerate(parameters)
        ]
        resolved_names = self.resolve_names(original_names, context, taken)
        return [
            param.with_escaped_name(name)
            for param, name in zip(parameters, resolved_names)
        ]

    def scope(self, context: NameContext) -> NameScope:
        return NameScope(self, context)


class NameScope:
    """
    Incrementally claims unique names in one context, e.g. class names of a single generated file.
    """

    __resolver: NameResolver
    __context: NameContext
    __used: Set[str]

    def __init__(self, resolver: NameResolver, context: NameContext):
        self.__resolver = resolver
        self.__context = context
        self.__used = set()

    def __contains__(self, name: str) -> bool:
        return name in self.__used

    @property
    def names(self) -> FrozenSet[str]:
        return frozenset(self.__used)

    def claim(self, name: str) -> str:
        if name in self.__used or self.__resolver.has_conflict(name, self.__context):
            name = self.__resolver.escape_name(name, self.__context, self.__used)
        self.__used.add(name)
        return name
