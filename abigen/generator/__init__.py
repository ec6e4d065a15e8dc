from .contract_generator import ContractBindingGenerator, generate
from .import_registry import ImportRegistry
from .name_resolver import NameContext, NameResolver
from .tuple_registry import TupleDefinition, TupleRegistry
from .type_mapper import TypeMapper
