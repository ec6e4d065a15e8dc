from .abigen_config import AbigenConfig, AbigenConfigError
