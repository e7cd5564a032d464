"""Static balance data access."""

from idlefarm.data.defaults import create_default_provider
from idlefarm.data.provider import (
    InMemoryDataProvider,
    Row,
    StaticDataProvider,
    parse_material_costs,
)

__all__ = [
    "InMemoryDataProvider",
    "Row",
    "StaticDataProvider",
    "create_default_provider",
    "parse_material_costs",
]
