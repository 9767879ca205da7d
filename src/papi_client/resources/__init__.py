"""
Resource operations for the Property Manager API.

Each module pairs request/response models with module-level async
operations taking a PapiClient as their first argument.
"""

from . import (
    activations,
    client_settings,
    contracts,
    cpcodes,
    edge_hostnames,
    groups,
    hostname_activations,
    hostname_buckets,
    hostnames,
    include_activations,
    include_rules,
    include_versions,
    includes,
    products,
    properties,
    property_versions,
    rules,
)

__all__ = [
    "activations",
    "client_settings",
    "contracts",
    "cpcodes",
    "edge_hostnames",
    "groups",
    "hostname_activations",
    "hostname_buckets",
    "hostnames",
    "include_activations",
    "include_rules",
    "include_versions",
    "includes",
    "products",
    "properties",
    "property_versions",
    "rules",
]
