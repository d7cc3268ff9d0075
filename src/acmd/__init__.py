"""Asynchronous module definitions.

acmd lets independent pieces of code define named, optionally versioned modules with
a factory, and lets other code use them by name. A module's factory runs lazily, the
first time the module is used, and exactly once: concurrent users share the same
resolution and the same exports. Factories require their own dependencies through
the ``require`` function they are given, and cycles among them are reported as errors
instead of hanging.

Basic Usage:
    >>> import acmd
    >>>
    >>> @acmd.defines("greeter")
    ... async def make_greeter(require, exports, module):
    ...     config = await require("config")
    ...     exports.greet = lambda name: f"{config['greeting']} {name}"
    >>>
    >>> acmd.define("config", {"greeting": "Hello"})
    >>> greeter = await acmd.use("greeter")
    >>> greeter.greet("Dominic")
    'Hello Dominic'

The package consists of:
    - registry: Module registries and their namespaces
    - resolver: Lazy, memoized resolution of one module
    - chain: Cycle detection along a resolution path
    - waiters: Callers waiting for modules not defined yet
    - factory: Classification of module factories
    - domain: Descriptors, modules and exports
    - errors: Framework-specific exceptions

The functions exported here operate on a default process-wide registry.
"""

from acmd.domain import ModuleDescriptor, Module, Exports
from acmd.errors import (
    RegistryError,
    ConfigurationError,
    ModuleResolutionError,
    CyclicDependencyError,
    ChainInvariantError,
)
from acmd.registry import ModuleRegistry, RegistryState

__all__ = [
    "ModuleRegistry",
    "RegistryState",
    "ModuleDescriptor",
    "Module",
    "Exports",
    "RegistryError",
    "ConfigurationError",
    "ModuleResolutionError",
    "CyclicDependencyError",
    "ChainInvariantError",
    "registry",
    "define",
    "defines",
    "use",
    "is_defined",
    "clear",
]

registry = ModuleRegistry()

define = registry.define
defines = registry.defines
use = registry.use
is_defined = registry.is_defined
clear = registry.clear
