from typing import Sequence

__all__ = [
    "RegistryError",
    "ConfigurationError",
    "ModuleResolutionError",
    "CyclicDependencyError",
    "ChainInvariantError",
]


class RegistryError(Exception):
    """Base class for errors raised by a module registry."""

    pass


class ConfigurationError(RegistryError):
    """Raised when a module is defined with an invalid descriptor or factory."""

    pass


class ModuleResolutionError(RegistryError):
    """Raised when a module's exports cannot be resolved."""

    pass


class CyclicDependencyError(ModuleResolutionError):
    """Raised when a module is required while it is already being resolved.

    Attributes:
        path: The chain of module ids being resolved, ending with the repeated id.
        cycle: The part of ``path`` starting at the first occurrence of the repeated id.
    """

    def __init__(self, path: Sequence[str]):
        self.path = list(path)
        super().__init__(f"loop dependencies found: {' => '.join(self.path)}")

    @property
    def cycle(self) -> list[str]:
        repeated = self.path[-1]
        return self.path[self.path.index(repeated) :]


class ChainInvariantError(RuntimeError):
    """Raised when a resolution chain is exited out of order.

    This indicates a bug in the resolver rather than a usage error.
    """

    pass
