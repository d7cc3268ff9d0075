"""Domain models shared by resolvers and registries."""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from acmd.errors import ConfigurationError

__all__ = ["ModuleDescriptor", "DescriptorLike", "Exports", "Module"]


@dataclass(frozen=True)
class ModuleDescriptor:
    """Identifies a module by name and optional version.

    Attributes:
        name: The module's bare name.
        version: An optional version tag. An empty tag is treated as no version.
    """

    name: str
    version: Optional[str] = None

    @property
    def module_id(self) -> str:
        """The canonical id, ``name#version`` for versioned modules and ``name`` otherwise."""
        if self.version:
            return f"{self.name}#{self.version}"
        return self.name

    @classmethod
    def parse(cls, descriptor: "DescriptorLike") -> "ModuleDescriptor":
        """Normalise a descriptor given as a string, a mapping or a ModuleDescriptor.

        Raises:
            ConfigurationError: If the name is missing or empty, or the version is not a string.
        """
        if isinstance(descriptor, ModuleDescriptor):
            name, version = descriptor.name, descriptor.version
        elif isinstance(descriptor, str):
            name, version = descriptor, None
        elif isinstance(descriptor, Mapping):
            name, version = descriptor.get("name"), descriptor.get("version")
        else:
            raise ConfigurationError(
                f"Module descriptor should be a string or mapping, got {descriptor!r}"
            )

        if not isinstance(name, str) or not name:
            raise ConfigurationError(
                f"Module name should be a non-empty string, got {name!r}"
            )
        if version is not None and not isinstance(version, str):
            raise ConfigurationError(
                f"Version of module <{name}> should be a string, got {version!r}"
            )
        return cls(name, version)


DescriptorLike = Union[ModuleDescriptor, str, Mapping[str, Any]]


class Exports(dict):
    """The export record a factory populates.

    Keys can be read and written either as items or as attributes. A stored key
    takes precedence over a dict method of the same name, so ``exports.values``
    reads back whatever the factory assigned to it.
    """

    def __getattribute__(self, key: str) -> Any:
        if not key.startswith("__") and dict.__contains__(self, key):
            return dict.__getitem__(self, key)
        return super().__getattribute__(key)

    def __getattr__(self, key: str) -> Any:
        try:
            return self[key]
        except KeyError:
            raise AttributeError(key) from None

    def __setattr__(self, key: str, value: Any):
        self[key] = value

    def __delattr__(self, key: str):
        try:
            del self[key]
        except KeyError:
            raise AttributeError(key) from None


class Module:
    """Handle passed to a factory, exposing its descriptor and live exports."""

    __slots__ = ("_descriptor", "_exports")

    def __init__(self, descriptor: ModuleDescriptor):
        self._descriptor = descriptor
        self._exports = Exports()

    @property
    def name(self) -> str:
        return self._descriptor.name

    @property
    def version(self) -> Optional[str]:
        return self._descriptor.version

    @property
    def module_id(self) -> str:
        return self._descriptor.module_id

    @property
    def exports(self) -> Exports:
        return self._exports

    def __repr__(self) -> str:
        return f"Module({self.module_id!r})"
