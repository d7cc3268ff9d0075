import asyncio
import logging
from functools import partial
from typing import Any, Callable, Mapping, Optional

from acmd.chain import ResolutionChain
from acmd.domain import DescriptorLike, ModuleDescriptor
from acmd.errors import CyclicDependencyError
from acmd.factory import make_factory
from acmd.resolver import ModuleResolver
from acmd.waiters import WaiterQueues, settle_waiters

__all__ = ["RegistryState", "ModuleRegistry"]

logger = logging.getLogger(__name__)


class RegistryState:
    """
    One generation of a registry's namespace.

    Holds the resolvers of defined modules, keyed by both bare name and full id, and
    the queues of callers waiting for modules not defined yet. Resolvers look up their
    dependencies in the state that created them, so a resolution that is still running
    when its registry is cleared carries on against its own generation.
    """

    def __init__(self):
        self.modules: dict[str, ModuleResolver] = {}
        self.waiters = WaiterQueues()

    def define(self, descriptor: ModuleDescriptor, factory: Any) -> ModuleResolver:
        """
        Store a new resolver under the descriptor's name and id, and wake its waiters.

        Raises:
            ConfigurationError: If the factory is neither callable nor a mapping.
        """
        resolver = ModuleResolver(descriptor, make_factory(factory), self.require)
        keys = list(dict.fromkeys([descriptor.name, descriptor.module_id]))

        for key in keys:
            previous = self.modules.get(key)
            if previous is not None:
                logger.warning(
                    "Module <%s> replaces <%s> under <%s>",
                    resolver.module_id,
                    previous.module_id,
                    key,
                )
            self.modules[key] = resolver
        logger.debug("Defined module <%s>", resolver.module_id)

        waiters = [
            waiter
            for waiter in self.waiters.drain(*keys)
            if not waiter.done() and not waiter.get_loop().is_closed()
        ]
        if waiters:
            logger.debug(
                "Resolving module <%s> for %d waiting caller(s)",
                resolver.module_id,
                len(waiters),
            )
            loader = resolver.resolve(loop=waiters[0].get_loop())
            loader.add_done_callback(partial(settle_waiters, waiters))

        return resolver

    def require(
        self,
        name: str,
        chain: Optional[ResolutionChain] = None,
        requester: Optional[ModuleResolver] = None,
    ) -> "asyncio.Future[Any]":
        """
        Resolve a module by bare name or full id, or wait for it to be defined.

        Args:
            name: The module's bare name or full id.
            chain: The chain of the requiring module, or None for a top-level resolution.
            requester: The resolver whose factory is requiring the module, if any.

        Returns:
            A future settling with the module's exports.

        Raises:
            CyclicDependencyError: If resolving the module would wait on the given chain.
        """
        resolver = self.modules.get(name)
        if resolver is None:
            logger.debug("Waiting for module <%s> to be defined", name)
            return self.waiters.wait_for(name)
        return asyncio.shield(resolver.resolve(chain, requester=requester))


class ModuleRegistry:
    """Registry of lazily resolved modules."""

    def __init__(self, state_factory: Callable[[], RegistryState] = RegistryState):
        self._state_factory = state_factory
        self._state = state_factory()

    def define(self, descriptor: DescriptorLike, factory: Any):
        """Define a module.

        Args:
            descriptor: The module's name, a mapping with ``name`` and optional
                ``version`` keys, or a ModuleDescriptor.
            factory: A callable taking ``(require, exports, module)`` which may be
                a coroutine function, or a mapping used as the module's exports.

        Raises:
            ConfigurationError: If the descriptor or factory is invalid.

        Example:
            registry.define({"name": "greeter", "version": "2"}, {"greeting": "Hello"})
        """
        self._state.define(ModuleDescriptor.parse(descriptor), factory)

    def defines(self, name: str, version: Optional[str] = None) -> Callable:
        """Decorator to define a function as a module factory.

        Args:
            name: The module's name.
            version: An optional version tag.

        Returns:
            A decorator that defines the module and returns the function unchanged.

        Example:
            @registry.defines("greeter")
            async def make_greeter(require, exports, module):
                exports.greet = lambda name: f"Hello {name}"
        """
        descriptor = ModuleDescriptor.parse({"name": name, "version": version})

        def decorator(func: Callable) -> Callable:
            self._state.define(descriptor, func)
            return func

        return decorator

    async def use(self, name: str) -> Mapping[str, Any]:
        """Resolve a module, waiting for it to be defined if necessary.

        Args:
            name: The module's bare name or full id.

        Returns:
            The module's exports.

        Raises:
            CyclicDependencyError: If the module's dependencies are cyclic.
        """
        try:
            return await self._state.require(name)
        except CyclicDependencyError as error:
            raise CyclicDependencyError(error.path) from error

    def is_defined(self, module_id: str) -> bool:
        return module_id in self._state.modules

    def defined_ids(self) -> list[str]:
        return sorted(self._state.modules.keys())

    def waiting_for(self) -> list[str]:
        return sorted(self._state.waiters.keys())

    def clear(self):
        """Replace the namespace with an empty one.

        Resolutions and waiters of the previous namespace are not cancelled.
        """
        previous = self._state
        self._state = self._state_factory()
        logger.debug(
            "Cleared registry, orphaning %d module key(s) and %d waiter(s)",
            len(previous.modules),
            len(previous.waiters),
        )
