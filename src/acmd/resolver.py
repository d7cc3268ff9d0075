import asyncio
import logging
from typing import Any, Callable, Mapping, Optional

from acmd.chain import ResolutionChain
from acmd.domain import ModuleDescriptor, Module
from acmd.errors import CyclicDependencyError
from acmd.factory import Factory, StaticFactory

__all__ = ["ModuleResolver"]

logger = logging.getLogger(__name__)


RequireInChain = Callable[
    [str, Optional[ResolutionChain], Optional["ModuleResolver"]], "asyncio.Future[Any]"
]


class ModuleResolver:
    """
    Owns the lazy, memoized resolution of one defined module.

    The factory runs at most once, the first time the module is resolved. Every later
    call to ``resolve`` returns the same task, whether it is still running, has
    produced the module's exports or has failed.

    While its factory runs, a resolver records the unfinished modules it has required.
    These edges let a module on one resolution path see that a module in flight on
    another path is already waiting for it.
    """

    def __init__(
        self,
        descriptor: ModuleDescriptor,
        factory: Factory,
        require: RequireInChain,
    ):
        self._descriptor = descriptor
        self._factory = factory
        self._require = require
        self._loader: Optional[asyncio.Future] = None
        self._awaiting: set["ModuleResolver"] = set()

    @property
    def descriptor(self) -> ModuleDescriptor:
        return self._descriptor

    @property
    def name(self) -> str:
        return self._descriptor.name

    @property
    def module_id(self) -> str:
        return self._descriptor.module_id

    @property
    def started(self) -> bool:
        return self._loader is not None

    def __repr__(self) -> str:
        return f"ModuleResolver({self.module_id!r})"

    def resolve(
        self,
        chain: Optional[ResolutionChain] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        requester: Optional["ModuleResolver"] = None,
    ) -> asyncio.Future:
        """
        Start resolving the module if that has not happened yet, and return its task.

        Args:
            chain: The chain of the requiring module, or None for a top-level resolution.
            loop: The loop to run the factory on; defaults to the running loop.
            requester: The resolver whose factory is requiring this module, if any.

        Returns:
            A future settling with the module's exports or with the factory's error.

        Raises:
            CyclicDependencyError: If this module is already on the given chain, or is
                in flight and waiting, directly or not, for a module on the chain.
        """
        if chain is not None:
            if self.module_id in chain:
                raise chain.cycle_error(self.module_id)
            if self._loader is not None and not self._loader.done():
                waiting = self._waiting_path(chain)
                if waiting:
                    raise CyclicDependencyError(list(chain) + waiting)

        if self._loader is None:
            if chain is None:
                chain = ResolutionChain()
            if loop is None:
                loop = asyncio.get_running_loop()

            if isinstance(self._factory, StaticFactory):
                self._loader = self._settle_static(chain, loop)
            else:
                self._loader = loop.create_task(
                    self._load(chain), name=f"resolve:{self.module_id}"
                )

        if requester is not None and not self._loader.done():
            requester._awaiting.add(self)
            self._loader.add_done_callback(lambda _: requester._awaiting.discard(self))

        return self._loader

    def _waiting_path(self, chain: ResolutionChain) -> Optional[list[str]]:
        """
        Follow the modules this one is waiting for until reaching one on the chain.

        Returns:
            The ids from this module to the first one found on the chain, or None.
        """
        pending = [(self, [self.module_id])]
        seen = {self}
        while pending:
            resolver, path = pending.pop()
            for dependency in resolver._awaiting:
                if dependency.module_id in chain:
                    return path + [dependency.module_id]
                if dependency not in seen:
                    seen.add(dependency)
                    pending.append((dependency, path + [dependency.module_id]))
        return None

    def _settle_static(
        self, chain: ResolutionChain, loop: asyncio.AbstractEventLoop
    ) -> asyncio.Future:
        chain.enter(self.module_id)
        chain.exit(self.module_id)
        loader = loop.create_future()
        loader.set_result(self._factory.exports)
        logger.debug("Resolved static module <%s>", self.module_id)
        return loader

    async def _load(self, chain: ResolutionChain) -> Mapping[str, Any]:
        chain.enter(self.module_id)
        logger.debug("Resolving module <%s> in %r", self.module_id, chain)

        def require(name: str) -> "asyncio.Future[Any]":
            return self._require(name, chain.branch(), self)

        module = Module(self._descriptor)
        try:
            returned = await self._factory.invoke(require, module)
        finally:
            chain.exit(self.module_id)

        if isinstance(returned, Mapping):
            dict.update(module.exports, returned)
        elif returned is not None:
            logger.debug(
                "Ignoring %s returned by factory of module <%s>",
                type(returned).__name__,
                self.module_id,
            )

        logger.debug("Resolved module <%s>", self.module_id)
        return module.exports
