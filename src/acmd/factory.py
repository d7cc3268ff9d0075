"""Classification of module factories into callables and static export records."""

import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Union

from acmd.domain import Exports, Module
from acmd.errors import ConfigurationError

__all__ = ["Require", "FunctionFactory", "StaticFactory", "Factory", "make_factory"]


Require = Callable[[str], Awaitable[Mapping[str, Any]]]


@dataclass(frozen=True)
class FunctionFactory:
    """A callable of the form ``func(require, exports, module)``.

    The callable may be synchronous, a coroutine function, or return any awaitable.
    """

    func: Callable[[Require, Exports, Module], Any]

    async def invoke(self, require: Require, module: Module) -> Any:
        """Call the factory and wait for its result if it returned an awaitable."""
        result = self.func(require, module.exports, module)
        if inspect.isawaitable(result):
            result = await result
        return result


@dataclass(frozen=True)
class StaticFactory:
    """A mapping used as a module's exports as-is."""

    exports: Mapping[str, Any]


Factory = Union[FunctionFactory, StaticFactory]


def make_factory(factory: Any) -> Factory:
    """
    Wrap a factory passed to ``define`` in its tagged form.

    Args:
        factory: A callable taking ``(require, exports, module)``, or a mapping of exports.

    Returns:
        A FunctionFactory for callables, a StaticFactory for mappings.

    Raises:
        ConfigurationError: If the factory is neither callable nor a mapping.
    """
    if isinstance(factory, (FunctionFactory, StaticFactory)):
        return factory
    if callable(factory):
        return FunctionFactory(factory)
    if isinstance(factory, Mapping):
        return StaticFactory(factory)
    raise ConfigurationError(
        f"Factory should be a function or mapping, got {type(factory).__name__}"
    )
