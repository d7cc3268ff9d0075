"""
Tracking of the modules being resolved along one path of a dependency tree.

A chain is created for each top-level ``use`` and is entered by every module resolved
on its behalf. Each ``require`` issued by a factory continues on a branch of its
module's chain, so requires that are awaited concurrently keep their own strictly
nested paths while still seeing every module above them.
"""

from typing import Iterable, Iterator

from acmd.errors import ChainInvariantError, CyclicDependencyError

__all__ = ["ResolutionChain"]


class ResolutionChain:
    def __init__(self, path: Iterable[str] = ()):
        self._chain: list[str] = list(path)
        self._chain_items: set[str] = set(self._chain)

    def __contains__(self, module_id: str) -> bool:
        return module_id in self._chain_items

    def __iter__(self) -> Iterator[str]:
        return iter(self._chain)

    def __len__(self) -> int:
        return len(self._chain)

    def __repr__(self) -> str:
        return f"ResolutionChain({' => '.join(self._chain)!r})"

    def enter(self, module_id: str):
        """
        Push a module id onto the chain.

        Raises:
            CyclicDependencyError: If the id is already on the chain.
        """
        if module_id in self._chain_items:
            raise self.cycle_error(module_id)
        self._chain.append(module_id)
        self._chain_items.add(module_id)

    def exit(self, module_id: str):
        """
        Pop a module id from the chain.

        Raises:
            ChainInvariantError: If the id is not the most recently entered one.
        """
        if module_id not in self._chain_items:
            raise ChainInvariantError(
                f"Module <{module_id}> exited but is not in {self!r}"
            )
        if self._chain[-1] != module_id:
            raise ChainInvariantError(
                f"Module <{module_id}> exited before <{self._chain[-1]}> in {self!r}"
            )
        self._chain.pop()
        self._chain_items.discard(module_id)

    def branch(self) -> "ResolutionChain":
        """Return an independent chain continuing from the current path."""
        return ResolutionChain(self._chain)

    def cycle_error(self, module_id: str) -> CyclicDependencyError:
        return CyclicDependencyError(self._chain + [module_id])
