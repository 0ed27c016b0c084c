"""
Model registry.

Maps public model names to :class:`ModelDescriptor` values. The registry is
built once from an iterable of descriptors and never mutated afterwards, so a
single instance may be shared by any number of concurrent requests.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping

from ..base.errors import ErrorCode, ProxyError
from ..base.models import ModelDescriptor, ModelSummary


class ModelRegistry:
    """Read-only name -> descriptor lookup."""

    def __init__(self, descriptors: Iterable[ModelDescriptor] = ()) -> None:
        """Index ``descriptors`` by name.

        Raises:
            ValueError: When two descriptors share a name.
        """
        entries: Dict[str, ModelDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.name in entries:
                raise ValueError(f"duplicate model name in catalog: {descriptor.name!r}")
            entries[descriptor.name] = descriptor
        self._entries: Mapping[str, ModelDescriptor] = MappingProxyType(entries)

    def resolve(self, name: str) -> ModelDescriptor:
        """Return the descriptor registered under ``name`` (exact, case-sensitive).

        Raises:
            ProxyError: ``NOT_FOUND`` when no such model exists.
        """
        try:
            return self._entries[name]
        except KeyError:
            raise ProxyError(
                code=ErrorCode.NOT_FOUND,
                message=f"unknown model {name!r}",
                model=name,
            ) from None

    def list_summaries(self) -> List[ModelSummary]:
        """Discovery view of every registered model, in catalog order."""
        return [ModelSummary.from_descriptor(d) for d in self._entries.values()]

    def names(self) -> List[str]:
        return list(self._entries)

    @property
    def descriptors(self) -> Mapping[str, ModelDescriptor]:
        return self._entries

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[ModelDescriptor]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["ModelRegistry"]
