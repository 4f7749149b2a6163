from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, Iterator, List, Protocol, TypeVar

from aegisprobe.core.models import DecodeResult


class Named(Protocol):
    name: str


class Decoder(ABC):
    name: str

    @abstractmethod
    def decode(self, text: str) -> DecodeResult:
        raise NotImplementedError


class MitigationCheck(ABC):
    """One mitigation field: a tool invocation plus an evidence rule."""

    name: str
    tool: str

    @abstractmethod
    def command(self, path: str, executable: str) -> List[str]:
        raise NotImplementedError

    @abstractmethod
    def evaluate(self, output: str) -> bool:
        raise NotImplementedError


PluginT = TypeVar("PluginT", bound=Named)


class PluginRegistry(Generic[PluginT]):
    def __init__(self) -> None:
        self.plugins: List[PluginT] = []

    def register(self, plugin: PluginT) -> None:
        if plugin.name in self.names():
            raise ValueError(f"Plugin already registered: {plugin.name}")
        self.plugins.append(plugin)

    def names(self) -> List[str]:
        return [p.name for p in self.plugins]

    def get(self, name: str) -> PluginT:
        for plugin in self.plugins:
            if plugin.name == name:
                return plugin
        raise KeyError(name)

    def __iter__(self) -> Iterator[PluginT]:
        return iter(self.plugins)

    def __len__(self) -> int:
        return len(self.plugins)
