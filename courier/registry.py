from __future__ import annotations

import threading
from collections.abc import Iterator
from typing import Generic, Optional, TypeVar

from .address import ActorAddress

R = TypeVar("R")


class Registry(Generic[R]):
    """
    Mutex-guarded mapping from actor address to runtime record.

    Names are optional and unique while their actor is registered. Lookups
    may run concurrently with registration and removal.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_address: dict[ActorAddress, R] = {}
        self._by_name: dict[str, ActorAddress] = {}
        self._names: dict[ActorAddress, str] = {}

    def register(self, address: ActorAddress, record: R, *, name: Optional[str] = None) -> None:
        with self._lock:
            if address in self._by_address:
                raise ValueError(f"Actor {address} is already registered.")
            if name is not None:
                if name in self._by_name:
                    raise ValueError(f"Actor name {name!r} is already in use.")
                self._by_name[name] = address
                self._names[address] = name
            self._by_address[address] = record

    def unregister(self, address: ActorAddress) -> Optional[R]:
        with self._lock:
            name = self._names.pop(address, None)
            if name is not None:
                self._by_name.pop(name, None)
            return self._by_address.pop(address, None)

    def lookup(self, address: ActorAddress) -> Optional[R]:
        with self._lock:
            return self._by_address.get(address)

    def lookup_name(self, name: str) -> Optional[R]:
        with self._lock:
            address = self._by_name.get(name)
            if address is None:
                return None
            return self._by_address.get(address)

    def snapshot(self) -> tuple[R, ...]:
        with self._lock:
            return tuple(self._by_address.values())

    def __contains__(self, address: object) -> bool:
        with self._lock:
            return address in self._by_address

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_address)

    def __iter__(self) -> Iterator[R]:
        return iter(self.snapshot())
