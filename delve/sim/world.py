"""Entity arena with per-type component storage."""

from __future__ import annotations

from typing import Any, Iterator, TypeVar

from delve.errors import EntityNotFoundError

C = TypeVar("C")


class World:
    """Stable integer entity ids mapped to component instances.

    Ids are never reused within a process, so a stale id can only fail a
    lookup; it can never resolve to a different entity.
    """

    def __init__(self, *, first_id: int = 1) -> None:
        self._next_id = first_id
        self._alive: set[int] = set()
        self._storages: dict[type, dict[int, Any]] = {}

    @property
    def next_id(self) -> int:
        return self._next_id

    def create_entity(self, *components: Any) -> int:
        entity = self._next_id
        self._next_id += 1
        self._alive.add(entity)
        for component in components:
            self.insert(entity, component)
        return entity

    def delete_entity(self, entity: int) -> None:
        if entity not in self._alive:
            raise EntityNotFoundError(entity)
        self._alive.remove(entity)
        for storage in self._storages.values():
            storage.pop(entity, None)

    def delete_all(self) -> None:
        self._alive.clear()
        for storage in self._storages.values():
            storage.clear()

    def is_alive(self, entity: int) -> bool:
        return entity in self._alive

    def entities(self) -> list[int]:
        return sorted(self._alive)

    def __len__(self) -> int:
        return len(self._alive)

    def insert(self, entity: int, component: Any) -> None:
        if entity not in self._alive:
            raise EntityNotFoundError(entity)
        self._storages.setdefault(type(component), {})[entity] = component

    def get(self, entity: int, component_type: type[C]) -> C | None:
        return self._storages.get(component_type, {}).get(entity)

    def has(self, entity: int, component_type: type) -> bool:
        return entity in self._storages.get(component_type, {})

    def remove(self, entity: int, component_type: type[C]) -> C | None:
        return self._storages.get(component_type, {}).pop(entity, None)

    def clear_storage(self, component_type: type) -> None:
        self._storages.get(component_type, {}).clear()

    def components_of(self, entity: int) -> list[Any]:
        return [
            storage[entity] for storage in self._storages.values() if entity in storage
        ]

    def query(self, *component_types: type) -> Iterator[tuple]:
        """Yield ``(entity, *components)`` for entities holding every type, by id."""
        if not component_types:
            return
        storages = [self._storages.get(kind, {}) for kind in component_types]
        smallest = min(storages, key=len)
        for entity in sorted(smallest):
            if all(entity in storage for storage in storages):
                yield (entity, *(storage[entity] for storage in storages))
