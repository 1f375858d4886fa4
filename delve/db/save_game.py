"""Single-slot JSON save file for the whole simulation context."""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from delve.sim.components import SERIALIZABLE_COMPONENTS, Viewshed
from delve.sim.context import GameContext, GameLog
from delve.sim.contracts import EntityRecord, MapRecord, SaveDocument
from delve.sim.grid_map import GridMap, TileKind, TileStatus
from delve.sim.systems import map_indexing_system
from delve.sim.world import World

logger = logging.getLogger(__name__)

_COMPONENT_TYPES: dict[str, type] = {cls.__name__: cls for cls in SERIALIZABLE_COMPONENTS}
_ADAPTERS: dict[type, TypeAdapter] = {cls: TypeAdapter(cls) for cls in SERIALIZABLE_COMPONENTS}


class JsonSaveStore:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def delete(self) -> None:
        self.path.unlink(missing_ok=True)

    def save(self, ctx: GameContext) -> None:
        document = snapshot(ctx)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(document.model_dump_json(), encoding="utf-8")
        logger.info("Saved %d entities to %s", len(document.entities), self.path)

    def load(self, ctx: GameContext) -> bool:
        """Replace the context's world with the saved one.

        Returns False (and leaves the context untouched) when the file is
        missing or cannot be decoded.
        """
        if not self.exists():
            return False
        try:
            document = SaveDocument.model_validate_json(self.path.read_text(encoding="utf-8"))
            restore(ctx, document)
        except (OSError, ValidationError, ValueError) as exc:
            logger.warning("Could not load save %s: %s", self.path, exc)
            return False
        logger.info("Loaded %d entities from %s", len(document.entities), self.path)
        return True


def snapshot(ctx: GameContext) -> SaveDocument:
    grid = ctx.map
    entities = []
    for entity in ctx.world.entities():
        components: dict[str, dict[str, Any]] = {}
        for component in ctx.world.components_of(entity):
            adapter = _ADAPTERS.get(type(component))
            if adapter is not None:
                components[type(component).__name__] = adapter.dump_python(component, mode="json")
        entities.append(EntityRecord(id=entity, components=components))
    return SaveDocument(
        map=MapRecord(
            depth=grid.depth,
            width=grid.width,
            height=grid.height,
            tiles=list(grid.tiles),
            status=[int(flag) for flag in grid.status],
        ),
        player_id=ctx.player,
        player_pos=ctx.player_pos,
        log=list(ctx.log.entries),
        entities=entities,
    )


def restore(ctx: GameContext, document: SaveDocument) -> None:
    """Rebuild ``ctx`` from ``document`` under freshly issued entity ids."""
    saved_ids = {record.id for record in document.entities}
    decoded: list[tuple[int, list[Any]]] = []
    for record in document.entities:
        components = []
        for name, data in record.components.items():
            component_type = _COMPONENT_TYPES.get(name)
            if component_type is None:
                raise ValueError(f"Unknown component {name!r} on entity {record.id}")
            component = _ADAPTERS[component_type].validate_python(data)
            for ref in _entity_refs(component):
                if getattr(component, ref) not in saved_ids:
                    raise ValueError(f"{name}.{ref} on entity {record.id} is dangling")
            components.append(component)
        decoded.append((record.id, components))

    grid = GridMap(
        width=document.map.width,
        height=document.map.height,
        depth=document.map.depth,
        tiles=[TileKind(tile) for tile in document.map.tiles],
        status=[TileStatus(flag) for flag in document.map.status],
    )

    # Continue the live id sequence so stale ids never resolve after a load.
    world = World(first_id=ctx.world.next_id)
    id_map = {saved_id: world.create_entity() for saved_id, _ in decoded}
    for saved_id, components in decoded:
        entity = id_map[saved_id]
        for component in components:
            for ref in _entity_refs(component):
                setattr(component, ref, id_map[getattr(component, ref)])
            world.insert(entity, component)
    for _entity, viewshed in world.query(Viewshed):
        viewshed.dirty = True

    log = GameLog(capacity=ctx.log.capacity)
    for entry in document.log:
        log.push(entry)
    staged = dataclasses.replace(
        ctx,
        world=world,
        map=grid,
        log=log,
        player_entity=id_map[document.player_id],
        player_pos=tuple(document.player_pos),
    )
    map_indexing_system(staged)

    ctx.world = staged.world
    ctx.map = staged.map
    ctx.log = staged.log
    ctx.player_entity = staged.player_entity
    ctx.player_pos = staged.player_pos


def _entity_refs(component: Any) -> list[str]:
    return [
        item.name
        for item in dataclasses.fields(component)
        if item.metadata.get("entity_ref")
    ]
