"""Persisted save document."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from delve.sim.grid_map import TileKind

SCHEMA_VERSION = 1


class MapRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")

    depth: int = Field(ge=1)
    width: int = Field(ge=1)
    height: int = Field(ge=1)
    tiles: list[TileKind]
    status: list[int]

    @model_validator(mode="after")
    def validate_lengths(self) -> "MapRecord":
        size = self.width * self.height
        if len(self.tiles) != size or len(self.status) != size:
            raise ValueError("tiles and status must have width * height entries")
        return self

    def contains(self, x: Any, y: Any) -> bool:
        return (
            isinstance(x, int)
            and isinstance(y, int)
            and 0 <= x < self.width
            and 0 <= y < self.height
        )


class EntityRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: int
    components: dict[str, dict[str, Any]] = Field(default_factory=dict)


class SaveDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    schema_version: int = SCHEMA_VERSION
    map: MapRecord
    player_id: int
    player_pos: tuple[int, int]
    log: list[str] = Field(default_factory=list)
    entities: list[EntityRecord] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_document(self) -> "SaveDocument":
        if self.schema_version != SCHEMA_VERSION:
            raise ValueError(f"unsupported schema_version {self.schema_version}")
        ids = [record.id for record in self.entities]
        if len(ids) != len(set(ids)):
            raise ValueError("entity ids must be unique")
        if self.player_id not in ids:
            raise ValueError("player_id must refer to a saved entity")
        if not self.map.contains(*self.player_pos):
            raise ValueError(f"player_pos {self.player_pos} is outside the map")
        for record in self.entities:
            pos = record.components.get("Position")
            if pos is not None and not self.map.contains(pos.get("x"), pos.get("y")):
                raise ValueError(f"Position on entity {record.id} is outside the map")
        return self
