"""Procedural level generation."""

from delve.mapgen.builder import BuilderKind, BuiltLevel, build_level, select_builder
from delve.mapgen.common import MAX_STEPS, cull_and_set_exit, gen_voronoi_regions

__all__ = [
    "BuilderKind",
    "BuiltLevel",
    "MAX_STEPS",
    "build_level",
    "cull_and_set_exit",
    "gen_voronoi_regions",
    "select_builder",
]
