# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Mesh worker task protocol.

Requests and responses exchanged with the meshing worker are tagged
variants; only plain data and numpy buffers cross the process boundary.

Wire form (dicts, for callers that speak the message protocol):
    request   {"command": "GEN_MESH", "data": {"geojson": ..., "geoFeature": "land"}}
    response  {"meshes": [{"name", "geometry": {"positionArray", "indexArray"},
                           "material": {"color", "transparent", "opacity", "side"}}]}
    failure   {"error": "..."}

Worker side: initialize_worker() runs once per worker process (it builds
the shared interior-sample lattice); handle_task() serves requests.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

import numpy as np

from .fibonacci import DEFAULT_FIBONACCI_POINT_COUNT, fibonacci_sphere
from .geo_features import GeoFeature, MeshMaterial, Side, generate_geo_polygon_meshes
from .spherical_mesh import SphereMesh


logger = logging.getLogger(__name__)


class MeshCommand(Enum):
    GEN_MESH = "GEN_MESH"


@dataclass(frozen=True)
class GenerateMeshTask:
    """Mesh all polygons of a FeatureCollection."""
    geojson: dict[str, Any]
    geo_feature: GeoFeature
    radius: float = 1.0
    fill_interior: bool = False
    command: MeshCommand = field(default=MeshCommand.GEN_MESH, init=False)


MeshTask = GenerateMeshTask


@dataclass(frozen=True, eq=False)
class SerializedMesh:
    """Mesh as flat numeric buffers plus a material descriptor."""
    name: str
    position_array: np.ndarray      # float32, 3 per vertex
    index_array: np.ndarray         # uint32, 3 per triangle
    material: MeshMaterial


@dataclass(frozen=True)
class MeshBatch:
    meshes: list[SerializedMesh]


@dataclass(frozen=True)
class MeshTaskError:
    error: str


MeshResult = Union[MeshBatch, MeshTaskError]


# ── Serialization ─────────────────────────────────────────────────

def serialize_mesh(mesh: SphereMesh, material: MeshMaterial) -> SerializedMesh:
    """Flatten a SphereMesh into contiguous float32/uint32 buffers."""
    return SerializedMesh(
        name=mesh.name,
        position_array=np.ascontiguousarray(mesh.positions, dtype=np.float32).reshape(-1),
        index_array=np.ascontiguousarray(mesh.triangles, dtype=np.uint32).reshape(-1),
        material=material,
    )


def task_to_message(task: MeshTask) -> dict[str, Any]:
    if isinstance(task, GenerateMeshTask):
        return {
            "command": task.command.value,
            "data": {
                "geojson": task.geojson,
                "geoFeature": task.geo_feature.value,
                "radius": task.radius,
                "fillInterior": task.fill_interior,
            },
        }
    raise TypeError(f"Unknown mesh task type: {type(task).__name__}")


def task_from_message(message: dict[str, Any]) -> MeshTask:
    """
    Parse a request message.

    Raises:
        ValueError: For an unknown command or feature classification.
        KeyError: If a required member is missing.
    """
    command = MeshCommand(message["command"])
    data = message["data"]
    if command is MeshCommand.GEN_MESH:
        return GenerateMeshTask(
            geojson=data["geojson"],
            geo_feature=GeoFeature(data["geoFeature"]),
            radius=float(data.get("radius", 1.0)),
            fill_interior=bool(data.get("fillInterior", False)),
        )
    raise ValueError(f"Unhandled mesh command: {command}")


def result_to_message(result: MeshResult) -> dict[str, Any]:
    if isinstance(result, MeshTaskError):
        return {"error": result.error}
    if isinstance(result, MeshBatch):
        return {
            "meshes": [
                {
                    "name": m.name,
                    "geometry": {
                        "positionArray": m.position_array,
                        "indexArray": m.index_array,
                    },
                    "material": {
                        "color": m.material.color,
                        "transparent": m.material.transparent,
                        "opacity": m.material.opacity,
                        "side": int(m.material.side),
                    },
                }
                for m in result.meshes
            ],
        }
    raise TypeError(f"Unknown mesh result type: {type(result).__name__}")


def result_from_message(message: dict[str, Any]) -> MeshResult:
    if "error" in message:
        return MeshTaskError(error=str(message["error"]))
    meshes = []
    for m in message["meshes"]:
        mat = m["material"]
        meshes.append(SerializedMesh(
            name=m["name"],
            position_array=np.asarray(m["geometry"]["positionArray"], dtype=np.float32),
            index_array=np.asarray(m["geometry"]["indexArray"], dtype=np.uint32),
            material=MeshMaterial(
                color=int(mat["color"]),
                transparent=bool(mat["transparent"]),
                opacity=float(mat["opacity"]),
                side=Side(mat["side"]),
            ),
        ))
    return MeshBatch(meshes=meshes)


# ── Worker side ───────────────────────────────────────────────────

@dataclass(frozen=True, eq=False)
class WorkerContext:
    """Per-process state built once by initialize_worker()."""
    lattice: np.ndarray


_context: WorkerContext | None = None


def initialize_worker(lattice_points: int = DEFAULT_FIBONACCI_POINT_COUNT) -> None:
    """Build this process's WorkerContext. Runs once per worker process."""
    global _context
    _context = WorkerContext(lattice=fibonacci_sphere(lattice_points))
    logger.debug("Mesh worker initialized with %d lattice points", lattice_points)


def worker_ready() -> bool:
    """True once initialize_worker() has completed in this process."""
    return _context is not None


def handle_task(task: MeshTask) -> MeshResult:
    """Serve one request in the worker. Never raises."""
    if _context is None:
        return MeshTaskError(error="mesh worker is not initialized")

    if isinstance(task, GenerateMeshTask):
        try:
            pairs = generate_geo_polygon_meshes(
                task.geojson,
                task.geo_feature,
                radius=task.radius,
                lattice=_context.lattice if task.fill_interior else None,
            )
        except (ValueError, KeyError, TypeError, IndexError, AttributeError) as e:
            logger.warning("Mesh task failed: %s", e)
            return MeshTaskError(error=str(e))
        return MeshBatch(meshes=[serialize_mesh(mesh, material) for mesh, material in pairs])

    return MeshTaskError(error=f"unknown task type: {type(task).__name__}")
