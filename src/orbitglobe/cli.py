# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Command-line interface for orbit simulation and globe meshing.

Usage:
    # Propagate satellites from a DTO file for 10 frames at 60x
    orbitglobe simulate --input satellites.json --frames 10 --step 1 --speed 60

    # Same, from the satellite API
    orbitglobe simulate --url http://localhost:8080/api/satellites --type active

    # Mesh GeoJSON land polygons in a worker process
    orbitglobe mesh ne_110m_land.geojson --feature land -o land_meshes.json
"""
import argparse
import asyncio
import json
import logging
import sys
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor
from datetime import datetime
from typing import Any

from orbitglobe.adapters.mesh_dispatcher import MeshTaskDispatcher
from orbitglobe.adapters.satellite_source import (
    DEFAULT_BASE_URL,
    FileSatelliteSource,
    HttpSatelliteSource,
)
from orbitglobe.adapters.scene_display import SceneDisplay
from orbitglobe.adapters.sgp4_propagator import Sgp4PropagatorFactory
from orbitglobe.domain.clock import DEFAULT_SPEED_MULTIPLIER, ScaledClock, wall_clock_ms
from orbitglobe.domain.geo_features import GeoFeature
from orbitglobe.domain.mesh_protocol import GenerateMeshTask, MeshTaskError
from orbitglobe.domain.satellite_registry import SatelliteRegistry
from orbitglobe.domain.tracked_object import parse_datetime


class SteppedWallClock:
    """Wall-clock stand-in that only moves when advanced, for offline runs."""

    def __init__(self, start_ms: float):
        self._now_ms = start_ms

    def __call__(self) -> float:
        return self._now_ms

    def advance(self, seconds: float) -> None:
        self._now_ms += seconds * 1000.0


def run_simulation(
    records: list[dict[str, Any]],
    frames: int,
    step_s: float,
    speed: float = DEFAULT_SPEED_MULTIPLIER,
    start: datetime | None = None,
    scene_radius: float = 1.0,
) -> tuple[SatelliteRegistry, SceneDisplay]:
    """
    Track records and step the simulation frame by frame.

    Each frame advances the wall clock by step_s seconds, so simulated time
    moves speed × step_s seconds per frame.
    """
    start_ms = start.timestamp() * 1000.0 if start is not None else wall_clock_ms()
    wall = SteppedWallClock(start_ms)
    display = SceneDisplay()
    registry = SatelliteRegistry(
        display,
        Sgp4PropagatorFactory(),
        clock_factory=lambda: ScaledClock(now_ms=wall),
        scene_radius=scene_radius,
    )
    registry.add_satellites(records)
    registry.set_speed(speed)

    for _ in range(frames):
        wall.advance(step_s)
        registry.update_satellites()
    return registry, display


def format_positions(registry: SatelliteRegistry) -> list[str]:
    lines = [f"Simulated time: {registry.clock.simulated_datetime().isoformat()}"]
    for obj in registry.satellites:
        s = obj.state
        lines.append(
            f"{obj.norad_cat_id:>6}  {obj.record.object_name:<24.24} "
            f"lat={s.lat_deg:8.3f}  lon={s.lon_deg:9.3f}  alt={s.alt_km:9.1f} km"
        )
    return lines


def run_mesh(
    geojson: dict[str, Any],
    geo_feature: GeoFeature,
    radius: float = 1.0,
    fill_interior: bool = False,
    workers: int = 1,
    use_threads: bool = False,
) -> list[dict[str, Any]]:
    """
    Mesh a FeatureCollection through the worker dispatcher.

    Returns:
        One summary dict per mesh.

    Raises:
        ValueError: If the worker reports a failure.
    """
    executor_factory = ThreadPoolExecutor if use_threads else ProcessPoolExecutor
    task = GenerateMeshTask(
        geojson=geojson, geo_feature=geo_feature,
        radius=radius, fill_interior=fill_interior,
    )

    async def _submit():
        async with MeshTaskDispatcher(
            max_workers=workers, executor_factory=executor_factory,
        ) as dispatcher:
            return await dispatcher.submit(task)

    result = asyncio.run(_submit())
    if isinstance(result, MeshTaskError):
        raise ValueError(result.error)

    return [
        {
            "name": mesh.name,
            "vertexCount": len(mesh.position_array) // 3,
            "triangleCount": len(mesh.index_array) // 3,
            "material": {
                "color": f"#{mesh.material.color:06X}",
                "transparent": mesh.material.transparent,
                "opacity": mesh.material.opacity,
                "side": int(mesh.material.side),
            },
            "positionArray": mesh.position_array.tolist(),
            "indexArray": mesh.index_array.tolist(),
        }
        for mesh in result.meshes
    ]


def _simulate(args: argparse.Namespace) -> None:
    if args.input:
        source = FileSatelliteSource(args.input)
    else:
        source = HttpSatelliteSource(args.url, timeout=args.timeout)
    records = source.fetch_by_type(args.type)
    print(f"Loaded {len(records)} satellite records")

    start = parse_datetime(args.start) if args.start else None
    registry, _ = run_simulation(
        records,
        frames=args.frames,
        step_s=args.step,
        speed=args.speed,
        start=start,
        scene_radius=args.radius,
    )
    print(f"Tracking {len(registry)} satellites after {args.frames} frames")
    for line in format_positions(registry):
        print(line)


def _mesh(args: argparse.Namespace) -> None:
    with open(args.geojson, encoding="utf-8") as f:
        geojson = json.load(f)

    meshes = run_mesh(
        geojson,
        GeoFeature(args.feature),
        radius=args.radius,
        fill_interior=args.fill_interior,
        workers=args.workers,
        use_threads=args.threads,
    )
    if not args.buffers:
        for m in meshes:
            del m["positionArray"]
            del m["indexArray"]

    triangles = sum(m["triangleCount"] for m in meshes)
    print(f"Meshed {len(meshes)} polygons ({triangles} triangles)")
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            json.dump({"meshes": meshes}, f, indent=2)
        print(f"Wrote {args.output}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Time-scaled satellite simulation and spherical GeoJSON meshing"
    )
    parser.add_argument(
        '--verbose', '-v', action='count', default=0,
        help="Increase log verbosity (-v info, -vv debug)"
    )
    sub = parser.add_subparsers(dest='command', required=True)

    sim = sub.add_parser('simulate', help="Propagate satellites and print positions")
    src = sim.add_mutually_exclusive_group()
    src.add_argument('--input', '-i', help="Satellite DTO JSON file or directory of {type}.json")
    src.add_argument(
        '--url', default=DEFAULT_BASE_URL,
        help=f"Satellite API base URL (default: {DEFAULT_BASE_URL})"
    )
    sim.add_argument('--type', default='active', help="Satellite type to load (default: active)")
    sim.add_argument('--frames', type=int, default=1, help="Frames to simulate (default: 1)")
    sim.add_argument(
        '--step', type=float, default=1.0,
        help="Wall-clock seconds per frame (default: 1.0)"
    )
    sim.add_argument(
        '--speed', type=float, default=DEFAULT_SPEED_MULTIPLIER,
        help=f"Speed multiplier (default: {DEFAULT_SPEED_MULTIPLIER:g})"
    )
    sim.add_argument('--start', help="Start time, ISO 8601 (default: now)")
    sim.add_argument('--radius', type=float, default=1.0, help="Globe radius in scene units")
    sim.add_argument('--timeout', type=int, default=10, help="HTTP timeout in seconds")
    sim.set_defaults(handler=_simulate)

    mesh = sub.add_parser('mesh', help="Mesh GeoJSON polygons onto the globe")
    mesh.add_argument('geojson', help="Path to a GeoJSON FeatureCollection")
    mesh.add_argument(
        '--feature', choices=[f.value for f in GeoFeature], default=GeoFeature.LAND.value,
        help="Feature classification, selects the material (default: land)"
    )
    mesh.add_argument('--output', '-o', help="Write mesh summary JSON here")
    mesh.add_argument('--radius', type=float, default=1.0, help="Globe radius in scene units")
    mesh.add_argument(
        '--fill-interior', action='store_true', default=False,
        help="Add Fibonacci-lattice interior vertices"
    )
    mesh.add_argument('--buffers', action='store_true', default=False,
                      help="Include position and index buffers in the output")
    mesh.add_argument('--workers', type=int, default=1, help="Worker processes (default: 1)")
    mesh.add_argument('--threads', action='store_true', default=False,
                      help="Use worker threads instead of processes")
    mesh.set_defaults(handler=_mesh)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        args.handler(args)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except (ValueError, ConnectionError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
