# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Mesh task dispatcher: runs polygon meshing in a worker process.

Meshing is CPU-bound, so it runs in a concurrent.futures executor
(ProcessPoolExecutor by default) driven from asyncio. Only plain task
dataclasses and numpy buffers cross the boundary.

Worker initialization happens at most once per dispatcher: the first
ensure_ready() call starts a single asyncio.Task that every later or
concurrent caller awaits. If it fails, the failure is cached and returned
to every caller until reset() is called.
"""
import asyncio
import logging
from concurrent.futures import Executor, ProcessPoolExecutor
from typing import Any, Callable

from orbitglobe.domain.fibonacci import DEFAULT_FIBONACCI_POINT_COUNT
from orbitglobe.domain.geo_features import GeoFeature
from orbitglobe.domain.mesh_protocol import (
    GenerateMeshTask,
    MeshBatch,
    MeshResult,
    MeshTask,
    MeshTaskError,
    SerializedMesh,
    handle_task,
    initialize_worker,
    result_to_message,
    task_from_message,
    worker_ready,
)
from orbitglobe.ports.data_source import GeoJsonSource


logger = logging.getLogger(__name__)


class WorkerInitializationError(RuntimeError):
    """The mesh worker could not be started or initialized."""


class MeshTaskDispatcher:
    """
    Submits mesh tasks to a worker executor.

    Args:
        max_workers: Worker count for the executor.
        executor_factory: Callable accepting max_workers, initializer and
            initargs keywords (ProcessPoolExecutor, ThreadPoolExecutor).
        lattice_points: Size of the interior-sample lattice each worker
            builds on initialization.
    """

    def __init__(
        self,
        max_workers: int = 1,
        executor_factory: Callable[..., Executor] = ProcessPoolExecutor,
        lattice_points: int = DEFAULT_FIBONACCI_POINT_COUNT,
    ) -> None:
        self._max_workers = max_workers
        self._executor_factory = executor_factory
        self._lattice_points = lattice_points
        self._executor: Executor | None = None
        self._init_task: asyncio.Task | None = None

    @property
    def is_ready(self) -> bool:
        task = self._init_task
        return (
            task is not None and task.done()
            and not task.cancelled() and task.exception() is None
        )

    @property
    def failed(self) -> bool:
        task = self._init_task
        return (
            task is not None and task.done()
            and (task.cancelled() or task.exception() is not None)
        )

    async def ensure_ready(self) -> None:
        """
        Start the worker once; every caller awaits the same initialization.

        Raises:
            WorkerInitializationError: If initialization failed, now or on
                an earlier call (until reset()).
        """
        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._initialize())
        await asyncio.shield(self._init_task)

    async def _initialize(self) -> None:
        loop = asyncio.get_running_loop()
        try:
            self._executor = self._executor_factory(
                max_workers=self._max_workers,
                initializer=initialize_worker,
                initargs=(self._lattice_points,),
            )
            ready = await loop.run_in_executor(self._executor, worker_ready)
        except (RuntimeError, OSError) as e:
            logger.error("Mesh worker initialization failed: %s", e)
            self._shutdown_executor()
            raise WorkerInitializationError(f"worker initialization failed: {e}") from e

        if not ready:
            self._shutdown_executor()
            raise WorkerInitializationError("worker initialization failed: worker not ready")
        logger.info("Mesh worker ready (%d worker(s))", self._max_workers)

    async def submit(self, task: MeshTask) -> MeshResult:
        """
        Run one task in the worker.

        Returns MeshTaskError instead of raising for initialization
        failures and broken workers. No timeout is applied.
        """
        try:
            await self.ensure_ready()
        except WorkerInitializationError as e:
            return MeshTaskError(error=str(e))

        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(self._executor, handle_task, task)
        except (RuntimeError, OSError) as e:
            logger.error("Mesh worker failed while running a task: %s", e)
            return MeshTaskError(error=f"mesh worker failed: {e}")

    async def submit_message(self, message: dict[str, Any]) -> dict[str, Any]:
        """Wire-level submit: request dict in, response dict out."""
        try:
            task = task_from_message(message)
        except (KeyError, ValueError, TypeError) as e:
            return {"error": f"invalid mesh request: {e}"}
        return result_to_message(await self.submit(task))

    def reset(self) -> None:
        """
        Forget a cached initialization so the next call retries it.

        Has no effect while initialization is still running.
        """
        if self._init_task is not None and not self._init_task.done():
            logger.debug("Reset ignored: mesh worker initialization in progress")
            return
        self._shutdown_executor()
        self._init_task = None

    def close(self) -> None:
        """Shut the worker down."""
        self._shutdown_executor()
        self._init_task = None

    def _shutdown_executor(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    async def __aenter__(self) -> "MeshTaskDispatcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


async def load_feature_meshes(
    source: GeoJsonSource,
    name: str,
    dispatcher: MeshTaskDispatcher,
    geo_feature: GeoFeature,
    radius: float = 1.0,
    fill_interior: bool = False,
) -> list[SerializedMesh]:
    """
    Fetch a GeoJSON dataset and mesh it in the worker.

    Any fetch or meshing failure is logged and yields an empty list, so a
    missing overlay never blocks the rest of the globe.
    """
    loop = asyncio.get_running_loop()
    try:
        geojson = await loop.run_in_executor(None, source.fetch, name)
    except (OSError, ValueError) as e:
        logger.warning("Could not load GeoJSON %s: %s", name, e)
        return []

    result = await dispatcher.submit(GenerateMeshTask(
        geojson=geojson,
        geo_feature=geo_feature,
        radius=radius,
        fill_interior=fill_interior,
    ))
    if isinstance(result, MeshTaskError):
        logger.error("Meshing %s failed: %s", name, result.error)
        return []
    if isinstance(result, MeshBatch):
        return result.meshes
    raise TypeError(f"Unexpected mesh result: {type(result).__name__}")
