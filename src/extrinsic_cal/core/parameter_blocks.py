"""
Registry of the parameter blocks that make up a multi-camera extrinsic
calibration problem.

Cameras and targets are either static (one set of parameters shared by every
scene) or moving (tracked per scene id). Each lookup hands back the array that
the registry owns, never a copy, so a solver can register it as a variable and
write optimized values straight back into it. The same query always returns
the same array object for the lifetime of the registry.

Ownership differs between the two moving kinds:
- a moving camera entry holds its own copy of the camera, so every scene gets
  an independent extrinsics block. Intrinsics are copied as well, but only the
  first entry for a camera name is ever looked up.
- a moving target entry references the target it was given. All scenes of a
  target name share its pose and point blocks, and the target must not be
  replaced by the caller while the registry is in use.

Collections only grow until `clear()` empties all four at once. Lookups scan
in insertion order and the first match wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, NamedTuple

import numpy as np
from numpy.typing import NDArray

from extrinsic_cal.cameras.camera import Camera
from extrinsic_cal.targets.target import Target

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MovingCamera:
    scene_id: int
    camera: Camera


@dataclass(frozen=True)
class MovingTarget:
    scene_id: int
    target: Target


class BlockKey(NamedTuple):
    """Identifies a live parameter block by what it parameterizes."""

    kind: str  # e.g. "static_camera_intrinsics", "moving_target_point"
    name: str
    scene_id: int | None = None
    point_id: int | None = None


class ParameterBlocks:
    """
    Owns the cameras and targets of a calibration problem and hands out their
    parameter blocks.

    Not thread safe: insertion from more than one thread must be serialized
    by the caller.
    """

    def __init__(self) -> None:
        self._static_cameras: list[Camera] = []
        self._static_targets: list[Target] = []
        self._moving_cameras: list[MovingCamera] = []
        self._moving_targets: list[MovingTarget] = []

    @property
    def static_cameras(self) -> tuple[Camera, ...]:
        return tuple(self._static_cameras)

    @property
    def static_targets(self) -> tuple[Target, ...]:
        return tuple(self._static_targets)

    @property
    def moving_cameras(self) -> tuple[MovingCamera, ...]:
        return tuple(self._moving_cameras)

    @property
    def moving_targets(self) -> tuple[MovingTarget, ...]:
        return tuple(self._moving_targets)

    def clear(self) -> None:
        """Release every camera and target. Safe to call when already empty."""
        self._static_cameras.clear()
        self._static_targets.clear()
        self._moving_cameras.clear()
        self._moving_targets.clear()
        logger.info("Cleared all cameras and targets from parameter blocks")

    # ------------------------------------------------------------------
    # insertion

    def add_static_camera(self, camera: Camera) -> bool:
        """
        Take ownership of `camera`. Returns False, leaving the registry
        untouched, if a static camera of the same name already exists.
        """
        for existing in self._static_cameras:
            if existing.name == camera.name:
                logger.debug(f"Static camera {camera.name} already exists; not added")
                return False

        self._static_cameras.append(camera)
        logger.debug(f"Added static camera {camera.name}")
        return True

    def add_static_target(self, target: Target) -> bool:
        """
        Take ownership of `target`. Returns False if a static target of the
        same name already exists.
        """
        for existing in self._static_targets:
            if existing.name == target.name:
                logger.debug(f"Static target {target.name} already exists; not added")
                return False

        self._static_targets.append(target)
        logger.debug(f"Added static target {target.name}")
        return True

    def add_moving_camera(self, camera: Camera, scene_id: int) -> bool:
        """
        Store a copy of `camera` for `scene_id`.

        The new entry's blocks start from the camera's current values but are
        independent arrays. Returns False if the (name, scene_id) pair is
        already present.
        """
        for entry in self._moving_cameras:
            if entry.camera.name == camera.name and entry.scene_id == scene_id:
                logger.debug(f"Moving camera {camera.name} already exists for scene {scene_id}; not added")
                return False

        scene_camera = Camera(name=camera.name, parameters=camera.parameters.copy(), is_moving=True)
        self._moving_cameras.append(MovingCamera(scene_id=scene_id, camera=scene_camera))
        logger.debug(f"Added moving camera {camera.name} for scene {scene_id}")
        return True

    def add_moving_target(self, target: Target, scene_id: int) -> bool:
        """
        Reference `target` for `scene_id`. The target is shared, not copied:
        every scene of the same target sees the same pose and point blocks.
        Returns False if the (name, scene_id) pair is already present.
        """
        for entry in self._moving_targets:
            if entry.target.name == target.name and entry.scene_id == scene_id:
                logger.debug(f"Moving target {target.name} already exists for scene {scene_id}; not added")
                return False

        self._moving_targets.append(MovingTarget(scene_id=scene_id, target=target))
        logger.debug(f"Added moving target {target.name} for scene {scene_id}")
        return True

    # ------------------------------------------------------------------
    # camera lookups

    def get_static_camera_intrinsics(self, camera_name: str) -> NDArray[np.float64] | None:
        for camera in self._static_cameras:
            if camera.name == camera_name:
                return camera.parameters.intrinsics
        return None

    def get_static_camera_extrinsics(self, camera_name: str) -> NDArray[np.float64] | None:
        for camera in self._static_cameras:
            if camera.name == camera_name:
                return camera.parameters.extrinsics
        return None

    def get_moving_camera_intrinsics(self, camera_name: str) -> NDArray[np.float64] | None:
        """
        Intrinsics do not change between scenes, so the first entry for the
        camera is the live block. Later entries carry intrinsics that are
        never returned.
        """
        for entry in self._moving_cameras:
            if entry.camera.name == camera_name:
                return entry.camera.parameters.intrinsics
        return None

    def get_moving_camera_extrinsics(self, camera_name: str, scene_id: int) -> NDArray[np.float64] | None:
        for entry in self._moving_cameras:
            if entry.camera.name == camera_name and entry.scene_id == scene_id:
                return entry.camera.parameters.extrinsics
        return None

    # ------------------------------------------------------------------
    # target lookups

    def get_static_target_pose(self, target_name: str) -> NDArray[np.float64] | None:
        for target in self._static_targets:
            if target.name == target_name:
                return target.pose
        return None

    def get_static_target_point(self, target_name: str, point_id: int) -> NDArray[np.float64] | None:
        """
        `point_id` must be a point the target was built with; it is not
        range checked.
        """
        for target in self._static_targets:
            if target.name == target_name:
                return target.points[point_id].position
        return None

    def get_moving_target_pose(self, target_name: str, scene_id: int) -> NDArray[np.float64] | None:
        for entry in self._moving_targets:
            if entry.target.name == target_name and entry.scene_id == scene_id:
                return entry.target.pose
        return None

    def get_moving_target_point(self, target_name: str, point_id: int) -> NDArray[np.float64] | None:
        """
        A point's position in its own target frame does not depend on the
        scene, so the first entry for the target is used. `point_id` is not
        range checked.
        """
        for entry in self._moving_targets:
            if entry.target.name == target_name:
                return entry.target.points[point_id].position
        return None

    # ------------------------------------------------------------------

    def live_blocks(self) -> Iterator[tuple[BlockKey, NDArray[np.float64]]]:
        """
        Yield every block a solver should optimize, each array exactly once.

        Dead intrinsics on later moving-camera entries are skipped, and a
        target shared between scenes contributes its pose and points a
        single time.
        """
        seen: set[int] = set()

        def fresh(block: NDArray[np.float64]) -> bool:
            if id(block) in seen:
                return False
            seen.add(id(block))
            return True

        for camera in self._static_cameras:
            if fresh(camera.intrinsics):
                yield BlockKey("static_camera_intrinsics", camera.name), camera.intrinsics
            if fresh(camera.extrinsics):
                yield BlockKey("static_camera_extrinsics", camera.name), camera.extrinsics

        for entry in self._moving_cameras:
            name = entry.camera.name
            intrinsics = self.get_moving_camera_intrinsics(name)
            if fresh(intrinsics):
                yield BlockKey("moving_camera_intrinsics", name), intrinsics
            yield BlockKey("moving_camera_extrinsics", name, scene_id=entry.scene_id), entry.camera.extrinsics

        for target in self._static_targets:
            if fresh(target.pose):
                yield BlockKey("static_target_pose", target.name), target.pose
            for point_id, point in enumerate(target.points):
                if fresh(point.position):
                    yield BlockKey("static_target_point", target.name, point_id=point_id), point.position

        names_with_points: set[str] = set()
        for entry in self._moving_targets:
            target = entry.target
            if fresh(target.pose):
                yield BlockKey("moving_target_pose", target.name, scene_id=entry.scene_id), target.pose
            if target.name in names_with_points:
                continue
            names_with_points.add(target.name)
            for point_id, point in enumerate(target.points):
                if fresh(point.position):
                    yield BlockKey("moving_target_point", target.name, point_id=point_id), point.position

    def __repr__(self) -> str:
        return (
            f"ParameterBlocks(static_cameras={len(self._static_cameras)}, "
            f"static_targets={len(self._static_targets)}, "
            f"moving_cameras={len(self._moving_cameras)}, "
            f"moving_targets={len(self._moving_targets)})"
        )
