"""Calibration targets: a posed rigid frame carrying known points."""

from __future__ import annotations

import logging
from typing import Iterable

import numpy as np
from numpy.typing import NDArray

from extrinsic_cal.cameras.camera import EXTRINSIC_PARAM_COUNT, as_block, homogeneous, rodrigues_to_matrix

logger = logging.getLogger(__name__)

POSE_PARAM_COUNT = EXTRINSIC_PARAM_COUNT  # angle-axis rotation (3), translation (3)
POINT_PARAM_COUNT = 3


class Point3d:
    """A target point whose position in the target frame is its own parameter block."""

    def __init__(self, position=(0.0, 0.0, 0.0)):
        self._position = as_block(position, POINT_PARAM_COUNT, "Point position")

    @property
    def position(self) -> NDArray[np.float64]:
        return self._position

    @property
    def x(self) -> float:
        return float(self.position[0])

    @property
    def y(self) -> float:
        return float(self.position[1])

    @property
    def z(self) -> float:
        return float(self.position[2])

    def __repr__(self) -> str:
        return f"Point3d({self.position.tolist()})"


class Target:
    """
    Named calibration target.

    The pose block is [ax, ay, az, x, y, z], the angle-axis rotation and
    translation taking target-frame points into the world frame. Point ids
    are indices into `points` and stay fixed for the lifetime of the target.

    The pose array and the point sequence cannot be rebound once built;
    solvers and callers update values in place (`target.pose[:] = ...`).

    Attributes:
        name: unique name among targets of the same kind
        pose: (6,) pose parameter block
        points: ordered points, each owning a (3,) position block
        is_moving: caller-set marker for targets used per scene; the
            parameter block registry neither reads nor writes it
    """

    def __init__(
        self,
        name: str,
        pose: NDArray[np.float64] | None = None,
        points: Iterable[Point3d] = (),
        is_moving: bool = False,
    ):
        if pose is None:
            pose = np.zeros(POSE_PARAM_COUNT)

        self.name = name
        self._pose = as_block(pose, POSE_PARAM_COUNT, "Target pose")
        self._points = tuple(points)
        self.is_moving = is_moving

    @property
    def pose(self) -> NDArray[np.float64]:
        return self._pose

    @property
    def points(self) -> tuple[Point3d, ...]:
        return self._points

    @classmethod
    def from_points(
        cls,
        name: str,
        points: NDArray[np.float64],
        pose: NDArray[np.float64] | None = None,
    ) -> Target:
        """Create from an (N, 3) array of target-frame point positions."""
        points = np.asarray(points, dtype=np.float64)
        if points.ndim != 2 or points.shape[1] != 3:
            raise ValueError(f"Points must be (N, 3), got shape {points.shape}")

        if pose is None:
            pose = np.zeros(POSE_PARAM_COUNT)

        return cls(name=name, pose=pose, points=[Point3d(p) for p in points])

    @classmethod
    def planar_grid(
        cls,
        name: str,
        rows: int,
        cols: int,
        spacing: float,
        pose: NDArray[np.float64] | None = None,
    ) -> Target:
        """Create rectangular planar grid (checkerboard-like).

        Grid lies in the XY plane (Z=0) of the target frame with its origin at
        the first corner. Point ids run row-major.

        Raises:
            ValueError: If rows < 2 or cols < 2 or spacing <= 0
        """
        if rows < 2 or cols < 2:
            raise ValueError(f"Grid must be at least 2x2, got {rows}x{cols}")
        if spacing <= 0:
            raise ValueError(f"Spacing must be positive, got {spacing}")

        points = np.zeros((rows * cols, 3), dtype=np.float64)
        for row in range(rows):
            for col in range(cols):
                idx = row * cols + col
                points[idx, 0] = col * spacing
                points[idx, 1] = row * spacing

        return cls.from_points(name, points, pose=pose)

    @property
    def num_points(self) -> int:
        return len(self.points)

    @property
    def rotation(self) -> NDArray[np.float64]:
        return rodrigues_to_matrix(self.pose[:3])

    @property
    def translation(self) -> NDArray[np.float64]:
        return self.pose[3:]

    @property
    def transformation(self) -> NDArray[np.float64]:
        return homogeneous(self.rotation, self.translation)

    def world_points(self) -> NDArray[np.float64]:
        """(N, 3) point positions mapped through the current pose into the world frame."""
        if not self.points:
            return np.zeros((0, 3), dtype=np.float64)
        local = np.vstack([p.position for p in self.points])
        return local @ self.rotation.T + self.translation

    def __repr__(self) -> str:
        return (
            f"Target(name={self.name!r}, pose={self.pose.tolist()}, "
            f"num_points={self.num_points}, is_moving={self.is_moving})"
        )
