from __future__ import annotations

import logging
from dataclasses import dataclass

import cv2
import numpy as np
from numpy.typing import NDArray

logger = logging.getLogger(__name__)

INTRINSIC_PARAM_COUNT = 9  # fx, fy, cx, cy, k1, k2, k3, p1, p2
EXTRINSIC_PARAM_COUNT = 6  # angle-axis rotation (3), translation (3)


def as_block(values, size: int, label: str) -> NDArray[np.float64]:
    """
    Copy `values` into a fresh 1-D float64 array of the given size.

    Every parameter block is owned storage, so the caller's array is never
    aliased.
    """
    block = np.array(values, dtype=np.float64).ravel()
    if block.shape != (size,):
        raise ValueError(f"{label} must hold {size} values, got shape {np.shape(values)}")
    return block


def rodrigues_to_matrix(angle_axis: NDArray[np.float64]) -> NDArray[np.float64]:
    return cv2.Rodrigues(np.asarray(angle_axis, dtype=np.float64))[0]


def matrix_to_rodrigues(rotation: NDArray[np.float64]) -> NDArray[np.float64]:
    return cv2.Rodrigues(np.asarray(rotation, dtype=np.float64))[0][:, 0]


def homogeneous(rotation: NDArray[np.float64], translation: NDArray[np.float64]) -> NDArray[np.float64]:
    t = np.eye(4, dtype=np.float64)
    t[:3, :3] = rotation
    t[:3, 3] = translation
    return t


class CameraParameters:
    """
    Numeric state of a camera, held as two parameter blocks.

    The intrinsics block is laid out as [fx, fy, cx, cy, k1, k2, k3, p1, p2].
    The extrinsics block is [ax, ay, az, x, y, z]: the angle-axis rotation and
    translation that take a world point into the camera frame.

    Both blocks are plain numpy arrays that a solver may write into directly,
    so the named accessors below always reflect the current values. The
    arrays themselves cannot be rebound; new values go in with `block[:] = ...`.
    """

    def __init__(
        self,
        intrinsics=None,
        extrinsics=None,
        width: int = 0,
        height: int = 0,
    ):
        if intrinsics is None:
            intrinsics = np.zeros(INTRINSIC_PARAM_COUNT)
        if extrinsics is None:
            extrinsics = np.zeros(EXTRINSIC_PARAM_COUNT)

        self._intrinsics = as_block(intrinsics, INTRINSIC_PARAM_COUNT, "Intrinsics")
        self._extrinsics = as_block(extrinsics, EXTRINSIC_PARAM_COUNT, "Extrinsics")
        self.width = width
        self.height = height

    @property
    def intrinsics(self) -> NDArray[np.float64]:
        return self._intrinsics

    @property
    def extrinsics(self) -> NDArray[np.float64]:
        return self._extrinsics

    @classmethod
    def from_matrix(
        cls,
        matrix: NDArray[np.float64],
        distortions: NDArray[np.float64],
        rotation: NDArray[np.float64] | None = None,
        translation: NDArray[np.float64] | None = None,
        size: tuple[int, int] = (0, 0),
    ) -> CameraParameters:
        """
        Build parameter blocks from OpenCV-style calibration output.

        Args:
            matrix: 3x3 camera matrix
            distortions: OpenCV distortion coefficients (k1, k2, p1, p2[, k3])
            rotation: 3x3 world-to-camera rotation, identity if omitted
            translation: (3,) world-to-camera translation, zero if omitted
            size: (width, height) in pixels
        """
        matrix = np.asarray(matrix, dtype=np.float64)
        if matrix.shape != (3, 3):
            raise ValueError(f"Camera matrix must be 3x3, got {matrix.shape}")

        dist = np.zeros(5, dtype=np.float64)
        given = np.asarray(distortions, dtype=np.float64).ravel()[:5]
        dist[: len(given)] = given
        k1, k2, p1, p2, k3 = dist

        intrinsics = [matrix[0, 0], matrix[1, 1], matrix[0, 2], matrix[1, 2], k1, k2, k3, p1, p2]

        if rotation is None:
            rotation = np.eye(3, dtype=np.float64)
        if translation is None:
            translation = np.zeros(3, dtype=np.float64)
        rotation = np.asarray(rotation, dtype=np.float64)
        if rotation.shape != (3, 3):
            raise ValueError(f"Rotation must be 3x3, got {rotation.shape}")

        extrinsics = np.hstack([matrix_to_rodrigues(rotation), np.asarray(translation, dtype=np.float64).ravel()])

        width, height = size
        return cls(intrinsics, extrinsics, width=width, height=height)

    def copy(self) -> CameraParameters:
        """Deep copy with independent parameter blocks."""
        return CameraParameters(self.intrinsics, self.extrinsics, width=self.width, height=self.height)

    @property
    def focal_length_x(self) -> float:
        return float(self.intrinsics[0])

    @property
    def focal_length_y(self) -> float:
        return float(self.intrinsics[1])

    @property
    def center_x(self) -> float:
        return float(self.intrinsics[2])

    @property
    def center_y(self) -> float:
        return float(self.intrinsics[3])

    @property
    def matrix(self) -> NDArray[np.float64]:
        fx, fy, cx, cy = self.intrinsics[:4]
        return np.array([[fx, 0, cx], [0, fy, cy], [0, 0, 1]], dtype=np.float64)

    @property
    def distortions(self) -> NDArray[np.float64]:
        """Distortion coefficients in OpenCV order (k1, k2, p1, p2, k3)."""
        k1, k2, k3, p1, p2 = self.intrinsics[4:]
        return np.array([k1, k2, p1, p2, k3], dtype=np.float64)

    @property
    def angle_axis(self) -> NDArray[np.float64]:
        return self.extrinsics[:3]

    @property
    def rotation(self) -> NDArray[np.float64]:
        return rodrigues_to_matrix(self.extrinsics[:3])

    @property
    def translation(self) -> NDArray[np.float64]:
        return self.extrinsics[3:]

    @property
    def transformation(self) -> NDArray[np.float64]:
        """
        Rotation and translation combined
        """
        return homogeneous(self.rotation, self.translation)

    def __repr__(self) -> str:
        return (
            f"CameraParameters(intrinsics={self.intrinsics.tolist()}, "
            f"extrinsics={self.extrinsics.tolist()}, width={self.width}, height={self.height})"
        )


@dataclass(frozen=True)
class Camera:
    """
    A named camera and its parameter blocks.

    `is_moving` marks cameras created for a moving-camera scene entry; it has
    no effect on the layout of the blocks.
    """

    name: str
    parameters: CameraParameters
    is_moving: bool = False

    @property
    def intrinsics(self) -> NDArray[np.float64]:
        return self.parameters.intrinsics

    @property
    def extrinsics(self) -> NDArray[np.float64]:
        return self.parameters.extrinsics
