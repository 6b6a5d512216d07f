"""Tests for ParameterVector, the flat-vector view over registry-owned blocks."""

from __future__ import annotations

import logging

import numpy as np
import pytest
from scipy.optimize import least_squares

from extrinsic_cal.cameras import Camera, CameraParameters
from extrinsic_cal.core import ParameterBlocks, ParameterVector
from extrinsic_cal.targets import Target

logger = logging.getLogger(__name__)


def test_offsets_follow_registration_order():
    a = np.arange(3, dtype=np.float64)
    b = np.arange(6, dtype=np.float64)

    vector = ParameterVector([a, b])

    assert vector.offset(a) == 0
    assert vector.offset(b) == 3
    assert vector.size == 9
    assert len(vector) == 2


def test_same_block_registered_once():
    a = np.zeros(3, dtype=np.float64)
    vector = ParameterVector()

    assert vector.add(a) == 0
    assert vector.add(a) == 0
    assert vector.size == 3

    # equal values but a different array is a different block
    assert vector.add(np.zeros(3, dtype=np.float64)) == 3


def test_gather_and_scatter_write_through():
    blocks = ParameterBlocks()
    blocks.add_static_camera(Camera("cam0", CameraParameters(intrinsics=np.arange(9))))
    vector = ParameterVector.from_blocks(blocks)

    x = vector.gather()
    assert x.shape == (15,)
    assert np.array_equal(x[:9], np.arange(9))

    vector.scatter(np.arange(15, dtype=np.float64) + 100)

    intrinsics = blocks.get_static_camera_intrinsics("cam0")
    extrinsics = blocks.get_static_camera_extrinsics("cam0")
    assert np.array_equal(intrinsics, np.arange(9) + 100)
    assert np.array_equal(extrinsics, np.arange(9, 15) + 100)


def test_gather_returns_a_copy():
    a = np.ones(3, dtype=np.float64)
    vector = ParameterVector([a])

    x = vector.gather()
    x[:] = 7.0
    assert np.array_equal(a, np.ones(3))


def test_empty_vector():
    vector = ParameterVector()
    assert vector.gather().shape == (0,)
    vector.scatter(np.zeros(0))


class TestValidation:
    def test_wrong_length_scatter(self):
        vector = ParameterVector([np.zeros(3, dtype=np.float64)])
        with pytest.raises(ValueError, match="Expected vector of 3 parameters"):
            vector.scatter(np.zeros(4))

    def test_rejects_2d_block(self):
        with pytest.raises(ValueError, match="1-D"):
            ParameterVector([np.zeros((2, 3))])

    def test_rejects_non_float64(self):
        with pytest.raises(ValueError, match="float64"):
            ParameterVector([np.zeros(3, dtype=np.float32)])

    def test_rejects_strided_view(self):
        with pytest.raises(ValueError, match="contiguous"):
            ParameterVector([np.zeros(6, dtype=np.float64)[::2]])

    def test_unregistered_block_offset(self):
        vector = ParameterVector()
        with pytest.raises(ValueError, match="not registered"):
            vector.offset(np.zeros(3))


def test_jacobian_sparsity():
    pose = np.zeros(6, dtype=np.float64)
    point_0 = np.zeros(3, dtype=np.float64)
    point_1 = np.zeros(3, dtype=np.float64)
    vector = ParameterVector([pose, point_0, point_1])

    sparsity = vector.jacobian_sparsity([(2, [pose, point_0]), (2, [pose, point_1])]).toarray()

    assert sparsity.shape == (4, 12)
    assert np.array_equal(sparsity[0], [1] * 6 + [1] * 3 + [0] * 3)
    assert np.array_equal(sparsity[1], sparsity[0])
    assert np.array_equal(sparsity[2], [1] * 6 + [0] * 3 + [1] * 3)
    assert np.array_equal(sparsity[3], sparsity[2])


def test_jacobian_sparsity_unknown_block():
    vector = ParameterVector([np.zeros(3, dtype=np.float64)])
    with pytest.raises(ValueError, match="not registered"):
        vector.jacobian_sparsity([(2, [np.zeros(3, dtype=np.float64)])])


def test_solver_writes_back_into_registry():
    """
    Recover a target pose from its observed world points. The solver only sees
    the flat vector; the optimized pose must land in the registry's block.
    """
    true_pose = np.array([0.1, -0.2, 0.05, 1.0, 2.0, 3.0])
    observed = Target.planar_grid("truth", rows=3, cols=3, spacing=0.1, pose=true_pose).world_points()

    blocks = ParameterBlocks()
    blocks.add_static_target(Target.planar_grid("board", rows=3, cols=3, spacing=0.1))

    pose = blocks.get_static_target_pose("board")
    vector = ParameterVector([pose])
    target = blocks.static_targets[0]

    def residuals(x):
        vector.scatter(x)
        return (target.world_points() - observed).ravel()

    result = least_squares(residuals, vector.gather(), method="trf", ftol=1e-12, xtol=1e-12)
    vector.scatter(result.x)

    logger.info(f"Recovered pose {pose} from initial zeros")
    assert blocks.get_static_target_pose("board") is pose
    assert np.allclose(pose, true_pose, atol=1e-6)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
