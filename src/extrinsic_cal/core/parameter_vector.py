from __future__ import annotations

import logging
from typing import Iterable, Sequence

import numpy as np
from numpy.typing import NDArray
from scipy.sparse import lil_matrix

from extrinsic_cal.core.parameter_blocks import ParameterBlocks

logger = logging.getLogger(__name__)


class ParameterVector:
    """
    Lays a set of parameter blocks end to end as one flat vector.

    scipy.optimize.least_squares works on a single vector `x`; this maps
    offsets in `x` onto the registry-owned arrays so that `gather()` gives an
    initial guess and `scatter(result.x)` writes the optimized values back
    into the very blocks the registry handed out.

    Blocks are tracked by identity, so registering the same array twice is a
    no-op that returns its existing offset.
    """

    def __init__(self, blocks: Iterable[NDArray[np.float64]] = ()) -> None:
        self._blocks: list[NDArray[np.float64]] = []
        self._offsets: dict[int, int] = {}
        self._size = 0
        for block in blocks:
            self.add(block)

    @classmethod
    def from_blocks(cls, parameter_blocks: ParameterBlocks) -> ParameterVector:
        """Register every live block of `parameter_blocks` in insertion order."""
        vector = cls(block for _, block in parameter_blocks.live_blocks())
        logger.info(f"Parameter vector built from {len(vector)} blocks ({vector.size} parameters)")
        return vector

    @property
    def size(self) -> int:
        return self._size

    def __len__(self) -> int:
        return len(self._blocks)

    def add(self, block: NDArray[np.float64]) -> int:
        """Register `block` and return its offset into the flat vector."""
        key = id(block)
        if key in self._offsets:
            return self._offsets[key]

        if not isinstance(block, np.ndarray) or block.ndim != 1:
            raise ValueError(f"Parameter block must be a 1-D numpy array, got {type(block).__name__}")
        if block.dtype != np.float64:
            raise ValueError(f"Parameter block must be float64, got {block.dtype}")
        if not block.flags.c_contiguous or not block.flags.writeable:
            raise ValueError("Parameter block must be contiguous and writeable")

        offset = self._size
        self._blocks.append(block)
        self._offsets[key] = offset
        self._size += block.size
        return offset

    def offset(self, block: NDArray[np.float64]) -> int:
        try:
            return self._offsets[id(block)]
        except KeyError:
            raise ValueError("Parameter block is not registered in this vector") from None

    def gather(self) -> NDArray[np.float64]:
        """Current block values as a new flat vector."""
        if not self._blocks:
            return np.zeros(0, dtype=np.float64)
        return np.concatenate(self._blocks)

    def scatter(self, x: NDArray[np.float64]) -> None:
        """Write `x` back into the registered blocks in place."""
        x = np.asarray(x, dtype=np.float64)
        if x.shape != (self._size,):
            raise ValueError(f"Expected vector of {self._size} parameters, got shape {x.shape}")

        for block in self._blocks:
            start = self._offsets[id(block)]
            block[:] = x[start : start + block.size]

    def jacobian_sparsity(self, residual_blocks: Sequence[tuple[int, Sequence[NDArray[np.float64]]]]) -> lil_matrix:
        """
        Generate sparsity pattern for the Jacobian.

        Args:
            residual_blocks: one (n_residuals, blocks) pair per residual group,
                in the order the residual function emits them. Every residual
                in a group depends on every parameter of each listed block.

        Returns:
            sparsity: lil_matrix of shape (total residuals, self.size)
        """
        n_residuals = sum(n for n, _ in residual_blocks)
        sparsity = lil_matrix((n_residuals, self._size), dtype=int)

        row = 0
        for n, blocks in residual_blocks:
            for block in blocks:
                start = self.offset(block)
                sparsity[row : row + n, start : start + block.size] = 1
            row += n

        return sparsity
