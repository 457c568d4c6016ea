# -- Packed Lattice Tests -- #

'''
Seeded initial particle layout and scenario presets.
'''

import numpy as np
import pytest

from FluidSim import constants as const
from FluidSim.scenarios.packedLattice import LatticeConfig, createPackedLattice


def testCountAndFirstRow():
    positions = createPackedLattice(100, 1.0)
    assert positions.shape == (100, 2)

    firstRow = positions[positions[:, 1] == positions[0, 1]]
    assert positions[0, 0] == pytest.approx(0.1)
    assert positions[0, 1] == pytest.approx(const.latticeFirstRowRatio * const.particleSize)
    # 0.1 -> 0.9 in steps of 1.5 * particleSize
    assert firstRow.shape[0] == 63


def testRowsWrapUpward():
    positions = createPackedLattice(100, 1.0)
    rows = np.unique(positions[:, 1])
    assert rows.size == 2
    assert rows[1] - rows[0] == pytest.approx(const.latticeSpacingRatio * const.particleSize)
    assert np.all(positions[:, 0] >= 0.1)
    assert np.all(positions[:, 0] <= 0.9)


def testJitterBreaksExactSpacing():
    positions = createPackedLattice(20, 1.0)
    steps = np.diff(positions[:, 0])
    base = const.latticeSpacingRatio * const.particleSize
    assert np.all(steps >= base)
    assert np.all(steps <= base + const.latticeJitter)
    assert np.unique(np.round(steps, 12)).size > 1


def testSameSeedSamePositions():
    np.testing.assert_array_equal(createPackedLattice(500, 1.0), createPackedLattice(500, 1.0))
    assert not np.array_equal(
        createPackedLattice(500, 1.0, seed=1),
        createPackedLattice(500, 1.0, seed=2),
    )


def testZeroParticles():
    assert createPackedLattice(0, 1.0).shape == (0, 2)


def testPresets():
    small = LatticeConfig.fromPreset('small')
    assert small.particleCount == 100
    assert LatticeConfig.fromPreset('large').fieldWidth == 1.5

    config = small.toSimulationConfig(subSteps=2)
    assert config.particleCount == 100
    assert config.subSteps == 2

    with pytest.raises(ValueError):
        LatticeConfig.fromPreset('huge')
