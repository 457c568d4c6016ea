# -- Shared Test Fixtures -- #

'''
Fixtures shared by the FluidSim test modules.
'''

from __future__ import annotations

import numpy as np
import pytest

from FluidSim.sph.kernels import KernelConstants
from FluidSim.sph.particles import ParticleSystem
from FluidSim.sph.solver import FluidSolver


@pytest.fixture
def kernel() -> KernelConstants:
    '''Kernel constants for a round interaction radius.'''
    return KernelConstants.fromRadius(0.1)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(7)


@pytest.fixture
def smallSolver() -> FluidSolver:
    '''100-particle column in a unit field.'''
    return FluidSolver.construct(100, 1.0, 1.0)


@pytest.fixture
def makeParticles():
    '''Builder for a particle store at given positions with optional state.'''

    def build(positions, velocities=None, densities=None) -> ParticleSystem:
        particles = ParticleSystem.fromPositions(np.asarray(positions, dtype=np.float64), size=0.01)
        if velocities is not None:
            particles.velocities[:] = velocities
        if densities is not None:
            particles.densities[:] = densities
        return particles

    return build
