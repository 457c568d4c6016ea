# -- Fluid Solver Tests -- #

'''
Construction, stepping, determinism, diagnostics and re-initialization.
'''

import numpy as np
import pytest

from FluidSim import ExternalForceInput, FluidSolver, SimulationConfig, construct, step
from FluidSim.scenarios.packedLattice import createPackedLattice


def testConstructPlacesLattice(smallSolver):
    assert smallSolver.positions.shape == (100, 2)
    np.testing.assert_array_equal(smallSolver.positions, createPackedLattice(100, 1.0))
    assert np.all(smallSolver.velocities == 0.0)
    assert np.all(smallSolver.sizes == smallSolver.config.particleSize)
    assert smallSolver.time == 0.0


def testAccessorsAreReadOnly(smallSolver):
    with pytest.raises(ValueError):
        smallSolver.positions[0, 0] = 5.0
    with pytest.raises(ValueError):
        smallSolver.velocities[0, 0] = 5.0


def testGravityScenario():
    '''100 particles under gravity stay in the field and lose height.'''
    solver = construct(100, 1.0, 1.0)
    heights = [solver.currentState.heightSum]

    for _ in range(100):
        step(solver)
        positions = solver.positions
        assert np.all(np.isfinite(positions))
        assert np.all(positions >= 0.0)
        assert np.all(positions[:, 0] <= 1.0)
        assert np.all(positions[:, 1] <= 1.0)
        heights.append(solver.currentState.heightSum)

    assert solver.stepCount == 100
    assert solver.time == pytest.approx(0.1)
    assert min(heights) < heights[0]
    assert np.mean(heights[1:]) < heights[0]


def testStepIsDeterministic():
    first = construct(200, 1.0, 1.0)
    second = construct(200, 1.0, 1.0)
    pointer = ExternalForceInput(point=(0.5, 0.05), active=True)

    for _ in range(30):
        first.step(pointer)
        second.step(pointer)

    np.testing.assert_array_equal(first.positions, second.positions)
    np.testing.assert_array_equal(first.velocities, second.velocities)


def testCacheToggleGivesSameTrajectory():
    cached = FluidSolver.construct(150, 1.0, 1.0)
    direct = FluidSolver.construct(150, 1.0, 1.0, SimulationConfig(useNeighborCache=False))
    assert direct.neighborCache is None

    for _ in range(20):
        cached.step()
        direct.step()

    np.testing.assert_allclose(cached.positions, direct.positions, rtol=1e-10, atol=1e-12)


def testSubStepsAdvanceTime():
    solver = FluidSolver.construct(50, 1.0, 1.0, SimulationConfig(subSteps=4))
    solver.step()
    assert solver.stepCount == 4
    assert solver.time == pytest.approx(4 * solver.config.timeStep)


def testPointerPushesParticlesAway():
    pushed = construct(100, 1.0, 1.0)
    baseline = construct(100, 1.0, 1.0)
    # Second-row particle, clear of the floor clamp
    target = 80
    x, y = pushed.positions[target]
    pointer = ExternalForceInput(point=(x, y + 0.001), active=True)

    pushed.step(pointer)
    baseline.step()

    assert pushed.velocities[target, 1] < baseline.velocities[target, 1] - 0.01

    pulled = construct(100, 1.0, 1.0)
    pulled.step(ExternalForceInput(point=(x, y + 0.001), active=True, attract=True))
    assert pulled.velocities[target, 1] > baseline.velocities[target, 1] + 0.01


def testZeroParticles():
    solver = construct(0, 1.0, 1.0)
    solver.step(ExternalForceInput(point=(0.5, 0.5), active=True))
    assert solver.positions.shape == (0, 2)
    state = solver.currentState
    assert state.heightSum == 0.0
    assert state.maxVelocity == 0.0


def testCurrentState(smallSolver):
    smallSolver.step()
    state = smallSolver.currentState
    assert state.step == 1
    assert state.heightSum == pytest.approx(float(np.sum(smallSolver.positions[:, 1])))
    assert state.maxDensity >= state.meanDensity > 0.0
    assert state.totalEnergy == pytest.approx(state.kineticEnergy + state.potentialEnergy)


def testReinitializeAndReset(smallSolver):
    initial = smallSolver.positions.copy()
    for _ in range(5):
        smallSolver.step()

    smallSolver.reset()
    assert smallSolver.time == 0.0
    np.testing.assert_array_equal(smallSolver.positions, initial)

    smallSolver.reinitialize(250)
    assert smallSolver.positions.shape == (250, 2)
    assert smallSolver.config.particleCount == 250
    smallSolver.step()
    assert smallSolver.neighborCache.nParticles == 250

    with pytest.raises(ValueError):
        smallSolver.reinitialize(-1)


def testInvalidConfigRejected():
    with pytest.raises(ValueError):
        FluidSolver(SimulationConfig(fieldWidth=0.0))
    with pytest.raises(ValueError):
        FluidSolver(SimulationConfig(particleCount=-3))
