# -- Density and Force Pass Tests -- #

'''
Density / pressure pass, neighbor cache and force pass.
'''

import math

import numpy as np

from FluidSim import constants as const
from FluidSim.sph.densityPressure import DensityPressurePass
from FluidSim.sph.forces import ForcePass
from FluidSim.sph.kernels import KernelConstants
from FluidSim.sph.neighborCache import NeighborCache
from FluidSim.sph.spatialGrid import SpatialGrid

h = const.interactionRadius
mass = const.particleMass
gravity = np.array(const.gravity)


def buildPasses():
    kernel = KernelConstants.fromRadius(h)
    density = DensityPressurePass(kernel, mass, const.stiffness, const.restDensity, const.distanceEpsilon)
    force = ForcePass(kernel, mass, const.viscosity, gravity, const.distanceEpsilon)
    return kernel, density, force


def runPasses(particles, useCache=True):
    kernel, density, force = buildPasses()
    grid = SpatialGrid(1.0, 1.0, cellSize=h)
    grid.rebuild(particles.positions)
    cache = NeighborCache() if useCache else None
    density.compute(particles, grid, cache)
    force.compute(particles, grid, cache)
    return kernel, density, cache


def testIsolatedParticle(makeParticles):
    particles = makeParticles([[0.5, 0.5]])
    kernel, density, cache = runPasses(particles)

    rho = mass * kernel.evaluatePoly6(0.0)
    assert math.isclose(particles.densities[0], rho)
    assert math.isclose(density.selfDensity(), rho)
    assert math.isclose(particles.pressures[0], const.stiffness * (rho - const.restDensity))
    np.testing.assert_allclose(particles.forces[0], rho * gravity)
    assert cache.nEntries == 0


def testDensityIsPositiveAndIncludesNeighbors(makeParticles, rng):
    positions = rng.uniform(0.3, 0.4, size=(200, 2))
    particles = makeParticles(positions)
    kernel, density, _ = runPasses(particles)

    assert np.all(particles.densities > 0.0)
    assert np.all(particles.densities >= density.selfDensity() - 1e-15)
    np.testing.assert_allclose(
        particles.pressures,
        const.stiffness * (particles.densities - const.restDensity),
    )

    # Brute-force reference for one particle
    dist = np.linalg.norm(positions - positions[17], axis=1)
    reference = mass * np.sum(kernel.poly6Batch(dist))
    assert math.isclose(particles.densities[17], reference, rel_tol=1e-12)


def testNeighborCacheEntries(makeParticles, rng):
    positions = rng.uniform(0.2, 0.3, size=(150, 2))
    particles = makeParticles(positions)
    _, _, cache = runPasses(particles)

    assert cache.nParticles == 150
    total = 0
    for i in range(150):
        entries = cache.neighborsOf(i)
        dist = np.linalg.norm(positions - positions[i], axis=1)
        expected = {j for j in np.nonzero(dist < h)[0].tolist() if j != i}
        assert {j for _, j in entries} == expected
        for r, j in entries:
            assert math.isclose(r, dist[j])
            assert i in {k for _, k in cache.neighborsOf(j)}
        total += len(entries)
    assert total == cache.nEntries


def testCachedAndGridForcesAgree(makeParticles, rng):
    positions = rng.uniform(0.1, 0.2, size=(300, 2))
    velocities = rng.normal(0.0, 0.1, size=(300, 2))

    cached = makeParticles(positions, velocities)
    direct = makeParticles(positions, velocities)
    runPasses(cached, useCache=True)
    runPasses(direct, useCache=False)

    np.testing.assert_allclose(cached.densities, direct.densities)
    np.testing.assert_allclose(cached.forces, direct.forces, rtol=1e-12, atol=1e-12)


def testPairPressureRepels(makeParticles):
    particles = makeParticles([[0.5, 0.5], [0.5 + 0.5 * h, 0.5]])
    runPasses(particles)

    # Horizontal components only carry the pair force
    assert particles.forces[0, 0] < 0.0
    assert particles.forces[1, 0] > 0.0
    assert math.isclose(particles.forces[0, 0], -particles.forces[1, 0])


def testCoincidentParticlesStayFinite(makeParticles):
    particles = makeParticles([[0.5, 0.5], [0.5, 0.5], [0.5 + 0.3 * h, 0.5]])
    runPasses(particles, useCache=True)
    assert np.all(np.isfinite(particles.forces))

    particles = makeParticles([[0.5, 0.5], [0.5, 0.5], [0.5 + 0.3 * h, 0.5]])
    runPasses(particles, useCache=False)
    assert np.all(np.isfinite(particles.forces))


def testViscosityPullsTowardNeighborVelocity(makeParticles):
    particles = makeParticles(
        [[0.5, 0.5], [0.5, 0.5 + 0.5 * h]],
        velocities=[[1.0, 0.0], [0.0, 0.0]],
    )
    runPasses(particles)

    # Pressure acts along y only; x is pure viscosity
    assert particles.forces[0, 0] < 0.0
    assert particles.forces[1, 0] > 0.0


def testEmptyParticleStore(makeParticles):
    particles = makeParticles(np.zeros((0, 2)))
    _, _, cache = runPasses(particles)
    assert cache.nEntries == 0
    assert particles.forces.shape == (0, 2)
