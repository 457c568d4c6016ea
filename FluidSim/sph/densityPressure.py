# -- Density and Pressure Pass -- #

'''
SPH density summation and linear equation of state.

For every particle i:

    rho_i = sum_j m * W_poly6(|r_j - r_i|)      over j with r_ij < h (j = i included)
    p_i   = k * (rho_i - rho_0)

Neighbors come from the 3x3 cell block around the particle's cell.
The pass reads only positions and writes only densities, pressures
and the neighbor cache, so the parallel map over particles needs no
locks: no worker writes anything another worker reads.

When a neighbor cache is supplied it is rebuilt in two parallel
sweeps: the density sweep also counts each particle's neighbors with
epsilon < r_ij < h, the counts become list offsets, and a second sweep
fills each particle's disjoint slice with (r_ij, j) entries.
'''

from __future__ import annotations

import math

import numba as nb
import numpy as np

from FluidSim.sph.kernels import KernelConstants, poly6Weight
from FluidSim.sph.neighborCache import NeighborCache
from FluidSim.sph.particles import ParticleSystem
from FluidSim.sph.spatialGrid import SpatialGrid, cellCoordinate


#--------------------------------------------------------------------#
# -- Compiled Passes -- #
#--------------------------------------------------------------------#

@nb.njit(parallel=True)
def densityPressureKernel(positions, cellStart, cellParticles, cellSize, nx, ny,
                          h, c6, mass, stiffness, restDensity, epsilon,
                          densities, pressures, neighborCounts):
    '''Density, pressure and cacheable-neighbor count of every particle.'''
    for i in nb.prange(positions.shape[0]):
        px = positions[i, 0]
        py = positions[i, 1]
        cx = cellCoordinate(px, cellSize, nx)
        cy = cellCoordinate(py, cellSize, ny)

        density = 0.0
        count = 0
        for gx in range(max(cx - 1, 0), min(cx + 1, nx - 1) + 1):
            for gy in range(max(cy - 1, 0), min(cy + 1, ny - 1) + 1):
                cell = gy * nx + gx
                for k in range(cellStart[cell], cellStart[cell + 1]):
                    j = cellParticles[k]
                    dx = positions[j, 0] - px
                    dy = positions[j, 1] - py
                    r = math.sqrt(dx * dx + dy * dy)
                    if r < h:
                        density += mass * poly6Weight(r, h, c6)
                        if j != i and r > epsilon:
                            count += 1

        densities[i] = density
        pressures[i] = stiffness * (density - restDensity)
        neighborCounts[i] = count


@nb.njit(parallel=True)
def fillNeighborCacheKernel(positions, cellStart, cellParticles, cellSize, nx, ny,
                            h, epsilon, offsets, distances, indices):
    '''Write every particle's (distance, index) entries into its slice.'''
    for i in nb.prange(positions.shape[0]):
        px = positions[i, 0]
        py = positions[i, 1]
        cx = cellCoordinate(px, cellSize, nx)
        cy = cellCoordinate(py, cellSize, ny)

        slot = offsets[i]
        for gx in range(max(cx - 1, 0), min(cx + 1, nx - 1) + 1):
            for gy in range(max(cy - 1, 0), min(cy + 1, ny - 1) + 1):
                cell = gy * nx + gx
                for k in range(cellStart[cell], cellStart[cell + 1]):
                    j = cellParticles[k]
                    if j == i:
                        continue
                    dx = positions[j, 0] - px
                    dy = positions[j, 1] - py
                    r = math.sqrt(dx * dx + dy * dy)
                    if epsilon < r and r < h:
                        distances[slot] = r
                        indices[slot] = j
                        slot += 1


#--------------------------------------------------------------------#
# -- Density / Pressure Pass -- #
#--------------------------------------------------------------------#

class DensityPressurePass:
    '''
    Computes density and pressure of every particle from its neighbors.

    Parameters:
    -----------
    kernel : KernelConstants
        Kernel constants for the interaction radius
    mass : float
        Particle mass
    stiffness : float
        Equation-of-state stiffness k
    restDensity : float
        Rest density rho_0
    epsilon : float
        Minimum distance of a cached neighbor entry
    '''

    def __init__(
        self,
        kernel: KernelConstants,
        mass: float,
        stiffness: float,
        restDensity: float,
        epsilon: float,
    ) -> None:
        self._kernel = kernel
        self._mass = mass
        self._stiffness = stiffness
        self._restDensity = restDensity
        self._epsilon = epsilon
        self._neighborCounts = np.zeros(0, dtype=np.int64)

    def compute(
        self,
        particles: ParticleSystem,
        grid: SpatialGrid,
        cache: NeighborCache | None = None,
    ) -> None:
        '''
        Overwrite densities and pressures (and the cache, if given).

        The grid must already be rebuilt from the current positions.

        Parameters:
        -----------
        particles : ParticleSystem
            Particle store
        grid : SpatialGrid
            Grid rebuilt for this tick
        cache : NeighborCache | None
            Neighbor cache to repopulate, or None to skip caching
        '''
        nParticles = particles.nParticles
        if self._neighborCounts.shape[0] != nParticles:
            self._neighborCounts = np.zeros(nParticles, dtype=np.int64)

        if nParticles == 0:
            if cache is not None:
                cache.allocate(self._neighborCounts)
            return

        h = self._kernel.radius
        densityPressureKernel(
            particles.positions, grid.cellStart, grid.cellParticles,
            grid.cellSize, grid.nx, grid.ny,
            h, self._kernel.poly6, self._mass, self._stiffness,
            self._restDensity, self._epsilon,
            particles.densities, particles.pressures, self._neighborCounts,
        )

        if cache is None:
            return

        cache.allocate(self._neighborCounts)
        fillNeighborCacheKernel(
            particles.positions, grid.cellStart, grid.cellParticles,
            grid.cellSize, grid.nx, grid.ny,
            h, self._epsilon,
            cache.offsets, cache.distances, cache.indices,
        )

    def selfDensity(self) -> float:
        '''Density of an isolated particle: m * W_poly6(0).'''
        return self._mass * self._kernel.evaluatePoly6(0.0)
