# -- Force Pass -- #

'''
Pressure, viscosity and gravity forces on every particle.

For particle i, summed over neighbors j != i with epsilon < r_ij < h:

    F_press = sum_j -m * (p_i + p_j) / 2 * Cs * (h - r)^3 * (r_j - r_i) / r / rho_j
    F_visc  = sum_j  mu * m * Cv * (h - r) * (v_j - v_i) / rho_j
    F_grav  = rho_i * g

    F_i = F_press + F_visc + F_grav

The pair term uses the mean pressure of the pair, so the pressure
contribution between two particles is equal and opposite. Pairs
closer than epsilon never reach the normalization (r_j - r_i) / r.

Like the density pass, this pass reads a frozen snapshot (positions,
velocities, densities, pressures) and writes only forces, so each
parallel worker touches only its own output row.

References:
-----------
Mueller et al. (2003) -- Particle-based fluid simulation for
    interactive applications
'''

from __future__ import annotations

import math

import numba as nb
import numpy as np

from FluidSim.sph.kernels import KernelConstants, spikyGradientWeight, viscosityLaplacianWeight
from FluidSim.sph.neighborCache import NeighborCache
from FluidSim.sph.particles import ParticleSystem
from FluidSim.sph.spatialGrid import SpatialGrid, cellCoordinate


#--------------------------------------------------------------------#
# -- Compiled Passes -- #
#--------------------------------------------------------------------#

@nb.njit
def pairForce(i, j, r, positions, velocities, densities, pressures,
              h, cs, cv, mass, viscosity):
    '''Pressure + viscosity force exerted on particle i by particle j.'''
    rx = positions[j, 0] - positions[i, 0]
    ry = positions[j, 1] - positions[i, 1]

    sharedPressure = 0.5 * (pressures[i] + pressures[j])
    pressCoeff = -mass * sharedPressure * spikyGradientWeight(r, h, cs) / densities[j]

    viscCoeff = viscosity * mass * viscosityLaplacianWeight(r, h, cv) / densities[j]
    dvx = velocities[j, 0] - velocities[i, 0]
    dvy = velocities[j, 1] - velocities[i, 1]

    fx = pressCoeff * rx / r + viscCoeff * dvx
    fy = pressCoeff * ry / r + viscCoeff * dvy
    return fx, fy


@nb.njit(parallel=True)
def cachedForceKernel(positions, velocities, densities, pressures,
                      offsets, distances, indices,
                      h, cs, cv, mass, viscosity, gx, gy, forces):
    '''Force pass walking the neighbor cache of the density pass.'''
    for i in nb.prange(positions.shape[0]):
        fx = 0.0
        fy = 0.0
        for k in range(offsets[i], offsets[i + 1]):
            dfx, dfy = pairForce(
                i, indices[k], distances[k], positions, velocities,
                densities, pressures, h, cs, cv, mass, viscosity,
            )
            fx += dfx
            fy += dfy

        forces[i, 0] = fx + densities[i] * gx
        forces[i, 1] = fy + densities[i] * gy


@nb.njit(parallel=True)
def gridForceKernel(positions, velocities, densities, pressures,
                    cellStart, cellParticles, cellSize, nx, ny,
                    h, cs, cv, mass, viscosity, epsilon, gx, gy, forces):
    '''Force pass traversing the 3x3 cell block directly.'''
    for i in nb.prange(positions.shape[0]):
        px = positions[i, 0]
        py = positions[i, 1]
        cx = cellCoordinate(px, cellSize, nx)
        cy = cellCoordinate(py, cellSize, ny)

        fx = 0.0
        fy = 0.0
        for cellX in range(max(cx - 1, 0), min(cx + 1, nx - 1) + 1):
            for cellY in range(max(cy - 1, 0), min(cy + 1, ny - 1) + 1):
                cell = cellY * nx + cellX
                for k in range(cellStart[cell], cellStart[cell + 1]):
                    j = cellParticles[k]
                    if j == i:
                        continue
                    dx = positions[j, 0] - px
                    dy = positions[j, 1] - py
                    r = math.sqrt(dx * dx + dy * dy)
                    if epsilon < r and r < h:
                        dfx, dfy = pairForce(
                            i, j, r, positions, velocities,
                            densities, pressures, h, cs, cv, mass, viscosity,
                        )
                        fx += dfx
                        fy += dfy

        forces[i, 0] = fx + densities[i] * gx
        forces[i, 1] = fy + densities[i] * gy


#--------------------------------------------------------------------#
# -- Force Pass -- #
#--------------------------------------------------------------------#

class ForcePass:
    '''
    Accumulates pressure, viscosity and gravity forces.

    Parameters:
    -----------
    kernel : KernelConstants
        Kernel constants for the interaction radius
    mass : float
        Particle mass
    viscosity : float
        Viscosity coefficient mu
    gravity : np.ndarray
        Gravity vector, shape (2,)
    epsilon : float
        Minimum pair distance admitted to the pass
    '''

    def __init__(
        self,
        kernel: KernelConstants,
        mass: float,
        viscosity: float,
        gravity: np.ndarray,
        epsilon: float,
    ) -> None:
        self._kernel = kernel
        self._mass = mass
        self._viscosity = viscosity
        self._gravity = np.asarray(gravity, dtype=np.float64)
        self._epsilon = epsilon

    def compute(
        self,
        particles: ParticleSystem,
        grid: SpatialGrid,
        cache: NeighborCache | None = None,
    ) -> None:
        '''
        Overwrite the force of every particle.

        Densities and pressures must already be final for this tick.
        If a cache filled by this tick's density pass is given, the
        grid is not traversed again.

        Parameters:
        -----------
        particles : ParticleSystem
            Particle store
        grid : SpatialGrid
            Grid rebuilt for this tick
        cache : NeighborCache | None
            Neighbor cache from the density pass, or None
        '''
        if particles.nParticles == 0:
            return

        k = self._kernel
        gx, gy = float(self._gravity[0]), float(self._gravity[1])

        if cache is not None:
            cachedForceKernel(
                particles.positions, particles.velocities,
                particles.densities, particles.pressures,
                cache.offsets, cache.distances, cache.indices,
                k.radius, k.spikyGradient, k.viscosityLaplacian,
                self._mass, self._viscosity, gx, gy, particles.forces,
            )
        else:
            gridForceKernel(
                particles.positions, particles.velocities,
                particles.densities, particles.pressures,
                grid.cellStart, grid.cellParticles, grid.cellSize, grid.nx, grid.ny,
                k.radius, k.spikyGradient, k.viscosityLaplacian,
                self._mass, self._viscosity, self._epsilon, gx, gy, particles.forces,
            )
