# -- SPH Particle System -- #

'''
Dataclass representing the SPH particle store.

Stores positions, velocities, forces, densities, pressures and
render sizes as contiguous NumPy arrays for vectorized and jitted
passes. The store owns no grid or neighbor state; particles are
created in bulk and never added or removed afterwards.
'''

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass
class ParticleSystem:
    '''
    SPH particle store.

    All arrays have shape (nParticles, 2) for vector quantities
    and (nParticles,) for scalar quantities. Index i refers to the
    same particle in every array for the whole simulation.

    Parameters:
    -----------
    positions : np.ndarray
        Particle positions, shape (N, 2)
    velocities : np.ndarray
        Particle velocities, shape (N, 2)
    forces : np.ndarray
        Net force of the current tick, shape (N, 2)
    densities : np.ndarray
        Kernel-summed densities, shape (N,)
    pressures : np.ndarray
        Equation-of-state pressures, shape (N,)
    sizes : np.ndarray
        Render radii, shape (N,)
    '''

    positions: np.ndarray
    velocities: np.ndarray
    forces: np.ndarray
    densities: np.ndarray
    pressures: np.ndarray
    sizes: np.ndarray

    @property
    def nParticles(self) -> int:
        '''Number of particles.'''
        return self.positions.shape[0]

    def kineticEnergy(self, mass: float) -> float:
        '''
        Total kinetic energy.

        KE = (1/2) * sum_i m * |v_i|^2

        Parameters:
        -----------
        mass : float
            Particle mass

        Returns:
        --------
        float : Kinetic energy
        '''
        speedsSq = np.sum(self.velocities * self.velocities, axis=1)
        return float(0.5 * mass * np.sum(speedsSq))

    def potentialEnergy(self, mass: float, gravity: float) -> float:
        '''
        Total gravitational potential energy relative to y = 0.

        PE = sum_i m * g * y_i

        Parameters:
        -----------
        mass : float
            Particle mass
        gravity : float
            Gravitational acceleration magnitude

        Returns:
        --------
        float : Potential energy
        '''
        return float(mass * gravity * np.sum(self.positions[:, 1]))

    def speeds(self) -> np.ndarray:
        '''Velocity magnitudes, shape (N,).'''
        return np.linalg.norm(self.velocities, axis=1)

    def maxSpeed(self) -> float:
        '''Maximum velocity magnitude.'''
        if self.nParticles == 0:
            return 0.0
        return float(np.max(self.speeds()))

    def heightSum(self) -> float:
        '''Sum of all y positions.'''
        return float(np.sum(self.positions[:, 1]))

    @classmethod
    def fromPositions(cls, positions: np.ndarray, size: float) -> ParticleSystem:
        '''
        Create a resting particle store at the given positions.

        Parameters:
        -----------
        positions : np.ndarray
            Initial positions, shape (N, 2)
        size : float
            Render radius shared by every particle

        Returns:
        --------
        ParticleSystem : Store with zero velocity, force, density and pressure
        '''
        positions = np.ascontiguousarray(positions, dtype=np.float64).reshape(-1, 2)
        nParticles = positions.shape[0]

        return cls(
            positions=positions,
            velocities=np.zeros((nParticles, 2)),
            forces=np.zeros((nParticles, 2)),
            densities=np.zeros(nParticles),
            pressures=np.zeros(nParticles),
            sizes=np.full(nParticles, size),
        )
