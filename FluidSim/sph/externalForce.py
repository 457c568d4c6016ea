# -- Pointer External Force -- #

'''
Localized push/pull force injected by the pointer.

Applied after the force pass and before integration. Every particle
within the pointer radius of the pointer location receives an
additional force along the unit vector away from the point (or toward
it when attracting), scaled by the pointer strength. The strength is
a specific force: it is multiplied by the particle density, like
gravity, so the integrator's F / rho turns it into an acceleration of
exactly `strength`.
'''

from __future__ import annotations

import numpy as np

from FluidSim.sph.particles import ParticleSystem
from FluidSim.sph.protocols import ExternalForceInput


class PointerForce:
    '''
    Radial pointer force hook.

    Parameters:
    -----------
    radius : float
        Radius of influence around the pointer
    strength : float
        Specific force magnitude
    epsilon : float
        Particles closer than this to the point are left untouched
        (their direction is undefined)
    '''

    def __init__(self, radius: float, strength: float, epsilon: float) -> None:
        self._radius = radius
        self._strength = strength
        self._epsilon = epsilon

    @property
    def radius(self) -> float:
        '''Radius of influence.'''
        return self._radius

    @property
    def strength(self) -> float:
        '''Specific force magnitude.'''
        return self._strength

    def apply(self, particles: ParticleSystem, externalInput: ExternalForceInput) -> None:
        '''
        Add the pointer force to the accumulated forces.

        No-op when the input is inactive.

        Parameters:
        -----------
        particles : ParticleSystem
            Particle store with this tick's forces
        externalInput : ExternalForceInput
            Pointer location and flags for this tick
        '''
        if not externalInput.active or particles.nParticles == 0:
            return

        point = np.asarray(externalInput.point, dtype=np.float64)
        offset = particles.positions - point
        dist = np.linalg.norm(offset, axis=1)

        inRange = (dist < self._radius) & (dist > self._epsilon)
        if not np.any(inRange):
            return

        direction = offset[inRange] / dist[inRange, np.newaxis]
        sign = -1.0 if externalInput.attract else 1.0
        magnitude = sign * self._strength * particles.densities[inRange]

        particles.forces[inRange] += magnitude[:, np.newaxis] * direction
