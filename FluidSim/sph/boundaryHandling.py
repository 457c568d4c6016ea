# -- SPH Boundary Conditions -- #

'''
Reflective boundary enforcement for the rectangular field.

After every drift, particles that left the inset field are clamped
back onto the inset edge. The lower edges are inset by the lower
inset (h by default) and the upper edges by the upper inset (2h by
default), which keeps every particle's 3x3 cell neighborhood inside
the grid.

Velocity response is deliberately lossy:
- floor / ceiling: the vertical velocity is replaced by a small
  fixed value (-0.5 by default), which stops the particle vertically
- left / right walls: the horizontal velocity is reflected and
  scaled by the damping factor (0.5 by default)

This is a soft reflection for visual plausibility, not an elastic
collision.
'''

from __future__ import annotations

import numpy as np

from FluidSim import constants as const
from FluidSim.sph.particles import ParticleSystem


class ReflectiveBoundary:
    '''
    Clamps particles to the inset field and damps their velocity.

    Parameters:
    -----------
    fieldWidth : float
        Field width
    fieldHeight : float
        Field height
    radius : float
        Interaction radius h
    lowerInsetRatio : float
        Inset from x = 0 and y = 0 in units of h
    upperInsetRatio : float
        Inset from x = width and y = height in units of h
    verticalReboundVelocity : float
        Vertical velocity assigned at the floor and ceiling
    horizontalDamping : float
        Factor applied to the reflected horizontal velocity
    '''

    def __init__(
        self,
        fieldWidth: float,
        fieldHeight: float,
        radius: float,
        lowerInsetRatio: float = const.lowerInsetRatio,
        upperInsetRatio: float = const.upperInsetRatio,
        verticalReboundVelocity: float = const.verticalReboundVelocity,
        horizontalDamping: float = const.horizontalDamping,
    ) -> None:
        lowerInset = lowerInsetRatio * radius
        upperInset = upperInsetRatio * radius

        self._lower = np.array([lowerInset, lowerInset])
        self._upper = np.array([fieldWidth - upperInset, fieldHeight - upperInset])
        self._verticalReboundVelocity = verticalReboundVelocity
        self._horizontalDamping = horizontalDamping

    @property
    def lowerBounds(self) -> np.ndarray:
        '''Lowest allowed (x, y).'''
        return self._lower

    @property
    def upperBounds(self) -> np.ndarray:
        '''Highest allowed (x, y).'''
        return self._upper

    def enforceBoundary(self, particles: ParticleSystem) -> None:
        '''
        Clamp positions into the inset field and damp velocities.

        Parameters:
        -----------
        particles : ParticleSystem
            Particle store after the drift
        '''
        positions = particles.positions
        velocities = particles.velocities

        # --- Vertical: floor, then ceiling --- #
        belowFloor = positions[:, 1] < self._lower[1]
        positions[belowFloor, 1] = self._lower[1]
        velocities[belowFloor, 1] = self._verticalReboundVelocity

        aboveCeiling = positions[:, 1] > self._upper[1]
        positions[aboveCeiling, 1] = self._upper[1]
        velocities[aboveCeiling, 1] = self._verticalReboundVelocity

        # --- Horizontal: left, then right --- #
        leftOfWall = positions[:, 0] < self._lower[0]
        positions[leftOfWall, 0] = self._lower[0]
        velocities[leftOfWall, 0] *= -self._horizontalDamping

        rightOfWall = positions[:, 0] > self._upper[0]
        positions[rightOfWall, 0] = self._upper[0]
        velocities[rightOfWall, 0] *= -self._horizontalDamping
