# -- SPH Time Integration Schemes -- #

'''
Time integration for the SPH particle store.

Implements the semi-implicit (symplectic) Euler integrator. Forces
in this engine are per unit volume (gravity enters as rho * g), so
the kick divides by each particle's own density to obtain the
acceleration F / rho.

References:
-----------
Monaghan (2005) -- Smoothed Particle Hydrodynamics
Hairer et al. (2003) -- Geometric Numerical Integration
'''

from __future__ import annotations

from typing import Protocol

from FluidSim.sph.particles import ParticleSystem


######################################################################
# -- Time Integrator Protocol -- #
######################################################################

class TimeIntegrator(Protocol):
    '''Protocol for time integration schemes.'''

    def integrate(self, particles: ParticleSystem, dt: float) -> None:
        '''
        Advance all particles by one time step.

        Parameters:
        -----------
        particles : ParticleSystem
            Particle store with final forces for the tick
        dt : float
            Time step size [s]
        '''
        ...


######################################################################
# -- Semi-Implicit Euler Integrator -- #
######################################################################

class SemiImplicitEuler:
    '''
    Semi-implicit (symplectic) Euler integrator.

    Update sequence:
        v(t+dt) = v(t) + F(t) / rho(t) * dt    (kick)
        x(t+dt) = x(t) + v(t+dt) * dt          (drift)

    The drift uses the updated velocity, which is what makes the
    scheme symplectic.
    '''

    def integrate(self, particles: ParticleSystem, dt: float) -> None:
        '''
        Advance all particles by one time step.

        Parameters:
        -----------
        particles : ParticleSystem
            Particle store to advance
        dt : float
            Time step size [s]
        '''
        # Kick: density is never zero (self-contribution of the kernel sum)
        particles.velocities += particles.forces * (dt / particles.densities)[:, None]

        # Drift
        particles.positions += particles.velocities * dt
