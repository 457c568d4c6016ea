# -- Real-Time SPH Fluid Solver -- #

'''
Simulation state and time stepping for the 2D SPH fluid.

FluidSolver aggregates the particle store, the field, the spatial
grid, the neighbor cache and the kernel constants, and is the only
object that advances time.

Algorithm per sub-step (strictly sequential stages, each a parallel
map over particles):
    1. Rebuild the spatial grid from current positions
    2. Density and pressure (poly6 sum + linear equation of state),
       filling the neighbor cache
    3. Forces (pressure + viscosity + gravity)
    4. Optional pointer force
    5. Semi-implicit Euler integration
    6. Reflective boundary clamping

Data flows only forward within a sub-step: no stage reads anything a
later stage writes.

References:
-----------
Mueller et al. (2003) -- Particle-based fluid simulation for
    interactive applications
Monaghan (1992) -- Smoothed Particle Hydrodynamics
'''

from __future__ import annotations

from dataclasses import replace

import numba as nb
import numpy as np

from FluidSim.scenarios.packedLattice import createPackedLattice
from FluidSim.sph.boundaryHandling import ReflectiveBoundary
from FluidSim.sph.densityPressure import DensityPressurePass
from FluidSim.sph.externalForce import PointerForce
from FluidSim.sph.forces import ForcePass
from FluidSim.sph.kernels import KernelConstants
from FluidSim.sph.neighborCache import NeighborCache
from FluidSim.sph.particles import ParticleSystem
from FluidSim.sph.protocols import ExternalForceInput, SimulationConfig, SimulationState
from FluidSim.sph.spatialGrid import SpatialGrid
from FluidSim.sph.timeIntegration import SemiImplicitEuler


class FluidSolver:
    '''
    Real-time SPH fluid simulation.

    The field and interaction radius are fixed at construction.
    Changing the particle count rebuilds everything from the seeded
    lattice (see reinitialize); there is no incremental resize.

    Parameters:
    -----------
    config : SimulationConfig
        Simulation configuration (field, particles, fluid, stepping)
    '''

    def __init__(self, config: SimulationConfig) -> None:
        config.validate()
        self._config = config

        if config.numThreads is not None:
            nb.set_num_threads(min(config.numThreads, nb.config.NUMBA_NUM_THREADS))

        h = config.interactionRadius
        self._kernel = KernelConstants.fromRadius(h)
        self._grid = SpatialGrid(config.fieldWidth, config.fieldHeight, cellSize=h)
        self._neighborCache = NeighborCache() if config.useNeighborCache else None

        self._densityPass = DensityPressurePass(
            kernel=self._kernel,
            mass=config.particleMass,
            stiffness=config.stiffness,
            restDensity=config.restDensity,
            epsilon=config.distanceEpsilon,
        )
        self._forcePass = ForcePass(
            kernel=self._kernel,
            mass=config.particleMass,
            viscosity=config.viscosity,
            gravity=config.gravity,
            epsilon=config.distanceEpsilon,
        )
        self._pointer = PointerForce(
            radius=config.pointerRadius,
            strength=config.pointerStrength,
            epsilon=config.distanceEpsilon,
        )
        self._integrator = SemiImplicitEuler()
        self._boundary = ReflectiveBoundary(
            fieldWidth=config.fieldWidth,
            fieldHeight=config.fieldHeight,
            radius=h,
            lowerInsetRatio=config.lowerInsetRatio,
            upperInsetRatio=config.upperInsetRatio,
            verticalReboundVelocity=config.verticalReboundVelocity,
            horizontalDamping=config.horizontalDamping,
        )

        self._particles = self._createParticles(config.particleCount)
        self._time: float = 0.0
        self._step: int = 0

    ######################################################################
    # -- Construction -- #
    ######################################################################

    @classmethod
    def construct(
        cls,
        particleCount: int,
        fieldWidth: float,
        fieldHeight: float,
        config: SimulationConfig | None = None,
    ) -> FluidSolver:
        '''
        Build a simulation with a seeded packed lattice of particles.

        Parameters:
        -----------
        particleCount : int
            Number of particles
        fieldWidth : float
            Field width
        fieldHeight : float
            Field height
        config : SimulationConfig | None
            Remaining parameters (defaults when None); its field size
            and particle count are replaced by the arguments

        Returns:
        --------
        FluidSolver : Ready-to-step simulation
        '''
        base = config or SimulationConfig()
        return cls(replace(
            base,
            particleCount=particleCount,
            fieldWidth=fieldWidth,
            fieldHeight=fieldHeight,
        ))

    def _createParticles(self, particleCount: int) -> ParticleSystem:
        '''Seeded lattice particle store for the current field.'''
        config = self._config
        positions = createPackedLattice(
            particleCount,
            config.fieldWidth,
            particleSize=config.particleSize,
            seed=config.seed,
        )
        return ParticleSystem.fromPositions(
            positions, size=config.particleSize * config.renderScale,
        )

    def reinitialize(self, particleCount: int) -> None:
        '''
        Rebuild the whole simulation for a new particle count.

        Parameters:
        -----------
        particleCount : int
            New number of particles

        Raises:
        -------
        ValueError : If the count is negative
        '''
        if particleCount < 0:
            raise ValueError(f'Particle count must be non-negative, got {particleCount}')

        self._config = replace(self._config, particleCount=particleCount)
        self._particles = self._createParticles(particleCount)
        self._grid = SpatialGrid(
            self._config.fieldWidth, self._config.fieldHeight,
            cellSize=self._kernel.radius,
        )
        if self._neighborCache is not None:
            self._neighborCache = NeighborCache()
        self._time = 0.0
        self._step = 0

    def reset(self) -> None:
        '''Restart from the seeded lattice with the same particle count.'''
        self.reinitialize(self._config.particleCount)

    ######################################################################
    # -- Main Time Step -- #
    ######################################################################

    def step(self, externalInput: ExternalForceInput | None = None) -> None:
        '''
        Advance the simulation by config.subSteps sub-steps.

        Parameters:
        -----------
        externalInput : ExternalForceInput | None
            Pointer state for this tick (None means inactive)
        '''
        if externalInput is None:
            externalInput = ExternalForceInput.inactive()

        for _ in range(self._config.subSteps):
            self._subStep(externalInput)

    def _subStep(self, externalInput: ExternalForceInput) -> None:
        '''One pass of grid, density, force, pointer, integrate, clamp.'''
        p = self._particles
        dt = self._config.timeStep

        # 1. Grid
        self._grid.rebuild(p.positions)

        # 2. Density and pressure
        self._densityPass.compute(p, self._grid, self._neighborCache)

        # 3. Forces
        self._forcePass.compute(p, self._grid, self._neighborCache)

        # 4. Pointer
        self._pointer.apply(p, externalInput)

        # 5. Integrate
        self._integrator.integrate(p, dt)

        # 6. Boundary
        self._boundary.enforceBoundary(p)

        self._time += dt
        self._step += 1

    ######################################################################
    # -- Read Accessors -- #
    ######################################################################

    @property
    def positions(self) -> np.ndarray:
        '''Particle positions in index order (read-only view).'''
        return self._readOnly(self._particles.positions)

    @property
    def velocities(self) -> np.ndarray:
        '''Particle velocities in index order (read-only view).'''
        return self._readOnly(self._particles.velocities)

    @property
    def sizes(self) -> np.ndarray:
        '''Particle render radii in index order (read-only view).'''
        return self._readOnly(self._particles.sizes)

    @staticmethod
    def _readOnly(array: np.ndarray) -> np.ndarray:
        view = array.view()
        view.flags.writeable = False
        return view

    @property
    def currentState(self) -> SimulationState:
        '''Diagnostic snapshot of the current state.'''
        p = self._particles
        mass = self._config.particleMass
        gravMag = float(np.linalg.norm(self._config.gravity))

        return SimulationState(
            time=self._time,
            step=self._step,
            kineticEnergy=p.kineticEnergy(mass),
            potentialEnergy=p.potentialEnergy(mass, gravMag),
            maxVelocity=p.maxSpeed(),
            maxDensity=float(np.max(p.densities)) if p.nParticles else 0.0,
            meanDensity=float(np.mean(p.densities)) if p.nParticles else 0.0,
            heightSum=p.heightSum(),
        )

    @property
    def config(self) -> SimulationConfig:
        '''Simulation configuration.'''
        return self._config

    @property
    def particles(self) -> ParticleSystem:
        '''Access the particle store.'''
        return self._particles

    @property
    def grid(self) -> SpatialGrid:
        '''Spatial grid of the last sub-step.'''
        return self._grid

    @property
    def neighborCache(self) -> NeighborCache | None:
        '''Neighbor cache of the last sub-step (None when disabled).'''
        return self._neighborCache

    @property
    def kernel(self) -> KernelConstants:
        '''Kernel constants.'''
        return self._kernel

    @property
    def boundary(self) -> ReflectiveBoundary:
        '''Boundary handler.'''
        return self._boundary

    @property
    def time(self) -> float:
        '''Simulated time [s].'''
        return self._time

    @property
    def stepCount(self) -> int:
        '''Sub-steps advanced since construction or the last reset.'''
        return self._step


def construct(particleCount: int, fieldWidth: float, fieldHeight: float) -> FluidSolver:
    '''Seeded simulation with default parameters.'''
    return FluidSolver.construct(particleCount, fieldWidth, fieldHeight)


def step(solver: FluidSolver, externalInput: ExternalForceInput | None = None) -> None:
    '''Advance a simulation by one tick.'''
    solver.step(externalInput)
