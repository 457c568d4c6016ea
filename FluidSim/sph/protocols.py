# -- SPH Simulation Protocols -- #

'''
Configuration, diagnostics and input dataclasses for the SPH engine.

Defines the core data structures shared by the solver, the runner
and the rendering collaborator: SimulationConfig (everything fixed
at construction), SimulationState (diagnostic snapshot after a step)
and ExternalForceInput (the per-tick pointer value).
'''

from __future__ import annotations

import json
from dataclasses import dataclass, field

import numpy as np

from FluidSim import constants as const


######################################################################
# -- Simulation Configuration -- #
######################################################################

@dataclass
class SimulationConfig:
    '''
    Configuration for a 2D SPH simulation.

    Defines the field size, particle population, kernel radius,
    fluid parameters and stepping options. The field and radius
    are fixed for the lifetime of a solver; changing them means
    building a new one.

    Parameters:
    -----------
    fieldWidth : float
        Width of the rectangular field
    fieldHeight : float
        Height of the rectangular field
    particleCount : int
        Number of particles placed at initialization
    renderScale : float
        Multiplier applied to the particle size for rendering
    particleSize : float
        Visual particle radius, also sets the lattice step
    interactionRadiusRatio : float
        Interaction radius h as a multiple of particleSize
    restDensity : float
        Rest density rho_0 of the linear equation of state
    stiffness : float
        Stiffness k of the linear equation of state
    particleMass : float
        Mass of every particle
    viscosity : float
        Viscosity coefficient mu
    gravity : np.ndarray
        Gravity vector, shape (2,)
    timeStep : float
        Fixed time step per sub-step [s]
    distanceEpsilon : float
        Minimum pair distance admitted to the force pass
    subSteps : int
        Internal sub-steps advanced by one call to step()
    seed : int
        Seed of the lattice jitter generator
    lowerInsetRatio : float
        Boundary inset from x = 0 and y = 0 in units of h
    upperInsetRatio : float
        Boundary inset from the far walls in units of h
    verticalReboundVelocity : float
        Vertical velocity assigned at the floor and ceiling
    horizontalDamping : float
        Reflection factor for the horizontal velocity at the side walls
    pointerRadius : float
        Radius of influence of the external pointer force
    pointerStrength : float
        Specific strength of the external pointer force
    useNeighborCache : bool
        Reuse the density-pass neighbor lists in the force pass
    numThreads : int | None
        Worker threads for the parallel passes (None keeps the default)
    '''

    fieldWidth: float = 1.0
    fieldHeight: float = 1.0
    particleCount: int = 1000
    renderScale: float = 1.0
    particleSize: float = const.particleSize
    interactionRadiusRatio: float = const.interactionRadiusRatio
    restDensity: float = const.restDensity
    stiffness: float = const.stiffness
    particleMass: float = const.particleMass
    viscosity: float = const.viscosity
    gravity: np.ndarray = field(default_factory=lambda: np.array(const.gravity))
    timeStep: float = const.timeStep
    distanceEpsilon: float = const.distanceEpsilon
    subSteps: int = const.defaultSubSteps
    seed: int = const.initialSeed
    lowerInsetRatio: float = const.lowerInsetRatio
    upperInsetRatio: float = const.upperInsetRatio
    verticalReboundVelocity: float = const.verticalReboundVelocity
    horizontalDamping: float = const.horizontalDamping
    pointerRadius: float = const.pointerRadius
    pointerStrength: float = const.pointerStrength
    useNeighborCache: bool = True
    numThreads: int | None = None

    @property
    def interactionRadius(self) -> float:
        '''Interaction radius h = ratio * particleSize.'''
        return self.interactionRadiusRatio * self.particleSize

    @property
    def fieldSize(self) -> np.ndarray:
        '''Field extent (width, height).'''
        return np.array([self.fieldWidth, self.fieldHeight])

    def validate(self) -> None:
        '''
        Check the configuration for values that would make the
        grid or the integrator degenerate.

        Raises:
        -------
        ValueError : If any parameter is out of range
        '''
        if self.fieldWidth <= 0.0 or self.fieldHeight <= 0.0:
            raise ValueError(
                f'Field dimensions must be positive, got '
                f'{self.fieldWidth} x {self.fieldHeight}'
            )
        if self.particleCount < 0:
            raise ValueError(f'Particle count must be non-negative, got {self.particleCount}')
        if self.interactionRadius <= 0.0:
            raise ValueError(f'Interaction radius must be positive, got {self.interactionRadius}')
        if self.timeStep <= 0.0:
            raise ValueError(f'Time step must be positive, got {self.timeStep}')
        if self.particleMass <= 0.0:
            raise ValueError(f'Particle mass must be positive, got {self.particleMass}')
        if self.subSteps < 1:
            raise ValueError(f'Sub-steps must be at least 1, got {self.subSteps}')
        if self.numThreads is not None and self.numThreads < 1:
            raise ValueError(f'Thread count must be at least 1, got {self.numThreads}')

    @classmethod
    def fromJson(cls, configPath: str) -> SimulationConfig:
        '''
        Load configuration from a JSON file.

        Reads the 'field', 'particles', 'sph', 'pointer' and
        'simulation' sections; every missing key falls back to
        the defaults in constants.py.

        Parameters:
        -----------
        configPath : str
            Path to the JSON configuration file

        Returns:
        --------
        SimulationConfig : Loaded configuration
        '''
        with open(configPath, 'r') as f:
            data = json.load(f)

        return cls.fromDict(data)

    @classmethod
    def fromDict(cls, data: dict) -> SimulationConfig:
        '''
        Build a configuration from already-parsed JSON sections.

        Parameters:
        -----------
        data : dict
            Parsed configuration with optional sections

        Returns:
        --------
        SimulationConfig : Configuration with defaults filled in
        '''
        fieldSection = data.get('field', {})
        particleSection = data.get('particles', {})
        sphSection = data.get('sph', {})
        boundarySection = data.get('boundary', {})
        pointerSection = data.get('pointer', {})
        simSection = data.get('simulation', {})

        gravity = sphSection.get('gravity', list(const.gravity))

        return cls(
            fieldWidth=fieldSection.get('width', 1.0),
            fieldHeight=fieldSection.get('height', 1.0),
            particleCount=particleSection.get('count', 1000),
            renderScale=particleSection.get('renderScale', 1.0),
            particleSize=particleSection.get('size', const.particleSize),
            interactionRadiusRatio=sphSection.get('interactionRadiusRatio', const.interactionRadiusRatio),
            restDensity=sphSection.get('restDensity', const.restDensity),
            stiffness=sphSection.get('stiffness', const.stiffness),
            particleMass=particleSection.get('mass', const.particleMass),
            viscosity=sphSection.get('viscosity', const.viscosity),
            gravity=np.array(gravity, dtype=np.float64),
            timeStep=simSection.get('timeStep', const.timeStep),
            distanceEpsilon=sphSection.get('distanceEpsilon', const.distanceEpsilon),
            subSteps=simSection.get('subSteps', const.defaultSubSteps),
            seed=particleSection.get('seed', const.initialSeed),
            lowerInsetRatio=boundarySection.get('lowerInsetRatio', const.lowerInsetRatio),
            upperInsetRatio=boundarySection.get('upperInsetRatio', const.upperInsetRatio),
            verticalReboundVelocity=boundarySection.get('verticalReboundVelocity', const.verticalReboundVelocity),
            horizontalDamping=boundarySection.get('horizontalDamping', const.horizontalDamping),
            pointerRadius=pointerSection.get('radius', const.pointerRadius),
            pointerStrength=pointerSection.get('strength', const.pointerStrength),
            useNeighborCache=simSection.get('useNeighborCache', True),
            numThreads=simSection.get('numThreads', None),
        )


######################################################################
# -- External Force Input -- #
######################################################################

@dataclass(frozen=True)
class ExternalForceInput:
    '''
    Pointer state handed to the solver once per tick.

    The rendering/input collaborator converts device coordinates to
    field coordinates before building this value; the solver never
    reads input state any other way.

    Parameters:
    -----------
    point : tuple[float, float]
        Pointer location in field coordinates
    active : bool
        Whether the pointer is pressed (force applied)
    attract : bool
        Pull particles toward the point instead of pushing them away
    '''

    point: tuple[float, float] = (0.0, 0.0)
    active: bool = False
    attract: bool = False

    @classmethod
    def inactive(cls) -> ExternalForceInput:
        '''Input that applies no force.'''
        return cls()


######################################################################
# -- Simulation State -- #
######################################################################

@dataclass
class SimulationState:
    '''
    Diagnostic snapshot of the simulation after a step.

    Parameters:
    -----------
    time : float
        Simulated time [s]
    step : int
        Number of sub-steps advanced so far
    kineticEnergy : float
        Total kinetic energy 1/2 * sum m |v|^2
    potentialEnergy : float
        Total gravitational potential energy sum m g y
    maxVelocity : float
        Maximum particle speed
    maxDensity : float
        Maximum particle density
    meanDensity : float
        Mean particle density
    heightSum : float
        Sum of all particle y positions (frame checksum)
    '''

    time: float
    step: int
    kineticEnergy: float
    potentialEnergy: float
    maxVelocity: float
    maxDensity: float
    meanDensity: float
    heightSum: float

    @property
    def totalEnergy(self) -> float:
        '''Total mechanical energy (KE + PE).'''
        return self.kineticEnergy + self.potentialEnergy
