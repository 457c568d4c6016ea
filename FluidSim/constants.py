# -- Physical and Numerical Constants for SPH Fluid Simulation -- #

'''
Default constants for the real-time 2D SPH fluid engine.

Units are simulation units: the field is a unit-ish square and
particle sizes, masses and densities are scaled so the fluid looks
plausible at interactive frame rates rather than matching water.

References:
-----------
Mueller et al. (2003) -- Particle-based fluid simulation for
    interactive applications
'''

#--------------------------------------------------------------------#
# -- Particle Geometry -- #
#--------------------------------------------------------------------#

# Visual particle radius [field units]
particleSize: float = 0.0085

# Interaction radius h as a multiple of the particle size
# Grid cells are exactly h wide
interactionRadiusRatio: float = 1.2

# Interaction (smoothing) radius h [field units]
interactionRadius: float = interactionRadiusRatio * particleSize

#--------------------------------------------------------------------#
# -- Fluid Properties -- #
#--------------------------------------------------------------------#

# Rest density rho_0 of the linear equation of state
restDensity: float = 300.0

# Stiffness k of the linear equation of state: p = k * (rho - rho_0)
stiffness: float = 3.0

# Mass of every particle
particleMass: float = 2.5 / 600.0 / 600.0

# Viscosity coefficient mu
viscosity: float = 0.0002

# Gravitational acceleration (x, y)
gravity: tuple[float, float] = (0.0, -9.8)

#--------------------------------------------------------------------#
# -- Numerical Parameters -- #
#--------------------------------------------------------------------#

# Fixed time step per sub-step [s]
timeStep: float = 0.001

# Pairs closer than this are excluded from the force pass so that
# direction normalization never divides by zero
distanceEpsilon: float = 1e-30

# Sub-steps advanced by one call to step()
defaultSubSteps: int = 1

# Sub-steps per rendered frame in the headless runner
frameSubSteps: int = 10

#--------------------------------------------------------------------#
# -- Initial Lattice -- #
#--------------------------------------------------------------------#

# Fixed pseudorandom seed for the packed lattice jitter
initialSeed: int = 12345

# Lattice step as a multiple of the particle size
latticeSpacingRatio: float = 1.5

# Maximum random jitter added to every horizontal lattice step
latticeJitter: float = 0.0001

# Horizontal extent of the lattice as fractions of the field width
latticeStartFraction: float = 0.1
latticeEndFraction: float = 0.9

# Height of the first lattice row as a multiple of the particle size
latticeFirstRowRatio: float = 1.2

#--------------------------------------------------------------------#
# -- Boundary Handling -- #
#--------------------------------------------------------------------#

# Inset from the lower / upper field edges in units of h
lowerInsetRatio: float = 1.0
upperInsetRatio: float = 2.0

# Vertical velocity assigned to a particle clamped at the floor or ceiling
verticalReboundVelocity: float = -0.5

# Horizontal velocity is reflected and scaled by this factor at the walls
horizontalDamping: float = 0.5

#--------------------------------------------------------------------#
# -- Pointer (External Force) -- #
#--------------------------------------------------------------------#

# Radius of influence of the pointer force [field units]
pointerRadius: float = 0.1

# Specific strength of the pointer force (scaled by density like gravity)
pointerStrength: float = 50.0
