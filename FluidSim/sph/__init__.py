# -- SPH Engine Package -- #

'''
Core Smoothed Particle Hydrodynamics (SPH) engine.

Provides the kernel constants, particle store, spatial grid, neighbor
cache, density / force passes, pointer hook, boundary handling, time
integration and the solver that sequences them.
'''

from FluidSim.sph.protocols import ExternalForceInput, SimulationConfig, SimulationState
from FluidSim.sph.kernels import KernelConstants
from FluidSim.sph.spatialGrid import SpatialGrid
from FluidSim.sph.neighborCache import NeighborCache
from FluidSim.sph.solver import FluidSolver, construct, step
