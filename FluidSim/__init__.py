# -- FluidSim Package -- #

'''
Real-time 2D fluid simulation using Smoothed Particle Hydrodynamics (SPH).

A fixed rectangular field of particles under gravity, stepped by a
parallel neighborhood pipeline and driven headless from the command
line or by an external renderer through the read accessors.
'''

__version__ = '0.1.0'

from FluidSim.sph.protocols import ExternalForceInput, SimulationConfig, SimulationState
from FluidSim.sph.solver import FluidSolver, construct, step
from FluidSim.export.frameExporter import FrameExporter
from FluidSim.runner import FluidSimRunner
