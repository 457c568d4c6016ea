# -- Simulation Scenarios Package -- #

'''
Initial conditions for the SPH fluid.

Each scenario provides the seeded particle layout and a matching
simulation configuration.
'''

from FluidSim.scenarios.packedLattice import LatticeConfig, createPackedLattice
