# -- Export Package -- #

'''
Data export utilities for SPH simulation results.

Writes frame data as JSON for an external viewer.
'''

from FluidSim.export.frameExporter import FrameExporter
