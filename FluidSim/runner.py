# -- Fluid Simulation Runner -- #

'''
Command-line entry point for running the SPH fluid headless.

Loads a preset or JSON configuration, runs the frame loop (a fixed
number of ticks per frame), reports the per-frame wall-clock time,
checksum and max speed, and optionally exports frame data for an
external viewer.

Usage:
    python -m FluidSim                                  # Small 100-particle column
    python -m FluidSim --preset standard --frames 50    # 2000 particles
    python -m FluidSim --config configs/default.json
    python -m FluidSim --pointer 0.5 0.2 --attract      # Hold the pointer down
    python -m FluidSim --quiet --export                 # Progress bar + JSON export
'''

from __future__ import annotations

import argparse
import time as timeModule
from dataclasses import replace

from tqdm import tqdm

from FluidSim import constants as const
from FluidSim.sph.protocols import ExternalForceInput, SimulationConfig, SimulationState
from FluidSim.sph.solver import FluidSolver
from FluidSim.scenarios.packedLattice import LatticeConfig
from FluidSim.export.frameExporter import FrameExporter


#--------------------------------------------------------------------#
# -- CLI Argument Parser -- #
#--------------------------------------------------------------------#

def buildParser() -> argparse.ArgumentParser:
    '''Build the CLI argument parser.'''
    parser = argparse.ArgumentParser(
        description='FluidSim -- real-time 2D SPH fluid',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        '--config', type=str, default=None,
        help='Path to JSON configuration file',
    )
    parser.add_argument(
        '--preset', type=str, default='small',
        choices=['small', 'standard', 'large'],
        help='Lattice preset (default: small)',
    )
    parser.add_argument(
        '--frames', type=int, default=None,
        help='Number of frames to run (default: from the preset)',
    )
    parser.add_argument(
        '--substeps', type=int, default=const.frameSubSteps,
        help=f'Ticks advanced per frame (default: {const.frameSubSteps})',
    )
    parser.add_argument(
        '--pointer', type=float, nargs=2, default=None, metavar=('X', 'Y'),
        help='Hold the pointer at (X, Y) for the whole run',
    )
    parser.add_argument(
        '--attract', action='store_true',
        help='Pointer pulls particles in instead of pushing them away',
    )
    parser.add_argument(
        '--threads', type=int, default=None,
        help='Worker threads for the parallel passes',
    )
    parser.add_argument(
        '--no-cache', action='store_true',
        help='Recompute neighbors in the force pass instead of caching them',
    )
    parser.add_argument(
        '--export', action='store_true',
        help='Export frame data as JSON',
    )
    parser.add_argument(
        '--output-dir', type=str, default='output',
        help='Output directory for exported frames (default: output)',
    )
    parser.add_argument(
        '--quiet', action='store_true',
        help='Show a progress bar instead of the per-frame table',
    )

    return parser


#--------------------------------------------------------------------#
# -- Runner Class -- #
#--------------------------------------------------------------------#

class FluidSimRunner:
    '''
    Runs an SPH fluid simulation headless and stores results.

    Handles the full pipeline: solver setup, frame loop with timing
    and progress reporting, and optional frame export.

    Parameters:
    -----------
    quiet : bool
        Replace the per-frame table with a tqdm progress bar
    '''

    def __init__(self, quiet: bool = False) -> None:
        self._quiet = quiet
        self._exporter: FrameExporter = FrameExporter()
        self._frameTimesMs: list[float] = []

    @property
    def exporter(self) -> FrameExporter:
        '''Frame exporter holding the recorded frames.'''
        return self._exporter

    @property
    def frameTimesMs(self) -> list[float]:
        '''Wall-clock time of each frame [ms].'''
        return self._frameTimesMs

    def run(
        self,
        config: SimulationConfig,
        nFrames: int,
        frameSubSteps: int = const.frameSubSteps,
        externalInput: ExternalForceInput | None = None,
        doExport: bool = False,
        exportDir: str = 'output',
        scenarioName: str = 'lattice',
    ) -> dict:
        '''
        Run the frame loop.

        Parameters:
        -----------
        config : SimulationConfig
            Simulation configuration
        nFrames : int
            Number of frames to run
        frameSubSteps : int
            Ticks (calls to step) per frame
        externalInput : ExternalForceInput | None
            Pointer state held for the whole run (None means inactive)
        doExport : bool
            Whether to export frame data
        exportDir : str
            Output directory for frame export
        scenarioName : str
            Scenario name for the export filename

        Returns:
        --------
        dict : Simulation results summary
        '''
        if nFrames < 0:
            raise ValueError(f'Frame count must be non-negative, got {nFrames}')
        if frameSubSteps < 1:
            raise ValueError(f'Ticks per frame must be at least 1, got {frameSubSteps}')

        externalInput = externalInput or ExternalForceInput.inactive()

        self._print()
        self._print('=' * 62)
        self._print('  FLUIDSIM -- REAL-TIME SPH FLUID')
        self._print('=' * 62)
        self._print()

        #--------------------------------------------------------------------#
        # Solver Setup
        #--------------------------------------------------------------------#
        self._print('-' * 62)
        self._print('  SIMULATION SETUP')
        self._print('-' * 62)

        solver = FluidSolver(config)
        grid = solver.grid

        self._print(f'  Field:             {config.fieldWidth:8.3f} x {config.fieldHeight:.3f}')
        self._print(f'  Particles:         {solver.particles.nParticles:8d}')
        self._print(f'  Particle Size:     {config.particleSize:8.4f}')
        self._print(f'  Interaction Radius:{config.interactionRadius:8.4f}')
        self._print(f'  Grid Cells:        {grid.nx:4d} x {grid.ny:d}')
        self._print(f'  Time Step:         {config.timeStep:8.4f} s')
        self._print(f'  Ticks per Frame:   {frameSubSteps:8d}')
        self._print(f'  Neighbor Cache:    {"on" if config.useNeighborCache else "off":>8}')
        if externalInput.active:
            mode = 'attract' if externalInput.attract else 'repel'
            self._print(
                f'  Pointer:           ({externalInput.point[0]:.3f}, '
                f'{externalInput.point[1]:.3f}) {mode}'
            )
        self._print()

        initialState = solver.currentState
        self._exporter.addFrame(initialState, solver)

        #--------------------------------------------------------------------#
        # Frame Loop
        #--------------------------------------------------------------------#
        self._print('-' * 62)
        self._print('  RUNNING SIMULATION')
        self._print('-' * 62)
        self._print()
        self._print(f'  {"Frame":>8}  {"Time":>8}  {"Frame":>10}  {"Checksum":>12}  {"MaxVel":>8}')
        self._print(f'  {"":>8}  {"(s)":>8}  {"(ms)":>10}  {"(sum y)":>12}  {"(m/s)":>8}')
        self._print('  ' + '-' * 54)

        frames = range(nFrames)
        if self._quiet:
            frames = tqdm(frames, desc='Frames', unit='frame')

        wallClockStart = timeModule.perf_counter()
        state = initialState

        for frame in frames:
            frameStart = timeModule.perf_counter()
            for _ in range(frameSubSteps):
                solver.step(externalInput)
            frameMs = (timeModule.perf_counter() - frameStart) * 1000.0
            self._frameTimesMs.append(frameMs)

            state = solver.currentState
            self._exporter.addFrame(state, solver)

            self._print(
                f'  {frame + 1:8d}  {state.time:8.4f}  {frameMs:10.3f}  '
                f'{state.heightSum:12.6f}  {state.maxVelocity:8.4f}'
            )

        wallClockSeconds = timeModule.perf_counter() - wallClockStart
        meanFrameMs = (sum(self._frameTimesMs) / len(self._frameTimesMs)
                       if self._frameTimesMs else 0.0)

        self._print()
        self._print('  Simulation complete.')
        self._print(f'  Total ticks:       {solver.stepCount:8d}')
        self._print(f'  Wall-clock time:   {wallClockSeconds:8.2f} s')
        self._print(f'  Mean frame time:   {meanFrameMs:8.3f} ms')
        self._print()

        #--------------------------------------------------------------------#
        # Export
        #--------------------------------------------------------------------#
        exportPath = None
        if doExport:
            self._print('-' * 62)
            self._print('  EXPORTING FRAME DATA')
            self._print('-' * 62)

            exportPath = self._exporter.export(
                config=solver.config,
                outputDir=exportDir,
                scenarioName=scenarioName,
            )
            self._print(f'  Exported to: {exportPath}')
            self._print()

        #--------------------------------------------------------------------#
        # Summary
        #--------------------------------------------------------------------#
        self._printSummary(initialState, state)

        return {
            'initialState': initialState,
            'finalState': state,
            'wallClockSeconds': wallClockSeconds,
            'meanFrameMs': meanFrameMs,
            'nFrames': self._exporter.nFrames,
            'exportPath': exportPath,
        }

    def _printSummary(self, initialState: SimulationState, finalState: SimulationState) -> None:
        self._print('=' * 62)
        self._print('  SIMULATION SUMMARY')
        self._print('=' * 62)
        self._print(f'  Initial Checksum:  {initialState.heightSum:12.6f}')
        self._print(f'  Final Checksum:    {finalState.heightSum:12.6f}')
        self._print(f'  Final KE:          {finalState.kineticEnergy:12.6e} J')
        self._print(f'  Final PE:          {finalState.potentialEnergy:12.6e} J')
        self._print(f'  Max Density:       {finalState.maxDensity:12.4f}')
        self._print(f'  Mean Density:      {finalState.meanDensity:12.4f}')
        self._print(f'  Max Velocity:      {finalState.maxVelocity:12.4f} m/s')
        self._print('=' * 62)
        self._print()

    def _print(self, line: str = '') -> None:
        '''Table output, silenced in quiet mode.'''
        if not self._quiet:
            print(line)


#--------------------------------------------------------------------#
# -- CLI Entry Point -- #
#--------------------------------------------------------------------#

def main(argv: list[str] | None = None) -> dict:
    '''CLI entry point.'''
    parser = buildParser()
    args = parser.parse_args(argv)

    preset = LatticeConfig.fromPreset(args.preset)

    if args.config:
        config = SimulationConfig.fromJson(args.config)
        scenarioName = 'config'
    else:
        config = preset.toSimulationConfig()
        scenarioName = args.preset

    overrides = {}
    if args.threads is not None:
        overrides['numThreads'] = args.threads
    if args.no_cache:
        overrides['useNeighborCache'] = False
    if overrides:
        config = replace(config, **overrides)

    externalInput = None
    if args.pointer is not None:
        externalInput = ExternalForceInput(
            point=(args.pointer[0], args.pointer[1]),
            active=True,
            attract=args.attract,
        )

    nFrames = args.frames if args.frames is not None else preset.nFrames

    runner = FluidSimRunner(quiet=args.quiet)
    return runner.run(
        config,
        nFrames=nFrames,
        frameSubSteps=args.substeps,
        externalInput=externalInput,
        doExport=args.export,
        exportDir=args.output_dir,
        scenarioName=scenarioName,
    )


if __name__ == '__main__':
    main()
