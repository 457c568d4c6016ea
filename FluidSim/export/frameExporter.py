# -- Simulation Frame Exporter -- #

'''
Exports SPH simulation frames as JSON for an external viewer.

Collects particle snapshots during a headless run through the
solver's read accessors (positions, speeds for the color map, render
sizes) and writes them with the energy history and run metadata to
one compact JSON file.
'''

from __future__ import annotations

import json
import os
from datetime import datetime

import numpy as np

from FluidSim.sph.protocols import SimulationConfig, SimulationState
from FluidSim.sph.solver import FluidSolver


class FrameExporter:
    '''
    Collects and exports simulation frame data as JSON.

    Usage:
        exporter = FrameExporter()
        # During the frame loop:
        exporter.addFrame(solver.currentState, solver)
        # After the run:
        exporter.export(solver.config, outputDir='output')

    Output JSON format:
    {
        "meta": { "type": "fluidSim", "nFrames": 100, "created": "...", ... },
        "config": { "fieldWidth": 1.0, ... },
        "frames": [
            {
                "time": 0.0,
                "step": 0,
                "positions": [[x0, y0], [x1, y1], ...],
                "speeds": [v0, v1, ...],
                "sizes": [s0, s1, ...],
                "heightSum": 12.3
            },
            ...
        ],
        "energy": {
            "times": [...],
            "kinetic": [...],
            "potential": [...],
            "total": [...]
        }
    }
    '''

    def __init__(self) -> None:
        self._frames: list[dict] = []
        self._energyHistory: dict[str, list[float]] = {
            'times': [],
            'kinetic': [],
            'potential': [],
            'total': [],
        }

    @property
    def nFrames(self) -> int:
        '''Number of collected frames.'''
        return len(self._frames)

    @property
    def frames(self) -> list[dict]:
        '''Collected frames in recording order.'''
        return self._frames

    def addFrame(self, state: SimulationState, solver: FluidSolver) -> None:
        '''
        Record a simulation frame.

        Parameters:
        -----------
        state : SimulationState
            Diagnostics for the frame
        solver : FluidSolver
            Solver whose read accessors supply the particle data
        '''
        speeds = np.linalg.norm(solver.velocities, axis=1)

        frame = {
            'time': round(state.time, 6),
            'step': state.step,
            'positions': np.round(solver.positions, 6).tolist(),
            'speeds': np.round(speeds, 6).tolist(),
            'sizes': np.round(solver.sizes, 6).tolist(),
            'heightSum': round(state.heightSum, 6),
        }
        self._frames.append(frame)

        self._energyHistory['times'].append(round(state.time, 6))
        self._energyHistory['kinetic'].append(round(state.kineticEnergy, 9))
        self._energyHistory['potential'].append(round(state.potentialEnergy, 9))
        self._energyHistory['total'].append(round(state.totalEnergy, 9))

    def export(
        self,
        config: SimulationConfig,
        outputDir: str = 'output',
        scenarioName: str = 'lattice',
    ) -> str:
        '''
        Write all collected frames to a JSON file.

        Parameters:
        -----------
        config : SimulationConfig
            Simulation configuration for metadata
        outputDir : str
            Output directory path
        scenarioName : str
            Scenario name for the filename

        Returns:
        --------
        str : Path to the exported JSON file
        '''
        os.makedirs(outputDir, exist_ok=True)

        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        filename = f'fluidSim_{scenarioName}_{timestamp}.json'
        filepath = os.path.join(outputDir, filename)

        output = {
            'meta': {
                'type': 'fluidSim',
                'dimensions': 2,
                'nFrames': len(self._frames),
                'nParticles': len(self._frames[0]['positions']) if self._frames else 0,
                'created': datetime.now().isoformat(),
            },
            'config': {
                'fieldWidth': config.fieldWidth,
                'fieldHeight': config.fieldHeight,
                'particleCount': config.particleCount,
                'particleSize': config.particleSize,
                'interactionRadius': config.interactionRadius,
                'restDensity': config.restDensity,
                'stiffness': config.stiffness,
                'viscosity': config.viscosity,
                'timeStep': config.timeStep,
                'subSteps': config.subSteps,
            },
            'frames': self._frames,
            'energy': self._energyHistory,
        }

        with open(filepath, 'w') as f:
            json.dump(output, f, indent=None, separators=(',', ':'))

        return filepath
