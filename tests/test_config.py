# -- Configuration Tests -- #

'''
SimulationConfig defaults, JSON loading and validation.
'''

import json
import math
import os

import numpy as np
import pytest

from FluidSim import constants as const
from FluidSim.sph.protocols import ExternalForceInput, SimulationConfig

defaultConfigPath = os.path.join(os.path.dirname(__file__), '..', 'configs', 'default.json')


def testDefaults():
    config = SimulationConfig()
    assert config.restDensity == const.restDensity
    assert config.subSteps == 1
    assert config.useNeighborCache
    assert math.isclose(config.interactionRadius, const.interactionRadius)
    np.testing.assert_array_equal(config.gravity, [0.0, -9.8])
    np.testing.assert_array_equal(config.fieldSize, [1.0, 1.0])


def testFromJsonFillsMissingKeys(tmp_path):
    path = tmp_path / 'partial.json'
    path.write_text(json.dumps({
        'field': {'width': 2.0},
        'particles': {'count': 42},
        'sph': {'stiffness': 5.0, 'gravity': [0.0, -1.0]},
        'boundary': {'horizontalDamping': 0.25},
        'simulation': {'subSteps': 3, 'useNeighborCache': False},
    }))

    config = SimulationConfig.fromJson(str(path))

    assert config.fieldWidth == 2.0
    assert config.fieldHeight == 1.0
    assert config.particleCount == 42
    assert config.stiffness == 5.0
    assert config.viscosity == const.viscosity
    assert config.horizontalDamping == 0.25
    assert config.subSteps == 3
    assert not config.useNeighborCache
    np.testing.assert_array_equal(config.gravity, [0.0, -1.0])


def testShippedDefaultConfig():
    config = SimulationConfig.fromJson(defaultConfigPath)
    config.validate()
    assert config.particleCount == 1000
    assert config.pointerStrength == const.pointerStrength


@pytest.mark.parametrize('overrides', [
    {'fieldWidth': 0.0},
    {'fieldHeight': -1.0},
    {'particleCount': -1},
    {'particleSize': 0.0},
    {'timeStep': 0.0},
    {'particleMass': -1.0},
    {'subSteps': 0},
    {'numThreads': 0},
])
def testValidateRejects(overrides):
    with pytest.raises(ValueError):
        SimulationConfig(**overrides).validate()


def testInactiveInput():
    pointer = ExternalForceInput.inactive()
    assert not pointer.active
    assert not pointer.attract
