# -- SPH Smoothing Kernels -- #

'''
Smoothing kernel functions for 2D SPH interpolation.

Implements the poly6 density kernel, the spiky pressure-gradient
kernel and the viscosity Laplacian kernel, all with compact support
at the interaction radius h. Normalizations are the 2D forms:

    poly6(r)              = C6 * (h^2 - r^2)^3      C6 =   4 / (pi * h^8)
    spikyGradient(r)      = Cs * (h - r)^3          Cs = -10 / (pi * h^5)
    viscosityLaplacian(r) = Cv * (h - r)            Cv =  40 / (pi * h^5)

All three vanish for r >= h. The spiky constant carries the negative
sign of a kernel that decreases with distance; the force pass uses it
as-is.

The scalar functions are compiled with Numba so the parallel passes
can call them from inside their particle loops. The batch methods on
KernelConstants are plain NumPy for diagnostics and tests.

References:
-----------
Mueller et al. (2003) -- Particle-based fluid simulation for
    interactive applications
Monaghan (1992) -- Smoothed Particle Hydrodynamics
'''

from __future__ import annotations

import math
from dataclasses import dataclass

import numba as nb
import numpy as np


######################################################################
# -- Compiled Scalar Kernels -- #
######################################################################

@nb.njit
def poly6Weight(r: float, h: float, c6: float) -> float:
    '''Poly6 kernel value C6 * (h^2 - r^2)^3 for r < h, else 0.'''
    if r >= h:
        return 0.0
    diff = h * h - r * r
    return c6 * diff * diff * diff


@nb.njit
def spikyGradientWeight(r: float, h: float, cs: float) -> float:
    '''Spiky gradient factor Cs * (h - r)^3 for r < h, else 0.'''
    if r >= h:
        return 0.0
    diff = h - r
    return cs * diff * diff * diff


@nb.njit
def viscosityLaplacianWeight(r: float, h: float, cv: float) -> float:
    '''Viscosity Laplacian Cv * (h - r) for r < h, else 0.'''
    if r >= h:
        return 0.0
    return cv * (h - r)


######################################################################
# -- Kernel Constants -- #
######################################################################

@dataclass(frozen=True)
class KernelConstants:
    '''
    Normalization constants derived once from the interaction radius.

    Parameters:
    -----------
    radius : float
        Interaction radius h
    poly6 : float
        Poly6 normalization C6
    spikyGradient : float
        Spiky gradient normalization Cs (negative)
    viscosityLaplacian : float
        Viscosity Laplacian normalization Cv
    '''

    radius: float
    poly6: float
    spikyGradient: float
    viscosityLaplacian: float

    @classmethod
    def fromRadius(cls, h: float) -> KernelConstants:
        '''
        Derive the kernel constants for interaction radius h.

        Parameters:
        -----------
        h : float
            Interaction radius

        Returns:
        --------
        KernelConstants : Constants for the 2D kernel family
        '''
        hPow4 = h ** 4
        hPow5 = hPow4 * h
        hPow8 = hPow4 * hPow4
        return cls(
            radius=h,
            poly6=4.0 / (math.pi * hPow8),
            spikyGradient=-10.0 / (math.pi * hPow5),
            viscosityLaplacian=40.0 / (math.pi * hPow5),
        )

    @property
    def radiusSquared(self) -> float:
        '''h^2.'''
        return self.radius * self.radius

    def evaluatePoly6(self, r: float) -> float:
        '''Poly6 kernel W(r).'''
        return poly6Weight(r, self.radius, self.poly6)

    def evaluateSpikyGradient(self, r: float) -> float:
        '''Spiky gradient factor at distance r.'''
        return spikyGradientWeight(r, self.radius, self.spikyGradient)

    def evaluateViscosityLaplacian(self, r: float) -> float:
        '''Viscosity Laplacian at distance r.'''
        return viscosityLaplacianWeight(r, self.radius, self.viscosityLaplacian)

    ######################################################################
    # -- Vectorized (Batch) Operations -- #
    ######################################################################

    def poly6Batch(self, distances: np.ndarray) -> np.ndarray:
        '''
        Evaluate the poly6 kernel for an array of distances.

        Parameters:
        -----------
        distances : np.ndarray
            Pair distances, shape (N,)

        Returns:
        --------
        np.ndarray : Kernel values, shape (N,)
        '''
        h = self.radius
        result = np.zeros_like(distances, dtype=np.float64)
        inside = distances < h
        diff = h * h - distances[inside] ** 2
        result[inside] = self.poly6 * diff ** 3
        return result

    def spikyGradientBatch(self, distances: np.ndarray) -> np.ndarray:
        '''Spiky gradient factors for an array of distances.'''
        h = self.radius
        result = np.zeros_like(distances, dtype=np.float64)
        inside = distances < h
        result[inside] = self.spikyGradient * (h - distances[inside]) ** 3
        return result

    def viscosityLaplacianBatch(self, distances: np.ndarray) -> np.ndarray:
        '''Viscosity Laplacian values for an array of distances.'''
        h = self.radius
        result = np.zeros_like(distances, dtype=np.float64)
        inside = distances < h
        result[inside] = self.viscosityLaplacian * (h - distances[inside])
        return result
