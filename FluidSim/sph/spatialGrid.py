# -- Uniform Spatial Grid for Neighbor Search -- #

'''
Cell-list spatial grid for O(N) neighbor search in SPH.

Divides the field into uniform square cells whose side equals the
interaction radius h. Every particle within h of a query point is
then guaranteed to lie in the 3x3 block of cells around the point's
own cell, so neighbor queries only scan those (at most) 9 cells.

The bins are stored in compressed form: cellParticles holds all
particle indices grouped by cell and cellStart[c]:cellStart[c + 1]
is the slice belonging to cell c, with c = cy * nx + cx.

Rebuild is race-free by construction: particle -> cell assignment is
scattered in parallel (each worker writes only its own slot), then the
grouping into bins is a serial counting sort.

References:
-----------
Green (2010) -- Particle Simulation using CUDA
Ihmsen et al. (2011) -- Parallel Neighbor-Search for SPH
'''

from __future__ import annotations

import math
from typing import Callable

import numba as nb
import numpy as np


#--------------------------------------------------------------------#
# -- Compiled Helpers -- #
#--------------------------------------------------------------------#

@nb.njit
def cellCoordinate(value: float, cellSize: float, nCells: int) -> int:
    '''Cell index floor(value / cellSize) clamped to [0, nCells - 1].'''
    c = int(np.floor(value / cellSize))
    if c < 0:
        return 0
    if c > nCells - 1:
        return nCells - 1
    return c


@nb.njit(parallel=True)
def scatterCellIds(positions, cellSize, nx, ny, cellIds):
    '''Assign every particle its flattened cell id (parallel map).'''
    for i in nb.prange(positions.shape[0]):
        cx = cellCoordinate(positions[i, 0], cellSize, nx)
        cy = cellCoordinate(positions[i, 1], cellSize, ny)
        cellIds[i] = cy * nx + cx


@nb.njit
def compactCells(cellIds, nCells, cellStart, cellParticles):
    '''Group particle indices by cell id (serial counting sort).'''
    counts = np.zeros(nCells, dtype=np.int64)
    for i in range(cellIds.shape[0]):
        counts[cellIds[i]] += 1

    cellStart[0] = 0
    for c in range(nCells):
        cellStart[c + 1] = cellStart[c] + counts[c]

    fill = cellStart[:-1].copy()
    for i in range(cellIds.shape[0]):
        c = cellIds[i]
        cellParticles[fill[c]] = i
        fill[c] += 1


#--------------------------------------------------------------------#
# -- Spatial Grid -- #
#--------------------------------------------------------------------#

class SpatialGrid:
    '''
    Uniform cell grid over a rectangular field.

    Cell size equals the interaction radius. Cells are cleared and
    fully repopulated by every rebuild; there is no incremental
    update. Cell coordinates are clamped to the grid so particles on
    or past the upper field edge still land in a valid cell.

    Parameters:
    -----------
    fieldWidth : float
        Field width
    fieldHeight : float
        Field height
    cellSize : float
        Cell side length, must equal the interaction radius
    '''

    def __init__(self, fieldWidth: float, fieldHeight: float, cellSize: float) -> None:
        self._cellSize = cellSize
        self._nx = max(1, math.ceil(fieldWidth / cellSize))
        self._ny = max(1, math.ceil(fieldHeight / cellSize))

        self._cellIds = np.zeros(0, dtype=np.int64)
        self._cellStart = np.zeros(self.nCells + 1, dtype=np.int64)
        self._cellParticles = np.zeros(0, dtype=np.int64)

    @property
    def cellSize(self) -> float:
        '''Cell side length.'''
        return self._cellSize

    @property
    def nx(self) -> int:
        '''Number of cells along x.'''
        return self._nx

    @property
    def ny(self) -> int:
        '''Number of cells along y.'''
        return self._ny

    @property
    def nCells(self) -> int:
        '''Total number of cells.'''
        return self._nx * self._ny

    @property
    def cellStart(self) -> np.ndarray:
        '''Bin offsets, shape (nCells + 1,).'''
        return self._cellStart

    @property
    def cellParticles(self) -> np.ndarray:
        '''Particle indices grouped by cell, shape (N,).'''
        return self._cellParticles

    @property
    def cellIds(self) -> np.ndarray:
        '''Flattened cell id of every particle from the last rebuild.'''
        return self._cellIds

    def rebuild(self, positions: np.ndarray) -> None:
        '''
        Clear every cell and re-bin all particles.

        Parameters:
        -----------
        positions : np.ndarray
            Particle positions, shape (N, 2)
        '''
        nParticles = positions.shape[0]
        if self._cellIds.shape[0] != nParticles:
            self._cellIds = np.zeros(nParticles, dtype=np.int64)
            self._cellParticles = np.zeros(nParticles, dtype=np.int64)

        if nParticles == 0:
            self._cellStart[:] = 0
            return

        scatterCellIds(positions, self._cellSize, self._nx, self._ny, self._cellIds)
        compactCells(self._cellIds, self.nCells, self._cellStart, self._cellParticles)

    def cellOf(self, position: np.ndarray) -> tuple[int, int]:
        '''
        Clamped cell coordinates (cx, cy) containing a position.

        Parameters:
        -----------
        position : np.ndarray
            Point in field coordinates, shape (2,)

        Returns:
        --------
        tuple[int, int] : Cell coordinates
        '''
        cx = cellCoordinate(float(position[0]), self._cellSize, self._nx)
        cy = cellCoordinate(float(position[1]), self._cellSize, self._ny)
        return (cx, cy)

    def cellContents(self, cx: int, cy: int) -> np.ndarray:
        '''Particle indices currently binned in cell (cx, cy).'''
        cellId = cy * self._nx + cx
        return self._cellParticles[self._cellStart[cellId]:self._cellStart[cellId + 1]]

    def neighborhoodCells(self, cx: int, cy: int) -> list[tuple[int, int]]:
        '''
        The 3x3 block of cells around (cx, cy), clipped at the edges.

        Edge cells yield 6 cells and corner cells 4.
        '''
        cells = []
        for gx in range(max(cx - 1, 0), min(cx + 1, self._nx - 1) + 1):
            for gy in range(max(cy - 1, 0), min(cy + 1, self._ny - 1) + 1):
                cells.append((gx, gy))
        return cells

    def forEachInNeighborhood(self, position: np.ndarray, visit: Callable[[int], None]) -> None:
        '''
        Call visit(j) for every particle binned in the 3x3 block of
        cells around the cell containing position.

        The candidates are a superset of the true neighbors; callers
        still filter by distance.

        Parameters:
        -----------
        position : np.ndarray
            Query point, shape (2,)
        visit : Callable[[int], None]
            Callback receiving each candidate particle index
        '''
        cx, cy = self.cellOf(position)
        for gx, gy in self.neighborhoodCells(cx, cy):
            for j in self.cellContents(gx, gy):
                visit(int(j))

    def neighborhoodCandidates(self, position: np.ndarray) -> np.ndarray:
        '''
        All candidate particle indices around a position as one array.

        Parameters:
        -----------
        position : np.ndarray
            Query point, shape (2,)

        Returns:
        --------
        np.ndarray : Candidate indices (unordered), shape (M,)
        '''
        cx, cy = self.cellOf(position)
        chunks = [self.cellContents(gx, gy) for gx, gy in self.neighborhoodCells(cx, cy)]
        if not chunks:
            return np.zeros(0, dtype=np.int64)
        return np.concatenate(chunks)

    def getStatistics(self) -> dict:
        '''Occupancy statistics from the last rebuild.'''
        counts = np.diff(self._cellStart)
        occupied = int(np.sum(counts > 0))
        return {
            'totalCells': self.nCells,
            'occupiedCells': occupied,
            'maxParticlesPerCell': int(np.max(counts)) if self.nCells > 0 else 0,
            'meanParticlesPerOccupiedCell': float(np.sum(counts)) / max(1, occupied),
        }
