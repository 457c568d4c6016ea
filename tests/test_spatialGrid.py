# -- Spatial Grid Tests -- #

'''
Cell binning, clamping and 3x3 neighborhood queries.
'''

import numpy as np

from FluidSim.sph.spatialGrid import SpatialGrid


def testGridDimensions():
    grid = SpatialGrid(1.0, 0.55, cellSize=0.1)
    assert grid.nx == 10
    assert grid.ny == 6
    assert grid.nCells == 60
    assert grid.cellStart.shape == (61,)


def testEveryParticleBinnedExactlyOnce(rng):
    grid = SpatialGrid(1.0, 1.0, cellSize=0.1)
    positions = rng.uniform(0.0, 1.0, size=(500, 2))
    grid.rebuild(positions)

    seen = []
    for cy in range(grid.ny):
        for cx in range(grid.nx):
            contents = grid.cellContents(cx, cy)
            for j in contents:
                assert grid.cellOf(positions[j]) == (cx, cy)
            seen.extend(contents.tolist())

    assert sorted(seen) == list(range(500))
    assert grid.cellStart[-1] == 500


def testOutOfFieldPositionsAreClamped():
    grid = SpatialGrid(1.0, 1.0, cellSize=0.1)
    assert grid.cellOf(np.array([1.5, -0.2])) == (9, 0)
    assert grid.cellOf(np.array([-3.0, 7.0])) == (0, 9)
    assert grid.cellOf(np.array([1.0, 1.0])) == (9, 9)


def testNeighborhoodClippedAtEdges():
    grid = SpatialGrid(1.0, 1.0, cellSize=0.1)
    assert len(grid.neighborhoodCells(0, 0)) == 4
    assert len(grid.neighborhoodCells(9, 9)) == 4
    assert len(grid.neighborhoodCells(0, 5)) == 6
    assert len(grid.neighborhoodCells(5, 9)) == 6
    assert len(grid.neighborhoodCells(5, 5)) == 9


def testNeighborhoodIsSupersetOfTrueNeighbors(rng):
    h = 0.1
    grid = SpatialGrid(1.0, 1.0, cellSize=h)
    positions = rng.uniform(0.0, 1.0, size=(400, 2))
    grid.rebuild(positions)

    for i in range(0, 400, 13):
        candidates = set(grid.neighborhoodCandidates(positions[i]).tolist())
        dist = np.linalg.norm(positions - positions[i], axis=1)
        trueNeighbors = set(np.nonzero(dist < h)[0].tolist())
        assert trueNeighbors <= candidates


def testForEachInNeighborhoodVisitsCandidates(rng):
    grid = SpatialGrid(1.0, 1.0, cellSize=0.1)
    positions = rng.uniform(0.0, 1.0, size=(100, 2))
    grid.rebuild(positions)

    visited = []
    grid.forEachInNeighborhood(positions[0], visited.append)
    assert sorted(visited) == sorted(grid.neighborhoodCandidates(positions[0]).tolist())
    assert 0 in visited


def testRebuildClearsPreviousBinning():
    grid = SpatialGrid(1.0, 1.0, cellSize=0.1)
    grid.rebuild(np.array([[0.05, 0.05], [0.95, 0.95]]))
    grid.rebuild(np.array([[0.55, 0.55]]))

    assert grid.cellContents(0, 0).size == 0
    assert grid.cellContents(9, 9).size == 0
    assert grid.cellContents(5, 5).tolist() == [0]


def testEmptyRebuild():
    grid = SpatialGrid(1.0, 1.0, cellSize=0.1)
    grid.rebuild(np.zeros((0, 2)))
    assert grid.getStatistics()['occupiedCells'] == 0
    assert grid.neighborhoodCandidates(np.array([0.5, 0.5])).size == 0


def testStatistics():
    grid = SpatialGrid(1.0, 1.0, cellSize=0.5)
    grid.rebuild(np.array([[0.1, 0.1], [0.2, 0.2], [0.9, 0.9]]))
    stats = grid.getStatistics()
    assert stats['totalCells'] == 4
    assert stats['occupiedCells'] == 2
    assert stats['maxParticlesPerCell'] == 2
    assert stats['meanParticlesPerOccupiedCell'] == 1.5
