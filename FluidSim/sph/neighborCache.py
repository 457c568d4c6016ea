# -- Per-Tick Neighbor Cache -- #

'''
Compressed per-particle neighbor lists reused within one tick.

The density pass records, for every particle i, the (distance, index)
pairs of all other particles j with epsilon < r_ij < h. The force pass
then walks these lists instead of traversing the grid again.

Storage is compressed: the list of particle i is
    distances[offsets[i]:offsets[i + 1]]
    indices[offsets[i]:offsets[i + 1]]
so each parallel worker fills a disjoint slice.
'''

from __future__ import annotations

import numpy as np


class NeighborCache:
    '''
    Neighbor lists of the current tick.

    Invalidated by every density pass: counts are recomputed,
    offsets re-derived and the slices overwritten.
    '''

    def __init__(self) -> None:
        self._offsets = np.zeros(1, dtype=np.int64)
        self._distances = np.zeros(0, dtype=np.float64)
        self._indices = np.zeros(0, dtype=np.int64)

    @property
    def offsets(self) -> np.ndarray:
        '''List offsets, shape (N + 1,).'''
        return self._offsets

    @property
    def distances(self) -> np.ndarray:
        '''Pair distances of all lists, shape (nEntries,).'''
        return self._distances

    @property
    def indices(self) -> np.ndarray:
        '''Neighbor indices of all lists, shape (nEntries,).'''
        return self._indices

    @property
    def nParticles(self) -> int:
        '''Number of particles the cache was sized for.'''
        return self._offsets.shape[0] - 1

    @property
    def nEntries(self) -> int:
        '''Total number of stored (distance, index) entries.'''
        return int(self._offsets[-1])

    def allocate(self, counts: np.ndarray) -> None:
        '''
        Size the cache for the given per-particle neighbor counts.

        Parameters:
        -----------
        counts : np.ndarray
            Number of neighbors of every particle, shape (N,)
        '''
        offsets = np.zeros(counts.shape[0] + 1, dtype=np.int64)
        np.cumsum(counts, out=offsets[1:])
        self._offsets = offsets

        nEntries = int(offsets[-1])
        if self._distances.shape[0] < nEntries:
            # Grow with headroom
            capacity = int(nEntries * 1.25) + 16
            self._distances = np.zeros(capacity, dtype=np.float64)
            self._indices = np.zeros(capacity, dtype=np.int64)

    def neighborsOf(self, i: int) -> list[tuple[float, int]]:
        '''
        The (distance, index) list of particle i.

        Parameters:
        -----------
        i : int
            Particle index

        Returns:
        --------
        list[tuple[float, int]] : Neighbor entries in fill order
        '''
        start, end = self._offsets[i], self._offsets[i + 1]
        return [
            (float(r), int(j))
            for r, j in zip(self._distances[start:end], self._indices[start:end])
        ]
