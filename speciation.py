import logging
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from config import COMPATIBILITY_THRESHOLD

logger = logging.getLogger(__name__)


def compatibility(weights_a, weights_b):
    """Mean absolute difference over every pair of corresponding weights."""
    diffs = [np.abs(a - b) for a, b in zip(weights_a.arrays(), weights_b.arrays())]
    count = sum(d.size for d in diffs)
    if count == 0:
        return 1.0
    return float(sum(d.sum() for d in diffs) / count)


@dataclass
class Species:
    id: int
    representative: object
    members: List[object] = field(default_factory=list)
    average_fitness: float = 0.0
    best_fitness: float = float("-inf")
    staleness: int = 0

    @property
    def size(self):
        return len(self.members)


# =============================================================================
# CLASS: SpeciationManager
# =============================================================================
class SpeciationManager:
    """
    Clusters organisms by weight-space distance.

    Species outlive a generation through their representative weights: each
    call first offers organisms to the existing species, in creation order,
    and only opens a new species when none is compatible.
    """
    def __init__(self, threshold=COMPATIBILITY_THRESHOLD):
        self.threshold = threshold
        self.species: List[Species] = []
        self._next_id = 1

    def speciate(self, population, rng):
        for sp in self.species:
            sp.members = []

        for organism in population:
            home = self._find_species(organism)
            if home is None:
                home = Species(self._next_id, organism.weights.copy())
                self._next_id += 1
                self.species.append(home)
                logger.debug("New species #%d founded by %s", home.id, organism.id)
            home.members.append(organism)

        self.species = [sp for sp in self.species if sp.members]
        for sp in self.species:
            sp.representative = sp.members[int(rng.integers(len(sp.members)))].weights.copy()
            self._update_fitness(sp)
        return self.species

    def _find_species(self, organism) -> Optional[Species]:
        for sp in self.species:
            if compatibility(organism.weights, sp.representative) < self.threshold:
                return sp
        return None

    @staticmethod
    def _update_fitness(sp):
        energies = [m.energy for m in sp.members]
        sp.average_fitness = sum(energies) / max(1, len(energies))
        best = max(energies)
        if best > sp.best_fitness:
            sp.best_fitness = best
            sp.staleness = 0
        else:
            sp.staleness += 1

    def shared_fitness(self):
        """Maps organism id to energy divided by the size of its species."""
        return {m.id: m.energy / sp.size for sp in self.species for m in sp.members}

    def species_of(self, organism_id):
        for sp in self.species:
            if any(m.id == organism_id for m in sp.members):
                return sp
        return None

    def clear(self):
        self.species = []
