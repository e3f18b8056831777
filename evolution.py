import logging
from dataclasses import dataclass, field
from typing import List

import numpy as np

from brain import ModelWeights
from speciation import SpeciationManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationScore:
    generation: int
    best_energy: float
    average_energy: float
    average_bot_energy: float


@dataclass
class EvolutionResult:
    score: GenerationScore
    weights: List[ModelWeights] = field(default_factory=list)
    elite_count: int = 0
    extinction: bool = False


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================
def crossover(weights_a, weights_b, blend):
    """Blends two parents: child = a * blend + b * (1 - blend). Always returns fresh arrays."""
    if weights_a.shape != weights_b.shape:
        raise ValueError(f"Cannot cross {weights_a.shape} with {weights_b.shape}")
    return ModelWeights(weights_a.shape, *(
        a * blend + b * (1.0 - blend) for a, b in zip(weights_a.arrays(), weights_b.arrays())))


def mutate(weights, rng, mutation_chance, mutation_rate, flip_chance):
    """
    Mutates weights in place and returns them.

    With mutation_chance one random element of one random array is scaled by
    a factor from [1 - rate, 1 + rate] and clamped to [-1, 1]. Independently,
    with flip_chance one random element has its sign flipped.
    """
    arrays = weights.arrays()
    if rng.random() < mutation_chance:
        target = arrays[int(rng.integers(len(arrays)))]
        if target.size:
            idx = int(rng.integers(target.size))
            factor = rng.uniform(1.0 - mutation_rate, 1.0 + mutation_rate)
            target[idx] = np.clip(target[idx] * factor, -1.0, 1.0)
    if rng.random() < flip_chance:
        target = arrays[int(rng.integers(len(arrays)))]
        if target.size:
            idx = int(rng.integers(target.size))
            target[idx] = -target[idx]
    return weights


def tournament_select(pool, fitness, rng, size):
    k = min(size, len(pool))
    picks = rng.choice(len(pool), size=k, replace=False)
    return max((pool[int(i)] for i in picks), key=fitness)


def weighted_pair(pool, fitness, rng):
    """Draws two distinct parents with probability proportional to fitness."""
    if len(pool) == 1:
        return pool[0], pool[0]
    scores = np.array([max(fitness(o), 0.0) for o in pool])
    p = scores / scores.sum() if np.count_nonzero(scores) >= 2 else None
    first, second = rng.choice(len(pool), size=2, replace=False, p=p)
    return pool[int(first)], pool[int(second)]


def rank(organisms, fitness=None):
    """Sorts by fitness, best first. Equal fitness keeps population order."""
    key = fitness or (lambda o: o.energy)
    return sorted(organisms, key=key, reverse=True)


# =============================================================================
# CLASS: GeneticAlgorithm
# =============================================================================
class GeneticAlgorithm:
    def __init__(self, config, speciation=None):
        self.config = config
        if speciation is None and config.speciation:
            speciation = SpeciationManager(config.compatibility_threshold)
        self.speciation = speciation

    def score(self, organisms, bots, generation):
        energies = [o.energy for o in organisms]
        bot_energies = [b.energy for b in bots]
        return GenerationScore(
            generation=generation,
            best_energy=max(energies) if energies else 0.0,
            average_energy=sum(energies) / len(energies) if energies else 0.0,
            average_bot_energy=sum(bot_energies) / len(bot_energies) if bot_energies else 0.0,
        )

    def is_collapsed(self, score, population_size):
        threshold = self.config.extinction_threshold
        return population_size == 0 or (threshold is not None and score.average_energy < threshold)

    def evolve(self, organisms, bots, generation, rng):
        """
        Builds the weights of the next generation from a settled population.

        `generation` is the number of the generation being scored.
        """
        cfg = self.config
        score = self.score(organisms, bots, generation)
        shape = cfg.shape

        if self.is_collapsed(score, len(organisms)):
            logger.warning("Mass extinction at generation %d (average energy %.4f), reseeding %d organisms",
                           generation, score.average_energy, cfg.max_organisms)
            if self.speciation is not None: self.speciation.clear()
            weights = [ModelWeights.random(shape, rng, cfg.weight_range, cfg.bias_range)
                       for _ in range(cfg.max_organisms)]
            return EvolutionResult(score, weights, elite_count=0, extinction=True)

        fitness = lambda o: o.energy
        if self.speciation is not None:
            self.speciation.speciate(organisms, rng)
            if cfg.fitness_sharing:
                shared = self.speciation.shared_fitness()
                fitness = lambda o: shared[o.id]

        ranked = rank(organisms, fitness)
        elite_count = min(cfg.elitism, len(ranked), cfg.max_organisms)
        elites = ranked[:elite_count]
        pool = ranked[:max(1, len(ranked) // 2)]

        weights = [o.weights.copy() for o in elites]
        while len(weights) < cfg.max_organisms:
            parent1, parent2 = self.select_parents(elites, pool, fitness, rng)
            if fitness(parent2) > fitness(parent1):
                parent1, parent2 = parent2, parent1
            child = crossover(parent1.weights, parent2.weights, rng.uniform(*cfg.crossover_blend_range))
            weights.append(mutate(child, rng, cfg.mutation_chance, cfg.mutation_rate, cfg.flip_chance))

        logger.info("Generation %d: best %.4f, average %.4f, bots %.4f",
                    generation, score.best_energy, score.average_energy, score.average_bot_energy)
        return EvolutionResult(score, weights, elite_count=elite_count)

    def select_parents(self, elites, pool, fitness, rng):
        if self.config.selection == "elite_pair":
            return weighted_pair(elites or pool, fitness, rng)
        size = self.config.tournament_size
        return tournament_select(pool, fitness, rng, size), tournament_select(pool, fitness, rng, size)
