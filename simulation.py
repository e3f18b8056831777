"""
The simulation driver.

One call to Simulation.tick(dt) runs, in this order:

1. refill the food pool,
2. bots perceive the organisms, steer, move and bite,
3. organisms perceive food and the bots' post-move positions, ask their
   brain for an acceleration, move, eat and take damage,
4. refresh the best-organism record,
5. at the end of an epoch, evolve a new organism population.

Steps 2 and 3 are split into a planning phase, which only reads shared state
and can be fanned out over a thread pool, and a commit phase that applies
collisions one agent at a time in population order.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from brain import ModelWeights, NeuralNetwork
from config import SimulationConfig, DEFAULT_TIME_STEP, EPOCH_EPSILON
from entities import Bot, EntityRef, EntityState, Food, Organism
from evolution import GeneticAlgorithm, GenerationScore, mutate
from perception import decode_outputs, encode_inputs, perceive_bot, perceive_organism, pursuit_acceleration
from physics import continuous_penalty, decay, integrate, random_position
from vector import Vector3

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Champion:
    """The best organism of a completed generation."""
    generation: int
    id: str
    energy: float
    weights: ModelWeights


@dataclass(frozen=True)
class SimulationSnapshot:
    generation: int
    time: float
    organisms: Tuple[EntityState, ...]
    bots: Tuple[EntityState, ...]
    food: Tuple[EntityState, ...]
    best_organism_id: Optional[str]
    best_energy: float
    best_weights: Optional[ModelWeights]
    scores: Tuple[GenerationScore, ...]
    champion: Optional[Champion] = None


@dataclass(frozen=True)
class AgentStep:
    """Result of the planning phase for one agent."""
    position: Vector3
    velocity: Vector3
    target: Optional[EntityRef] = None
    threat: Optional[EntityRef] = None
    target_distance: float = 0.0


# =============================================================================
# PLANNING FUNCTIONS (read-only, safe to run concurrently)
# =============================================================================
def plan_bot_step(bot, organisms, config, dt):
    target, target_distance = perceive_bot(bot, organisms, config.visibility, config.bots_target_living_only)
    acceleration = pursuit_acceleration(bot, target)
    if config.planar:
        acceleration = Vector3(acceleration.x, acceleration.y, 0.0)
    position, velocity = integrate(bot.position, bot.velocity, acceleration, 1.0, dt,
                                   bot.max_speed, bot.max_acceleration, config.friction)
    return AgentStep(position, velocity, target=target, target_distance=target_distance)


def plan_organism_step(organism, foods, bots, config, dt):
    target, threat = perceive_organism(organism, foods, bots, config.visibility)
    outputs = organism.brain.predict(encode_inputs(organism.position, target, threat, config.visibility))
    acceleration, throttle = decode_outputs(outputs, config.planar)
    position, velocity = integrate(organism.position, organism.velocity, acceleration, throttle, dt,
                                   organism.max_speed, organism.max_acceleration, config.friction)
    return AgentStep(position, velocity, target=target, threat=threat)


# =============================================================================
# CLASS: Simulation
# =============================================================================
class Simulation:
    def __init__(self, config=None, initial_weights=None, on_evolve=None, genetic_algorithm=None):
        self.config = config or SimulationConfig()
        self.rng = np.random.default_rng(self.config.seed)
        self.on_evolve = on_evolve
        self.genetic_algorithm = genetic_algorithm or GeneticAlgorithm(self.config)
        self.shape = self.config.shape

        self.time = 0.0
        self.generation = 0
        self.scores = []
        self.champion: Optional[Champion] = None
        self.best_organism: Optional[Organism] = None
        self.food_eaten = 0
        self.bot_hits = 0

        self._food_counter = 0
        self.food = {}
        self.organisms = self._initial_organisms(initial_weights)
        self.bots = [self._spawn_bot(idx) for idx in range(self.config.max_bots)]
        self._update_best()

        self._executor = ThreadPoolExecutor(max_workers=self.config.workers) if self.config.workers > 1 else None
        logger.info("Simulation ready: %d organisms, %d bots, %d food, brain %s",
                    len(self.organisms), len(self.bots), self.config.max_food, self.shape)

    # --- Population construction ---
    def _initial_organisms(self, initial_weights):
        cfg = self.config
        if initial_weights is None:
            seeds = []
        elif isinstance(initial_weights, ModelWeights):
            # One progenitor kept verbatim, the rest are mutated descendants.
            seeds = [initial_weights.copy()]
            for _ in range(cfg.max_organisms - 1):
                seeds.append(mutate(initial_weights.copy(), self.rng, cfg.mutation_chance,
                                    cfg.mutation_rate, cfg.flip_chance))
        else:
            seeds = [w.copy() for w in list(initial_weights)[:cfg.max_organisms]]
        for w in seeds:
            if w.shape != self.shape:
                raise ValueError(f"Initial weights of shape {w.shape} do not fit the configured brain {self.shape}")
        while len(seeds) < cfg.max_organisms:
            seeds.append(self._random_weights())
        return [self._spawn_organism(slot, w) for slot, w in enumerate(seeds)]

    def _random_weights(self):
        return ModelWeights.random(self.shape, self.rng, self.config.weight_range, self.config.bias_range)

    def _spawn_position(self):
        return random_position(self.rng, self.config.spawn_half_size, self.config.planar)

    def _spawn_organism(self, slot, weights, at_rest=False):
        cfg = self.config
        r = 0.0 if at_rest else cfg.initial_velocity_range
        vx, vy, vz = self.rng.uniform(-r, r, 3)
        return Organism(
            f"organism_{slot}_gen_{self.generation}",
            NeuralNetwork(self.shape, weights, hidden_activation=cfg.hidden_activation),
            max_speed=cfg.organism_max_speed + self.rng.uniform(0, cfg.organism_max_speed_jitter),
            max_acceleration=cfg.organism_max_acceleration + self.rng.uniform(0, cfg.organism_max_acceleration_jitter),
            position=self._spawn_position(),
            velocity=Vector3(vx, vy, 0.0 if cfg.planar else vz),
            energy=cfg.initial_energy,
        )

    def _spawn_bot(self, idx):
        cfg = self.config
        return Bot(
            f"bot_{idx}",
            max_speed=cfg.bot_max_speed + self.rng.uniform(0, cfg.bot_max_speed_jitter),
            max_acceleration=cfg.bot_max_acceleration + self.rng.uniform(0, cfg.bot_max_acceleration_jitter),
            position=self._spawn_position(),
        )

    def add_food(self, position=None):
        if position is None: position = self._spawn_position()
        food = Food(f"food_{self._food_counter}", position, self.config.food_energy_value)
        self._food_counter += 1
        self.food[food.id] = food
        return food

    def remove_food(self, food_id):
        """Compare-and-remove by id. Returns the removed item, or None if someone got there first."""
        return self.food.pop(food_id, None)

    def spawn_food(self):
        missing = self.config.max_food - len(self.food)
        if self.config.food_spawn_per_tick is not None:
            missing = min(missing, self.config.food_spawn_per_tick)
        for _ in range(max(0, missing)):
            self.add_food()

    # --- Tick ---
    def tick(self, dt=DEFAULT_TIME_STEP):
        if dt <= 0:
            raise ValueError(f"Time step must be positive, got {dt}")
        self.time += dt
        self.spawn_food()
        self.update_bots(dt)
        self.update_organisms(dt)
        self._update_best()
        if self.time >= self.config.evolution_time - EPOCH_EPSILON:
            self.evolve()
        return self.snapshot()

    def _map(self, fn, items):
        if self._executor is None:
            return [fn(item) for item in items]
        return list(self._executor.map(fn, items))

    def update_bots(self, dt):
        cfg = self.config
        organisms = self.organisms
        steps = self._map(lambda bot: plan_bot_step(bot, organisms, cfg, dt), self.bots)
        for bot, step in zip(self.bots, steps):
            bot.position, bot.velocity = step.position, step.velocity
            bot.target, bot.target_distance = step.target, step.target_distance
            if bot.target is not None and bot.position.distance_to(bot.target.position) < cfg.bot_collision_distance:
                bot.energy += dt
                bot.target = None

    def update_organisms(self, dt):
        cfg = self.config
        foods = list(self.food.values())
        bots = self.bots
        steps = self._map(lambda o: plan_organism_step(o, foods, bots, cfg, dt), self.organisms)
        for organism, step in zip(self.organisms, steps):
            organism.position, organism.velocity = step.position, step.velocity
            organism.target, organism.threat = step.target, step.threat
            self._resolve_collisions(organism, dt)

    def _resolve_collisions(self, organism, dt):
        cfg = self.config
        if organism.target is not None:
            if organism.position.distance_to(organism.target.position) < cfg.food_collision_distance:
                eaten = self.remove_food(organism.target.id)
                if eaten is not None:
                    organism.energy += eaten.energy
                    self.food_eaten += 1
                organism.target = None
        if organism.threat is not None:
            if organism.position.distance_to(organism.threat.position) < cfg.bot_collision_distance:
                organism.energy = decay(organism.energy, cfg.bot_damage, dt)
                self.bot_hits += 1
                organism.threat = None
        penalty = continuous_penalty(organism.position, dt, cfg.energy_drain, cfg.center_penalty,
                                     cfg.arena_half_size)
        if penalty:
            organism.energy = max(0.0, organism.energy - penalty)

    def _update_best(self):
        self.best_organism = max(self.organisms, key=lambda o: o.energy, default=None)

    # --- Evolution ---
    def evolve(self):
        best = max(self.organisms, key=lambda o: o.energy, default=None)
        if best is not None:
            self.champion = Champion(self.generation, best.id, best.energy, best.weights.copy())
        result = self.genetic_algorithm.evolve(self.organisms, self.bots, self.generation, self.rng)
        self.scores.append(result.score)

        self.generation += 1
        # Elites keep their weights but restart from rest.
        self.organisms = [self._spawn_organism(slot, w, at_rest=slot < result.elite_count)
                          for slot, w in enumerate(result.weights)]
        for bot in self.bots:
            bot.reset(self._spawn_position())
        self.food.clear()
        self.time = 0.0
        self._update_best()

        if self.on_evolve is not None:
            self.on_evolve(self.snapshot())
        return result

    # --- Read-only views ---
    @property
    def species(self):
        speciation = self.genetic_algorithm.speciation
        return list(speciation.species) if speciation is not None else []

    def snapshot(self):
        best = self.best_organism
        return SimulationSnapshot(
            generation=self.generation,
            time=self.time,
            organisms=tuple(o.state() for o in self.organisms),
            bots=tuple(b.state() for b in self.bots),
            food=tuple(f.state() for f in self.food.values()),
            best_organism_id=best.id if best else None,
            best_energy=best.energy if best else 0.0,
            best_weights=best.weights.copy() if best else None,
            scores=tuple(self.scores),
            champion=self.champion,
        )

    def close(self):
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
