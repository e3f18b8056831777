import math
from dataclasses import dataclass, field, fields, replace as dc_replace
from typing import Optional, Tuple

# --- Arena Configuration ---
ARENA_HALF_SIZE = 2.5  # The arena spans [-ARENA_HALF_SIZE, ARENA_HALF_SIZE] on x and y
SPAWN_MARGIN = 1.0  # Distance kept between spawn positions and the arena edge
PLANAR = True  # Keep every entity on the z = 0 plane

# --- Population Configuration ---
MAX_ORGANISMS = 50  # Organisms per generation
MAX_BOTS = 5  # Predator bots
MAX_FOOD = 100  # Food items kept in the arena

# --- Time Configuration ---
DEFAULT_TIME_STEP = 0.1  # Seconds advanced by one tick
EVOLUTION_TIME = 40.0  # Seconds of simulated time per generation
EPOCH_EPSILON = 1e-9  # Absorbs float drift when summing time steps

# --- Movement Configuration ---
FRICTION = 0.75  # Velocity is multiplied by FRICTION ** dt every tick
ORGANISM_MAX_SPEED = 0.05  # Base per-component speed limit of organisms
ORGANISM_MAX_SPEED_JITTER = 0.01  # Random extra speed per organism
ORGANISM_MAX_ACCELERATION = 0.1  # Base acceleration of organisms
ORGANISM_MAX_ACCELERATION_JITTER = 0.05  # Random extra acceleration per organism
BOT_MAX_SPEED = 0.03  # Base per-component speed limit of bots
BOT_MAX_SPEED_JITTER = 0.003  # Random extra speed per bot
BOT_MAX_ACCELERATION = 0.05  # Base acceleration of bots
BOT_MAX_ACCELERATION_JITTER = 0.01  # Random extra acceleration per bot
INITIAL_VELOCITY_RANGE = 0.01  # Organisms start with velocity components in [-r, r]

# --- Energy Configuration ---
INITIAL_ENERGY = 1.0  # Organism energy at the start of every generation
FOOD_ENERGY_VALUE = 1.0  # Energy gained per food item
BOT_DAMAGE = 0.5  # Organism energy is multiplied by BOT_DAMAGE ** dt while touching a bot
ENERGY_DRAIN = 0.0  # Energy lost per second by every organism
CENTER_PENALTY = 0.0  # Energy lost per second at the arena edge, quadratic in distance from centre

# --- Collision and Perception Configuration ---
FOOD_COLLISION_DISTANCE = 0.075  # Eating distance
BOT_COLLISION_DISTANCE = 0.075  # Bite distance
VISIBILITY = 2.5  # Perception radius
BOTS_TARGET_LIVING_ONLY = False  # Bots ignore organisms with no energy left

# --- Neural Network Configuration ---
PERCEPTION_INPUT_COUNT = 8  # Target direction + distance, threat direction + distance
INPUT_COUNT = PERCEPTION_INPUT_COUNT
HIDDEN_COUNT = 8
OUTPUT_COUNT = 4  # Acceleration x, y, z and throttle
HIDDEN_ACTIVATION = "tanh"
ACTIVATIONS = ("tanh", "identity")
WEIGHT_RANGE = 1.0  # Initial weights are drawn from [-WEIGHT_RANGE, WEIGHT_RANGE]
BIAS_RANGE = 0.1  # Initial biases are drawn from [-BIAS_RANGE, BIAS_RANGE]

# --- Evolution Configuration ---
ELITISM = 4  # Best organisms copied unchanged into the next generation
SELECTION = "tournament"
SELECTION_POLICIES = ("tournament", "elite_pair")
TOURNAMENT_SIZE = 5
CROSSOVER_BLEND_RANGE = (0.75, 1.0)  # Weight of the fitter parent in the blend
MUTATION_CHANCE = 0.1  # Probability of a multiplicative mutation per child
MUTATION_RATE = 0.1  # Mutation factor is drawn from [1 - rate, 1 + rate]
FLIP_CHANCE = 0.2  # Probability of a sign-flip mutation per child
EXTINCTION_THRESHOLD = 0.1  # Average energy below which the generation is reseeded

# --- Speciation Configuration ---
SPECIATION = False
COMPATIBILITY_THRESHOLD = 0.3  # Mean absolute weight difference inside one species
FITNESS_SHARING = False

# --- Execution Configuration ---
WORKERS = 1  # Threads used for the per-agent update phase
FOOD_SPAWN_PER_TICK = None  # None refills the arena to MAX_FOOD every tick


class ConfigurationError(ValueError):
    """Raised when the simulation is wired with inconsistent settings."""


@dataclass(frozen=True)
class SimulationConfig:
    max_organisms: int = MAX_ORGANISMS
    max_bots: int = MAX_BOTS
    max_food: int = MAX_FOOD
    arena_half_size: float = ARENA_HALF_SIZE
    spawn_margin: float = SPAWN_MARGIN
    planar: bool = PLANAR

    evolution_time: float = EVOLUTION_TIME
    friction: float = FRICTION
    organism_max_speed: float = ORGANISM_MAX_SPEED
    organism_max_speed_jitter: float = ORGANISM_MAX_SPEED_JITTER
    organism_max_acceleration: float = ORGANISM_MAX_ACCELERATION
    organism_max_acceleration_jitter: float = ORGANISM_MAX_ACCELERATION_JITTER
    bot_max_speed: float = BOT_MAX_SPEED
    bot_max_speed_jitter: float = BOT_MAX_SPEED_JITTER
    bot_max_acceleration: float = BOT_MAX_ACCELERATION
    bot_max_acceleration_jitter: float = BOT_MAX_ACCELERATION_JITTER
    initial_velocity_range: float = INITIAL_VELOCITY_RANGE

    initial_energy: float = INITIAL_ENERGY
    food_energy_value: float = FOOD_ENERGY_VALUE
    bot_damage: float = BOT_DAMAGE
    energy_drain: float = ENERGY_DRAIN
    center_penalty: float = CENTER_PENALTY

    food_collision_distance: float = FOOD_COLLISION_DISTANCE
    bot_collision_distance: float = BOT_COLLISION_DISTANCE
    visibility: float = VISIBILITY
    bots_target_living_only: bool = BOTS_TARGET_LIVING_ONLY

    input_count: int = INPUT_COUNT
    hidden_count: int = HIDDEN_COUNT
    output_count: int = OUTPUT_COUNT
    hidden_activation: str = HIDDEN_ACTIVATION
    weight_range: float = WEIGHT_RANGE
    bias_range: float = BIAS_RANGE

    elitism: int = ELITISM
    selection: str = SELECTION
    tournament_size: int = TOURNAMENT_SIZE
    crossover_blend_range: Tuple[float, float] = CROSSOVER_BLEND_RANGE
    mutation_chance: float = MUTATION_CHANCE
    mutation_rate: float = MUTATION_RATE
    flip_chance: float = FLIP_CHANCE
    extinction_threshold: Optional[float] = EXTINCTION_THRESHOLD

    speciation: bool = SPECIATION
    compatibility_threshold: float = COMPATIBILITY_THRESHOLD
    fitness_sharing: bool = FITNESS_SHARING

    workers: int = WORKERS
    food_spawn_per_tick: Optional[int] = FOOD_SPAWN_PER_TICK
    seed: Optional[int] = field(default=None, compare=False)

    def __post_init__(self):
        self.validate()

    def validate(self):
        for name in ("max_organisms", "max_bots", "max_food", "elitism"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must not be negative, got {getattr(self, name)}")
        for name in ("arena_half_size", "evolution_time", "visibility", "food_collision_distance",
                     "bot_collision_distance", "hidden_count", "tournament_size", "workers"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive, got {getattr(self, name)}")
        if not 0 <= self.spawn_margin < self.arena_half_size:
            raise ConfigurationError("spawn_margin must leave room to spawn inside the arena")
        if self.input_count != PERCEPTION_INPUT_COUNT:
            raise ConfigurationError(
                f"input_count must match the perception vector ({PERCEPTION_INPUT_COUNT}), got {self.input_count}")
        if self.output_count not in (3, 4):
            raise ConfigurationError(f"output_count must be 3 or 4, got {self.output_count}")
        if self.hidden_activation not in ACTIVATIONS:
            raise ConfigurationError(f"Unknown hidden activation {self.hidden_activation!r}")
        if self.selection not in SELECTION_POLICIES:
            raise ConfigurationError(f"Unknown selection policy {self.selection!r}")
        low, high = self.crossover_blend_range
        if not 0.0 <= low <= high <= 1.0:
            raise ConfigurationError(f"crossover_blend_range must lie inside [0, 1], got {self.crossover_blend_range}")
        for name in ("mutation_chance", "flip_chance", "friction", "bot_damage"):
            if not 0.0 <= getattr(self, name) <= 1.0:
                raise ConfigurationError(f"{name} must lie inside [0, 1], got {getattr(self, name)}")
        if self.mutation_rate < 0:
            raise ConfigurationError("mutation_rate must not be negative")
        if self.food_spawn_per_tick is not None and self.food_spawn_per_tick < 0:
            raise ConfigurationError("food_spawn_per_tick must not be negative")
        if not math.isfinite(self.initial_energy):
            raise ConfigurationError("initial_energy must be finite")

    @property
    def spawn_half_size(self):
        return self.arena_half_size - self.spawn_margin

    @property
    def shape(self):
        """Brain topology as (input, hidden, output)."""
        return (self.input_count, self.hidden_count, self.output_count)

    def replace(self, **changes):
        unknown = set(changes) - {f.name for f in fields(self)}
        if unknown:
            raise ConfigurationError(f"Unknown configuration fields: {', '.join(sorted(unknown))}")
        return dc_replace(self, **changes)
