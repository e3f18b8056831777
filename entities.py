from dataclasses import dataclass
from enum import Enum
from typing import Optional

from config import INITIAL_ENERGY, FOOD_ENERGY_VALUE
from vector import Vector3


class EntityKind(Enum):
    FOOD = "food"
    BOT = "bot"
    ORGANISM = "organism"


@dataclass(frozen=True)
class EntityRef:
    """What one agent remembers about another: enough to perceive it, nothing more."""
    kind: EntityKind
    id: str
    position: Vector3
    energy: float


@dataclass(frozen=True)
class EntityState:
    """Read-only row of a simulation snapshot."""
    kind: EntityKind
    id: str
    position: Vector3
    velocity: Vector3
    energy: float

    @property
    def rotation(self):
        return self.velocity.rotation


# =============================================================================
# CLASS: Entity
# =============================================================================
class Entity:
    kind: EntityKind

    def __init__(self, entity_id, position=None, velocity=None, energy=0.0):
        self.id = str(entity_id)
        self.position = position if position is not None else Vector3.zero()
        self.velocity = velocity if velocity is not None else Vector3.zero()
        self.energy = float(energy)

    def __eq__(self, other):
        if not isinstance(other, Entity):
            return NotImplemented
        return self.kind is other.kind and self.id == other.id

    def __hash__(self):
        return hash((self.kind, self.id))

    @property
    def rotation(self):
        return self.velocity.rotation

    def ref(self) -> EntityRef:
        return EntityRef(self.kind, self.id, self.position, self.energy)

    def state(self) -> EntityState:
        return EntityState(self.kind, self.id, self.position, self.velocity, self.energy)

    def __repr__(self):
        return f"{type(self).__name__}(id={self.id!r}, energy={self.energy:.3f}, position={self.position})"


# =============================================================================
# CLASS: Food
# =============================================================================
class Food(Entity):
    kind = EntityKind.FOOD

    def __init__(self, entity_id, position=None, energy=FOOD_ENERGY_VALUE):
        super().__init__(entity_id, position=position, energy=energy)


# =============================================================================
# CLASS: Bot
# =============================================================================
class Bot(Entity):
    kind = EntityKind.BOT

    def __init__(self, entity_id, max_speed, max_acceleration, position=None, velocity=None, energy=0.0):
        super().__init__(entity_id, position=position, velocity=velocity, energy=energy)
        self.max_speed = max_speed
        self.max_acceleration = max_acceleration
        self.target: Optional[EntityRef] = None
        self.target_distance = 0.0

    def reset(self, position):
        self.position = position
        self.velocity = Vector3.zero()
        self.energy = 0.0
        self.target = None
        self.target_distance = 0.0


# =============================================================================
# CLASS: Organism
# =============================================================================
class Organism(Entity):
    kind = EntityKind.ORGANISM

    def __init__(self, entity_id, brain, max_speed, max_acceleration, position=None, velocity=None,
                 energy=INITIAL_ENERGY):
        super().__init__(entity_id, position=position, velocity=velocity, energy=energy)
        self.brain = brain
        self.max_speed = max_speed
        self.max_acceleration = max_acceleration
        self.target: Optional[EntityRef] = None
        self.threat: Optional[EntityRef] = None

    @property
    def weights(self):
        return self.brain.weights

    def is_alive(self):
        return self.energy > 0
