"""
Sensing for organisms and bots.

Organisms see the nearest food (their target) and the nearest bot (their
threat) inside the visibility radius. The controller receives both as a
unit direction plus a normalised distance; a slot with nothing in range is
encoded as (0, 0, 0, -1) so "absent" never looks like "far away".
"""
import numpy as np

from config import PERCEPTION_INPUT_COUNT
from vector import Vector3

ABSENT_SLOT = (0.0, 0.0, 0.0, -1.0)


def nearest(position, candidates, radius, predicate=None):
    """
    Returns (entity, distance) for the closest candidate within radius.

    Ties keep the first candidate seen, so results only depend on the order
    of the collection. Returns (None, None) when nothing is in range.
    """
    best, best_distance = None, None
    for candidate in candidates:
        if predicate is not None and not predicate(candidate):
            continue
        dist = position.distance_to(candidate.position)
        if dist > radius:
            continue
        if best_distance is None or dist < best_distance:
            best, best_distance = candidate, dist
    return best, best_distance


def perceive_organism(organism, foods, bots, visibility):
    """Returns the (target, threat) references an organism perceives this tick."""
    food, _ = nearest(organism.position, foods, visibility)
    bot, _ = nearest(organism.position, bots, visibility)
    return (food.ref() if food is not None else None,
            bot.ref() if bot is not None else None)


def perceive_bot(bot, organisms, visibility, living_only=False):
    predicate = (lambda o: o.is_alive()) if living_only else None
    organism, dist = nearest(bot.position, organisms, visibility, predicate)
    if organism is None:
        return None, 0.0
    return organism.ref(), dist


def encode_slot(position, ref, visibility):
    if ref is None:
        return ABSENT_SLOT
    direction = position.direction_to(ref.position)
    dist = min(max(position.distance_to(ref.position) / visibility, 0.0), 1.0)
    return (direction.x, direction.y, direction.z, dist)


def encode_inputs(position, target, threat, visibility):
    inputs = np.empty(PERCEPTION_INPUT_COUNT)
    inputs[:4] = encode_slot(position, target, visibility)
    inputs[4:] = encode_slot(position, threat, visibility)
    return inputs


def decode_outputs(outputs, planar=True):
    """Splits controller output into an acceleration direction and a throttle in [0, 1]."""
    z = 0.0 if planar else outputs[2]
    acceleration = Vector3(outputs[0], outputs[1], z)
    throttle = (outputs[3] + 1.0) / 2.0 if len(outputs) > 3 else 1.0
    return acceleration, throttle


def pursuit_acceleration(bot, target):
    """Proportional pursuit: accelerate along the gap between current and desired velocity."""
    if target is None:
        return Vector3.zero()
    desired = bot.position.direction_to(target.position) * bot.max_speed
    return (desired - bot.velocity).normalize()
