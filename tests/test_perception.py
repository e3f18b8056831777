import numpy as np
import pytest

from entities import Food
from perception import (ABSENT_SLOT, decode_outputs, encode_inputs, nearest, perceive_bot,
                        perceive_organism, pursuit_acceleration)
from vector import Vector3
from helpers import make_bot, make_organism


def food(entity_id, x, y):
    return Food(entity_id, Vector3(x, y, 0))


def test_nothing_visible_encodes_sentinels():
    organism = make_organism("o")
    target, threat = perceive_organism(organism, [], [], visibility=2.5)
    assert target is None and threat is None
    inputs = encode_inputs(organism.position, target, threat, 2.5)
    assert list(inputs) == list(ABSENT_SLOT) * 2
    assert list(ABSENT_SLOT) == [0.0, 0.0, 0.0, -1.0]


def test_out_of_range_entities_are_absent():
    organism = make_organism("o")
    target, threat = perceive_organism(organism, [food("f", 3, 0)], [make_bot("b", (0, -3, 0))], 2.5)
    assert target is None and threat is None


def test_nearest_food_and_bot_are_chosen():
    organism = make_organism("o")
    foods = [food("far", 2, 0), food("near", 0, 1), food("mid", -1.5, 0)]
    bots = [make_bot("b1", (1, 1, 0)), make_bot("b0", (0.5, 0, 0))]
    target, threat = perceive_organism(organism, foods, bots, 2.5)
    assert target.id == "near"
    assert threat.id == "b0"
    assert threat.position == Vector3(0.5, 0, 0)


def test_ties_keep_first_seen():
    origin = Vector3.zero()
    candidates = [food("a", 1, 0), food("b", 0, 1), food("c", -1, 0)]
    best, dist = nearest(origin, candidates, 2.0)
    assert best.id == "a"
    assert dist == pytest.approx(1.0)
    best, _ = nearest(origin, list(reversed(candidates)), 2.0)
    assert best.id == "c"


def test_inputs_are_unit_direction_and_normalised_distance():
    organism = make_organism("o", (1, 1, 0))
    target, threat = perceive_organism(organism, [food("f", 1, 2)], [make_bot("b", (-1, 1, 0))], 2.5)
    inputs = encode_inputs(organism.position, target, threat, 2.5)
    assert list(inputs[:4]) == pytest.approx([0, 1, 0, 1 / 2.5])
    assert list(inputs[4:]) == pytest.approx([-1, 0, 0, 2 / 2.5])


def test_distance_is_clamped_to_one():
    organism = make_organism("o")
    target = food("f", 3, 4).ref()
    inputs = encode_inputs(organism.position, target, None, 2.5)
    assert inputs[3] == 1.0
    assert list(inputs[4:]) == list(ABSENT_SLOT)


def test_target_on_top_of_organism_does_not_produce_nan():
    organism = make_organism("o", (0.2, 0.2, 0))
    inputs = encode_inputs(organism.position, food("f", 0.2, 0.2).ref(), None, 2.5)
    assert not np.any(np.isnan(inputs))
    assert list(inputs[:4]) == pytest.approx([0, 0, 0, 0])


def test_bot_targets_nearest_organism():
    bot = make_bot("b")
    organisms = [make_organism("o1", (1, 0, 0)), make_organism("o2", (0, 0.5, 0))]
    target, dist = perceive_bot(bot, organisms, 2.5)
    assert target.id == "o2"
    assert dist == pytest.approx(0.5)


def test_bot_can_ignore_organisms_without_energy():
    bot = make_bot("b")
    organisms = [make_organism("dead", (0.1, 0, 0), energy=0.0), make_organism("alive", (1, 0, 0))]
    assert perceive_bot(bot, organisms, 2.5)[0].id == "dead"
    assert perceive_bot(bot, organisms, 2.5, living_only=True)[0].id == "alive"


def test_bot_without_visible_organism_has_no_target():
    assert perceive_bot(make_bot("b"), [make_organism("o", (5, 0, 0))], 2.5) == (None, 0.0)


def test_decode_outputs():
    acceleration, throttle = decode_outputs(np.array([0.5, -0.5, 0.9, -1.0]))
    assert acceleration == Vector3(0.5, -0.5, 0.0)
    assert throttle == 0.0
    acceleration, throttle = decode_outputs(np.array([0.5, -0.5, 0.9, 1.0]), planar=False)
    assert acceleration == Vector3(0.5, -0.5, 0.9)
    assert throttle == 1.0
    assert decode_outputs(np.array([0.0, 0.0, 0.0, 0.0]))[1] == 0.5
    assert decode_outputs(np.array([0.1, 0.2, 0.3]))[1] == 1.0


def test_pursuit_points_at_the_target():
    bot = make_bot("b")
    target = make_organism("o", (1, 0, 0)).ref()
    assert pursuit_acceleration(bot, target) == Vector3(1, 0, 0)
    assert pursuit_acceleration(bot, None) == Vector3.zero()


def test_pursuit_corrects_current_velocity():
    # Moving sideways at full speed: the correction points back and forward.
    bot = make_bot("b", velocity=(0, 0.03, 0))
    a = pursuit_acceleration(bot, make_organism("o", (1, 0, 0)).ref())
    assert a.length() == pytest.approx(1.0)
    assert a.x > 0 and a.y < 0
