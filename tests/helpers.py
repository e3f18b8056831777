import numpy as np

from brain import ModelWeights, NeuralNetwork
from entities import Bot, Organism
from vector import Vector3

SHAPE = (8, 8, 4)


def zero_brain(shape=SHAPE):
    return NeuralNetwork(shape, ModelWeights.zeros(shape))


def make_organism(entity_id, position=(0.0, 0.0, 0.0), brain=None, energy=1.0):
    return Organism(entity_id, brain or zero_brain(), max_speed=0.05, max_acceleration=0.1,
                    position=Vector3(*position), energy=energy)


def make_bot(entity_id, position=(0.0, 0.0, 0.0), velocity=(0.0, 0.0, 0.0)):
    return Bot(entity_id, max_speed=0.03, max_acceleration=0.05,
               position=Vector3(*position), velocity=Vector3(*velocity))


def constant_weights(value, shape=SHAPE):
    return ModelWeights(shape, *(np.full(n, value) for n in ModelWeights.expected_counts(shape)))


def park(simulation):
    """Stops every agent so positions only change when a test moves them."""
    for agent in simulation.organisms + simulation.bots:
        agent.velocity = Vector3.zero()
