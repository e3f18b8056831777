from vector import Vector3


def integrate(position, velocity, acceleration, throttle, dt, max_speed, max_acceleration, friction):
    """
    Advances one agent by dt.

    velocity = clamp(velocity + acceleration * dt * max_acceleration * throttle)
    velocity *= friction ** dt
    position += velocity
    Returns (position, velocity).
    """
    velocity = (velocity + acceleration * (dt * max_acceleration * throttle)).clamp(-max_speed, max_speed)
    velocity = velocity * (friction ** dt)
    return position + velocity, velocity


def decay(energy, factor, dt):
    return energy * (factor ** dt)


def continuous_penalty(position, dt, energy_drain, center_penalty, arena_half_size):
    """Energy an organism loses this tick for existing and for straying from the centre."""
    penalty = energy_drain * dt
    if center_penalty:
        normalized = position.length() / arena_half_size
        penalty += center_penalty * normalized**2 * dt
    return penalty


def random_position(rng, half_size, planar=True):
    x, y, z = rng.uniform(-half_size, half_size, 3)
    return Vector3(x, y, 0.0 if planar else z)
