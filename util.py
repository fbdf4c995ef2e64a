import math
import collections

from pyglet.math import Vec3

from config import CHUNK_SIZE


def as_xyz(v):
    """Components of a Vec3 or any 3-sequence as floats."""
    if isinstance(v, Vec3):
        return float(v.x), float(v.y), float(v.z)
    x, y, z = v
    return float(x), float(y), float(z)


class Ray(object):
    """ A half line from `origin` along `direction`, limited to `max_distance`
    world units. Supplied by the camera/input side to `World.raycast`.

    """
    def __init__(self, origin, direction, max_distance):
        self.origin = Vec3(*as_xyz(origin))
        self.direction = Vec3(*as_xyz(direction))
        self.max_distance = float(max_distance)

    def point_at(self, t):
        ox, oy, oz = as_xyz(self.origin)
        dx, dy, dz = as_xyz(self.direction)
        return Vec3(ox + dx * t, oy + dy * t, oz + dz * t)

    def __repr__(self):
        return 'Ray(origin=%r, direction=%r, max_distance=%r)' % (
            as_xyz(self.origin), as_xyz(self.direction), self.max_distance)


# position is the Vec3 of the hit cell's minimum corner, distance the ray
# parameter at which it was sampled.
RaycastHit = collections.namedtuple('RaycastHit', ['position', 'distance', 'block_type'])


def block_position(position):
    """ Accepts `position` of arbitrary precision and returns the block
    containing that position.

    Parameters
    ----------
    position : Vec3 or tuple of len 3

    Returns
    -------
    block_position : tuple of ints of len 3

    """
    x, y, z = as_xyz(position)
    return (int(math.floor(x)), int(math.floor(y)), int(math.floor(z)))


def split_world_position(x, z):
    """ Split integer world block coordinates into the chunk grid coordinate
    and the local offset inside that chunk. Floor division keeps negative
    coordinates in the right chunk.

    Returns
    -------
    ((chunk_x, chunk_z), (local_x, local_z))

    """
    return (x // CHUNK_SIZE, z // CHUNK_SIZE), (x % CHUNK_SIZE, z % CHUNK_SIZE)


def clamp(value, lo, hi):
    return max(lo, min(hi, value))
