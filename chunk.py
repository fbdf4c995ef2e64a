import collections
import numpy

from config import CHUNK_SIZE, CHUNK_HEIGHT, CHUNK_AREA, CHUNK_VOLUME, MAX_LIGHT
from blocks import BlockType, BLOCK_TYPES, BLOCK_TRANSPARENT, BLOCK_LIGHT_LEVELS

AIR = int(BlockType.AIR)


class ChunkCoordinate(collections.namedtuple('ChunkCoordinate', ['x', 'z'])):
    """Position of a chunk in chunk-grid units (one unit is CHUNK_SIZE blocks)."""
    __slots__ = ()

    def world_position(self):
        """World block coordinates of the chunk's minimum corner."""
        return (self.x * CHUNK_SIZE, self.z * CHUNK_SIZE)

    def neighbors(self):
        x, z = self
        return [
            ChunkCoordinate(x + 1, z), #east
            ChunkCoordinate(x - 1, z), #west
            ChunkCoordinate(x, z + 1), #north
            ChunkCoordinate(x, z - 1), #south
        ]

    def surrounding(self):
        x, z = self
        return self.neighbors() + [
            ChunkCoordinate(x + 1, z + 1),
            ChunkCoordinate(x + 1, z - 1),
            ChunkCoordinate(x - 1, z + 1),
            ChunkCoordinate(x - 1, z - 1),
        ]

    @classmethod
    def containing(cls, world_x, world_z):
        return cls(int(world_x // CHUNK_SIZE), int(world_z // CHUNK_SIZE))


def in_bounds(x, y, z):
    return 0 <= x < CHUNK_SIZE and 0 <= y < CHUNK_HEIGHT and 0 <= z < CHUNK_SIZE


def _index(x, y, z):
    return x + CHUNK_SIZE * (z + CHUNK_SIZE * y)


def column_heights(grid):
    """ Topmost non-air y + 1 for every column of a (y, z, x) block grid,
    0 for all-air columns.

    """
    filled = grid != AIR
    top = grid.shape[0] - numpy.argmax(filled[::-1], axis=0)
    return numpy.where(filled.any(axis=0), top, 0)


def sky_light_levels(grid):
    """ Top-down sky light for a (y, z, x) block grid: full light down to the
    first non-transparent cell of each column, 0 at and below it.

    """
    opaque = BLOCK_TRANSPARENT[grid] == 0
    covered = numpy.logical_or.accumulate(opaque[::-1], axis=0)[::-1]
    return numpy.where(covered, 0, MAX_LIGHT).astype(numpy.uint8)


class Chunk(object):
    """ A CHUNK_SIZE x CHUNK_HEIGHT x CHUNK_SIZE column of blocks.

    Storage is flat and indexed by x + CHUNK_SIZE*(z + CHUNK_SIZE*y):
      * blocks: block ids (BlockType values)
      * light_levels: packed light, high nibble sky light, low nibble block light
      * height_map: topmost non-air y + 1 per column, indexed x + CHUNK_SIZE*z

    Local coordinates outside the chunk read as Air / light 0 and writes to
    them are ignored.
    """
    def __init__(self, coordinate):
        self.coordinate = ChunkCoordinate(*coordinate)
        self.blocks = numpy.zeros(CHUNK_VOLUME, dtype=numpy.uint8)
        self.height_map = numpy.zeros(CHUNK_AREA, dtype=numpy.int32)
        self.light_levels = numpy.full(CHUNK_VOLUME, 0xFF, dtype=numpy.uint8)
        # Set by any block change; cleared by the generator and by mark_clean.
        self.dirty = False

    def __repr__(self):
        return 'Chunk(%r, blocks=%d, dirty=%r)' % (tuple(self.coordinate), self.block_count(), self.dirty)

    def grid(self):
        """(y, z, x) view of the block array."""
        return self.blocks.reshape((CHUNK_HEIGHT, CHUNK_SIZE, CHUNK_SIZE))

    def light_grid(self):
        """(y, z, x) view of the packed light array."""
        return self.light_levels.reshape((CHUNK_HEIGHT, CHUNK_SIZE, CHUNK_SIZE))

    def get_block(self, x, y, z):
        if not in_bounds(x, y, z):
            return BlockType.AIR
        return BLOCK_TYPES[self.blocks[_index(x, y, z)]]

    def set_block(self, x, y, z, block):
        if not in_bounds(x, y, z):
            return
        block = int(block)
        i = _index(x, y, z)
        if self.blocks[i] == block:
            return
        self.blocks[i] = block
        self.dirty = True
        self._update_height_at(x, y, z, block)
        self._update_light_at(x, y, z, block)

    def _update_height_at(self, x, y, z, block):
        col = x + CHUNK_SIZE * z
        height = self.height_map[col]
        if block != AIR:
            if y >= height:
                self.height_map[col] = y + 1
        elif y + 1 == height:
            # The top block was cleared, so look for the next one down.
            below = numpy.flatnonzero(self.grid()[:y, z, x])
            self.height_map[col] = below[-1] + 1 if len(below) > 0 else 0

    def _update_light_at(self, x, y, z, block):
        # Placeholder only: real propagation is the lighting engine's job.
        above = self.grid()[y + 1:, z, x]
        sky = 0 if (BLOCK_TRANSPARENT[above] == 0).any() else MAX_LIGHT
        self.light_levels[_index(x, y, z)] = (sky << 4) | int(BLOCK_LIGHT_LEVELS[block])

    def get_height_at(self, x, z):
        if not (0 <= x < CHUNK_SIZE and 0 <= z < CHUNK_SIZE):
            return 0
        return int(self.height_map[x + CHUNK_SIZE * z])

    def update_height_map(self):
        self.height_map[:] = column_heights(self.grid()).reshape(-1)

    def get_light_level(self, x, y, z):
        if not in_bounds(x, y, z):
            return 0
        return int(self.light_levels[_index(x, y, z)])

    def set_light_level(self, x, y, z, light):
        if not in_bounds(x, y, z):
            return
        self.light_levels[_index(x, y, z)] = light & 0xFF

    def get_sky_light(self, x, y, z):
        return (self.get_light_level(x, y, z) >> 4) & 0x0F

    def get_block_light(self, x, y, z):
        return self.get_light_level(x, y, z) & 0x0F

    def set_sky_light(self, x, y, z, light):
        current = self.get_light_level(x, y, z)
        self.set_light_level(x, y, z, (current & 0x0F) | ((light & 0x0F) << 4))

    def set_block_light(self, x, y, z, light):
        current = self.get_light_level(x, y, z)
        self.set_light_level(x, y, z, (current & 0xF0) | (light & 0x0F))

    def calculate_lighting(self):
        """ Chunk-local sky pass. Rewrites the sky nibble of every cell from
        the block columns and leaves block light alone.

        """
        light = self.light_grid()
        light[...] = (light & 0x0F) | (sky_light_levels(self.grid()) << 4)

    def fill_region(self, start_x, start_y, start_z, end_x, end_y, end_z, block):
        """ Set every cell in [start, end) to `block`, with the end clamped to
        the chunk. Each cell behaves as if set_block had been called on it in
        x, y, z loop order.

        """
        block = int(block)
        sx, sy, sz = max(start_x, 0), max(start_y, 0), max(start_z, 0)
        ex, ey, ez = min(end_x, CHUNK_SIZE), min(end_y, CHUNK_HEIGHT), min(end_z, CHUNK_SIZE)
        if sx >= ex or sy >= ey or sz >= ez:
            return
        grid = self.grid()
        region = grid[sy:ey, sz:ez, sx:ex]
        changed = region != block
        if not changed.any():
            return
        # Each cell's placeholder sky light sees the column above it before the
        # fill, since higher cells of a column are written after lower ones.
        opaque = BLOCK_TRANSPARENT[grid[:, sz:ez, sx:ex]] == 0
        covered = numpy.logical_or.accumulate(opaque[::-1], axis=0)[::-1]
        covered_above = numpy.zeros_like(covered)
        covered_above[:-1] = covered[1:]
        sky = numpy.where(covered_above[sy:ey], 0, MAX_LIGHT).astype(numpy.uint8)
        packed = (sky << 4) | BLOCK_LIGHT_LEVELS[block]

        light = self.light_grid()[sy:ey, sz:ez, sx:ex]
        light[changed] = packed[changed]
        region[changed] = block
        self.dirty = True
        heights = self.height_map.reshape((CHUNK_SIZE, CHUNK_SIZE))
        heights[sz:ez, sx:ex] = column_heights(grid[:, sz:ez, sx:ex])

    def block_count(self):
        return int(numpy.count_nonzero(self.blocks))

    def is_empty(self):
        return not self.height_map.any()

    def mark_dirty(self):
        self.dirty = True

    def mark_clean(self):
        self.dirty = False
