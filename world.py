'''
world.py -- the loaded part of an infinite chunked world: chunk streaming around
the player, world-space block queries and edits, and ray casting
'''

# standard library imports
import time

# third party imports
from pyglet.math import Vec3

# local imports
import config
from config import CHUNK_HEIGHT
from blocks import BlockType
from chunk import ChunkCoordinate
from util import RaycastHit, block_position, split_world_position, clamp, as_xyz
import mapgen
import lighting
import logutil


class World(object):
    """ Owns the chunk map and keeps it filled around the player.

    Chunks are generated synchronously as they come within `render_distance`
    of the player and discarded once they are more than UNLOAD_MARGIN chunks
    beyond it. Nothing is saved: unloading drops any edits. Pass `on_unload`,
    a callable taking (coordinate, chunk), to see each chunk before it goes.
    """
    def __init__(self, seed=None, render_distance=None, on_unload=None):
        if seed is None:
            seed = config.DEFAULT_SEED
        self._seed = seed
        self.generator = mapgen.WorldGenerator(seed)
        self.lighting = lighting.LightingEngine()
        # Ground truth for what is loaded; _loaded_chunks mirrors its keys in load order.
        self.chunks = {}
        self._loaded_chunks = []
        self._render_distance = config.DEFAULT_RENDER_DISTANCE
        if render_distance is not None:
            self.set_render_distance(render_distance)
        self._spawn_point = Vec3(*as_xyz(config.SPAWN_POINT))
        self.on_unload = on_unload
        self._tick = 0

    @classmethod
    def with_seed(cls, seed):
        return cls(seed=seed)

    @property
    def seed(self):
        return self._seed

    @property
    def render_distance(self):
        return self._render_distance

    @render_distance.setter
    def render_distance(self, value):
        self.set_render_distance(value)

    def set_render_distance(self, distance):
        self._render_distance = clamp(int(distance), config.MIN_RENDER_DISTANCE, config.MAX_RENDER_DISTANCE)

    @property
    def spawn_point(self):
        return self._spawn_point

    def set_spawn_point(self, point):
        self._spawn_point = Vec3(*as_xyz(point))

    @property
    def loaded_chunks(self):
        return list(self._loaded_chunks)

    # ----- Streaming -----

    def load_chunks_around(self, position):
        """ Load every chunk within the render distance (a circle in chunk
        units) of `position`, then unload those past render distance + margin.

        """
        self._tick += 1
        logutil.set_tick(self._tick)
        px, _, pz = as_xyz(position)
        center = ChunkCoordinate.containing(px, pz)
        rd = self._render_distance
        to_load = []
        for x in range(center.x - rd, center.x + rd + 1):
            for z in range(center.z - rd, center.z + rd + 1):
                coord = ChunkCoordinate(x, z)
                if (x - center.x)**2 + (z - center.z)**2 <= rd * rd and coord not in self.chunks:
                    to_load.append(coord)
        keep = (rd + getattr(config, 'UNLOAD_MARGIN', 2))**2
        to_unload = [c for c in self.chunks if (c.x - center.x)**2 + (c.z - center.z)**2 > keep]

        t0 = time.perf_counter()
        for coord in to_load:
            self.load_chunk(coord)
        for coord in to_unload:
            self.unload_chunk(coord)
        if to_load or to_unload:
            logutil.log('STREAM', 'around %s: loaded %d, unloaded %d, %d resident (%.1f ms)' % (
                tuple(center), len(to_load), len(to_unload), len(self.chunks),
                (time.perf_counter() - t0) * 1000.0))

    def load_chunk(self, coordinate):
        coordinate = ChunkCoordinate(*coordinate)
        chunk = self.chunks.get(coordinate)
        if chunk is not None:
            return chunk
        chunk = self.generator.generate_chunk(coordinate)
        if getattr(config, 'FULL_LIGHTING_ON_LOAD', False):
            self.lighting.calculate_chunk_lighting(chunk)
        self.chunks[coordinate] = chunk
        self._loaded_chunks.append(coordinate)
        return chunk

    def unload_chunk(self, coordinate):
        """Drop the chunk at `coordinate`. Returns False if it was not loaded."""
        coordinate = ChunkCoordinate(*coordinate)
        chunk = self.chunks.get(coordinate)
        if chunk is None:
            return False
        if chunk.dirty:
            logutil.log('STREAM', 'unloading chunk %s discards unsaved edits' % (tuple(coordinate),),
                level='WARNING')
        if self.on_unload is not None:
            self.on_unload(coordinate, chunk)
        del self.chunks[coordinate]
        self._loaded_chunks = [c for c in self._loaded_chunks if c != coordinate]
        return True

    def get_chunk(self, coordinate):
        return self.chunks.get(ChunkCoordinate(*coordinate))

    # Chunks are mutable objects, so the mutable lookup is the same one.
    get_chunk_mut = get_chunk

    def is_chunk_loaded(self, coordinate):
        return ChunkCoordinate(*coordinate) in self.chunks

    # ----- Block access -----

    def _locate(self, x, y, z):
        if not 0 <= y < CHUNK_HEIGHT:
            return None, None, None
        (cx, cz), (lx, lz) = split_world_position(x, z)
        return self.chunks.get(ChunkCoordinate(cx, cz)), lx, lz

    def get_block_at(self, x, y, z):
        """Block at integer world coordinates, or None if its chunk is not loaded."""
        chunk, lx, lz = self._locate(x, y, z)
        if chunk is None:
            return None
        return chunk.get_block(lx, y, lz)

    def set_block_at(self, x, y, z, block):
        """ Set the block at integer world coordinates. Returns False if its
        chunk is not loaded or y is out of range.

        """
        chunk, lx, lz = self._locate(x, y, z)
        if chunk is None:
            return False
        block = BlockType(block)
        if not getattr(config, 'INCREMENTAL_LIGHTING', False):
            chunk.set_block(lx, y, lz, block)
            return True
        previous = chunk.get_block(lx, y, lz)
        prior_light = chunk.get_light_level(lx, y, lz)
        chunk.set_block(lx, y, lz, block)
        if previous != block:
            if block == BlockType.AIR:
                self.lighting.on_block_removed(chunk, lx, y, lz, previous)
            else:
                self.lighting.on_block_placed(chunk, lx, y, lz, prior_light)
        return True

    def raycast(self, ray):
        """ March along `ray` in RAYCAST_STEP increments and return a
        RaycastHit for the first non-air block found in a loaded chunk, or
        None once max_distance is reached.

        """
        step = getattr(config, 'RAYCAST_STEP', 0.1)
        t = 0.0
        while t < ray.max_distance:
            x, y, z = block_position(ray.point_at(t))
            block = self.get_block_at(x, y, z)
            if block is not None and block != BlockType.AIR:
                return RaycastHit(Vec3(float(x), float(y), float(z)), t, block)
            t += step
        return None
