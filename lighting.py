import collections
import math
import time
import numpy

from config import CHUNK_SIZE, CHUNK_HEIGHT
from blocks import BlockType, BLOCK_TRANSPARENT, BLOCK_LIGHT_LEVELS
from chunk import in_bounds, sky_light_levels
import config
import logutil

LightNode = collections.namedtuple('LightNode', ['x', 'y', 'z', 'level'])

NEIGHBORS = ((1, 0, 0), (-1, 0, 0), (0, 1, 0), (0, -1, 0), (0, 0, 1), (0, 0, -1))


def propagate_block_light(blocks, light, seeds):
    """ Flood block light outward from `seeds` and return the new light array.

    Parameters
    ----------
    blocks : flat (or (y, z, x)) uint8 array of block ids for one chunk
    light : packed light array of the same size; not modified
    seeds : iterable of LightNode or (x, y, z, level) tuples, processed FIFO

    Returns
    -------
    light : new packed light array shaped like `light`

    A node at level <= 1 spreads no further. Otherwise each in-range,
    transparent axis neighbour whose block light is below level - 1 is raised
    to level - 1 and queued. The result is, for every transparent cell, the
    highest seed level minus the Manhattan path length to it.
    """
    transparent = BLOCK_TRANSPARENT[numpy.asarray(blocks).reshape(-1)].tobytes()
    out = bytearray(numpy.asarray(light, dtype=numpy.uint8).tobytes())
    queue = collections.deque(seeds)
    while queue:
        x, y, z, level = queue.popleft()
        if level <= 1:
            continue
        level -= 1
        for dx, dy, dz in NEIGHBORS:
            nx, ny, nz = x + dx, y + dy, z + dz
            if not (0 <= nx < CHUNK_SIZE and 0 <= ny < CHUNK_HEIGHT and 0 <= nz < CHUNK_SIZE):
                continue
            i = nx + CHUNK_SIZE * (nz + CHUNK_SIZE * ny)
            if not transparent[i]:
                continue
            current = out[i]
            if level > (current & 0x0F):
                out[i] = (current & 0xF0) | level
                queue.append(LightNode(nx, ny, nz, level))
    return numpy.frombuffer(out, dtype=numpy.uint8).reshape(numpy.shape(light)).copy()


def _seed_nodes(mask, levels, offset=(0, 0, 0)):
    # mask and levels are (y, z, x); offset is the (x, y, z) of their origin.
    ys, zs, xs = numpy.nonzero(mask)
    ox, oy, oz = offset
    return list(zip((xs + ox).tolist(), (ys + oy).tolist(), (zs + oz).tolist(), levels[mask].tolist()))


class LightingEngine(object):
    """ Full and incremental block/sky lighting for single chunks.

    Sky light is a top-down column pass. Block light comes from emitting
    blocks (and sky-lit cells) flooded through transparent cells by
    propagate_block_light. Nothing crosses chunk boundaries.
    """
    def calculate_chunk_lighting(self, chunk):
        t0 = time.perf_counter()
        # Sky pass
        chunk.calculate_lighting()
        light = chunk.light_grid()
        sky = light >> 4
        seeds = _seed_nodes(sky > 0, sky)
        # Emission pass
        emission = BLOCK_LIGHT_LEVELS[chunk.grid()]
        emitters = emission > 0
        light[emitters] = (light[emitters] & 0xF0) | emission[emitters]
        seeds += _seed_nodes(emitters, emission)
        # Relaxation
        chunk.light_levels[:] = propagate_block_light(chunk.blocks, chunk.light_levels, seeds)
        logutil.log('LIGHT', 'chunk %s lit from %d seeds in %.1f ms' % (tuple(chunk.coordinate),
            len(seeds), (time.perf_counter() - t0) * 1000.0), level='DEBUG')

    def on_block_placed(self, chunk, x, y, z, prior_light=None):
        """ Update lighting after a block was placed at (x, y, z). Only the cube
        whose radius is the cell's previous light level is recomputed, so
        changes further out are not corrected.

        `prior_light` is the packed light the cell had before the placement;
        by default it is read from the chunk.
        """
        if not in_bounds(x, y, z):
            return
        prior = chunk.get_light_level(x, y, z) if prior_light is None else prior_light
        radius = max(prior >> 4, prior & 0x0F)
        chunk.set_light_level(x, y, z, 0)
        self.recalculate_area(chunk, x, y, z, radius)

    def on_block_removed(self, chunk, x, y, z, removed):
        """Update lighting after `removed` was taken out of (x, y, z)."""
        if not in_bounds(x, y, z):
            return
        emission = BlockType(removed).light_level
        if emission > 0:
            self.recalculate_area(chunk, x, y, z, emission)
        self.recalculate_sky_column(chunk, x, z)
        brightest = 0
        for dx, dy, dz in NEIGHBORS:
            brightest = max(brightest, chunk.get_block_light(x + dx, y + dy, z + dz))
        if brightest - 1 > 0:
            chunk.set_block_light(x, y, z, brightest - 1)
            chunk.light_levels[:] = propagate_block_light(chunk.blocks, chunk.light_levels,
                [LightNode(x, y, z, brightest - 1)])

    def recalculate_area(self, chunk, x, y, z, radius):
        """ Reset block light in the cube of `radius` around (x, y, z) to each
        cell's own emission and flood it again from the emitters inside.

        """
        x0, x1 = max(x - radius, 0), min(x + radius, CHUNK_SIZE - 1) + 1
        y0, y1 = max(y - radius, 0), min(y + radius, CHUNK_HEIGHT - 1) + 1
        z0, z1 = max(z - radius, 0), min(z + radius, CHUNK_SIZE - 1) + 1
        light = chunk.light_grid()[y0:y1, z0:z1, x0:x1]
        emission = BLOCK_LIGHT_LEVELS[chunk.grid()[y0:y1, z0:z1, x0:x1]]
        light[...] = (light & 0xF0) | emission
        seeds = _seed_nodes(emission > 0, emission, (x0, y0, z0))
        if seeds:
            chunk.light_levels[:] = propagate_block_light(chunk.blocks, chunk.light_levels, seeds)

    def recalculate_sky_column(self, chunk, x, z):
        column = chunk.light_grid()[:, z, x]
        sky = sky_light_levels(chunk.grid()[:, z:z+1, x:x+1])[:, 0, 0]
        column[:] = (column & 0x0F) | (sky << 4)

    def calculate_ambient_occlusion(self, chunk, x, y, z):
        """ Brightness factor in [1 - AO_MAX_DARKEN, 1] for a point, from the
        share of non-transparent blocks in the 3x3x3 cells around it that lie
        inside the chunk.

        """
        bx, by, bz = int(math.floor(x)), int(math.floor(y)), int(math.floor(z))
        x0, x1 = max(bx - 1, 0), min(bx + 2, CHUNK_SIZE)
        y0, y1 = max(by - 1, 0), min(by + 2, CHUNK_HEIGHT)
        z0, z1 = max(bz - 1, 0), min(bz + 2, CHUNK_SIZE)
        if x0 >= x1 or y0 >= y1 or z0 >= z1:
            return 1.0
        region = chunk.grid()[y0:y1, z0:z1, x0:x1]
        opaque = int(numpy.count_nonzero(BLOCK_TRANSPARENT[region] == 0))
        return 1.0 - opaque / region.size * getattr(config, 'AO_MAX_DARKEN', 0.3)
