#std/external libs
import collections
import enum
import random
import time
import numpy

#local libs
from config import CHUNK_SIZE, CHUNK_HEIGHT, SEA_LEVEL, MIN_TERRAIN_HEIGHT, MAX_TERRAIN_HEIGHT
from blocks import BlockType, BLOCK_LIGHT_LEVELS
from chunk import Chunk, ChunkCoordinate
import simplex
import config
import logutil

AIR = int(BlockType.AIR)
STONE = int(BlockType.STONE)
GRASS = int(BlockType.GRASS)
DIRT = int(BlockType.DIRT)
SAND = int(BlockType.SAND)
WATER = int(BlockType.WATER)
LOG = int(BlockType.LOG)
LEAVES = int(BlockType.LEAVES)
TALL_GRASS = int(BlockType.TALL_GRASS)
DEAD_BUSH = int(BlockType.DEAD_BUSH)
COAL_ORE = int(BlockType.COAL_ORE)
IRON_ORE = int(BlockType.IRON_ORE)
GOLD_ORE = int(BlockType.GOLD_ORE)
DIAMOND_ORE = int(BlockType.DIAMOND_ORE)
REDSTONE_ORE = int(BlockType.REDSTONE_ORE)

SEED_MASK_32 = 0xFFFFFFFF
SEED_MASK_64 = (1 << 64) - 1


class Biome(enum.Enum):
    PLAINS = 'Plains'
    FOREST = 'Forest'
    DESERT = 'Desert'
    MOUNTAINS = 'Mountains'
    HILLS = 'Hills'
    SWAMP = 'Swamp'
    OCEAN = 'Ocean'

    @property
    def display_name(self):
        return self.value


# Biome codes used by the vectorised per-chunk maps are indices into this list.
BIOMES = list(Biome)

# Ordered decision list on (temperature, humidity); the first matching rule
# wins, anything left over is DEFAULT_BIOME. The predicates work on scalars and
# on numpy arrays alike.
BIOME_RULES = [
    (Biome.MOUNTAINS, lambda t, h: t < -0.5),
    (Biome.DESERT, lambda t, h: (t > 0.5) & (h < -0.3)),
    (Biome.SWAMP, lambda t, h: (t < 0.2) & (h > 0.3)),
    (Biome.OCEAN, lambda t, h: h < -0.6),
    (Biome.FOREST, lambda t, h: (t > 0.0) & (h > 0.0)),
    (Biome.HILLS, lambda t, h: t > 0.2),
]
DEFAULT_BIOME = Biome.PLAINS

BIOME_HEIGHT_MODIFIERS = {
    Biome.MOUNTAINS: 1.5,
    Biome.HILLS: 1.2,
    Biome.PLAINS: 0.8,
    Biome.DESERT: 0.9,
    Biome.FOREST: 1.0,
    Biome.SWAMP: 0.6,
    Biome.OCEAN: 0.3,
}
SURFACE_BLOCKS = dict((b, GRASS) for b in Biome)
SURFACE_BLOCKS.update({Biome.DESERT: SAND, Biome.OCEAN: DIRT, Biome.SWAMP: DIRT})
SUBSURFACE_BLOCKS = dict((b, DIRT) for b in Biome)
SUBSURFACE_BLOCKS[Biome.DESERT] = SAND

HEIGHT_MODIFIER_TABLE = numpy.array([BIOME_HEIGHT_MODIFIERS[b] for b in BIOMES])
SURFACE_TABLE = numpy.array([SURFACE_BLOCKS[b] for b in BIOMES], dtype=numpy.uint8)
SUBSURFACE_TABLE = numpy.array([SUBSURFACE_BLOCKS[b] for b in BIOMES], dtype=numpy.uint8)

# Placed in this order, all drawing from the same per-chunk random stream.
# y range is [min_y, max_y).
ORE_SETTINGS = [
    {'block': COAL_ORE, 'min_y': 10, 'max_y': 70, 'frequency': 0.02, 'vein_size': 8},
    {'block': IRON_ORE, 'min_y': 5, 'max_y': 50, 'frequency': 0.015, 'vein_size': 6},
    {'block': GOLD_ORE, 'min_y': 5, 'max_y': 35, 'frequency': 0.008, 'vein_size': 4},
    {'block': DIAMOND_ORE, 'min_y': 1, 'max_y': 16, 'frequency': 0.003, 'vein_size': 3},
    {'block': REDSTONE_ORE, 'min_y': 1, 'max_y': 20, 'frequency': 0.01, 'vein_size': 5},
]

VEIN_STEPS = ((1, 0, 0), (-1, 0, 0), (0, 1, 0), (0, -1, 0), (0, 0, 1), (0, 0, -1))
VEIN_TRAVERSALS = ('stack', 'queue')


def classify_biome(temperature, humidity):
    for biome, rule in BIOME_RULES:
        if rule(temperature, humidity):
            return biome
    return DEFAULT_BIOME


def classify_biome_codes(temperature, humidity):
    """Vectorised classify_biome; returns indices into BIOMES."""
    conditions = [rule(temperature, humidity) for _, rule in BIOME_RULES]
    choices = [BIOMES.index(biome) for biome, _ in BIOME_RULES]
    return numpy.select(conditions, choices, default=BIOMES.index(DEFAULT_BIOME))


def chunk_seed(seed, coordinate):
    """Seed of the per-chunk random stream shared by the ore and feature passes."""
    world_x, world_z = ChunkCoordinate(*coordinate).world_position()
    return (seed + (world_x << 32) + world_z) & SEED_MASK_64


class ChunkNoise2D(object):
    """2D simplex field sampled over the columns of one chunk, indexed [z, x]."""
    def __init__(self, noise, freq_x, freq_z=None):
        self.noise = noise
        if freq_z is None:
            freq_z = freq_x
        self.freq = numpy.array([freq_x, freq_z])
        Z = numpy.mgrid[0:CHUNK_SIZE, 0:CHUNK_SIZE].T
        shape = Z.shape
        self.Z = Z.reshape((shape[0]*shape[1], 2))

    def __call__(self, coordinate):
        world_x, world_z = coordinate.world_position()
        Z = (self.Z + numpy.array([world_x, world_z])) * self.freq
        return self.noise.noise(Z).reshape((CHUNK_SIZE, CHUNK_SIZE))


class ChunkNoise3D(object):
    """3D simplex field over the y band [y0, y1) of one chunk, indexed [y - y0, z, x]."""
    def __init__(self, noise, freq, vertical_stretch, y0, y1):
        self.noise = noise
        self.y0 = y0
        self.y1 = y1
        self.freq = numpy.array([freq, freq * vertical_stretch, freq])
        Y, Zs, X = numpy.mgrid[y0:y1, 0:CHUNK_SIZE, 0:CHUNK_SIZE]
        self.Z = numpy.stack([X, Y, Zs], axis=-1).reshape((-1, 3))

    def __call__(self, coordinate):
        world_x, world_z = coordinate.world_position()
        Z = (self.Z + numpy.array([world_x, 0, world_z])) * self.freq
        return self.noise.noise(Z).reshape((self.y1 - self.y0, CHUNK_SIZE, CHUNK_SIZE))


class WorldGenerator(object):
    """ Deterministic chunk generator. The same seed and chunk coordinate
    always produce identical block, height and light arrays.

    Pipeline: terrain, caves, ores, surface features, chunk-local lighting.
    """
    def __init__(self, seed=None, vein_traversal=None):
        if seed is None:
            seed = config.DEFAULT_SEED
        self.seed = seed
        if vein_traversal is None:
            vein_traversal = getattr(config, 'ORE_VEIN_TRAVERSAL', 'stack')
        if vein_traversal not in VEIN_TRAVERSALS:
            raise ValueError('unknown ore vein traversal %r' % (vein_traversal,))
        self.vein_traversal = vein_traversal

        self.terrain_noise = simplex.SimplexNoise(seed=(seed + 0) & SEED_MASK_32)
        self.cave_noise = simplex.SimplexNoise(seed=(seed + 1) & SEED_MASK_32)
        # Reserved for noise-driven ore placement; ores currently use the chunk RNG.
        self.ore_noise = simplex.SimplexNoise(seed=(seed + 2) & SEED_MASK_32)
        self.temperature_noise = simplex.SimplexNoise(seed=(seed + 3) & SEED_MASK_32)
        self.humidity_noise = simplex.SimplexNoise(seed=(seed + 4) & SEED_MASK_32)

        scale = getattr(config, 'TERRAIN_SCALE', 0.01)
        self.terrain_octaves = [(weight, ChunkNoise2D(self.terrain_noise, scale * mult))
            for weight, mult in config.TERRAIN_OCTAVES]
        biome_scale = getattr(config, 'BIOME_SCALE', 0.005)
        stretch_x, stretch_z = getattr(config, 'HUMIDITY_STRETCH', (1.3, 1.7))
        self.temperature = ChunkNoise2D(self.temperature_noise, biome_scale)
        self.humidity = ChunkNoise2D(self.humidity_noise, biome_scale * stretch_x, biome_scale * stretch_z)
        self.caves = ChunkNoise3D(self.cave_noise, config.CAVE_SCALE, config.CAVE_VERTICAL_STRETCH,
            config.CAVE_MIN_Y, config.CAVE_MAX_Y)

    # ----- Point queries -----

    def get_biome(self, x, z):
        """Biome of the world column (x, z)."""
        biome_scale = getattr(config, 'BIOME_SCALE', 0.005)
        stretch_x, stretch_z = getattr(config, 'HUMIDITY_STRETCH', (1.3, 1.7))
        t = float(self.temperature_noise.sample(x * biome_scale, z * biome_scale))
        h = float(self.humidity_noise.sample(x * (biome_scale * stretch_x), z * (biome_scale * stretch_z)))
        return classify_biome(t, h)

    def get_terrain_height(self, x, z, biome=None):
        if biome is None:
            biome = self.get_biome(x, z)
        scale = getattr(config, 'TERRAIN_SCALE', 0.01)
        n = sum(weight * float(self.terrain_noise.sample(x * (scale * mult), z * (scale * mult)))
            for weight, mult in config.TERRAIN_OCTAVES)
        return int(self._scale_height(n, BIOME_HEIGHT_MODIFIERS[biome]))

    def _scale_height(self, n, modifier):
        normalized = (n + 1.0) * 0.5
        height = MIN_TERRAIN_HEIGHT + normalized * (MAX_TERRAIN_HEIGHT - MIN_TERRAIN_HEIGHT) * modifier
        return numpy.clip(height, MIN_TERRAIN_HEIGHT, MAX_TERRAIN_HEIGHT)

    # ----- Per-chunk maps -----

    def biome_codes(self, coordinate):
        """(z, x) array of indices into BIOMES for the chunk's columns."""
        return classify_biome_codes(self.temperature(coordinate), self.humidity(coordinate))

    def terrain_heights(self, coordinate, codes):
        n = sum(weight * field(coordinate) for weight, field in self.terrain_octaves)
        return self._scale_height(n, HEIGHT_MODIFIER_TABLE[codes]).astype(numpy.int64)

    # ----- Passes -----

    def generate_terrain(self, chunk, codes):
        heights = self.terrain_heights(chunk.coordinate, codes)
        depth = getattr(config, 'SUBSURFACE_DEPTH', 3)
        y = numpy.arange(CHUNK_HEIGHT)[:, None, None]
        h = heights[None, :, :]
        blocks = numpy.where(y == h, SURFACE_TABLE[codes][None, :, :], AIR)
        blocks = numpy.where((y >= h - depth) & (y < h), SUBSURFACE_TABLE[codes][None, :, :], blocks)
        blocks = numpy.where(y < h - depth, STONE, blocks)
        blocks = numpy.where((y > h) & (y <= SEA_LEVEL), WATER, blocks)
        blocks[0] = STONE
        chunk.grid()[...] = blocks
        return heights

    def generate_caves(self, chunk):
        band = chunk.grid()[self.caves.y0:self.caves.y1]
        carve = self.caves(chunk.coordinate) > config.CAVE_THRESHOLD
        carve &= (band == STONE) | (band == DIRT)
        band[carve] = AIR

    def generate_ores(self, chunk, rng=None):
        if rng is None:
            rng = random.Random(chunk_seed(self.seed, chunk.coordinate))
        attempts = getattr(config, 'ORE_ATTEMPTS_PER_CHUNK', CHUNK_SIZE * CHUNK_SIZE // 64)
        for setting in ORE_SETTINGS:
            for _ in range(attempts):
                if rng.random() < setting['frequency']:
                    x = rng.randrange(CHUNK_SIZE)
                    z = rng.randrange(CHUNK_SIZE)
                    y = rng.randrange(setting['min_y'], setting['max_y'])
                    self.place_ore_vein(chunk, x, y, z, setting['block'], setting['vein_size'], rng)

    def place_ore_vein(self, chunk, x, y, z, ore, max_size, rng, traversal=None):
        """ Grow a vein of `ore` through stone from (x, y, z) and return the
        number of blocks placed.

        Each placed block spreads to its six axis neighbours with probability
        ORE_SPREAD_CHANCE. `traversal` picks the frontier order: 'stack' grows
        stringy depth-first veins, 'queue' rounder breadth-first ones.
        """
        if traversal is None:
            traversal = self.vein_traversal
        if traversal not in VEIN_TRAVERSALS:
            raise ValueError('unknown ore vein traversal %r' % (traversal,))
        spread = getattr(config, 'ORE_SPREAD_CHANCE', 0.6)
        frontier = collections.deque([(x, y, z)])
        take = frontier.pop if traversal == 'stack' else frontier.popleft
        placed = 0
        while frontier and placed < max_size:
            x, y, z = take()
            # Out of range cells read as air, so this also skips them.
            if chunk.get_block(x, y, z) != STONE:
                continue
            chunk.set_block(x, y, z, ore)
            placed += 1
            if rng.random() < spread:
                for dx, dy, dz in VEIN_STEPS:
                    nx, ny, nz = x + dx, y + dy, z + dz
                    if nx >= 0 and ny >= 0 and nz >= 0:
                        frontier.append((nx, ny, nz))
        return placed

    def generate_surface_features(self, chunk, codes, rng=None):
        if rng is None:
            rng = random.Random(chunk_seed(self.seed, chunk.coordinate))
        grid = chunk.grid()
        for x in range(CHUNK_SIZE):
            for z in range(CHUNK_SIZE):
                # Scanned on the live grid: leaves from earlier trees count as ground.
                y = surface_level(grid, x, z)
                if y is None or y >= CHUNK_HEIGHT - 1:
                    continue
                biome = BIOMES[codes[z, x]]
                if biome is Biome.FOREST:
                    if rng.random() < config.TREE_CHANCE:
                        self.place_tree(chunk, x, y + 1, z, rng)
                    elif rng.random() < config.FOREST_GRASS_CHANCE:
                        chunk.set_block(x, y + 1, z, TALL_GRASS)
                elif biome is Biome.PLAINS:
                    if rng.random() < config.PLAINS_GRASS_CHANCE:
                        chunk.set_block(x, y + 1, z, TALL_GRASS)
                elif biome is Biome.DESERT:
                    if rng.random() < config.DEAD_BUSH_CHANCE:
                        chunk.set_block(x, y + 1, z, DEAD_BUSH)

    def place_tree(self, chunk, x, y, z, rng):
        """Log trunk of 4-7 blocks starting at y, with a leaf canopy around its top."""
        height = rng.randrange(4, 8)
        for dy in range(height):
            chunk.set_block(x, y + dy, z, LOG)
        top = y + height
        for leaf_y in range(top - 3, top + 2):
            if leaf_y >= CHUNK_HEIGHT:
                break
            radius = 1 if leaf_y >= top else 2
            for dx in range(-radius, radius + 1):
                for dz in range(-radius, radius + 1):
                    lx, lz = x + dx, z + dz
                    if not (0 <= lx < CHUNK_SIZE and 0 <= lz < CHUNK_SIZE):
                        continue
                    if dx*dx + dz*dz <= radius*radius and rng.random() < config.LEAF_CHANCE:
                        if chunk.get_block(lx, leaf_y, lz) == AIR:
                            chunk.set_block(lx, leaf_y, lz, LEAVES)

    def generate_lighting(self, chunk):
        # Terrain bypasses set_block, so give every cell the block light
        # set_block would have left (its own emission) before the sky pass.
        chunk.light_levels[:] = BLOCK_LIGHT_LEVELS[chunk.blocks]
        chunk.calculate_lighting()

    def generate_chunk(self, coordinate):
        t0 = time.perf_counter()
        chunk = Chunk(coordinate)
        codes = self.biome_codes(chunk.coordinate)
        self.generate_terrain(chunk, codes)
        self.generate_caves(chunk)
        chunk.update_height_map()
        self.generate_ores(chunk)
        self.generate_surface_features(chunk, codes)
        self.generate_lighting(chunk)
        chunk.mark_clean()
        logutil.log('MAPGEN', 'chunk %s generated in %.1f ms' % (tuple(chunk.coordinate),
            (time.perf_counter() - t0) * 1000.0), level='DEBUG')
        return chunk


def surface_level(grid, x, z):
    """Topmost y in column (x, z) that is neither air nor water, or None."""
    column = grid[:, z, x]
    ys = numpy.flatnonzero((column != AIR) & (column != WATER))
    if len(ys) == 0:
        return None
    return int(ys[-1])


_generator = None

def generate_chunk(seed, coordinate):
    """Generate the chunk at `coordinate` for world `seed`."""
    global _generator
    if _generator is None or _generator.seed != seed:
        _generator = WorldGenerator(seed)
    return _generator.generate_chunk(ChunkCoordinate(*coordinate))


if __name__ == '__main__':
    gen = WorldGenerator(42)
    t = time.time()
    chunks = [gen.generate_chunk(ChunkCoordinate(x, z)) for x in range(-2, 2) for z in range(-2, 2)]
    print('generated', len(chunks), 'chunks in', time.time() - t)
    for c in chunks[:4]:
        heights = c.height_map.reshape((CHUNK_SIZE, CHUNK_SIZE))
        ores = numpy.isin(c.blocks, [s['block'] for s in ORE_SETTINGS]).sum()
        print(tuple(c.coordinate), 'height', heights.min(), heights.max(), 'ores', ores,
            'biome', gen.get_biome(*c.coordinate.world_position()).display_name)
