# Size of chunks, the unit of storage, generation and streaming.
CHUNK_SIZE = 16 #width and depth (x and z)
CHUNK_HEIGHT = 256 #height of world (y)
CHUNK_AREA = CHUNK_SIZE * CHUNK_SIZE
CHUNK_VOLUME = CHUNK_AREA * CHUNK_HEIGHT

# Terrain generation
SEA_LEVEL = 64
MIN_TERRAIN_HEIGHT = 30
MAX_TERRAIN_HEIGHT = 120
TERRAIN_SCALE = 0.01
# Octave (weight, frequency multiplier) pairs for the terrain height field.
TERRAIN_OCTAVES = ((0.5, 1.0), (0.25, 2.0), (0.125, 4.0))
SUBSURFACE_DEPTH = 3

# Biome climate sampling. Humidity is stretched differently per axis so the
# two climate fields don't line up.
BIOME_SCALE = 0.005
HUMIDITY_STRETCH = (1.3, 1.7)

# Caves
CAVE_SCALE = 0.02
CAVE_VERTICAL_STRETCH = 2.0
CAVE_THRESHOLD = 0.4
CAVE_MIN_Y = 5
CAVE_MAX_Y = 80

# Ores
ORE_ATTEMPTS_PER_CHUNK = CHUNK_AREA // 64
ORE_SPREAD_CHANCE = 0.6
# 'stack' grows stringy depth-first veins, 'queue' grows rounder breadth-first ones.
ORE_VEIN_TRAVERSAL = 'stack'

# Surface decoration
TREE_CHANCE = 0.1
FOREST_GRASS_CHANCE = 0.3
PLAINS_GRASS_CHANCE = 0.2
DEAD_BUSH_CHANCE = 0.02
LEAF_CHANCE = 0.8

# World and streaming
DEFAULT_SEED = 12345
DEFAULT_RENDER_DISTANCE = 8
MIN_RENDER_DISTANCE = 1
MAX_RENDER_DISTANCE = 32
# Extra chunks kept beyond the render distance before unloading (hysteresis).
UNLOAD_MARGIN = 2
SPAWN_POINT = (0.0, 100.0, 0.0)

# Lighting settings
MAX_LIGHT = 15
# Run the full flood-fill engine over every newly generated chunk instead of
# only the chunk-local sky pass.
FULL_LIGHTING_ON_LOAD = False
# Let World.set_block_at drive the engine's incremental place/remove updates.
INCREMENTAL_LIGHTING = False
# Ambient occlusion darkens by at most this fraction.
AO_MAX_DARKEN = 0.3

# Ray casting
RAYCAST_STEP = 0.1

# Enable ANSI colors in logs.
LOG_COLOR = True

# Log chunk load/unload counts and timings.
LOG_STREAMING = True

# Log per-chunk generation timings (noisy at large render distances).
LOG_GENERATION = False

# Log lighting engine pass timings.
LOG_LIGHTING = False
