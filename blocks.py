import enum
import numpy

from config import MAX_LIGHT


class BlockType(enum.IntEnum):
    """Every block kind in the world. The value is the id stored in chunk arrays."""
    AIR = 0
    STONE = 1
    GRASS = 2
    DIRT = 3
    COBBLESTONE = 4
    WOOD = 5
    SAND = 6
    GRAVEL = 7
    COAL_ORE = 8
    IRON_ORE = 9
    GOLD_ORE = 10
    DIAMOND_ORE = 11
    REDSTONE_ORE = 12
    LAPIS_ORE = 13
    EMERALD_ORE = 14
    LEAVES = 15
    LOG = 16
    CACTUS = 17
    DEAD_BUSH = 18
    TALL_GRASS = 19
    FLOWER = 20
    MUSHROOM = 21
    WATER = 22
    LAVA = 23
    PLANKS = 24
    GLASS = 25
    BRICK = 26
    MOSSY_COBBLESTONE = 27
    OBSIDIAN = 28
    REDSTONE = 29
    REDSTONE_TORCH = 30
    REDSTONE_WIRE = 31
    LEVER = 32
    BUTTON = 33
    PRESSURE_PLATE = 34
    CHEST = 35
    FURNACE = 36
    CRAFTING_TABLE = 37
    BED = 38
    DOOR = 39
    LADDER = 40
    TORCH = 41
    WOOL = 42
    CLAY = 43
    SANDSTONE = 44
    NETHERRACK = 45
    SOUL_SAND = 46
    GLOWSTONE = 47

    @property
    def block(self):
        return BLOCKS[self]

    @property
    def display_name(self):
        return self.block.name

    @property
    def is_solid(self):
        return self.block.solid

    @property
    def is_transparent(self):
        return self.block.transparent

    @property
    def light_level(self):
        return self.block.light

    @property
    def hardness(self):
        return self.block.hardness

    @property
    def mining_time(self):
        return self.block.mining_time

    @property
    def explosion_resistance(self):
        return self.block.explosion_resistance

    @property
    def is_replaceable(self):
        return self.block.replaceable

    @property
    def needs_support(self):
        return self.block.needs_support

    @property
    def is_affected_by_gravity(self):
        return self.block.falls

    @property
    def can_mine_by_hand(self):
        return self.block.mine_by_hand

    def drops(self):
        """ Return a list of (BlockType, count) pairs produced by mining this block.

        """
        drops = self.block.drops
        if drops is None:
            return [(self, 1)]
        return list(drops)

    def id(self):
        """ Legacy numeric id used by the old save and network formats. Only a
        subset of kinds have one; the rest report 255.

        """
        return self.block.legacy_id

    @classmethod
    def from_id(cls, legacy_id):
        """ Inverse of `id`, or None for ids without a block. Wood and Planks
        share id 5, which maps back to Wood.

        """
        return LEGACY_IDS.get(legacy_id)


class Block(object):
    kind = None
    name = None
    solid = True
    # Light passes through transparent blocks (sky light and flood fill).
    transparent = False
    # Emitted block light, 0-15.
    light = 0
    hardness = 1.0
    mining_time = 1.0
    explosion_resistance = 15.0
    # Placing a block may overwrite a replaceable one without mining it first.
    replaceable = False
    # Needs a block underneath it to stay in place.
    needs_support = False
    # Falls when unsupported.
    falls = False
    mine_by_hand = True
    # None drops the block itself.
    drops = None
    legacy_id = 255

class Plant(Block):
    solid = False
    transparent = True
    replaceable = True
    needs_support = True
    hardness = 0.0
    mining_time = 0.1
    explosion_resistance = 0.0

class Ore(Block):
    mine_by_hand = False
    hardness = 3.0
    mining_time = 4.0

class Air(Block):
    kind = BlockType.AIR
    name = 'Air'
    solid = False
    transparent = True
    replaceable = True
    hardness = 0.0
    mining_time = 0.0
    explosion_resistance = 0.0
    legacy_id = 0

class Stone(Block):
    kind = BlockType.STONE
    name = 'Stone'
    hardness = 1.5
    mining_time = 1.5
    explosion_resistance = 30.0
    mine_by_hand = False
    drops = ((BlockType.COBBLESTONE, 1),)
    legacy_id = 1

class Grass(Block):
    kind = BlockType.GRASS
    name = 'Grass Block'
    drops = ((BlockType.DIRT, 1),)
    legacy_id = 2

class Dirt(Block):
    kind = BlockType.DIRT
    name = 'Dirt'
    hardness = 0.5
    mining_time = 0.5
    explosion_resistance = 2.5
    legacy_id = 3

class Cobblestone(Block):
    kind = BlockType.COBBLESTONE
    name = 'Cobblestone'
    hardness = 2.0
    mining_time = 1.5
    explosion_resistance = 30.0
    mine_by_hand = False
    legacy_id = 4

class Wood(Block):
    kind = BlockType.WOOD
    name = 'Wood'
    hardness = 2.0
    mining_time = 0.75
    legacy_id = 5

class Sand(Block):
    kind = BlockType.SAND
    name = 'Sand'
    hardness = 0.5
    mining_time = 0.5
    explosion_resistance = 2.5
    falls = True
    legacy_id = 12

class Gravel(Block):
    kind = BlockType.GRAVEL
    name = 'Gravel'
    hardness = 0.5
    mining_time = 0.5
    explosion_resistance = 2.5
    falls = True
    legacy_id = 13

class CoalOre(Ore):
    kind = BlockType.COAL_ORE
    name = 'Coal Ore'
    mining_time = 3.0
    drops = ((BlockType.REDSTONE, 1),)
    legacy_id = 16

class IronOre(Ore):
    kind = BlockType.IRON_ORE
    name = 'Iron Ore'
    mining_time = 3.0
    legacy_id = 15

class GoldOre(Ore):
    kind = BlockType.GOLD_ORE
    name = 'Gold Ore'
    legacy_id = 14

class DiamondOre(Ore):
    kind = BlockType.DIAMOND_ORE
    name = 'Diamond Ore'
    drops = ((BlockType.REDSTONE, 1),)
    legacy_id = 56

class RedstoneOre(Ore):
    kind = BlockType.REDSTONE_ORE
    name = 'Redstone Ore'
    hardness = 1.0
    mining_time = 1.0
    drops = ((BlockType.REDSTONE, 4),)
    legacy_id = 73

class LapisOre(Ore):
    kind = BlockType.LAPIS_ORE
    name = 'Lapis Lazuli Ore'
    hardness = 1.0
    mining_time = 1.0
    legacy_id = 21

class EmeraldOre(Ore):
    kind = BlockType.EMERALD_ORE
    name = 'Emerald Ore'
    hardness = 1.0
    mining_time = 1.0
    legacy_id = 129

class Leaves(Block):
    kind = BlockType.LEAVES
    name = 'Leaves'
    transparent = True
    mining_time = 0.75
    drops = ()
    legacy_id = 18

class Log(Block):
    kind = BlockType.LOG
    name = 'Log'
    legacy_id = 17

class Cactus(Block):
    kind = BlockType.CACTUS
    name = 'Cactus'

class DeadBush(Plant):
    kind = BlockType.DEAD_BUSH
    name = 'Dead Bush'

class TallGrass(Plant):
    kind = BlockType.TALL_GRASS
    name = 'Tall Grass'
    drops = ()

class Flower(Plant):
    kind = BlockType.FLOWER
    name = 'Flower'

class Mushroom(Plant):
    kind = BlockType.MUSHROOM
    name = 'Mushroom'

class Water(Block):
    kind = BlockType.WATER
    name = 'Water'
    solid = False
    transparent = True
    replaceable = True
    legacy_id = 8

class Lava(Block):
    kind = BlockType.LAVA
    name = 'Lava'
    solid = False
    light = 15
    legacy_id = 10

class Planks(Block):
    kind = BlockType.PLANKS
    name = 'Wooden Planks'
    hardness = 2.0
    mining_time = 0.75
    legacy_id = 5

class Glass(Block):
    kind = BlockType.GLASS
    name = 'Glass'
    transparent = True
    legacy_id = 20

class Brick(Block):
    kind = BlockType.BRICK
    name = 'Brick'

class MossyCobblestone(Block):
    kind = BlockType.MOSSY_COBBLESTONE
    name = 'Mossy Cobblestone'

class Obsidian(Block):
    kind = BlockType.OBSIDIAN
    name = 'Obsidian'
    hardness = 50.0
    mining_time = 15.0
    explosion_resistance = 6000.0
    mine_by_hand = False

class Redstone(Block):
    kind = BlockType.REDSTONE
    name = 'Redstone'

class RedstoneTorch(Block):
    kind = BlockType.REDSTONE_TORCH
    name = 'Redstone Torch'
    solid = False
    transparent = True
    light = 7
    needs_support = True
    mining_time = 0.1

class RedstoneWire(Block):
    kind = BlockType.REDSTONE_WIRE
    name = 'Redstone Wire'
    solid = False
    transparent = True
    mining_time = 0.1

class Lever(Block):
    kind = BlockType.LEVER
    name = 'Lever'

class Button(Block):
    kind = BlockType.BUTTON
    name = 'Button'

class PressurePlate(Block):
    kind = BlockType.PRESSURE_PLATE
    name = 'Pressure Plate'

class Chest(Block):
    kind = BlockType.CHEST
    name = 'Chest'

class Furnace(Block):
    kind = BlockType.FURNACE
    name = 'Furnace'

class CraftingTable(Block):
    kind = BlockType.CRAFTING_TABLE
    name = 'Crafting Table'

class Bed(Block):
    kind = BlockType.BED
    name = 'Bed'

class Door(Block):
    kind = BlockType.DOOR
    name = 'Door'

class Ladder(Block):
    kind = BlockType.LADDER
    name = 'Ladder'

class Torch(Block):
    kind = BlockType.TORCH
    name = 'Torch'
    solid = False
    transparent = True
    light = 14
    needs_support = True
    mining_time = 0.1
    legacy_id = 50

class Wool(Block):
    kind = BlockType.WOOL
    name = 'Wool'

class Clay(Block):
    kind = BlockType.CLAY
    name = 'Clay'

class Sandstone(Block):
    kind = BlockType.SANDSTONE
    name = 'Sandstone'

class Netherrack(Block):
    kind = BlockType.NETHERRACK
    name = 'Netherrack'

class SoulSand(Block):
    kind = BlockType.SOUL_SAND
    name = 'Soul Sand'

class Glowstone(Block):
    kind = BlockType.GLOWSTONE
    name = 'Glowstone'
    light = 15

# Explicit ordering keeps the list index equal to the stored block id.
BLOCKS = [
    Air,
    Stone,
    Grass,
    Dirt,
    Cobblestone,
    Wood,
    Sand,
    Gravel,
    CoalOre,
    IronOre,
    GoldOre,
    DiamondOre,
    RedstoneOre,
    LapisOre,
    EmeraldOre,
    Leaves,
    Log,
    Cactus,
    DeadBush,
    TallGrass,
    Flower,
    Mushroom,
    Water,
    Lava,
    Planks,
    Glass,
    Brick,
    MossyCobblestone,
    Obsidian,
    Redstone,
    RedstoneTorch,
    RedstoneWire,
    Lever,
    Button,
    PressurePlate,
    Chest,
    Furnace,
    CraftingTable,
    Bed,
    Door,
    Ladder,
    Torch,
    Wool,
    Clay,
    Sandstone,
    Netherrack,
    SoulSand,
    Glowstone,
]
for i, x in enumerate(BLOCKS):
    assert x.kind == i, x.name
    assert 0 <= x.light <= MAX_LIGHT, x.name

# Stored id -> BlockType without going through the enum constructor.
BLOCK_TYPES = tuple(x.kind for x in BLOCKS)
BLOCK_ID = dict((x.name, int(x.kind)) for x in BLOCKS)
BLOCK_SOLID = numpy.array([x.solid for x in BLOCKS], dtype=numpy.uint8)
BLOCK_TRANSPARENT = numpy.array([x.transparent for x in BLOCKS], dtype=numpy.uint8)
BLOCK_LIGHT_LEVELS = numpy.array([x.light for x in BLOCKS], dtype=numpy.uint8)

# Legacy id -> BlockType. On a shared id the earlier block in BLOCKS wins.
LEGACY_IDS = {}
for x in BLOCKS:
    if x.legacy_id != 255 and x.legacy_id not in LEGACY_IDS:
        LEGACY_IDS[x.legacy_id] = x.kind
