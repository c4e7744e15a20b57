from .adjacency import AdjacencyModel
from .errors import ConfigError
from .weights import WeightTable

BIOME_TILES = {
    "Forest": {
        "neighbors": ["Forest", "Plains", "Swamp", "Mountain", "Jungle", "Savanna"],
        "color": (34, 139, 34),
    },
    "Desert": {
        "neighbors": ["Desert", "Savanna", "Plains", "Mountain"],
        "color": (237, 201, 175),
    },
    "Tundra": {
        "neighbors": ["Tundra", "Ice", "Mountain", "Plains"],
        "color": (176, 196, 196),
    },
    "Plains": {
        "neighbors": ["Forest", "Plains", "Desert", "Swamp", "Savanna", "Tundra"],
        "color": (124, 200, 80),
    },
    "Swamp": {
        "neighbors": ["Forest", "Swamp", "Plains"],
        "color": (85, 107, 47),
    },
    "Mountain": {
        "neighbors": ["Forest", "Mountain", "Tundra", "Desert", "Plains"],
        "color": (139, 137, 137),
    },
    "Jungle": {
        "neighbors": ["Forest", "Jungle", "Swamp", "Plains"],
        "color": (0, 100, 0),
    },
    "Savanna": {
        "neighbors": ["Desert", "Plains", "Forest", "Savanna"],
        "color": (210, 180, 90),
    },
    "Ice": {
        "neighbors": ["Tundra", "Ice"],
        "color": (224, 255, 255),
    },
}

# trees only border grass, grass borders both
FOREST_TILES = {
    "grass": {
        "neighbors": ["grass", "tree"],
        "color": (106, 190, 48),
        "weight": 0.3,
    },
    "tree": {
        "neighbors": ["grass"],
        "color": (20, 90, 30),
        "weight": 0.7,
    },
}

PRESETS = {
    "biomes": {"tiles": BIOME_TILES, "neighbor_bonus": 0.0},
    "forest": {"tiles": FOREST_TILES, "neighbor_bonus": 0.5},
}


def get_preset(name: str) -> dict:
    try:
        return PRESETS[name]
    except KeyError:
        raise ConfigError(f"Unknown preset {name!r}, expected one of {sorted(PRESETS)}") from None


def create_adjacency_model(name: str = "biomes") -> AdjacencyModel:
    return AdjacencyModel.from_tiles(get_preset(name)["tiles"])


def preset_weights(name: str = "biomes") -> WeightTable:
    tiles = get_preset(name)["tiles"]
    return WeightTable({tile: data["weight"] for tile, data in tiles.items() if "weight" in data})


def print_adjacency_compatibility(name: str = "biomes"):
    for tile, data in get_preset(name)["tiles"].items():
        print(f"{tile}: {data['neighbors']}")
