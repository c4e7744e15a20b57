import argparse
from timeit import default_timer as timer

from tilegen.biome_adjacency_rules import PRESETS, print_adjacency_compatibility
from tilegen.config import GenerationConfig, load_config
from tilegen.errors import ConfigError, WFCError
from tilegen.logging_config import setup_logging
from tilegen.regions import generate_regions
from tilegen.wfc import FallbackPolicy

SCREEN_WIDTH = 640
SCREEN_HEIGHT = 480


def format_grid(labels, width: int = 3) -> str:
    """Text map: the first ``width`` letters of each label, '?' for undecided cells."""
    rows = []
    for row in labels:
        rows.append(" ".join((label or "?")[:width].ljust(width) for label in row))
    return "\n".join(rows)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Generate a tile map with simplified WFC")
    parser.add_argument("--config", type=str, default=None, help="YAML generation config")
    parser.add_argument("--preset", type=str, choices=sorted(PRESETS), default=None)
    parser.add_argument("--width", type=int, default=None)
    parser.add_argument("--height", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument(
        "--fallback",
        type=str,
        choices=[p.value for p in FallbackPolicy],
        default=None,
        help="Label used to resolve contradictions",
    )
    parser.add_argument("--regions", type=int, default=None, help="Number of independent grids")
    parser.add_argument("--processes", type=int, default=None)
    parser.add_argument("--no-render", action="store_true", help="Print the map instead of opening a window")
    parser.add_argument("--show-rules", action="store_true", help="Print the preset adjacency rules")
    parser.add_argument("--log-level", type=str, default="WARNING")
    parser.add_argument("--log-file", type=str, default=None)
    return parser.parse_args(argv)


def build_config(args) -> GenerationConfig:
    config = load_config(args.config) if args.config else GenerationConfig()
    if args.preset is not None and config.tiles is not None:
        raise ConfigError(f"--preset {args.preset} conflicts with the inline tiles in {args.config}")
    overrides = {
        "preset": args.preset,
        "width": args.width,
        "height": args.height,
        "seed": args.seed,
        "fallback": args.fallback,
        "regions": args.regions,
    }
    data = config.to_dict()
    data.update({k: v for k, v in overrides.items() if v is not None})
    return GenerationConfig.from_dict(data)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level.upper(), log_file=args.log_file)

    try:
        config = build_config(args)
    except WFCError as e:
        print(f"Error: {e}")
        return 1

    if args.show_rules:
        if config.tiles is not None:
            for tile, data in config.tiles.items():
                print(f"{tile}: {data.get('neighbors', [])}")
        else:
            print_adjacency_compatibility(config.preset)

    start_time = timer()
    try:
        results = generate_regions(config, processes=args.processes, progress=config.regions > 1)
    except WFCError as e:
        print(f"Error: {e}")
        return 1
    print(f"Generated {len(results)} region(s) in {timer() - start_time:.2f} seconds")

    for i, result in enumerate(results):
        print(
            f"Region {i}: {result.steps} collapse steps, "
            f"{result.fallback_count} fallback resolutions, {len(result.conflicts)} conflicts"
        )
        if args.no_render:
            print(format_grid(result.labels()))

    if not args.no_render:
        # pygame is only needed for the window
        from tilegen.render import GridRenderer

        renderer = GridRenderer(config.tile_table, tile_size=config.tile_size)
        renderer.run_viewer(results[0].grid, screen_size=(SCREEN_WIDTH, SCREEN_HEIGHT))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
