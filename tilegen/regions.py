"""Generate several independent grids, one per worker process."""
from __future__ import annotations

import logging
from multiprocessing import Pool, cpu_count

import numpy as np
from tqdm import tqdm

from .config import GenerationConfig
from .errors import ConfigError
from .wfc import CollapseResult

logger = logging.getLogger(__name__)


def region_seeds(count: int, seed: int | None = None) -> list[np.random.SeedSequence]:
    """Independent child streams, one per region, derived from a single seed."""
    return np.random.SeedSequence(seed).spawn(count)


def run_region(task: tuple[GenerationConfig, np.random.SeedSequence]) -> CollapseResult:
    config, seed_seq = task
    engine = config.build_engine(rng=np.random.default_rng(seed_seq))
    return engine.run(config.build_grid(engine.model))


def generate_regions(
    config: GenerationConfig,
    count: int | None = None,
    seed: int | None = None,
    processes: int | None = None,
    progress: bool = False,
) -> list[CollapseResult]:
    """
    Collapse ``count`` grids described by ``config``.

    Results come back in region order and depend only on the config, the
    count and the seed; the number of worker processes does not change them.
    """
    count = config.regions if count is None else count
    if count <= 0:
        raise ConfigError(f"Region count must be positive, got {count}")
    seed = config.seed if seed is None else seed
    tasks = [(config, seed_seq) for seed_seq in region_seeds(count, seed)]

    if processes is None:
        processes = min(cpu_count(), count)
    logger.info("Generating %d regions on %d process(es)", count, max(processes, 1))

    if processes <= 1:
        return list(tqdm(map(run_region, tasks), total=count, desc="Regions", disable=not progress))
    with Pool(processes) as pool:
        return list(
            tqdm(pool.imap(run_region, tasks), total=count, desc="Regions", disable=not progress)
        )
