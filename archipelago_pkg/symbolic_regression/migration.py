"""Migration of top individuals between islands.

Migration runs at the barrier between generations, so every island is
quiescent while it is rearranged. Only clones cross island boundaries.
"""

from __future__ import annotations

import logging
import random
from enum import Enum

from .individual import Individual
from .island import Island

logger = logging.getLogger(__name__)


class MigrationTopology(Enum):
    """Migration topology options."""

    RING = "ring"  # i -> (i + 1) mod N
    FULLY_CONNECTED = "fully_connected"  # every migrant offered to every island
    STAR = "star"  # island 0 exchanges with each other island
    RANDOM = "random"  # each migrant to a random island

    @classmethod
    def parse(cls, value: MigrationTopology | str) -> MigrationTopology:
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace("-", "_")
        try:
            return cls(normalized)
        except ValueError:
            valid = ", ".join(t.value for t in cls)
            raise ValueError(
                f"Unknown migration topology '{value}' (expected one of: {valid})"
            ) from None


def collect_migrants(islands: list[Island], migrants_per_island: int) -> list[list[Individual]]:
    """Sort every island and clone its top ``migrants_per_island`` individuals.

    Returns:
        One list of migrants per island, in island order
    """
    migrants = []
    for island in islands:
        island.sort_population()
        migrants.append(
            [ind.clone_with_scores() for ind in island.population[:migrants_per_island]]
        )
    return migrants


def _migrate_ring(islands: list[Island], migrants: list[list[Individual]]) -> None:
    for i, outgoing in enumerate(migrants):
        target = islands[(i + 1) % len(islands)]
        for j, migrant in enumerate(outgoing):
            target.population[len(target.population) - 1 - j] = migrant.clone_with_scores()


def _migrate_fully_connected(islands: list[Island], migrants: list[list[Individual]]) -> None:
    pool = [m for outgoing in migrants for m in outgoing]
    for island in islands:
        for migrant in pool:
            worst_index = len(island.population) - 1
            if migrant.fitness > island.population[worst_index].fitness:
                island.population[worst_index] = migrant.clone_with_scores()
                island.sort_population()


def _migrate_star(islands: list[Island], migrants: list[list[Individual]]) -> None:
    hub = islands[0]
    for i in range(1, len(islands)):
        spoke = islands[i]
        for j, migrant in enumerate(migrants[0]):
            spoke.population[len(spoke.population) - 1 - j] = migrant.clone_with_scores()
        for j, migrant in enumerate(migrants[i]):
            hub.population[len(hub.population) - 1 - j] = migrant.clone_with_scores()


def _migrate_random(
    islands: list[Island], migrants: list[list[Individual]], rng: random.Random
) -> None:
    for outgoing in migrants:
        for migrant in outgoing:
            target = islands[rng.randrange(len(islands))]
            target.population[len(target.population) - 1] = migrant.clone_with_scores()


def migrate(
    islands: list[Island],
    migrants_per_island: int,
    topology: MigrationTopology | str = MigrationTopology.RING,
    rng: random.Random | None = None,
) -> list[list[Individual]]:
    """Exchange migrants between islands according to ``topology``.

    Incoming migrants overwrite the worst-ranked slots of their target
    island. Ring, Star and Random overwrite unconditionally; Fully-Connected
    only replaces the current worst when the migrant is strictly fitter.

    Args:
        islands: All islands of the archipelago
        migrants_per_island: Number of top individuals each island donates
        topology: Placement rule
        rng: Random stream for the Random topology

    Returns:
        The migrants collected from each island
    """
    topology = MigrationTopology.parse(topology)
    if not islands or migrants_per_island <= 0:
        return [[] for _ in islands]

    migrants = collect_migrants(islands, migrants_per_island)

    if topology is MigrationTopology.RING:
        _migrate_ring(islands, migrants)
    elif topology is MigrationTopology.FULLY_CONNECTED:
        _migrate_fully_connected(islands, migrants)
    elif topology is MigrationTopology.STAR:
        _migrate_star(islands, migrants)
    else:
        _migrate_random(islands, migrants, rng if rng is not None else random.Random())

    logger.debug(
        "Migrated %d individuals per island across %d islands (%s)",
        migrants_per_island,
        len(islands),
        topology.value,
    )
    return migrants
