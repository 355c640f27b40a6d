"""
Tests for migration topologies between islands.
"""

import random

import pytest

from archipelago_pkg.symbolic_regression import ExpressionNode
from archipelago_pkg.symbolic_regression import Individual
from archipelago_pkg.symbolic_regression import Island
from archipelago_pkg.symbolic_regression import MigrationTopology
from archipelago_pkg.symbolic_regression import migrate


def _island(island_id, fitnesses):
    island = Island(island_id, len(fitnesses), 0.7, 1.0, 2, seed=island_id)
    island.population = [
        Individual(ExpressionNode.constant(f), fitness=f, mse=-f, complexity=1)
        for f in fitnesses
    ]
    return island


def _fitnesses(island):
    return [ind.fitness for ind in island.population]


@pytest.mark.parametrize(
    "value, expected",
    [
        ("ring", MigrationTopology.RING),
        ("RING", MigrationTopology.RING),
        ("fully-connected", MigrationTopology.FULLY_CONNECTED),
        ("star", MigrationTopology.STAR),
        (MigrationTopology.RANDOM, MigrationTopology.RANDOM),
    ],
)
def test_parse_topology(value, expected):
    assert MigrationTopology.parse(value) is expected


def test_parse_unknown_topology():
    with pytest.raises(ValueError, match="Unknown migration topology"):
        MigrationTopology.parse("torus")


def test_ring_with_two_islands_swaps_best():
    a = _island(0, [-1.0, -2.0, -3.0])
    b = _island(1, [-10.0, -20.0, -30.0])

    migrate([a, b], 1, MigrationTopology.RING)

    assert _fitnesses(a) == [-1.0, -2.0, -10.0]
    assert _fitnesses(b) == [-10.0, -20.0, -1.0]
    assert b.population[-1].expression == "-1.00"


def test_ring_moves_to_next_island_only():
    islands = [_island(i, [-float(i), -10.0 - i, -20.0 - i]) for i in range(3)]

    migrate(islands, 2, "ring")

    assert _fitnesses(islands[1]) == [-1.0, -10.0, -0.0]
    assert _fitnesses(islands[2])[1:] == [-11.0, -1.0]
    assert _fitnesses(islands[0])[1:] == [-12.0, -2.0]


def test_migrants_are_independent_copies():
    a = _island(0, [-1.0, -2.0])
    b = _island(1, [-3.0, -4.0])
    returned = migrate([a, b], 1, MigrationTopology.RING)

    placed = b.population[-1]
    assert placed is not a.population[0]
    assert placed is not returned[0][0]

    placed.root.value = 123.0
    assert a.population[0].root.value == -1.0


def test_fully_connected_only_replaces_when_fitter():
    a = _island(0, [-1.0, -2.0, -3.0])
    b = _island(1, [-10.0, -20.0, -30.0])

    migrate([a, b], 1, MigrationTopology.FULLY_CONNECTED)

    assert _fitnesses(a) == [-1.0, -1.0, -2.0]
    assert _fitnesses(b) == [-1.0, -10.0, -10.0]


def test_fully_connected_offers_pool_to_every_island():
    a = _island(0, [-1.0, -1.5])
    b = _island(1, [-5.0, -6.0])
    c = _island(2, [-7.0, -8.0])

    migrate([a, b, c], 1, "fully_connected")

    assert _fitnesses(a) == [-1.0, -1.0]
    assert _fitnesses(c) == [-1.0, -5.0]


def test_star_exchanges_through_hub():
    hub = _island(0, [-1.0, -2.0, -3.0])
    s1 = _island(1, [-4.0, -5.0, -6.0])
    s2 = _island(2, [-7.0, -8.0, -9.0])

    migrate([hub, s1, s2], 1, MigrationTopology.STAR)

    assert _fitnesses(s1) == [-4.0, -5.0, -1.0]
    assert _fitnesses(s2) == [-7.0, -8.0, -1.0]
    # each spoke writes the same hub slot; the last spoke's migrant remains
    assert _fitnesses(hub) == [-1.0, -2.0, -7.0]


def test_random_topology_is_seeded():
    def run():
        islands = [_island(i, [-float(i), -10.0 - i, -20.0 - i]) for i in range(4)]
        migrate(islands, 1, MigrationTopology.RANDOM, random.Random(5))
        return [_fitnesses(island) for island in islands]

    first = run()
    assert first == run()

    migrant_fitnesses = {0.0, -1.0, -2.0, -3.0}
    for i, fitnesses in enumerate(first):
        assert len(fitnesses) == 3
        assert fitnesses[-1] in migrant_fitnesses | {-20.0 - i}


def test_zero_migrants_changes_nothing():
    a = _island(0, [-1.0, -2.0])
    b = _island(1, [-3.0, -4.0])
    assert migrate([a, b], 0, MigrationTopology.RING) == [[], []]
    assert _fitnesses(a) == [-1.0, -2.0]
    assert _fitnesses(b) == [-3.0, -4.0]


def test_migration_sorts_source_islands():
    a = _island(0, [-3.0, -1.0, -2.0])
    b = _island(1, [-10.0, -20.0, -30.0])
    migrants = migrate([a, b], 1, MigrationTopology.RING)
    assert migrants[0][0].fitness == -1.0
    assert b.population[-1].fitness == -1.0
