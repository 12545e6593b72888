"""
Tests for generators module.
"""

import pytest
import networkx as nx
import numpy as np

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.dynamic.graph_updater import check_consistency
from src.generators.base_generators import (
    BarabasiAlbertGenerator,
    ChungLuGenerator,
    ConfigurationModelGenerator,
    DorogovtsevMendesGenerator,
    ErdosRenyiGenerator,
    HavelHakimiGenerator,
    RegularRingLatticeGenerator,
    RmatGenerator,
    StochasticBlockmodel,
    WattsStrogatzGenerator,
)
from src.generators.hyperbolic import HyperbolicGenerator, unit_disk_edges
from src.geometry.hyperbolic_space import (
    hyperbolic_area_to_radius,
    hyperbolic_radius_to_euclidean,
    sample_points_in_radius,
)
from src.index.quadtree import Quadtree
from src.metrics.graph_statistics import edge_count_within_tolerance
from src.validation.consistency import brute_force_edges


class TestHyperbolicGenerator:
    """Tests for the static hyperbolic generator."""

    def test_generate_basic(self):
        """Graph has n nodes and coordinates attached."""
        G = HyperbolicGenerator(n=1000, average_degree=6, seed=42).generate()

        assert G.number_of_nodes() == 1000
        assert G.number_of_edges() > 0
        assert check_consistency(G, 1000)
        assert len(G.graph["angles"]) == len(G.graph["radii"]) == 1000
        assert G.graph["params"]["n"] == 1000

    def test_edges_match_brute_force(self):
        """The quadtree finds exactly the pairs within distance R."""
        G = HyperbolicGenerator(n=1500, average_degree=8, exponent=2.6, capacity=32, seed=1).generate()
        expected = brute_force_edges(G.graph["angles"], G.graph["radii"], G.graph["R"])
        assert sorted(G.edges()) == expected

    def test_reproducible_with_seed(self):
        """Equal seeds give equal graphs."""
        edges_a, _ = HyperbolicGenerator(n=500, average_degree=6, seed=3).generate_edges()
        edges_b, _ = HyperbolicGenerator(n=500, average_degree=6, seed=3).generate_edges()
        assert edges_a == edges_b

    def test_workers_do_not_change_result(self):
        """Threaded construction and queries give the same edge list."""
        single, _ = HyperbolicGenerator(n=3000, average_degree=6, capacity=50, n_workers=1, seed=5).generate_edges()
        multi, _ = HyperbolicGenerator(n=3000, average_degree=6, capacity=50, n_workers=4, seed=5).generate_edges()
        assert single == multi

    def test_edges_sorted_without_duplicates(self):
        """Edges are (u, v) with u < v, sorted and unique."""
        edges, _ = HyperbolicGenerator(n=800, average_degree=10, seed=9).generate_edges()
        assert all(u < v for u, v in edges)
        assert edges == sorted(set(edges))

    @pytest.mark.parametrize("exponent,average_degree", [(3.0, 6.0), (3.5, 10.0), (5.0, 16.0)])
    def test_edge_count_close_to_target(self, exponent, average_degree):
        """Edge counts land within 10% of n * k / 2."""
        n = 10000
        edges, _ = HyperbolicGenerator(n=n, average_degree=average_degree, exponent=exponent, seed=42).generate_edges()
        assert edge_count_within_tolerance(len(edges), n * average_degree / 2, 0.1)

    @pytest.mark.slow
    def test_large_graph_edge_count(self):
        """n = 100000, k = 32 stays within 10% of the expected edge count."""
        n, k = 100000, 32
        edges, _ = HyperbolicGenerator(n=n, average_degree=k, exponent=7, n_workers=4, seed=42).generate_edges()
        assert edge_count_within_tolerance(len(edges), n * k / 2, 0.1)

    def test_empty_and_single_node(self):
        """Degenerate sizes produce edgeless graphs."""
        assert HyperbolicGenerator(n=0, average_degree=6).generate().number_of_nodes() == 0
        G = HyperbolicGenerator(n=1, average_degree=6).generate()
        assert G.number_of_nodes() == 1
        assert G.number_of_edges() == 0

    def test_invalid_parameters(self):
        """Invalid model parameters raise ValueError."""
        with pytest.raises(ValueError):
            HyperbolicGenerator(n=-1)
        with pytest.raises(ValueError):
            HyperbolicGenerator(n=100, average_degree=0)
        with pytest.raises(ValueError):
            HyperbolicGenerator(n=100, exponent=2.0)
        with pytest.raises(ValueError):
            HyperbolicGenerator(n=10, average_degree=9).generate()


class TestGenerateFromCoordinates:
    """Tests for generation from explicit points."""

    @pytest.fixture
    def coordinates(self):
        n = 1000
        R = hyperbolic_area_to_radius(n)
        angles, radii = sample_points_in_radius(n, 1.0, R, seed=21)
        return angles, radii, R

    def test_matches_brute_force(self, coordinates):
        """Explicit coordinates give the exact threshold graph."""
        angles, radii, R = coordinates
        r = hyperbolic_radius_to_euclidean(R)
        G = HyperbolicGenerator(capacity=40).generate_from_coordinates(angles, radii, r, 0.7 * R)
        assert sorted(G.edges()) == brute_force_edges(angles, radii, 0.7 * R)

    def test_zero_threshold_has_no_edges(self, coordinates):
        """A zero threshold connects nothing."""
        angles, radii, R = coordinates
        G = HyperbolicGenerator().generate_from_coordinates(angles, radii, hyperbolic_radius_to_euclidean(R), 0.0)
        assert G.number_of_nodes() == len(angles)
        assert G.number_of_edges() == 0

    def test_negative_threshold_raises(self, coordinates):
        """Thresholds must be non-negative."""
        angles, radii, R = coordinates
        with pytest.raises(ValueError):
            HyperbolicGenerator().generate_from_coordinates(angles, radii, hyperbolic_radius_to_euclidean(R), -1.0)

    def test_points_outside_disk_raise(self, coordinates):
        """Points beyond the given disk radius are rejected."""
        angles, radii, R = coordinates
        with pytest.raises(ValueError):
            HyperbolicGenerator().generate_from_coordinates(angles, radii, float(radii.max()) / 2, R)

    def test_generate_from_index(self, coordinates):
        """A prebuilt index gives the same graph."""
        angles, radii, R = coordinates
        r = hyperbolic_radius_to_euclidean(R)
        tree = Quadtree.from_points(angles, radii, r, capacity=40)
        G = HyperbolicGenerator().generate_from_index(angles, radii, tree, R)
        assert sorted(G.edges()) == unit_disk_edges(tree, angles, radii, R)

    def test_index_size_mismatch_raises(self, coordinates):
        """The index must hold exactly the given points."""
        angles, radii, R = coordinates
        tree = Quadtree.from_points(angles[:10], radii[:10], hyperbolic_radius_to_euclidean(R))
        with pytest.raises(ValueError):
            HyperbolicGenerator().generate_from_index(angles, radii, tree, R)


class TestBaseGenerators:
    """Tests for baseline generators."""

    def test_erdos_renyi(self):
        """Edge count is within 25% of p * n(n-1)/2."""
        n = 2000
        p = 1.5 * np.log(n) / n
        G = ErdosRenyiGenerator(n, p, seed=42).generate()
        pairs = n * (n - 1) / 2
        assert G.number_of_nodes() == n
        assert 0.75 * p * pairs <= G.number_of_edges() <= 1.25 * p * pairs

    def test_barabasi_albert(self):
        """(n0 - 1) + (n_max - n0) * k edges."""
        k, n_max, n0 = 3, 100, 3
        G = BarabasiAlbertGenerator(k, n_max, n0, seed=42).generate()
        assert G.number_of_nodes() == n_max
        assert G.number_of_edges() == (n0 - 1) + (n_max - n0) * k
        assert check_consistency(G, n_max)

    def test_barabasi_albert_invalid(self):
        """The initial path must have at least k nodes."""
        with pytest.raises(ValueError):
            BarabasiAlbertGenerator(5, 100, 3)

    def test_ring_lattice(self):
        """Each node is connected exactly to nodes within ring distance neighbors."""
        n, neighbors = 10, 2
        G = RegularRingLatticeGenerator(n, neighbors).generate()
        assert G.number_of_edges() == n * neighbors
        for u in range(n):
            for v in range(u + 1, n):
                diff = v - u
                assert G.has_edge(u, v) == (diff <= neighbors or diff >= n - neighbors)

    def test_watts_strogatz(self):
        """p = 0 is the lattice; rewiring preserves the edge count."""
        n, neighbors = 10, 2
        lattice = RegularRingLatticeGenerator(n, neighbors).generate()
        unrewired = WattsStrogatzGenerator(n, neighbors, 0.0).generate()
        assert set(map(frozenset, unrewired.edges())) == set(map(frozenset, lattice.edges()))
        G = WattsStrogatzGenerator(n, neighbors, 0.3, seed=42).generate()
        assert G.number_of_nodes() == n
        assert G.number_of_edges() == n * neighbors

    def test_dorogovtsev_mendes(self):
        """2n - 3 edges; node u <= 2 has u lower neighbors, all others two."""
        n = 20
        G = DorogovtsevMendesGenerator(n, seed=42).generate()
        assert G.number_of_nodes() == n
        assert G.number_of_edges() == 2 * n - 3
        for u in G.nodes():
            lower = sum(1 for v in G.neighbors(u) if v < u)
            assert lower == (u if u <= 2 else 2)

    def test_havel_hakimi_realizes_sequence(self):
        """A graphical sequence is realized exactly."""
        G = nx.gnp_random_graph(200, 0.05, seed=42)
        sequence = [d for _, d in sorted(G.degree())]
        H = HavelHakimiGenerator(sequence).generate()
        assert [d for _, d in sorted(H.degree())] == sequence
        assert check_consistency(H, 200)

    def test_havel_hakimi_unrealizable(self):
        """Unrealizable sequences raise unless truncation is requested."""
        sequence = [20, 10, 2, 2, 2, 2, 2, 2, 2, 2, 2]
        generator = HavelHakimiGenerator(sequence)
        assert not generator.is_realizable()
        with pytest.raises(ValueError):
            generator.generate()

        G = HavelHakimiGenerator(sequence, ignore_if_unrealizable=True).generate()
        for u in G.nodes():
            assert G.degree(u) == min(sequence[u], 10)

    def test_configuration_model(self):
        """Degrees are exact and the graph stays simple."""
        G = nx.barabasi_albert_graph(300, 3, seed=42)
        sequence = [d for _, d in sorted(G.degree())]
        H = ConfigurationModelGenerator(sequence, seed=42).generate()
        assert [d for _, d in sorted(H.degree())] == sequence
        assert nx.number_of_selfloops(H) == 0

    def test_configuration_model_unrealizable(self):
        """Non-graphical sequences raise ValueError."""
        with pytest.raises(ValueError):
            ConfigurationModelGenerator([3, 1]).generate()

    def test_stochastic_blockmodel(self):
        """Block-diagonal affinity 1 gives two cliques."""
        membership = [0, 0, 0, 0, 0, 1, 1, 1, 1, 1]
        G = StochasticBlockmodel(10, 2, membership, [[1.0, 0.0], [0.0, 1.0]], seed=42).generate()
        assert G.number_of_nodes() == 10
        assert G.number_of_edges() == 20
        assert all(membership[u] == membership[v] for u, v in G.edges())

    def test_stochastic_blockmodel_invalid(self):
        """Membership and affinity shapes are validated."""
        with pytest.raises(ValueError):
            StochasticBlockmodel(3, 2, [0, 1], [[1.0, 0.0], [0.0, 1.0]])
        with pytest.raises(ValueError):
            StochasticBlockmodel(2, 2, [0, 1], [[1.0, 0.5], [0.0, 1.0]])

    def test_havel_hakimi_matches_networkx(self):
        """Graphical sequences give the networkx Havel-Hakimi realization."""
        sequence = [d for _, d in sorted(nx.barabasi_albert_graph(100, 2, seed=7).degree())]
        H = HavelHakimiGenerator(sequence).generate()
        expected = nx.havel_hakimi_graph(sequence)
        assert set(map(frozenset, H.edges())) == set(map(frozenset, expected.edges()))

    def test_havel_hakimi_truncates_large_sequence(self):
        """Truncation on a 10k-node odd-volume sequence keeps the graph simple and bounded."""
        rng = np.random.default_rng(42)
        sequence = rng.integers(0, 60, size=10000).tolist()
        if sum(sequence) % 2 == 0:
            sequence[0] += 1
        G = HavelHakimiGenerator(sequence, ignore_if_unrealizable=True).generate()
        assert check_consistency(G, len(sequence))
        assert all(G.degree(u) <= sequence[u] for u in G.nodes())
        assert 2 * G.number_of_edges() >= 0.99 * sum(sequence)

    def test_stochastic_blockmodel_interleaved_membership(self):
        """Blocks need not be contiguous; node ids keep their own block."""
        membership = [0, 1] * 50
        G = StochasticBlockmodel(100, 2, membership, [[1.0, 0.0], [0.0, 1.0]], seed=1).generate()
        assert list(G.nodes()) == list(range(100))
        assert G.number_of_edges() == 2 * (50 * 49 // 2)
        assert all(membership[u] == membership[v] for u, v in G.edges())
        assert G.graph["membership"] == membership

    def test_stochastic_blockmodel_density(self):
        """Edge counts follow the affinity matrix within and across blocks."""
        n = 400
        membership = [0] * 200 + [1] * 200
        G = StochasticBlockmodel(n, 2, membership, [[0.1, 0.01], [0.01, 0.1]], seed=42).generate()
        inside = sum(1 for u, v in G.edges() if membership[u] == membership[v])
        across = G.number_of_edges() - inside
        assert inside == pytest.approx(2 * 0.1 * 200 * 199 / 2, rel=0.1)
        assert across == pytest.approx(0.01 * 200 * 200, rel=0.25)

    def test_chung_lu(self):
        """Node count, simplicity and volume close to the expected degrees."""
        rng = np.random.default_rng(42)
        n = 400
        sequence = rng.integers(0, n // 8, size=n).tolist()
        G = ChungLuGenerator(sequence, seed=42).generate()
        assert G.number_of_nodes() == n
        assert check_consistency(G, n)
        volume = 2 * G.number_of_edges()
        assert volume == pytest.approx(sum(sequence), rel=0.1)

    def test_chung_lu_zero_sequence(self):
        """All-zero weights give an empty graph."""
        G = ChungLuGenerator([0] * 5).generate()
        assert G.number_of_nodes() == 5
        assert G.number_of_edges() == 0

    def test_rmat(self):
        """2**scale nodes and at most edge_factor * n edges."""
        scale, edge_factor = 9, 12
        n = 1 << scale
        G = RmatGenerator(scale, edge_factor, 0.51, 0.12, 0.12, 0.25, seed=42).generate()
        assert G.number_of_nodes() == n
        assert 0 < G.number_of_edges() <= n * edge_factor
        assert check_consistency(G, n)

    def test_rmat_skews_towards_first_quadrant(self):
        """Low ids collect more edges than high ids when a dominates."""
        G = RmatGenerator(8, 8, 0.57, 0.19, 0.19, 0.05, seed=3).generate()
        degrees = [d for _, d in sorted(G.degree())]
        assert sum(degrees[:128]) > sum(degrees[128:])

    def test_rmat_invalid_probabilities(self):
        """Quadrant probabilities must sum to one."""
        with pytest.raises(ValueError):
            RmatGenerator(9, 12, 0.51, 0.12, 0.12, 0.2)
