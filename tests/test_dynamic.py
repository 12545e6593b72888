"""
Tests for the event protocol and the dynamic generators.
"""

import pytest
import networkx as nx
import numpy as np

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.dynamic.graph_event import (
    GraphEvent,
    GraphEventType,
    count_time_steps,
    format_stream,
    split_rounds,
)
from src.dynamic.graph_updater import GraphConsistencyError, GraphUpdater, check_consistency
from src.generators.dynamic_generators import (
    DynamicBarabasiAlbertGenerator,
    DynamicDorogovtsevMendesGenerator,
    DynamicForestFireGenerator,
    DynamicPathGenerator,
)
from src.generators.dynamic_hyperbolic import DynamicHyperbolicGenerator
from src.generators.hyperbolic import HyperbolicGenerator
from src.geometry.hyperbolic_space import (
    TWO_PI,
    hyperbolic_area_to_radius,
    hyperbolic_radius_to_euclidean,
    poincare_metric,
    sample_points_in_radius,
)
from src.validation.consistency import (
    compare_event_streams,
    event_streams_equal,
    replay_events,
    replay_matches_static,
)


def make_points(n, alpha=1.0, seed=42):
    R = hyperbolic_area_to_radius(n)
    angles, radii = sample_points_in_radius(n, alpha, R, seed=seed)
    return angles, radii, R


class TestGraphEvent:
    """Tests for event records."""

    def test_string_forms(self):
        """Events have compact string forms."""
        assert str(GraphEvent.node_addition(3)) == "+n(3)"
        assert str(GraphEvent.edge_addition(1, 2)) == "+e(1,2)"
        assert str(GraphEvent.edge_removal(1, 2)) == "-e(1,2)"
        assert str(GraphEvent.time_step()) == "st"

    def test_ordering_and_equality(self):
        """Events compare by (type, u, v) and are hashable."""
        events = [GraphEvent.time_step(), GraphEvent.edge_addition(0, 2), GraphEvent.edge_addition(0, 1)]
        assert sorted(events)[0] == GraphEvent.edge_addition(0, 1)
        assert len({GraphEvent.edge_addition(0, 1), GraphEvent.edge_addition(0, 1)}) == 1
        assert GraphEvent.edge_addition(0, 1).is_edge_event
        assert not GraphEvent.node_addition(0).is_edge_event

    def test_stream_helpers(self):
        """Streams split into rounds at TIME_STEP events."""
        stream = [
            GraphEvent.edge_addition(0, 1), GraphEvent.time_step(),
            GraphEvent.time_step(),
            GraphEvent.edge_removal(0, 1),
        ]
        assert count_time_steps(stream) == 2
        assert [len(r) for r in split_rounds(stream)] == [2, 1, 1]
        assert format_stream(stream[:2]) == "+e(0,1) st"

    def test_compare_event_streams(self):
        """Streams compare as multisets."""
        a = [GraphEvent.edge_addition(0, 1), GraphEvent.time_step()]
        b = [GraphEvent.time_step(), GraphEvent.edge_addition(0, 1)]
        assert event_streams_equal(a, b)
        diff = compare_event_streams(a, b + [GraphEvent.time_step()])
        assert not diff["only_in_a"]
        assert diff["only_in_b"][GraphEvent.time_step()] == 1


class TestGraphUpdater:
    """Tests for replaying event streams."""

    def test_update_applies_events(self):
        """Nodes, edges and time steps are applied in order."""
        G = nx.Graph()
        updater = GraphUpdater(G)
        updater.update([
            GraphEvent.node_addition(0), GraphEvent.node_addition(1), GraphEvent.node_addition(2),
            GraphEvent.edge_addition(0, 1), GraphEvent.edge_addition(1, 2), GraphEvent.time_step(),
            GraphEvent.edge_removal(0, 1), GraphEvent.time_step(),
        ])
        assert sorted(G.edges()) == [(1, 2)]
        assert updater.time == 2
        assert check_consistency(G, 3)

    @pytest.mark.parametrize("events", [
        [GraphEvent.node_addition(0), GraphEvent.node_addition(0)],
        [GraphEvent.node_addition(0), GraphEvent.edge_addition(0, 1)],
        [GraphEvent.node_addition(0), GraphEvent.edge_addition(0, 0)],
        [GraphEvent.node_addition(0), GraphEvent.node_addition(1),
         GraphEvent.edge_addition(0, 1), GraphEvent.edge_addition(1, 0)],
        [GraphEvent.node_addition(0), GraphEvent.node_addition(1), GraphEvent.edge_removal(0, 1)],
    ])
    def test_inconsistent_streams_raise(self, events):
        """Contradictory events raise GraphConsistencyError."""
        with pytest.raises(GraphConsistencyError):
            GraphUpdater(nx.Graph()).update(events)

    def test_consistency_error_is_runtime_error(self):
        """Callers can catch replay failures as RuntimeError."""
        assert issubclass(GraphConsistencyError, RuntimeError)

    def test_check_consistency_detects_gaps(self):
        """Node ids must be contiguous when n is given."""
        G = nx.Graph()
        G.add_nodes_from([0, 2])
        assert check_consistency(G)
        assert not check_consistency(G, 2)


class TestDynamicHyperbolicGenerator:
    """Tests for the dynamic hyperbolic generator."""

    def test_initialize_builds_static_graph(self):
        """Replaying initialize() gives the static graph at the initial threshold."""
        angles, radii, R = make_points(500)
        gen = DynamicHyperbolicGenerator(angles, radii, R, initial_factor=0.8)
        G = replay_events(gen.initialize())
        assert G.number_of_nodes() == 500
        assert replay_matches_static(G, angles, radii, 0.8 * R)
        assert sorted(G.edges()) == sorted(gen.get_graph().edges())

    def test_factor_growth_only_adds_edges(self):
        """A growing threshold adds edges whose distance lies in the new band."""
        n, n_steps, initial_factor = 1000, 20, 0.5
        factor_growth = (1 - initial_factor) / n_steps
        angles, radii, R = make_points(n)
        gen = DynamicHyperbolicGenerator(angles, radii, R, initial_factor=initial_factor, factor_growth=factor_growth)

        G = gen.get_graph()
        updater = GraphUpdater(G)
        for _ in range(n_steps):
            previous = gen.threshold
            stream = gen.generate(1)
            current = gen.threshold
            assert stream[-1].type == GraphEventType.TIME_STEP
            for event in stream[:-1]:
                assert event.type == GraphEventType.EDGE_ADDITION
                distance = poincare_metric(angles[event.u], radii[event.u], angles[event.v], radii[event.v])
                assert previous - 1e-9 <= distance <= current + 1e-9
            updater.update(stream)
            assert check_consistency(G, n)

        comparison = HyperbolicGenerator().generate_from_coordinates(
            angles, radii, hyperbolic_radius_to_euclidean(R), gen.threshold
        )
        assert G.number_of_edges() == comparison.number_of_edges()
        assert replay_matches_static(G, angles, radii, gen.threshold)

    def test_shrinking_threshold_only_removes_edges(self):
        """A negative growth removes edges and stops at factor 0."""
        angles, radii, R = make_points(300)
        gen = DynamicHyperbolicGenerator(angles, radii, R, initial_factor=0.3, factor_growth=-0.2)
        G = replay_events(gen.initialize())
        stream = gen.generate(3)
        assert all(e.type in (GraphEventType.EDGE_REMOVAL, GraphEventType.TIME_STEP) for e in stream)
        replay_events(stream, G)
        assert gen.factor == 0.0
        assert G.number_of_edges() == 0

    @pytest.mark.parametrize("moved_share", [0.3, 1.0])
    def test_moved_nodes(self, moved_share):
        """Moving points keeps the replayed graph exact and the edge count stable."""
        n, n_steps = 2000, 20
        static = HyperbolicGenerator(n=n, average_degree=10, exponent=5, seed=7)
        angles, radii, R = static.sample_coordinates()
        gen = DynamicHyperbolicGenerator(
            angles, radii, R, initial_factor=1.0, moved_share=moved_share,
            move_distance=0.1, alpha=static.alpha, seed=7,
        )

        G = replay_events(gen.initialize())
        initial_edges = G.number_of_edges()
        updater = GraphUpdater(G)
        for _ in range(n_steps):
            stream = gen.generate(1)
            for event in stream:
                assert event.type in (
                    GraphEventType.EDGE_ADDITION, GraphEventType.EDGE_REMOVAL, GraphEventType.TIME_STEP
                )
                if event.type == GraphEventType.EDGE_REMOVAL:
                    assert G.has_edge(event.u, event.v)
                if event.type != GraphEventType.TIME_STEP:
                    assert event.u < n and event.v < n
            updater.update(stream)
            assert check_consistency(G, n)

        final_angles, final_radii = gen.get_coordinates()
        assert not np.array_equal(final_radii, radii)
        assert np.all((final_angles >= 0) & (final_angles < TWO_PI))
        assert np.all(final_radii <= hyperbolic_radius_to_euclidean(R))
        assert replay_matches_static(G, final_angles, final_radii, gen.threshold)
        assert abs(G.number_of_edges() - initial_edges) <= initial_edges / 10

    def test_collected_steps_equal_single_steps(self):
        """generate(k) emits the same events as k calls of generate(1)."""
        n, n_steps = 10, 100
        angles, radii, R = make_points(n)
        params = dict(initial_factor=0.0, factor_growth=1.0 / n_steps)
        stepwise = DynamicHyperbolicGenerator(angles, radii, R, **params)
        batched = DynamicHyperbolicGenerator(angles, radii, R, **params)

        stream = []
        for _ in range(n_steps):
            stream.extend(stepwise.generate(1))
        comparison = batched.generate(n_steps)

        assert len(stream) == len(comparison)
        assert event_streams_equal(stream, comparison)
        assert stream == comparison

    def test_collected_steps_with_movement(self):
        """Batching does not change the random movement either."""
        angles, radii, R = make_points(200)
        params = dict(moved_share=0.5, move_distance=0.2, seed=3)
        stepwise = DynamicHyperbolicGenerator(angles, radii, R, **params)
        batched = DynamicHyperbolicGenerator(angles, radii, R, **params)
        stream = [e for _ in range(10) for e in stepwise.generate(1)]
        assert stream == batched.generate(10)

    def test_round_structure(self):
        """Each round lists removals, then additions, each sorted, then one TIME_STEP."""
        angles, radii, R = make_points(300)
        gen = DynamicHyperbolicGenerator(angles, radii, R, moved_share=0.5, move_distance=0.3, seed=1)
        stream = gen.generate(5)
        rounds = split_rounds(stream)
        assert len(rounds) == 5
        for events in rounds:
            assert events[-1].type == GraphEventType.TIME_STEP
            body = events[:-1]
            types = [e.type for e in body]
            assert types == sorted(types, key=lambda t: t != GraphEventType.EDGE_REMOVAL)
            removals = [e for e in body if e.type == GraphEventType.EDGE_REMOVAL]
            additions = [e for e in body if e.type == GraphEventType.EDGE_ADDITION]
            assert removals == sorted(removals)
            assert additions == sorted(additions)
            assert all(e.u < e.v for e in body)

    def test_empty_generator_emits_only_time_steps(self):
        """n = 0 gives TIME_STEP events and nothing else."""
        gen = DynamicHyperbolicGenerator([], [], 0.0, factor_growth=0.1, moved_share=1.0, move_distance=0.1)
        assert gen.initialize() == [GraphEvent.time_step()]
        stream = gen.generate(5)
        assert stream == [GraphEvent.time_step()] * 5
        assert gen.get_graph().number_of_nodes() == 0

    def test_zero_steps(self):
        """generate(0) is empty; negative step counts raise."""
        angles, radii, R = make_points(50)
        gen = DynamicHyperbolicGenerator(angles, radii, R)
        assert gen.generate(0) == []
        with pytest.raises(ValueError):
            gen.generate(-1)

    def test_invalid_parameters(self):
        """Constructor inputs are validated."""
        angles, radii, R = make_points(50)
        with pytest.raises(ValueError):
            DynamicHyperbolicGenerator(angles, radii[:-1], R)
        with pytest.raises(ValueError):
            DynamicHyperbolicGenerator(angles, radii, R, moved_share=1.5)
        with pytest.raises(ValueError):
            DynamicHyperbolicGenerator(angles, radii, R, move_distance=-0.1)
        with pytest.raises(ValueError):
            DynamicHyperbolicGenerator(angles, radii, R / 2)

    def test_overflowing_radial_distribution_raises(self):
        """alpha * R beyond the range of cosh is rejected up front."""
        angles, radii, R = make_points(50)
        with pytest.raises(ValueError, match="too large"):
            DynamicHyperbolicGenerator(
                angles, radii, R, alpha=800.0 / R, moved_share=1.0, move_distance=0.1
            )

    def test_displacement_keeps_radii_finite_for_steep_alpha(self):
        """Strongly concentrated radii still move to finite points inside the disk."""
        angles, radii, R = make_points(200, alpha=30.0)
        gen = DynamicHyperbolicGenerator(
            angles, radii, R, alpha=30.0, moved_share=1.0, move_distance=0.1, seed=3
        )
        gen.generate(5)
        _, moved_radii = gen.get_coordinates()
        assert np.all(np.isfinite(moved_radii))
        assert np.all((moved_radii >= 0.0) & (moved_radii <= gen.max_r))

    def test_hyperbolic_coordinates(self):
        """Cartesian coordinates are available for every point."""
        angles, radii, R = make_points(20)
        points = DynamicHyperbolicGenerator(angles, radii, R).get_hyperbolic_coordinates()
        assert len(points) == 20
        assert all(x * x + y * y < 1.0 for x, y in points)


class TestDynamicGenerators:
    """Tests for the dynamic baseline generators."""

    def test_barabasi_albert_single_step(self):
        """Initial path of k nodes; each step adds one node with k edges."""
        k = 2
        gen = DynamicBarabasiAlbertGenerator(k, seed=42)
        G = replay_events(gen.initialize())
        assert G.number_of_nodes() == k
        assert G.number_of_edges() == k - 1

        replay_events(gen.generate(1), G)
        assert G.number_of_nodes() == k + 1
        assert G.number_of_edges() == (k - 1) + k

    def test_barabasi_albert_resume(self):
        """Generation can be resumed across calls."""
        gen = DynamicBarabasiAlbertGenerator(3, seed=1)
        G = replay_events(gen.initialize())
        replay_events(gen.generate(97), G)
        assert G.number_of_nodes() == 100
        replay_events(gen.generate(100), G)
        assert G.number_of_nodes() == 200
        assert G.number_of_edges() == 2 + 197 * 3
        assert check_consistency(G, 200)

    def test_barabasi_albert_lazy_initialization(self):
        """generate() without initialize() includes the initial path."""
        G = replay_events(DynamicBarabasiAlbertGenerator(2, seed=0).generate(5))
        assert G.number_of_nodes() == 7

    def test_dorogovtsev_mendes(self):
        """generate(n - 3) yields n nodes and 2n - 3 edges."""
        n = 20
        G = replay_events(DynamicDorogovtsevMendesGenerator(seed=42).generate(n - 3))
        assert G.number_of_nodes() == n
        assert G.number_of_edges() == 2 * n - 3
        for u in G.nodes():
            lower = sum(1 for v in G.neighbors(u) if v < u)
            assert lower == (u if u <= 2 else 2)

    def test_path_generator(self):
        """Each step extends the path by one node."""
        stream = DynamicPathGenerator().generate(42)
        G = replay_events(stream)
        assert count_time_steps(stream) == 42
        assert nx.is_isomorphic(G, nx.path_graph(42))

    def test_forest_fire_without_burning_is_a_tree(self):
        """p = 0 links every new node to exactly one earlier node."""
        G = replay_events(DynamicForestFireGenerator(0.0, seed=42).generate(10))
        assert G.number_of_nodes() == 10
        assert check_consistency(G, 10)
        for u in G.nodes():
            lower = sum(1 for v in G.neighbors(u) if v < u)
            assert lower == (0 if u == 0 else 1)

    def test_forest_fire_full_burning_is_a_clique(self):
        """p = 1 burns the whole graph every round."""
        G = replay_events(DynamicForestFireGenerator(1.0, seed=42).generate(10))
        assert G.number_of_nodes() == 10
        assert G.number_of_edges() == 10 * 9 // 2

    def test_forest_fire_rounds(self):
        """One node per round, always attached to the existing graph."""
        gen = DynamicForestFireGenerator(0.4, seed=7)
        stream = gen.generate(50) + gen.generate(150)
        assert count_time_steps(stream) == 200
        G = replay_events(stream)
        assert G.number_of_nodes() == 200
        assert check_consistency(G, 200)
        assert nx.is_connected(G)
        assert G.number_of_edges() > 199

    def test_forest_fire_invalid_probability(self):
        """Burning probabilities outside [0, 1] are rejected."""
        with pytest.raises(ValueError):
            DynamicForestFireGenerator(1.5)
