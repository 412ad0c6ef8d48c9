"""
Unit tests for the window clusterer.

Tests anchor-based grouping, partition of the input and edge cases.
"""

import pytest
import numpy as np


def _records(times):
    from t0_monitor.timing.interfaces.data_models import Record
    return [Record(record_id=i, time_ps=float(t)) for i, t in enumerate(times)]


def _times(clusters):
    return [[r.time_ps for r in c] for c in clusters]


class TestAnchorSemantics:
    """Test that clusters are measured from their first record."""

    def test_split_on_large_gap(self):
        from t0_monitor.timing.window_clusterer import WindowClusterer

        clusters = WindowClusterer(100_000).cluster(_records([0, 50_000, 90_000, 300_000]))

        assert _times(clusters) == [[0, 50_000, 90_000], [300_000]]

    def test_anchor_not_previous_record(self):
        """110000 is 50000 after its neighbour but 110000 after the anchor."""
        from t0_monitor.timing.window_clusterer import WindowClusterer

        clusters = WindowClusterer(100_000).cluster(_records([0, 60_000, 110_000]))

        assert _times(clusters) == [[0, 60_000], [110_000]]

    def test_threshold_is_inclusive(self):
        from t0_monitor.timing.window_clusterer import WindowClusterer

        clusters = WindowClusterer(100_000).cluster(_records([0, 100_000, 100_001]))

        assert _times(clusters) == [[0, 100_000], [100_001]]

    def test_dense_train_is_cut_by_span(self):
        """Records every 10 ns never exceed the gap, but the span does."""
        from t0_monitor.timing.window_clusterer import WindowClusterer

        times = [i * 10_000 for i in range(35)]  # 0 .. 340000
        clusters = WindowClusterer(100_000).cluster(_records(times))

        assert [len(c) for c in clusters] == [11, 11, 11, 2]
        assert all(c.span_ps <= 100_000 for c in clusters)


class TestPartition:
    """Test that clusters partition the input exactly."""

    def test_unsorted_input_is_sorted(self):
        from t0_monitor.timing.window_clusterer import WindowClusterer

        clusters = WindowClusterer(100_000).cluster(_records([300_000, 0, 90_000, 50_000]))

        assert _times(clusters) == [[0, 50_000, 90_000], [300_000]]

    def test_random_input_properties(self):
        """Partition, ordering and anchor gap on random timeframes."""
        from t0_monitor.timing.window_clusterer import WindowClusterer

        rng = np.random.default_rng(1234)
        clusterer = WindowClusterer(100_000)

        for _ in range(20):
            times = rng.uniform(0, 5e6, size=rng.integers(0, 200))
            records = _records(times)
            clusters = clusterer.cluster(records)

            ids = [r.record_id for c in clusters for r in c]
            assert sorted(ids) == list(range(len(records)))

            flat = [r.time_ps for c in clusters for r in c]
            assert flat == sorted(flat)

            for c in clusters:
                gaps = np.diff([r.time_ps for r in c])
                assert np.all(gaps <= 100_000)
                assert c.last_time_ps - c.first_time_ps <= 100_000

            for earlier, later in zip(clusters, clusters[1:]):
                assert later.first_time_ps - earlier.first_time_ps > 100_000

    def test_idempotent_on_flattened_clusters(self):
        from t0_monitor.timing.window_clusterer import WindowClusterer

        rng = np.random.default_rng(7)
        clusterer = WindowClusterer(100_000)
        clusters = clusterer.cluster(_records(rng.uniform(0, 2e6, size=150)))

        flattened = [r for c in clusters for r in c]
        again = clusterer.cluster(flattened)

        assert [[r.record_id for r in c] for c in again] == [[r.record_id for r in c] for c in clusters]

    def test_equal_times_keep_input_order(self):
        from t0_monitor.timing.interfaces.data_models import Record
        from t0_monitor.timing.window_clusterer import WindowClusterer

        records = [Record(record_id=i, time_ps=5000.0) for i in (3, 1, 2)]
        clusters = WindowClusterer().cluster(records)

        assert len(clusters) == 1
        assert [r.record_id for r in clusters[0]] == [3, 1, 2]


class TestEdgeCases:
    """Test degenerate inputs."""

    def test_empty_input_gives_no_clusters(self):
        from t0_monitor.timing.window_clusterer import WindowClusterer

        assert WindowClusterer().cluster([]) == []

    def test_single_record_is_singleton_cluster(self):
        from t0_monitor.timing.window_clusterer import WindowClusterer

        clusters = WindowClusterer().cluster(_records([42.0]))

        assert len(clusters) == 1
        assert len(clusters[0]) == 1
        assert clusters[0].span_ps == 0.0

    def test_accepts_generator(self):
        from t0_monitor.timing.window_clusterer import WindowClusterer

        clusters = WindowClusterer().cluster(r for r in _records([0, 1, 2]))

        assert len(clusters) == 1

    def test_negative_threshold_rejected(self):
        from t0_monitor.timing.window_clusterer import WindowClusterer
        from t0_monitor.exceptions import ConfigurationError

        with pytest.raises(ConfigurationError):
            WindowClusterer(-1.0)

    def test_empty_cluster_rejected(self):
        from t0_monitor.timing.interfaces.data_models import Cluster

        with pytest.raises(ValueError):
            Cluster(())
