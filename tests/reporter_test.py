from unittest import TestCase, mock
from unittest.mock import Mock

from prometheus_client import CollectorRegistry

from esmonitor import reporter, stats
from esmonitor.stats import StatsSnapshot, SnapshotReference


class MetricsTableTests(TestCase):
    def test_exposes_every_snapshot_field_once(self):
        fields = [field for _, _, field, _ in reporter.METRICS]
        self.assertCountEqual(stats.FIELDS, fields)

    def test_names_are_unique(self):
        names = [name for name, _, _, _ in reporter.METRICS]
        self.assertEqual(len(names), len(set(names)))

    def test_deltas_are_counters_everything_else_gauges(self):
        for name, metric_type, _, _ in reporter.METRICS:
            if name.endswith("_delta"):
                self.assertEqual(reporter.COUNTER, metric_type, name)
            else:
                self.assertEqual(reporter.GAUGE, metric_type, name)

    @mock.patch("esmonitor.utils.console.println")
    def test_list_metrics(self, println):
        reporter.list_metrics()

        table = println.call_args_list[1][0][0]
        self.assertIn("search_query_delta", table)
        self.assertIn("counter", table)


class NodeIndicesStatsReporterTests(TestCase):
    def setUp(self):
        self.registry = CollectorRegistry()
        self.snapshot_reference = SnapshotReference()
        self.reporter = reporter.NodeIndicesStatsReporter(self.snapshot_reference, registry=self.registry)

    def test_exposes_zeros_before_first_sample(self):
        self.assertEqual(0, self.registry.get_sample_value("elasticsearch_node_indices_store_size"))
        self.assertEqual(0, self.registry.get_sample_value("elasticsearch_node_indices_get_missing_delta_total"))

    def test_exposes_gauges_and_counters(self):
        self.snapshot_reference.set(StatsSnapshot(store_size=185622, refresh_avg_time_in_millis_per_request=50.0,
                                                  search_query_delta=50, indexing_delete_delta=3))

        self.assertEqual(185622, self.registry.get_sample_value("elasticsearch_node_indices_store_size"))
        self.assertEqual(50.0, self.registry.get_sample_value(
            "elasticsearch_node_indices_refresh_avg_time_in_millis_per_request"))
        self.assertEqual(50, self.registry.get_sample_value("elasticsearch_node_indices_search_query_delta_total"))
        self.assertEqual(3, self.registry.get_sample_value("elasticsearch_node_indices_indexing_delete_delta_total"))

    def test_metric_types(self):
        types = {metric.name: metric.type for metric in self.registry.collect()}

        self.assertEqual("gauge", types["elasticsearch_node_indices_search_query_total"])
        self.assertEqual("counter", types["elasticsearch_node_indices_search_query_delta"])
        self.assertEqual(len(reporter.METRICS), len(types))

    def test_reads_latest_snapshot(self):
        self.snapshot_reference.set(StatsSnapshot(docs_count=1))
        self.assertEqual(1, self.reporter.value("docs_count"))

        self.snapshot_reference.set(StatsSnapshot(docs_count=2))
        self.assertEqual(2, self.reporter.value("docs_count"))
        self.assertEqual(2, self.registry.get_sample_value("elasticsearch_node_indices_docs_count"))

    def test_values(self):
        self.snapshot_reference.set(StatsSnapshot(get_exists_total=16, get_exists_delta=4))

        values = self.reporter.values()

        self.assertEqual(len(reporter.METRICS), len(values))
        self.assertEqual(16, values["get_exists_total"])
        self.assertEqual(4, values["get_exists_delta"])
        self.assertEqual(0, values["merges_total"])

    def test_unknown_metric(self):
        with self.assertRaises(KeyError):
            self.reporter.value("jvm_heap_used")

    def test_collect_reads_one_snapshot(self):
        snapshot_reference = Mock()
        snapshot_reference.get.return_value = StatsSnapshot(docs_count=5, docs_deleted=1)
        r = reporter.NodeIndicesStatsReporter(snapshot_reference, registry=CollectorRegistry())

        families = list(r.collect())

        snapshot_reference.get.assert_called_once_with()
        self.assertEqual(len(reporter.METRICS), len(families))

    def test_registration_does_not_collect(self):
        snapshot_reference = Mock()
        reporter.NodeIndicesStatsReporter(snapshot_reference, registry=CollectorRegistry())

        snapshot_reference.get.assert_not_called()

    def test_unregister(self):
        self.reporter.unregister()

        self.assertIsNone(self.registry.get_sample_value("elasticsearch_node_indices_store_size"))

    def test_without_namespace(self):
        registry = CollectorRegistry()
        reporter.NodeIndicesStatsReporter(SnapshotReference(StatsSnapshot(docs_count=3)), namespace="", registry=registry)

        self.assertEqual(3, registry.get_sample_value("docs_count"))
