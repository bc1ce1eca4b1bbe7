# SPDX-License-Identifier: Apache-2.0
#
# The OpenSearch Contributors require contributions made to
# this file be licensed under the Apache-2.0 license or a
# compatible open source license.
# Modifications Copyright OpenSearch Contributors. See
# GitHub history for details.
# Licensed to Elasticsearch B.V. under one or more contributor
# license agreements. See the NOTICE file distributed with
# this work for additional information regarding copyright
# ownership. Elasticsearch B.V. licenses this file to you under
# the Apache License, Version 2.0 (the "License"); you may
# not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#	http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing,
# software distributed under the License is distributed on an
# "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY
# KIND, either express or implied.  See the License for the
# specific language governing permissions and limitations
# under the License.

import collections
import logging
import threading

from esmonitor import exceptions
from esmonitor.reporter import NodeIndicesStatsReporter, DEFAULT_NAMESPACE
from esmonitor.stats import OPERATION_FIELDS, StatsSnapshot, SnapshotReference, accumulate, average, operation_fields
from esmonitor.utils import console

DEFAULT_SAMPLE_INTERVAL_MILLIS = 60 * 1000

IDLE = "idle"
COLLECTING = "collecting"


class TelemetryDevice:
    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def on_monitor_start(self):
        pass

    def on_monitor_stop(self):
        pass


class SamplerThread(threading.Thread):
    def __init__(self, task):
        threading.Thread.__init__(self, name="sampler-%s" % task)
        self.task = task
        self.stopped = threading.Event()

    def finish(self):
        self.stopped.set()
        self.join()

    def run(self):
        # noinspection PyBroadException
        try:
            while not self.stopped.is_set():
                self.task.execute()
                self.stopped.wait(self.task.sample_interval)
        except BaseException:
            logging.getLogger(__name__).exception("Could not determine %s", self.task)


class NodeIndicesStatsMonitor(TelemetryDevice):
    """
    Regularly samples the index statistics of the local node and exposes them as metrics.

    Each sample is taken by :meth:`execute`. Failures of a single sample are logged and leave the
    previously published snapshot in place, so the sampler keeps running.
    """

    name = "Elasticsearch_NodeIndicesMonitor"
    human_name = "Node Indices Stats"

    def __init__(self, telemetry_params, client, process_monitor, registry=None, snapshot_reference=None):
        super().__init__()
        self.sample_interval = self._sample_interval(telemetry_params)
        self.snapshot_reference = snapshot_reference if snapshot_reference is not None else SnapshotReference()
        self.recorder = NodeIndicesStatsRecorder(telemetry_params, client, process_monitor, self.snapshot_reference)
        reporter_args = {"namespace": telemetry_params.get("namespace", DEFAULT_NAMESPACE)}
        if registry is not None:
            reporter_args["registry"] = registry
        self.reporter = NodeIndicesStatsReporter(self.snapshot_reference, **reporter_args)
        self.state = IDLE
        self.sampler = None

    def __str__(self):
        return self.name

    @staticmethod
    def _sample_interval(telemetry_params):
        sample_interval = telemetry_params.get("sample-interval", DEFAULT_SAMPLE_INTERVAL_MILLIS / 1000)
        if isinstance(sample_interval, bool) or not isinstance(sample_interval, (int, float)):
            raise exceptions.SystemSetupError(
                "The monitor parameter 'sample-interval' must be a number but was {}.".format(type(sample_interval)))
        if sample_interval <= 0:
            raise exceptions.SystemSetupError(
                "The monitor parameter 'sample-interval' must be greater than zero but was {}.".format(sample_interval))
        return sample_interval

    def on_monitor_start(self):
        if self.sampler:
            self.logger.warning("%s is already sampling, ignoring start request.", self.name)
            return
        console.info("%s: Sampling every [%s] seconds." % (self.human_name, self.sample_interval), logger=self.logger)
        self.sampler = SamplerThread(self)
        self.sampler.daemon = True
        self.sampler.start()

    def on_monitor_stop(self):
        if self.sampler:
            self.sampler.finish()
            self.sampler = None

    def execute(self):
        self.state = COLLECTING
        # noinspection PyBroadException
        try:
            self.recorder.record()
        except Exception:
            self.logger.exception("Sampling %s failed. Keeping the previous snapshot.", self.recorder)
        finally:
            self.state = IDLE


class NodeIndicesStatsRecorder:
    """
    Turns one ``_nodes/stats`` response into a :class:`StatsSnapshot` and publishes it.
    """

    def __init__(self, telemetry_params, client, process_monitor, snapshot_reference):
        """
        :param telemetry_params: Monitor parameters (``node-id``, ``publish-partial``).
        :param client: The Elasticsearch client for the monitored node.
        :param process_monitor: Tells whether the monitored node is started.
        :param snapshot_reference: Holds the published snapshot; it is also the baseline for deltas.
        """
        self.node_id = telemetry_params.get("node-id", "_local")
        self.publish_partial = telemetry_params.get("publish-partial", False)
        if not isinstance(self.publish_partial, bool):
            raise exceptions.SystemSetupError(
                "The monitor parameter 'publish-partial' must be a boolean but was {}.".format(type(self.publish_partial)))
        self.client = client
        self.process_monitor = process_monitor
        self.snapshot_reference = snapshot_reference
        self.logger = logging.getLogger(__name__)

    def __str__(self):
        return "node indices stats"

    def record(self):
        """
        Takes one sample.

        :return: The published snapshot or ``None`` if this sample has been skipped.
        """
        # If Elasticsearch is started then only start the monitoring
        if not self.process_monitor.is_started():
            self.logger.info("Elasticsearch is not yet started, check back again later")
            return None

        node_stats = self.sample()
        if node_stats is None:
            self.logger.info("No node stats available, hence skipping this sample.")
            return None
        indices_stats = node_stats.get("indices")
        if indices_stats is None:
            self.logger.info("NodeIndicesStats is null, hence skipping this sample.")
            return None

        previous = self.snapshot_reference.get()
        # deltas are only computed against a sample that has actually been taken
        baseline = previous if self.snapshot_reference.has_baseline else None
        extracted_stats = {}
        complete = False
        # noinspection PyBroadException
        try:
            extracted_stats.update(self.store_docs_stats(indices_stats))
            extracted_stats.update(self.refresh_flush_stats(indices_stats))
            extracted_stats.update(self.merge_stats(indices_stats))
            extracted_stats.update(self.cache_stats(indices_stats))
            extracted_stats.update(self.search_stats(indices_stats, baseline))
            extracted_stats.update(self.get_stats(indices_stats, baseline))
            extracted_stats.update(self.indexing_stats(indices_stats, baseline))
            complete = True
        except Exception:
            if not self.publish_partial:
                self.logger.warning("Failed to extract node indices stats. Keeping the previous snapshot.", exc_info=True)
                return None
            self.logger.warning("Failed to extract node indices stats. Publishing a partial snapshot.", exc_info=True)

        collected_stats = collections.OrderedDict(StatsSnapshot()._asdict())
        if not complete:
            # operation families that could not be read keep their last values so counters never go down
            for field in OPERATION_FIELDS:
                collected_stats[field] = getattr(previous, field)
        collected_stats.update(extracted_stats)

        snapshot = StatsSnapshot(**collected_stats)
        self.snapshot_reference.set(snapshot, baseline=complete)
        return snapshot

    def sample(self):
        # pylint: disable=import-outside-toplevel
        import elasticsearch
        try:
            stats = self.client.nodes.stats(node_id=self.node_id, metric="indices")
        except (elasticsearch.ApiError, elasticsearch.TransportError):
            self.logger.warning("Could not retrieve node stats.", exc_info=True)
            return None
        nodes = stats["nodes"] if "nodes" in stats else {}
        # only the first node is monitored
        return next(iter(nodes.values()), None)

    def store_docs_stats(self, indices_stats):
        store = indices_stats["store"]
        docs = indices_stats["docs"]
        return {
            "store_size": number(store, "size_in_bytes"),
            "store_throttle_time": number(store, "throttle_time_in_millis"),
            "docs_count": number(docs, "count"),
            "docs_deleted": number(docs, "deleted"),
        }

    def refresh_flush_stats(self, indices_stats):
        results = {}
        for section in ["refresh", "flush"]:
            stats = indices_stats[section]
            total = number(stats, "total")
            total_time = number(stats, "total_time_in_millis")
            results[section + "_total"] = total
            results[section + "_total_time"] = total_time
            results[section + "_avg_time_in_millis_per_request"] = average(total_time, total)
        return results

    def merge_stats(self, indices_stats):
        merges = indices_stats["merges"]
        return {
            "merges_current": number(merges, "current"),
            "merges_current_docs": number(merges, "current_docs"),
            "merges_current_size": number(merges, "current_size_in_bytes"),
            "merges_total": number(merges, "total"),
            "merges_total_time": number(merges, "total_time_in_millis"),
            "merges_total_size": number(merges, "total_size_in_bytes"),
        }

    def cache_stats(self, indices_stats):
        field_data = indices_stats["fielddata"]
        # the filter cache has been replaced by the query cache in later versions
        filter_cache = indices_stats["filter_cache"] if "filter_cache" in indices_stats else indices_stats["query_cache"]
        return {
            "cache_field_evictions": number(field_data, "evictions"),
            "cache_field_size": number(field_data, "memory_size_in_bytes"),
            "cache_filter_evictions": number(filter_cache, "evictions"),
            "cache_filter_size": number(filter_cache, "memory_size_in_bytes"),
        }

    def search_stats(self, indices_stats, previous):
        search = indices_stats["search"]
        results = {
            "search_query_current": number(search, "query_current"),
            "search_fetch_current": number(search, "fetch_current"),
        }
        results.update(operation_stats(previous, "search_query", "search_query_total", "search_query_time",
                                       number(search, "query_total"), number(search, "query_time_in_millis")))
        results.update(operation_stats(previous, "search_fetch", "search_fetch_total", "search_fetch_time",
                                       number(search, "fetch_total"), number(search, "fetch_time_in_millis")))
        return results

    def get_stats(self, indices_stats, previous):
        get = indices_stats["get"]
        results = {
            "get_current": number(get, "current"),
        }
        results.update(operation_stats(previous, "get_total", "get_total", "get_time",
                                       number(get, "total"), number(get, "time_in_millis")))
        results.update(operation_stats(previous, "get_exists", "get_exists_total", "get_exists_time",
                                       number(get, "exists_total"), number(get, "exists_time_in_millis")))
        results.update(operation_stats(previous, "get_missing", "get_missing_total", "get_missing_time",
                                       number(get, "missing_total"), number(get, "missing_time_in_millis")))
        return results

    def indexing_stats(self, indices_stats, previous):
        indexing = indices_stats["indexing"]
        results = {
            "indexing_index_current": number(indexing, "index_current"),
            "indexing_delete_current": number(indexing, "delete_current"),
        }
        results.update(operation_stats(previous, "indexing_index", "indexing_index_total", "indexing_index_time_in_millis",
                                       number(indexing, "index_total"), number(indexing, "index_time_in_millis")))
        results.update(operation_stats(previous, "indexing_delete", "indexing_delete_total", "indexing_delete_time",
                                       number(indexing, "delete_total"), number(indexing, "delete_time_in_millis")))
        return results


def operation_stats(previous, prefix, total_field, time_field, total, time_in_millis):
    """
    Derives the fields of one operation family, e.g. search queries.

    :param previous: The previously published snapshot, used as baseline for the delta. ``None`` if there is
                     no previous sample yet, in which case the delta is zero.
    :param prefix: Prefix of the average and delta fields, e.g. ``search_query``.
    :param total_field: Name of the field holding the lifetime operation count.
    :param time_field: Name of the field holding the lifetime time spent in milliseconds.
    :param total: Lifetime operation count as reported by the node.
    :param time_in_millis: Lifetime time spent as reported by the node.
    :return: A dict with the total, time, average and delta fields of this family.
    """
    _, _, average_field, delta_field = operation_fields(prefix, total_field, time_field)
    if previous is None:
        delta = accumulate(0, None, total)
    else:
        delta = accumulate(getattr(previous, delta_field), getattr(previous, total_field), total)
    return {
        total_field: total,
        time_field: time_in_millis,
        average_field: average(time_in_millis, total),
        delta_field: delta,
    }


def number(stats, key):
    # keys come and go across versions so absent values are treated as zero
    value = stats.get(key, 0)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise exceptions.DataError("Expected a number for [{}] but got [{}].".format(key, value))
    return value
