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

import logging

import tabulate
from prometheus_client import REGISTRY
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily

from esmonitor.utils import console

DEFAULT_NAMESPACE = "elasticsearch_node_indices"

GAUGE = "gauge"
COUNTER = "counter"

# (metric name, type, snapshot field, help)
METRICS = [
    ("store_size", GAUGE, "store_size", "Size of the store in bytes"),
    ("store_throttle_time", GAUGE, "store_throttle_time", "Time the store has been throttled in milliseconds"),
    ("docs_count", GAUGE, "docs_count", "Number of documents"),
    ("docs_deleted", GAUGE, "docs_deleted", "Number of deleted documents"),

    ("refresh_total", GAUGE, "refresh_total", "Total number of refreshes"),
    ("refresh_total_time", GAUGE, "refresh_total_time", "Total time spent on refreshes in milliseconds"),
    ("refresh_avg_time_in_millis_per_request", GAUGE, "refresh_avg_time_in_millis_per_request",
     "Average time per refresh in milliseconds"),
    ("flush_total", GAUGE, "flush_total", "Total number of flushes"),
    ("flush_total_time", GAUGE, "flush_total_time", "Total time spent on flushes in milliseconds"),
    ("flush_avg_time_in_millis_per_request", GAUGE, "flush_avg_time_in_millis_per_request",
     "Average time per flush in milliseconds"),

    ("merges_current", GAUGE, "merges_current", "Number of merges in flight"),
    ("merges_current_docs", GAUGE, "merges_current_docs", "Number of documents in merges in flight"),
    ("merges_current_size", GAUGE, "merges_current_size", "Size of merges in flight in bytes"),
    ("merges_total", GAUGE, "merges_total", "Total number of merges"),
    ("merges_total_time", GAUGE, "merges_total_time", "Total time spent on merges in milliseconds"),
    ("merges_total_size", GAUGE, "merges_total_size", "Total size of merges in bytes"),

    ("cache_field_evictions", GAUGE, "cache_field_evictions", "Field data cache evictions"),
    ("cache_field_size", GAUGE, "cache_field_size", "Field data cache size in bytes"),
    ("cache_filter_evictions", GAUGE, "cache_filter_evictions", "Filter cache evictions"),
    ("cache_filter_size", GAUGE, "cache_filter_size", "Filter cache size in bytes"),

    ("search_query_total", GAUGE, "search_query_total", "Total number of search queries"),
    ("search_query_time", GAUGE, "search_query_time", "Total time spent on search queries in milliseconds"),
    ("search_query_current", GAUGE, "search_query_current", "Number of search queries in flight"),
    ("search_query_avg_time_in_millis_per_request", GAUGE, "search_query_avg_time_in_millis_per_request",
     "Average time per search query in milliseconds"),
    ("search_query_delta", COUNTER, "search_query_delta", "Search queries since the monitor started"),
    ("search_fetch_total", GAUGE, "search_fetch_total", "Total number of search fetches"),
    ("search_fetch_time", GAUGE, "search_fetch_time", "Total time spent on search fetches in milliseconds"),
    ("search_fetch_current", GAUGE, "search_fetch_current", "Number of search fetches in flight"),
    ("search_fetch_avg_time_in_millis_per_request", GAUGE, "search_fetch_avg_time_in_millis_per_request",
     "Average time per search fetch in milliseconds"),
    ("search_fetch_delta", COUNTER, "search_fetch_delta", "Search fetches since the monitor started"),

    ("get_total", GAUGE, "get_total", "Total number of get requests"),
    ("get_time", GAUGE, "get_time", "Total time spent on get requests in milliseconds"),
    ("get_current", GAUGE, "get_current", "Number of get requests in flight"),
    ("get_total_avg_time_in_millis_per_request", GAUGE, "get_total_avg_time_in_millis_per_request",
     "Average time per get request in milliseconds"),
    ("get_total_delta", COUNTER, "get_total_delta", "Get requests since the monitor started"),
    ("get_exists_total", GAUGE, "get_exists_total", "Total number of get requests for existing documents"),
    ("get_exists_time", GAUGE, "get_exists_time", "Total time spent on get requests for existing documents in milliseconds"),
    ("get_exists_avg_time_in_millis_per_request", GAUGE, "get_exists_avg_time_in_millis_per_request",
     "Average time per get request for existing documents in milliseconds"),
    ("get_exists_delta", COUNTER, "get_exists_delta", "Get requests for existing documents since the monitor started"),
    ("get_missing_total", GAUGE, "get_missing_total", "Total number of get requests for missing documents"),
    ("get_missing_time", GAUGE, "get_missing_time", "Total time spent on get requests for missing documents in milliseconds"),
    ("get_missing_avg_time_in_millis_per_request", GAUGE, "get_missing_avg_time_in_millis_per_request",
     "Average time per get request for missing documents in milliseconds"),
    ("get_missing_delta", COUNTER, "get_missing_delta", "Get requests for missing documents since the monitor started"),

    ("indexing_index_total", GAUGE, "indexing_index_total", "Total number of index operations"),
    ("indexing_index_time_in_millis", GAUGE, "indexing_index_time_in_millis", "Total time spent on index operations in milliseconds"),
    ("indexing_index_current", GAUGE, "indexing_index_current", "Number of index operations in flight"),
    ("indexing_index_avg_time_in_millis_per_request", GAUGE, "indexing_index_avg_time_in_millis_per_request",
     "Average time per index operation in milliseconds"),
    ("indexing_index_delta", COUNTER, "indexing_index_delta", "Index operations since the monitor started"),
    ("indexing_delete_total", GAUGE, "indexing_delete_total", "Total number of delete operations"),
    ("indexing_delete_time", GAUGE, "indexing_delete_time", "Total time spent on delete operations in milliseconds"),
    ("indexing_delete_current", GAUGE, "indexing_delete_current", "Number of delete operations in flight"),
    ("indexing_delete_avg_time_in_millis_per_request", GAUGE, "indexing_delete_avg_time_in_millis_per_request",
     "Average time per delete operation in milliseconds"),
    ("indexing_delete_delta", COUNTER, "indexing_delete_delta", "Delete operations since the monitor started"),
]

_FIELDS_BY_NAME = {name: field for name, _, field, _ in METRICS}


def list_metrics():
    console.println("Available node indices metrics:\n")
    rows = [[name, metric_type, documentation] for name, metric_type, _, documentation in METRICS]
    console.println(tabulate.tabulate(rows, ["Name", "Type", "Description"]))
    console.println("\nCounters are exposed with a '_total' suffix.")


class NodeIndicesStatsReporter:
    """
    Exposes the currently published snapshot to a prometheus registry.

    Values are read from the snapshot whenever the registry is scraped so they are at most one sample
    interval old. Every scrape reads the snapshot reference once, hence all metrics of a scrape belong to
    the same snapshot.
    """

    def __init__(self, snapshot_reference, namespace=DEFAULT_NAMESPACE, registry=REGISTRY):
        self.snapshot_reference = snapshot_reference
        self.namespace = namespace
        self.registry = registry
        self.logger = logging.getLogger(__name__)
        self.registry.register(self)
        self.logger.info("Registered [%d] node indices metrics with namespace [%s].", len(METRICS), self.namespace)

    def unregister(self):
        self.registry.unregister(self)

    def metric_name(self, name):
        return "{}_{}".format(self.namespace, name) if self.namespace else name

    def value(self, name):
        return getattr(self.snapshot_reference.get(), _FIELDS_BY_NAME[name])

    def values(self):
        snapshot = self.snapshot_reference.get()
        return {name: getattr(snapshot, field) for name, _, field, _ in METRICS}

    def describe(self):
        # avoids a collection on registration
        for name, metric_type, _, documentation in METRICS:
            yield self._metric_family(name, metric_type, documentation)

    def collect(self):
        snapshot = self.snapshot_reference.get()
        for name, metric_type, field, documentation in METRICS:
            yield self._metric_family(name, metric_type, documentation, getattr(snapshot, field))

    def _metric_family(self, name, metric_type, documentation, value=None):
        if metric_type == COUNTER:
            return CounterMetricFamily(self.metric_name(name), documentation, value=value)
        return GaugeMetricFamily(self.metric_name(name), documentation, value=value)
