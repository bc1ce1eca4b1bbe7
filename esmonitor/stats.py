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

FIELDS = (
    "store_size",
    "store_throttle_time",
    "docs_count",
    "docs_deleted",
    "refresh_total",
    "refresh_total_time",
    "refresh_avg_time_in_millis_per_request",
    "flush_total",
    "flush_total_time",
    "flush_avg_time_in_millis_per_request",
    "merges_current",
    "merges_current_docs",
    "merges_current_size",
    "merges_total",
    "merges_total_time",
    "merges_total_size",
    "cache_field_evictions",
    "cache_field_size",
    "cache_filter_evictions",
    "cache_filter_size",
    "search_query_total",
    "search_query_time",
    "search_query_current",
    "search_query_avg_time_in_millis_per_request",
    "search_query_delta",
    "search_fetch_total",
    "search_fetch_time",
    "search_fetch_current",
    "search_fetch_avg_time_in_millis_per_request",
    "search_fetch_delta",
    "get_total",
    "get_time",
    "get_current",
    "get_total_avg_time_in_millis_per_request",
    "get_total_delta",
    "get_exists_total",
    "get_exists_time",
    "get_exists_avg_time_in_millis_per_request",
    "get_exists_delta",
    "get_missing_total",
    "get_missing_time",
    "get_missing_avg_time_in_millis_per_request",
    "get_missing_delta",
    "indexing_index_total",
    "indexing_index_time_in_millis",
    "indexing_index_current",
    "indexing_index_avg_time_in_millis_per_request",
    "indexing_index_delta",
    "indexing_delete_total",
    "indexing_delete_time",
    "indexing_delete_current",
    "indexing_delete_avg_time_in_millis_per_request",
    "indexing_delete_delta",
)

AVERAGE_SUFFIX = "_avg_time_in_millis_per_request"

# (prefix, total field, time field) of every operation family that tracks a delta
OPERATIONS = (
    ("search_query", "search_query_total", "search_query_time"),
    ("search_fetch", "search_fetch_total", "search_fetch_time"),
    ("get_total", "get_total", "get_time"),
    ("get_exists", "get_exists_total", "get_exists_time"),
    ("get_missing", "get_missing_total", "get_missing_time"),
    ("indexing_index", "indexing_index_total", "indexing_index_time_in_millis"),
    ("indexing_delete", "indexing_delete_total", "indexing_delete_time"),
)


def operation_fields(prefix, total_field, time_field):
    return total_field, time_field, prefix + AVERAGE_SUFFIX, prefix + "_delta"


# fields that carry over from the previous snapshot when an operation family could not be read
OPERATION_FIELDS = tuple(field for operation in OPERATIONS for field in operation_fields(*operation))


def _initial_value(field):
    return 0.0 if field.endswith(AVERAGE_SUFFIX) else 0


StatsSnapshot = collections.namedtuple("StatsSnapshot", FIELDS, defaults=[_initial_value(f) for f in FIELDS])
StatsSnapshot.__doc__ = """
Point-in-time view of the index statistics of a single node.

Snapshots are immutable. A new one is built for every sample, seeded with zeros, and
then published through a :class:`SnapshotReference`.
"""


def average(total_time_in_millis, total):
    """
    :param total_time_in_millis: Lifetime time spent on all operations of a family.
    :param total: Lifetime number of operations of a family.
    :return: The average time per operation in milliseconds, or 0.0 if there were no operations.
    """
    if total == 0:
        return 0.0
    return total_time_in_millis / total


def increase(previous_total, current_total):
    # counters start from zero again when a node restarts
    if current_total < previous_total:
        return current_total
    return current_total - previous_total


def accumulate(previous_delta, previous_total, current_total):
    """
    Adds the increase of a lifetime counter since the previous sample to a running delta.

    The result is cumulative over the lifetime of the monitor, not per sample interval. Without a previous
    total (``None``) there is nothing to compare against and the delta stays as it is.
    """
    if previous_total is None:
        return previous_delta
    return previous_delta + increase(previous_total, current_total)


class SnapshotReference:
    """
    Holds the currently published :class:`StatsSnapshot`.

    There is exactly one writer (the sampler) and any number of readers (metric scrapes). Publishing a
    snapshot is a single attribute assignment so readers always see either the old or the new snapshot,
    never a mix of both.

    The all-zero snapshot a reference starts with is not an observation of the node. ``has_baseline``
    tells the sampler whether the held snapshot may serve as the baseline for deltas.
    """

    def __init__(self, snapshot=None):
        self._snapshot = snapshot if snapshot is not None else StatsSnapshot()
        self.has_baseline = snapshot is not None

    def get(self):
        return self._snapshot

    def set(self, snapshot, baseline=True):
        self._snapshot = snapshot
        self.has_baseline = self.has_baseline or baseline
