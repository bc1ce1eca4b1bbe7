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
import shlex
import subprocess

from esmonitor.exceptions import ExecutorError

DEFAULT_PROCESS_PATTERN = "org.elasticsearch.bootstrap"


def run_subprocess_with_output(command_line):
    logger = logging.getLogger(__name__)
    logger.debug("Running subprocess [%s] with output.", command_line)
    command_line_args = shlex.split(command_line)
    try:
        with subprocess.Popen(command_line_args, stdout=subprocess.PIPE, stderr=subprocess.STDOUT) as command_line_process:
            has_output = True
            lines = []
            while has_output:
                line = command_line_process.stdout.readline()
                if line:
                    lines.append(line.decode("UTF-8").strip())
                else:
                    has_output = False
    except OSError as e:
        raise ExecutorError("Could not run [%s]" % command_line, e)
    return lines


class ProcessMonitor:
    """
    Determines whether an Elasticsearch process is running on this host.
    """

    def __init__(self, pattern=DEFAULT_PROCESS_PATTERN):
        self.pattern = pattern
        self.started = False
        self.logger = logging.getLogger(__name__)

    def is_started(self):
        try:
            pids = run_subprocess_with_output("pgrep -f %s" % shlex.quote(self.pattern))
        except ExecutorError:
            self.logger.warning("Could not determine whether a process matching [%s] is running.", self.pattern, exc_info=True)
            return False

        started = len(pids) > 0
        if started != self.started:
            if started:
                self.logger.info("Found Elasticsearch process(es) %s matching [%s].", pids, self.pattern)
            else:
                self.logger.info("No process matching [%s] is running anymore.", self.pattern)
        self.started = started
        return started


class AssumeStartedMonitor:
    """
    Used for clusters that do not run on this host, where a process check is not possible.
    """

    def is_started(self):
        return True
