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

QUIET = False


def init(quiet=False):
    global QUIET
    QUIET = quiet


def info(msg, end="\n", flush=False, force=False, logger=None):
    println(msg, console_prefix="[INFO]", end=end, flush=flush, force=force, logger=logger.info if logger else None)


def error(msg, end="\n", flush=False, force=False, logger=None):
    println(msg, console_prefix="[ERROR]", end=end, flush=flush, force=force, logger=logger.error if logger else None)


def println(msg, console_prefix=None, end="\n", flush=False, force=False, logger=None):
    if not QUIET or force:
        complete_msg = "%s %s" % (console_prefix, msg) if console_prefix else msg
        print(complete_msg, end=end, flush=flush)
    if logger:
        logger(msg)
