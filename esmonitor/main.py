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

import argparse
import logging
import signal
import sys
import threading

from prometheus_client import start_http_server

from esmonitor import __version__, client, exceptions, log, reporter, telemetry
from esmonitor.utils import console, opts, process

DEFAULT_PORT = 9108


def create_arg_parser():
    parser = argparse.ArgumentParser(prog="esmonitor",
                                     description="Exposes Elasticsearch node indices stats as prometheus metrics.")
    parser.add_argument("--version", action="version", version="%(prog)s " + __version__)
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Log level (default: INFO).")
    parser.add_argument("--quiet", action="store_true", default=False,
                        help="Suppress as much console output as possible (default: false).")

    subparsers = parser.add_subparsers(title="subcommands", dest="subcommand")
    subparsers.add_parser("list-metrics", help="List all exposed metrics")

    start_parser = subparsers.add_parser("start", help="Sample node indices stats and serve them as metrics")
    start_parser.add_argument("--target-hosts", default="localhost:9200",
                              help="Comma-separated list of host:port pairs of the monitored node (default: localhost:9200).")
    start_parser.add_argument("--client-options", default="timeout:60",
                              help="Comma-separated list of client options to use (default: timeout:60).")
    start_parser.add_argument("--monitor-params", default="",
                              help="Comma-separated list of key:value pairs, e.g. sample-interval:30,publish-partial:true.")
    start_parser.add_argument("--host", default="0.0.0.0", help="Address to serve metrics on (default: 0.0.0.0).")
    start_parser.add_argument("--port", type=int, default=DEFAULT_PORT,
                              help="Port to serve metrics on (default: {}).".format(DEFAULT_PORT))
    start_parser.add_argument("--skip-process-check", action="store_true", default=False,
                              help="Do not check for a local Elasticsearch process before sampling (default: false).")
    return parser


def parse_kv(name, arg):
    try:
        return opts.to_dict(arg)
    except ValueError as e:
        raise exceptions.InvalidSyntax("Could not parse --{} [{}].".format(name, arg), e)


def wait_for_shutdown():
    shutdown = threading.Event()

    def on_signal(signum, frame):
        logging.getLogger(__name__).info("Received signal [%s], shutting down.", signum)
        shutdown.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, on_signal)
    shutdown.wait()


def start(args):
    logger = logging.getLogger(__name__)
    monitor_params = parse_kv("monitor-params", args.monitor_params)
    client_options = parse_kv("client-options", args.client_options)
    hosts = opts.csv_to_list(args.target_hosts)

    es = client.EsClientFactory(hosts, client_options).create()
    if args.skip_process_check:
        process_monitor = process.AssumeStartedMonitor()
    else:
        process_monitor = process.ProcessMonitor(monitor_params.get("process-pattern", process.DEFAULT_PROCESS_PATTERN))

    node_indices_monitor = telemetry.NodeIndicesStatsMonitor(monitor_params, es, process_monitor)
    server, _ = start_http_server(args.port, addr=args.host)
    console.info("Serving metrics on [{}:{}].".format(args.host, args.port), logger=logger)

    node_indices_monitor.on_monitor_start()
    try:
        wait_for_shutdown()
    finally:
        node_indices_monitor.on_monitor_stop()
        server.shutdown()
        server.server_close()
        es.close()


def dispatch(args):
    if args.subcommand == "list-metrics":
        reporter.list_metrics()
    elif args.subcommand == "start":
        start(args)
    else:
        raise exceptions.SystemSetupError("Unknown subcommand [{}].".format(args.subcommand))


def main(argv=None):
    parser = create_arg_parser()
    args = parser.parse_args(argv)
    if args.subcommand is None:
        parser.print_help()
        return 64

    console.init(quiet=args.quiet)
    log.configure_logging(args.log_level)
    logger = logging.getLogger(__name__)
    logger.info("esmonitor version [%s]", __version__)

    try:
        dispatch(args)
    except exceptions.MonitorError as e:
        logger.exception("Cannot run subcommand [%s].", args.subcommand)
        console.error("Cannot {}. {}".format(args.subcommand, e), force=True)
        return 64
    return 0


if __name__ == "__main__":
    sys.exit(main())
