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

from esmonitor import exceptions


class EsClientFactory:
    """
    Abstracts how the Elasticsearch client is created.
    """

    def __init__(self, hosts, client_options):
        self.hosts = [self._to_url(host) for host in hosts]
        self.client_options = dict(client_options)
        self.logger = logging.getLogger(__name__)

        masked_client_options = dict(self.client_options)
        for option in ["basic_auth", "basic_auth_password", "api_key", "bearer_auth"]:
            if option in masked_client_options:
                masked_client_options[option] = "*****"
        self.logger.info("Creating client connected to %s with options [%s]", self.hosts, masked_client_options)

        # the client calls this option request_timeout
        if "timeout" in self.client_options:
            self.client_options["request_timeout"] = self.client_options.pop("timeout")
        self._basic_auth()

    def _basic_auth(self):
        # the client treats a string as an already encoded header value, credentials must be passed as a tuple
        if "basic_auth_user" in self.client_options or "basic_auth_password" in self.client_options:
            if "basic_auth" in self.client_options:
                raise exceptions.SystemSetupError(
                    "Client options 'basic_auth' and 'basic_auth_user'/'basic_auth_password' are mutually exclusive.")
            if "basic_auth_user" not in self.client_options or "basic_auth_password" not in self.client_options:
                raise exceptions.SystemSetupError(
                    "Client options 'basic_auth_user' and 'basic_auth_password' must be provided together.")
            self.client_options["basic_auth"] = (str(self.client_options.pop("basic_auth_user")),
                                                 str(self.client_options.pop("basic_auth_password")))
        elif isinstance(self.client_options.get("basic_auth"), str):
            user, separator, password = self.client_options["basic_auth"].partition(":")
            if not separator:
                raise exceptions.SystemSetupError("Client option 'basic_auth' must be given as 'user:password'.")
            self.client_options["basic_auth"] = (user, password)

    @staticmethod
    def _to_url(host):
        if not host:
            raise exceptions.SystemSetupError("Target hosts must not be empty.")
        if "://" in host:
            return host
        return "http://{}".format(host)

    def create(self):
        # pylint: disable=import-outside-toplevel
        import elasticsearch
        return elasticsearch.Elasticsearch(hosts=self.hosts, **self.client_options)
