from unittest import TestCase, mock

from esmonitor import client, exceptions


class EsClientFactoryTests(TestCase):
    def test_adds_scheme_to_hosts(self):
        f = client.EsClientFactory(["localhost:9200", "https://node-2:9200"], {})

        self.assertEqual(["http://localhost:9200", "https://node-2:9200"], f.hosts)

    def test_rejects_empty_host(self):
        with self.assertRaises(exceptions.SystemSetupError):
            client.EsClientFactory([""], {})

    def test_renames_timeout(self):
        f = client.EsClientFactory(["localhost:9200"], {"timeout": 60, "verify_certs": False})

        self.assertEqual({"request_timeout": 60, "verify_certs": False}, f.client_options)

    def test_does_not_modify_passed_options(self):
        client_options = {"timeout": 60}
        client.EsClientFactory(["localhost:9200"], client_options)

        self.assertEqual({"timeout": 60}, client_options)

    def test_splits_basic_auth_into_user_and_password(self):
        f = client.EsClientFactory(["localhost:9200"], {"basic_auth": "elastic:changeme:1"})

        self.assertEqual({"basic_auth": ("elastic", "changeme:1")}, f.client_options)

    def test_combines_basic_auth_user_and_password(self):
        f = client.EsClientFactory(["localhost:9200"], {"basic_auth_user": "elastic", "basic_auth_password": "changeme"})

        self.assertEqual({"basic_auth": ("elastic", "changeme")}, f.client_options)

    def test_rejects_basic_auth_without_password(self):
        with self.assertRaises(exceptions.SystemSetupError):
            client.EsClientFactory(["localhost:9200"], {"basic_auth": "elastic"})
        with self.assertRaises(exceptions.SystemSetupError):
            client.EsClientFactory(["localhost:9200"], {"basic_auth_user": "elastic"})

    def test_keeps_basic_auth_tuple(self):
        f = client.EsClientFactory(["localhost:9200"], {"basic_auth": ("elastic", "changeme")})

        self.assertEqual({"basic_auth": ("elastic", "changeme")}, f.client_options)

    @mock.patch("elasticsearch.Elasticsearch")
    def test_create(self, es):
        f = client.EsClientFactory(["localhost:9200"], {"timeout": 10})

        self.assertIs(es.return_value, f.create())
        es.assert_called_once_with(hosts=["http://localhost:9200"], request_timeout=10)
