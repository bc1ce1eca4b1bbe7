from unittest import TestCase

from esmonitor.utils import opts


class ConfigHelperFunctionTests(TestCase):
    def test_csv_to_list(self):
        self.assertIsNone(opts.csv_to_list(None))
        self.assertEqual([], opts.csv_to_list(""))
        self.assertEqual(["a", "b", "c", "d"], opts.csv_to_list("    a,b,c   , d"))
        self.assertEqual(["a-;d", "b", "c", "d"], opts.csv_to_list("    a-;d    ,b,c   , d"))
        self.assertEqual(["node-1:9200"], opts.csv_to_list(["node-1:9200"]))

    def test_to_bool(self):
        self.assertTrue(opts.to_bool("True"))
        self.assertTrue(opts.to_bool("true"))
        self.assertTrue(opts.to_bool(True))
        self.assertFalse(opts.to_bool("False"))
        self.assertFalse(opts.to_bool("false"))
        self.assertIsNone(opts.to_bool(None))
        with self.assertRaises(ValueError):
            opts.to_bool("maybe")

    def test_kv_to_map(self):
        self.assertEqual({}, opts.kv_to_map([]))
        self.assertEqual({"sample-interval": 30, "publish-partial": True, "ratio": 0.5, "node-id": "_local"},
                         opts.kv_to_map(["sample-interval:30", "publish-partial:true", "ratio:0.5", "node-id:'_local'"]))

    def test_kv_to_map_keeps_colons_in_values(self):
        self.assertEqual({"process-pattern": "org.elasticsearch:bootstrap"},
                         opts.kv_to_map(["process-pattern:'org.elasticsearch:bootstrap'"]))

    def test_to_dict(self):
        self.assertEqual({}, opts.to_dict(None))
        self.assertEqual({}, opts.to_dict(""))
        self.assertEqual({"timeout": 60, "verify_certs": False}, opts.to_dict("timeout:60, verify_certs:false"))

    def test_to_dict_with_unquoted_string(self):
        self.assertEqual({"node-id": "_local"}, opts.to_dict("node-id:_local"))

    def test_to_dict_without_value(self):
        with self.assertRaises(ValueError):
            opts.to_dict("publish-partial")
