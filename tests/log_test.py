from unittest import TestCase, mock

from esmonitor import log


class LogConfigTests(TestCase):
    def test_log_config_uses_level(self):
        config = log.log_config("DEBUG")

        self.assertEqual("DEBUG", config["root"]["level"])
        self.assertEqual(["console"], config["root"]["handlers"])
        self.assertEqual("WARNING", config["loggers"]["elastic_transport"]["level"])

    @mock.patch("logging.captureWarnings")
    @mock.patch("logging.config.dictConfig")
    def test_configure_logging(self, dict_config, capture_warnings):
        log.configure_logging("WARNING")

        dict_config.assert_called_once_with(log.log_config("WARNING"))
        capture_warnings.assert_called_once_with(True)
