from unittest import TestCase, mock
from unittest.mock import Mock

from esmonitor.utils import console


class ConsoleTests(TestCase):
    def setUp(self):
        console.init(quiet=False)

    def tearDown(self):
        console.init(quiet=False)

    @mock.patch("builtins.print")
    def test_info_prints_and_logs(self, print_mock):
        logger = Mock()

        console.info("Sampling.", logger=logger)

        print_mock.assert_called_once_with("[INFO] Sampling.", end="\n", flush=False)
        logger.info.assert_called_once_with("Sampling.")

    @mock.patch("builtins.print")
    def test_quiet_only_prints_forced_messages(self, print_mock):
        console.init(quiet=True)

        console.println("hidden")
        console.error("shown", force=True)

        print_mock.assert_called_once_with("[ERROR] shown", end="\n", flush=False)
