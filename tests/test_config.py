import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import fakes  # noqa: F401
from cosmos import config
from cosmos.errors import ProviderError, UpstreamHTTPError, format_error
from cosmos.factory import build_search_service
from cosmos.providers.perplexity import LARGE_MODEL


class TestConfig(unittest.TestCase):
    def test_load_env_file_does_not_override(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            env = Path(tmpdir) / ".env"
            env.write_text('# comment\nexport COSMOS_TEST_A="from-file"\nCOSMOS_TEST_B=from-file\n')
            with mock.patch.dict(os.environ, {"COSMOS_TEST_B": "from-env"}, clear=False):
                config.load_env_file(str(env))
                self.assertEqual(os.environ["COSMOS_TEST_A"], "from-file")
                self.assertEqual(os.environ["COSMOS_TEST_B"], "from-env")
                os.environ.pop("COSMOS_TEST_A", None)

    def test_placeholder_keys_are_missing(self):
        with mock.patch.dict(os.environ, {"NEWSAPI_API_KEY": "your_key_here", "PERPLEXITY_API_KEY": " pplx-1 "}):
            self.assertIsNone(config.get_newsapi_key())
            self.assertEqual(config.get_perplexity_key(), "pplx-1")

    def test_http_timeout(self):
        with mock.patch.dict(os.environ, {"COSMOS_HTTP_TIMEOUT": "2.5"}):
            self.assertEqual(config.get_http_timeout(10), 2.5)
        for bad in ("abc", "-1"):
            with mock.patch.dict(os.environ, {"COSMOS_HTTP_TIMEOUT": bad}):
                self.assertEqual(config.get_http_timeout(10), 10)

    def test_factory_wires_clients(self):
        env = {
            "NEWSAPI_API_KEY": "news-key",
            "PERPLEXITY_API_KEY": "pplx-key",
            "NEWSAPI_BASE_URL": "https://proxy.test/newsapi/",
            "PERPLEXITY_SMALL_MODEL": "sonar",
        }
        with mock.patch.dict(os.environ, env):
            os.environ.pop("COSMOS_HTTP_TIMEOUT", None)
            service = build_search_service()

        self.assertEqual(service.news_client.api_key, "news-key")
        self.assertEqual(service.news_client.base_url, "https://proxy.test/newsapi")
        self.assertEqual(service.news_client.timeout, 10)
        self.assertEqual(service.perplexity_client.timeout, 60)
        self.assertEqual(service.perplexity_client.models, {"small": "sonar", "large": LARGE_MODEL})
        self.assertIsNot(service.news_client.session, service.perplexity_client.session)

    def test_factory_builds_one_session_per_client(self):
        built = []

        def session_factory():
            built.append(mock.Mock(name=f"session-{len(built)}"))
            return built[-1]

        with mock.patch.dict(os.environ, {"NEWSAPI_API_KEY": "news-key", "PERPLEXITY_API_KEY": "pplx-key"}):
            service = build_search_service(session_factory)

        self.assertEqual(len(built), 2)
        self.assertIs(service.news_client.session, built[0])
        self.assertIs(service.perplexity_client.session, built[1])


class TestFormatError(unittest.TestCase):
    def test_cosmos_error(self):
        payload = json.loads(format_error(UpstreamHTTPError("NewsAPI error: 429", status=429)))

        self.assertFalse(payload["ok"])
        self.assertEqual(payload["error"]["type"], "UpstreamHTTPError")
        self.assertEqual(payload["error"]["details"], {"status": 429})

    def test_unknown_error(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError as e:
            payload = json.loads(format_error(e))

        self.assertEqual(payload["error"]["type"], "UnknownError")
        self.assertEqual(payload["error"]["message"], "boom")
        self.assertTrue(payload["error"]["details"]["traceback"])

    def test_hierarchy(self):
        self.assertTrue(issubclass(UpstreamHTTPError, ProviderError))


if __name__ == "__main__":
    unittest.main()
