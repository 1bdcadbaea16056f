"""Configuration tests."""

import json
import os
import tempfile
import unittest

from kvfs.core.config_loader import Config, ConfigLoader, get_config
from kvfs.exceptions import ConfigurationError


class TestConfig(unittest.TestCase):
    """Test the configuration system."""

    def setUp(self):
        self.loader = ConfigLoader()
        self.loader.reset()
        self._tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.loader.reset()
        self._tmp.cleanup()

    def write_config(self, data):
        path = os.path.join(self._tmp.name, 'kvfs.json')
        with open(path, 'w', encoding='utf-8') as f:
            f.write(data if isinstance(data, str) else json.dumps(data))
        return path

    def test_default_config(self):
        config = Config()

        self.assertEqual(config.filesystem.key_prefix, "fakeFs:")
        self.assertEqual(config.filesystem.default_encoding, "utf8")
        self.assertTrue(config.filesystem.preserve_created)
        self.assertEqual(config.streams.high_water_mark, 65536)
        self.assertEqual(config.storage.backend, "memory")

    def test_loader_is_singleton(self):
        self.assertIs(ConfigLoader(), self.loader)
        self.assertIs(get_config(), self.loader.config)

    def test_load_file(self):
        path = self.write_config({
            'filesystem': {'key_prefix': 'app:'},
            'streams': {'high_water_mark': 1024},
        })

        config = self.loader.load(path)

        self.assertTrue(self.loader.loaded)
        self.assertEqual(config.filesystem.key_prefix, 'app:')
        self.assertEqual(config.filesystem.default_encoding, 'utf8')
        self.assertEqual(config.streams.high_water_mark, 1024)
        self.assertEqual(get_config().filesystem.key_prefix, 'app:')

    def test_missing_file(self):
        with self.assertRaises(ConfigurationError):
            self.loader.load(os.path.join(self._tmp.name, 'nope.json'))

    def test_invalid_json(self):
        with self.assertRaises(ConfigurationError):
            self.loader.load(self.write_config('{"filesystem": '))

    def test_invalid_values(self):
        for data in (
            {'storage': {'backend': 'redis'}},
            {'storage': {'backend': 'json_file'}},
            {'streams': {'high_water_mark': 0}},
            {'filesystem': {'default_encoding': 'ascii'}},
            {'logging': {'level': 'LOUD'}},
        ):
            with self.subTest(data=data):
                with self.assertRaises(ConfigurationError):
                    self.loader.load(self.write_config(data))

        self.assertFalse(self.loader.loaded)

    def test_get_and_set(self):
        self.assertEqual(self.loader.get('streams.high_water_mark'), 65536)
        self.assertEqual(self.loader.get('streams.missing', 'dflt'), 'dflt')

        self.loader.set('streams.high_water_mark', 10)
        self.assertEqual(get_config().streams.high_water_mark, 10)

    def test_set_rejects_invalid_value(self):
        with self.assertRaises(ConfigurationError):
            self.loader.set('storage.backend', 'redis')
        self.assertEqual(self.loader.get('storage.backend'), 'memory')

        with self.assertRaises(ConfigurationError):
            self.loader.set('storage.nope', 1)

    def test_set_rejects_whole_section(self):
        with self.assertRaises(ConfigurationError):
            self.loader.set('streams', 5)

        self.assertEqual(get_config().streams.high_water_mark, 65536)

    def test_set_rejects_non_setting_attributes(self):
        for key in ('validate', 'filesystem.key_prefix.upper', 'streams.__class__'):
            with self.subTest(key=key):
                with self.assertRaises(ConfigurationError):
                    self.loader.set(key, 5)

        self.assertEqual(get_config().filesystem.key_prefix, 'fakeFs:')
        get_config().validate()

    def test_non_object_section(self):
        for data in ({'streams': 3}, {'logging': ['DEBUG']}, {'storage': None}):
            with self.subTest(data=data):
                with self.assertRaises(ConfigurationError):
                    self.loader.load(self.write_config(data))

        self.assertFalse(self.loader.loaded)

    def test_to_dict(self):
        data = self.loader.to_dict()

        self.assertEqual(data['filesystem']['key_prefix'], 'fakeFs:')
        self.assertEqual(data['storage'], {'backend': 'memory', 'path': None})


if __name__ == '__main__':
    unittest.main()
