"""Logger, event loop and exception tests."""

import errno
import os
import tempfile
import unittest

from kvfs.core.config_loader import Config
from kvfs.core.event_loop import EventLoop
from kvfs.exceptions import (
    BadFileDescriptorError,
    CorruptEntryError,
    ErrorKind,
    FileNotFoundError,
    FileSystemException,
    StorageException,
    UnsupportedEncodingError,
)
from kvfs.filesystem import StorageFileSystem
from kvfs.logger import LogFormatter, Logger, LogLevel, get_logger
from kvfs.storage import MemoryStorage


class TestExceptions(unittest.TestCase):
    """Test the exception hierarchy."""

    def test_error_codes_follow_errno(self):
        exc = FileNotFoundError('/a', syscall='open')

        self.assertEqual(exc.code, 'ENOENT')
        self.assertEqual(exc.error_code, errno.ENOENT)
        self.assertEqual(exc.context['path'], '/a')
        self.assertEqual(exc.context['syscall'], 'open')

    def test_kind_errno_values(self):
        self.assertEqual(ErrorKind.EBADF.errno, errno.EBADF)
        self.assertEqual(ErrorKind.ENOTEMPTY.errno, errno.ENOTEMPTY)

    def test_not_builtin_exceptions(self):
        exc = FileNotFoundError('/a')

        self.assertIsInstance(exc, FileSystemException)
        self.assertNotIsInstance(exc, OSError)

    def test_descriptor_error(self):
        exc = BadFileDescriptorError(3, syscall='close')

        self.assertEqual(exc.fd, 3)
        self.assertIsNone(exc.path)
        self.assertIn("EBADF", repr(exc))

    def test_encoding_error_context(self):
        exc = UnsupportedEncodingError('hex', path='/a', stored_encoding='utf8')

        self.assertEqual(exc.context['encoding'], 'hex')
        self.assertEqual(exc.context['stored_encoding'], 'utf8')
        self.assertEqual(exc.kind, ErrorKind.EINVAL)

    def test_storage_errors(self):
        exc = CorruptEntryError('fakeFs:/a', reason='bad')

        self.assertIsInstance(exc, StorageException)
        self.assertEqual(str(exc), 'Corrupt entry record (key=fakeFs:/a)')
        self.assertEqual(exc.context['reason'], 'bad')

    def test_positional_base_arguments(self):
        exc = FileSystemException('boom', '/a', 99, {'extra': 1})

        self.assertEqual(exc.error_code, 99)
        self.assertIsNone(exc.syscall)
        self.assertEqual(exc.context, {'extra': 1, 'path': '/a'})

    def test_caller_context_not_modified(self):
        context = {'request': 7}

        FileNotFoundError('/a', syscall='open', context=context)
        BadFileDescriptorError(3, syscall='close', context=context)
        UnsupportedEncodingError('hex', path='/a', context=context)
        CorruptEntryError('fakeFs:/a', reason='bad', context=context)

        self.assertEqual(context, {'request': 7})


class TestLogger(unittest.TestCase):
    """Test the logging system."""

    def setUp(self):
        Logger.shutdown()

    def tearDown(self):
        Logger.shutdown()

    def test_logger_singleton(self):
        self.assertIs(Logger('test1'), get_logger('test1'))
        self.assertEqual(get_logger('test1').subsystem, 'test1')

    def test_log_levels(self):
        self.assertTrue(LogLevel.ERROR > LogLevel.INFO)
        self.assertEqual(LogLevel.from_name('debug'), LogLevel.DEBUG)
        with self.assertRaises(ValueError):
            LogLevel.from_name('loud')

    def test_filesystem_operations_are_logged(self):
        Logger.initialize(level=LogLevel.DEBUG, console_output=False)
        fs = StorageFileSystem(MemoryStorage(), config=Config())

        fs.write_file('/a.txt', 'abc')
        fs.mkdir('/dir')

        logs = Logger.get_buffered_logs(subsystem='filesystem')
        messages = [entry['message'] for entry in logs]
        self.assertIn('Wrote file', messages)
        self.assertIn('Created directory', messages)
        wrote = next(entry for entry in logs if entry['message'] == 'Wrote file')
        self.assertEqual(wrote['context']['path'], '/a.txt')
        self.assertEqual(wrote['level'], 'DEBUG')

    def test_level_filters_buffer(self):
        Logger.initialize(level=LogLevel.INFO, console_output=False)
        fs = StorageFileSystem(MemoryStorage(), config=Config())

        fs.write_file('/a.txt', 'abc')
        fs.initialize()

        messages = [entry['message'] for entry in Logger.get_buffered_logs(subsystem='filesystem')]
        self.assertNotIn('Wrote file', messages)
        self.assertIn('Storage filesystem initialized', messages)

    def test_log_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'logs', 'kvfs.log')
            Logger.initialize(level=LogLevel.INFO, log_file=path, console_output=False)

            get_logger('filesystem').info('hello', context={'path': '/a'})
            Logger.shutdown()

            with open(path, encoding='utf-8') as f:
                line = f.read()
        self.assertIn('[filesystem] hello {path=/a}', line)

    def test_formatter_without_colors(self):
        import logging

        record = logging.LogRecord('kvfs.x', logging.WARNING, __file__, 1, 'msg', None, None)
        record.subsystem = 'x'
        record.context = {'k': 'v'}

        text = LogFormatter(use_colors=False).format(record)

        self.assertIn('WARNING', text)
        self.assertTrue(text.endswith('[x] msg {k=v}'))


class TestEventLoop(unittest.TestCase):
    """Test the cooperative timer loop."""

    def test_fifo_order(self):
        loop = EventLoop()
        calls = []

        loop.schedule_timer(calls.append, 0.0, 'a')
        loop.schedule_timer(calls.append, 0.0, 'b')
        self.assertEqual(loop.pending, 2)

        self.assertEqual(loop.run_until_idle(), 2)
        self.assertEqual(calls, ['a', 'b'])
        self.assertEqual(loop.pending, 0)

    def test_callbacks_scheduled_during_turn_run_later(self):
        loop = EventLoop()
        calls = []

        def first():
            calls.append('first')
            loop.schedule_timer(calls.append, 0.0, 'nested')

        loop.schedule_timer(first)
        loop.schedule_timer(calls.append, 0.0, 'second')

        self.assertEqual(loop.run_pending(), 2)
        self.assertEqual(calls, ['first', 'second'])

        loop.run_until_idle()
        self.assertEqual(calls, ['first', 'second', 'nested'])

    def test_delayed_timer(self):
        loop = EventLoop()
        calls = []
        loop.schedule_timer(calls.append, 0.01, 'late')

        self.assertEqual(loop.run_pending(), 0)
        loop.run_until_idle()

        self.assertEqual(calls, ['late'])

    def test_cancel(self):
        loop = EventLoop()
        calls = []
        event_id = loop.schedule_timer(calls.append, 0.0, 'x')

        self.assertTrue(loop.cancel_event(event_id))
        self.assertFalse(loop.cancel_event(event_id))
        loop.run_until_idle()

        self.assertEqual(calls, [])

    def test_failing_callback_does_not_stop_loop(self):
        loop = EventLoop()
        calls = []

        def boom():
            raise RuntimeError('boom')

        loop.schedule_timer(boom)
        loop.schedule_timer(calls.append, 0.0, 'after')
        loop.run_until_idle()

        self.assertEqual(calls, ['after'])
        stats = loop.get_stats()
        self.assertEqual(stats['events_failed'], 1)
        self.assertEqual(stats['events_processed'], 1)


if __name__ == '__main__':
    unittest.main()
