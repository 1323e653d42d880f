from contextlib import contextmanager
from functools import wraps
from os.path import dirname
from sys import path

import pytest
import trio


# Add this project to the Python path.
path.append(dirname(dirname(__file__)))


XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>'
SITEMAP_NS = 'http://www.sitemaps.org/schemas/sitemap/0.9'
URLSET = '<urlset xmlns="{}">'.format(SITEMAP_NS)


@contextmanager
def assert_max_elapsed(seconds):
    '''
    Fail the test if the execution of a block takes longer than ``seconds``.
    '''
    try:
        with trio.fail_after(seconds):
            yield
    except trio.TooSlowError:
        pytest.fail('Failed to complete within {} seconds'.format(seconds))


class fail_after:
    ''' This decorator fails if the runtime of the decorated function (as
    measured by the Trio clock) exceeds the specified value. '''
    def __init__(self, seconds):
        self._seconds = seconds

    def __call__(self, fn):
        @wraps(fn)
        async def wrapper(*args, **kwargs):
            with trio.move_on_after(self._seconds) as cancel_scope:
                await fn(*args, **kwargs)
            if cancel_scope.cancelled_caught:
                pytest.fail('Test runtime exceeded the maximum {} seconds'
                    .format(self._seconds))
        return wrapper


class FailingStream:
    '''
    A text stream that raises ``OSError`` on demand.

    Writes always succeed; set ``fail_flush`` or ``fail_close`` to make the
    corresponding call fail.
    '''
    def __init__(self, fail_flush=False, fail_close=False):
        self.chunks = list()
        self.fail_flush = fail_flush
        self.fail_close = fail_close
        self.closed = False

    def write(self, text):
        self.chunks.append(text)

    def flush(self):
        if self.fail_flush:
            raise OSError('flush failed')

    def close(self):
        if self.fail_close:
            raise OSError('close failed')
        self.closed = True

    def getvalue(self):
        return ''.join(self.chunks)


def make_site_tree():
    '''
    Create a content tree with the top level sitemap root ``/content/site/de``.

    The root is flagged through its ``jcr:content`` node, like most pages.

    :returns: A tuple of (tree, root).
    '''
    from sitemapper.resource import ResourceTree
    tree = ResourceTree()
    root = tree.create('/content/site/de')
    tree.create('/content/site/de/jcr:content', {'sitemapRoot': True})
    return tree, root


def make_sitemap(*capabilities):
    '''
    Create a sitemap that writes into memory.

    :param capabilities: The built-in extensions to register. If none are
        given, the registry is empty.
    :returns: A tuple of (buffer, sitemap).
    '''
    from sitemapper.builder import Sitemap, TextBuffer
    from sitemapper.extensions import BUILTIN_PROVIDERS, ExtensionRegistry
    registry = ExtensionRegistry([provider for provider in BUILTIN_PROVIDERS
        if provider.capability in capabilities])
    buffer = TextBuffer()
    return buffer, Sitemap(buffer, registry)
