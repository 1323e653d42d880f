'''
Streaming builders for sitemaps and sitemap indexes.

Both builders write to a text stream as entries are added, so a document is
never held in memory. The life cycle is open -> entries -> closed; once a
builder is closed it cannot be used again, and once a url has been written it
cannot be changed.
'''
import logging

from . import SITEMAP_NAMESPACE, SitemapException, codec
from .extensions import ExtensionResult, MissingFieldError
from .xmlstream import ExtensionWriter, XmlStreamWriter


logger = logging.getLogger(__name__)


class SitemapStateError(RuntimeError):
    ''' A builder or url was modified after it was closed or written. '''


class ChangeFrequency:
    ''' Allowed values of ``<changefreq>``. '''
    ALWAYS = 'always'
    HOURLY = 'hourly'
    DAILY = 'daily'
    WEEKLY = 'weekly'
    MONTHLY = 'monthly'
    YEARLY = 'yearly'
    NEVER = 'never'


CHANGE_FREQUENCIES = (ChangeFrequency.ALWAYS, ChangeFrequency.HOURLY,
    ChangeFrequency.DAILY, ChangeFrequency.WEEKLY, ChangeFrequency.MONTHLY,
    ChangeFrequency.YEARLY, ChangeFrequency.NEVER)


class _CountingStream:
    ''' Wrap a text stream and count the UTF-8 bytes written to it. '''
    def __init__(self, stream):
        self._stream = stream
        self.size = 0

    def write(self, text):
        self._stream.write(text)
        self.size += len(text.encode('utf8'))

    def flush(self):
        flush = getattr(self._stream, 'flush', None)
        if flush is not None:
            flush()

    def close(self):
        close = getattr(self._stream, 'close', None)
        if close is not None:
            close()


class TextBuffer:
    '''
    An in-memory text stream for builders.

    Unlike ``io.StringIO`` the content is still available after the builder
    closed the stream.
    '''
    def __init__(self):
        self._chunks = list()
        self.closed = False

    def write(self, text):
        if self.closed:
            raise ValueError('Write to closed buffer')
        self._chunks.append(text)

    def flush(self):
        pass

    def close(self):
        self.closed = True

    def getvalue(self):
        return ''.join(self._chunks)


class _DocumentBuilder:
    ''' The life cycle shared by sitemaps and sitemap indexes. '''
    def __init__(self, stream, root_element, namespaces):
        self._stream = _CountingStream(stream)
        self._writer = XmlStreamWriter(self._stream)
        self._closed = False
        self._entries = 0
        try:
            self._writer.set_default_namespace(SITEMAP_NAMESPACE)
            self._writer.write_start_document()
            self._writer.write_start_element(root_element, SITEMAP_NAMESPACE)
            self._writer.write_default_namespace(SITEMAP_NAMESPACE)
            for namespace, prefix in namespaces.items():
                self._writer.write_namespace(prefix, namespace)
        except OSError as exc:
            raise SitemapException('Cannot start {}'.format(root_element)) \
                from exc

    @property
    def closed(self):
        return self._closed

    @property
    def entries(self):
        ''' The number of entries added so far. '''
        return self._entries

    @property
    def size(self):
        ''' The number of bytes written to the stream so far. '''
        return self._stream.size

    def close(self):
        '''
        Finish the document, then flush and close the stream.

        :raises SitemapStateError: If already closed.
        :raises SitemapException: If the last entry cannot be written.
        :raises OSError: If the stream cannot be flushed or closed.
        '''
        self._check_open()
        self._closed = True
        try:
            self._write_pending()
            self._writer.write_end_document()
        except OSError as exc:
            raise SitemapException('Cannot finish document') from exc
        try:
            self._writer.flush()
        finally:
            self._stream.close()

    def _check_open(self):
        if self._closed:
            raise SitemapStateError('{} is closed'.format(
                type(self).__name__))

    def _write_pending(self):
        ''' Write whatever entry is still open. '''


class Url:
    '''
    A ``<url>`` entry of a sitemap.

    A url can be changed until the sitemap writes it, which happens when the
    next url is added or the sitemap is closed.
    '''
    def __init__(self, location, registry):
        self._location = location
        self._registry = registry
        self._last_modified = None
        self._change_frequency = None
        self._priority = None
        self._extensions = list()
        self._written = False

    def __repr__(self):
        return '<Url {}>'.format(self._location)

    @property
    def location(self):
        return self._location

    def set_last_modified(self, last_modified):
        '''
        :param last_modified: A datetime (written in UTC), a date, or an
            ISO-8601 string.
        '''
        self._check_writable()
        self._last_modified = codec.encode_lastmod(last_modified)
        return self

    def set_change_frequency(self, change_frequency):
        self._check_writable()
        if change_frequency not in CHANGE_FREQUENCIES:
            raise ValueError('Invalid change frequency: {}'
                .format(change_frequency))
        self._change_frequency = change_frequency
        return self

    def set_priority(self, priority):
        ''' :param float priority: Clamped into [0.0, 1.0]. '''
        self._check_writable()
        self._priority = codec.encode_priority(priority)
        return self

    def add_extension(self, capability):
        '''
        Add a new extension of the given capability to this url.

        :param str capability: e.g. ``sitemapper.extensions.IMAGE``.
        :rtype: ExtensionResult
        '''
        self._check_writable()
        factory = self._registry.get_factory(capability)
        if factory is None:
            logger.debug('No extension registered for %s', capability)
            return ExtensionResult(capability)
        extension = factory.new_instance()
        self._extensions.append((factory, extension))
        return ExtensionResult(capability, extension)

    def write_to(self, writer):
        '''
        Write this url and lock it.

        :param XmlStreamWriter writer:
        '''
        self._written = True
        writer.write_start_element('url')
        self._write_element(writer, 'loc', self._location)
        if self._last_modified is not None:
            self._write_element(writer, 'lastmod', self._last_modified)
        if self._change_frequency is not None:
            self._write_element(writer, 'changefreq', self._change_frequency)
        if self._priority is not None:
            self._write_element(writer, 'priority', self._priority)
        for factory, extension in self._extensions:
            fragment = self._render_extension(writer, factory, extension)
            if fragment is not None:
                writer.write_fragment(fragment)
        writer.write_end_element()

    def _render_extension(self, writer, factory, extension):
        buffer = writer.fork()
        extension_writer = ExtensionWriter(buffer, factory.namespace)
        try:
            if factory.empty_element:
                extension_writer.write_empty_element(factory.local_name)
            else:
                extension_writer.write_start_element(factory.local_name)
            extension.write_to(extension_writer)
            buffer.write_end_document()
        except MissingFieldError as exc:
            logger.debug('Omitting %s extension of %s: %s',
                factory.capability, self._location, exc)
            return None
        return buffer.getvalue()

    @staticmethod
    def _write_element(writer, local_name, text):
        writer.write_start_element(local_name)
        writer.write_characters(text)
        writer.write_end_element()

    def _check_writable(self):
        if self._written:
            raise SitemapStateError('{!r} has already been written'
                .format(self))


class Sitemap(_DocumentBuilder):
    ''' Build a ``<urlset>`` document. '''
    def __init__(self, stream, registry):
        '''
        Constructor.

        Writes the XML declaration and the ``<urlset>`` start tag, declaring
        the namespace of every registered extension.

        :param stream: A text stream.
        :param sitemapper.extensions.ExtensionRegistry registry:
        '''
        self._registry = registry
        self._pending = None
        super().__init__(stream, 'urlset', registry.namespaces)

    def __repr__(self):
        return '<Sitemap entries={}>'.format(self._entries)

    def add_url(self, location):
        '''
        Add a url. The previous url is written first.

        :param str location:
        :rtype: Url
        :raises SitemapStateError: If the sitemap is closed.
        :raises SitemapException: If the previous url cannot be written.
        '''
        self._check_open()
        try:
            self._write_pending()
            self._writer.flush()
        except OSError as exc:
            raise SitemapException('Cannot write url') from exc
        self._pending = Url(location, self._registry)
        self._entries += 1
        return self._pending

    def _write_pending(self):
        if self._pending is not None:
            url, self._pending = self._pending, None
            url.write_to(self._writer)


class SitemapIndex(_DocumentBuilder):
    ''' Build a ``<sitemapindex>`` document. '''
    def __init__(self, stream):
        ''' :param stream: A text stream. '''
        super().__init__(stream, 'sitemapindex', {})

    def __repr__(self):
        return '<SitemapIndex entries={}>'.format(self._entries)

    def add_sitemap(self, location, last_modified=None):
        '''
        Add a sitemap to the index.

        :param str location:
        :param last_modified: Optional datetime, date or ISO-8601 string.
        :raises SitemapStateError: If the index is closed.
        :raises SitemapException: If the entry cannot be written.
        '''
        self._check_open()
        lastmod = None
        if last_modified is not None:
            lastmod = codec.encode_lastmod(last_modified)
        try:
            self._writer.write_start_element('sitemap')
            self._writer.write_start_element('loc')
            self._writer.write_characters(location)
            self._writer.write_end_element()
            if lastmod is not None:
                self._writer.write_start_element('lastmod')
                self._writer.write_characters(lastmod)
                self._writer.write_end_element()
            self._writer.write_end_element()
            self._writer.flush()
        except OSError as exc:
            raise SitemapException('Cannot write sitemap entry') from exc
        self._entries += 1
        return self
