'''
Streaming XML output.

``XmlStreamWriter`` writes XML events straight to a text stream without
building a tree, so that sitemaps with many thousands of entries can be
written in constant memory. ``ExtensionWriter`` restricts a writer to a single
namespace; it is what sitemap extensions render through.
'''
import io
import logging
from types import MappingProxyType
from xml.sax.saxutils import escape

from . import SitemapException


logger = logging.getLogger(__name__)
_ATTR_ENTITIES = {'"': '&quot;', '\n': '&#10;', '\r': '&#13;', '\t': '&#9;'}


class XmlStreamError(SitemapException):
    ''' The writer was used in a way that cannot produce well-formed XML. '''


class XmlStreamWriter:
    '''
    A forward-only XML writer in the style of StAX.

    Start tags are left open until the next event so that attributes can be
    added. An element that is started and ended without content is written as
    ``<a></a>``; use ``write_empty_element()`` to get ``<a/>``.

    Namespaces must be bound (``write_namespace``, ``write_default_namespace``
    or ``set_prefix``) before an element or attribute can use them.
    '''
    def __init__(self, stream, namespaces=None, default_namespace=None):
        '''
        Constructor.

        :param stream: A text stream with a ``write(str)`` method.
        :param dict namespaces: Initial namespace bindings, URI to prefix.
        :param str default_namespace: Initial default namespace.
        '''
        self._stream = stream
        self._prefixes = dict(namespaces or {})
        self._default_namespace = default_namespace
        self._properties = dict()
        self._stack = list()
        self._tag_open = False
        self._tag_empty = False

    def __repr__(self):
        return '<XmlStreamWriter depth={}>'.format(len(self._stack))

    @property
    def depth(self):
        ''' The number of elements that are currently open. '''
        return len(self._stack)

    @property
    def namespace_context(self):
        ''' A read-only view of the current namespace bindings. '''
        return MappingProxyType(self._prefixes)

    def get_prefix(self, namespace):
        ''' Return the prefix bound to ``namespace``, or None. '''
        if namespace == self._default_namespace:
            return ''
        return self._prefixes.get(namespace)

    def get_property(self, name):
        ''' Return a writer property, or None. '''
        return self._properties.get(name)

    def set_prefix(self, prefix, namespace):
        ''' Bind ``prefix`` to ``namespace`` without declaring it. '''
        self._prefixes[namespace] = prefix

    def set_default_namespace(self, namespace):
        ''' Make ``namespace`` the default without declaring it. '''
        self._default_namespace = namespace

    def set_namespace_context(self, namespaces):
        ''' Replace all prefix bindings. '''
        self._prefixes = dict(namespaces)

    def write_start_document(self, encoding='UTF-8', version='1.0'):
        self._write('<?xml version="{}" encoding="{}"?>'.format(version,
            encoding))

    def write_end_document(self):
        ''' Close every element that is still open. '''
        while self._stack or self._tag_open:
            if self._stack:
                self.write_end_element()
            else:
                self._close_start_tag()

    def write_start_element(self, local_name, namespace=None):
        self._close_start_tag()
        name = self._qualify(local_name, namespace)
        self._write('<' + name)
        self._stack.append(name)
        self._tag_open = True

    def write_empty_element(self, local_name, namespace=None):
        self._close_start_tag()
        self._write('<' + self._qualify(local_name, namespace))
        self._tag_open = True
        self._tag_empty = True

    def write_end_element(self):
        if not self._stack:
            raise XmlStreamError('No element is open')
        self._close_start_tag()
        self._write('</{}>'.format(self._stack.pop()))

    def write_attribute(self, local_name, value, namespace=None):
        if not self._tag_open:
            raise XmlStreamError('Attribute {} written outside of a start tag'
                .format(local_name))
        name = self._qualify(local_name, namespace)
        self._write(' {}="{}"'.format(name, escape(str(value),
            _ATTR_ENTITIES)))

    def write_namespace(self, prefix, namespace):
        ''' Declare ``xmlns:prefix`` on the open start tag and bind it. '''
        self.set_prefix(prefix, namespace)
        self.write_attribute('xmlns:' + prefix, namespace)

    def write_default_namespace(self, namespace):
        ''' Declare ``xmlns`` on the open start tag and bind it. '''
        self.set_default_namespace(namespace)
        self.write_attribute('xmlns', namespace)

    def write_characters(self, text):
        self._close_start_tag()
        self._write(escape(text))

    def write_cdata(self, data):
        if ']]>' in data:
            raise XmlStreamError('CDATA section may not contain "]]>"')
        self._close_start_tag()
        self._write('<![CDATA[{}]]>'.format(data))

    def write_comment(self, text):
        if '--' in text:
            raise XmlStreamError('Comment may not contain "--"')
        self._close_start_tag()
        self._write('<!--{}-->'.format(text))

    def write_processing_instruction(self, target, data=None):
        self._close_start_tag()
        if data is None:
            self._write('<?{}?>'.format(target))
        else:
            self._write('<?{} {}?>'.format(target, data))

    def write_dtd(self, dtd):
        self._close_start_tag()
        self._write(dtd)

    def write_entity_ref(self, name):
        self._close_start_tag()
        self._write('&{};'.format(name))

    def fork(self):
        '''
        Return a writer over a fresh string buffer that shares this writer's
        namespace bindings.

        Whatever is written to the fork can later be copied into this writer
        with ``write_fragment(fork.getvalue())``, or discarded.
        '''
        return _BufferedXmlStreamWriter(self._prefixes,
            self._default_namespace)

    def write_fragment(self, fragment):
        ''' Copy markup produced by a fork into this writer. '''
        if fragment:
            self._close_start_tag()
            self._write(fragment)

    def flush(self):
        self._close_start_tag()
        flush = getattr(self._stream, 'flush', None)
        if flush is not None:
            flush()

    def close(self):
        ''' Flush pending output. The underlying stream is left open. '''
        self.flush()

    def _close_start_tag(self):
        if self._tag_open:
            self._write('/>' if self._tag_empty else '>')
            self._tag_open = False
            self._tag_empty = False

    def _qualify(self, local_name, namespace):
        if namespace is None or namespace == self._default_namespace:
            return local_name
        try:
            prefix = self._prefixes[namespace]
        except KeyError:
            raise XmlStreamError('Namespace {} is not bound'
                .format(namespace)) from None
        return '{}:{}'.format(prefix, local_name) if prefix else local_name

    def _write(self, text):
        self._stream.write(text)


class _BufferedXmlStreamWriter(XmlStreamWriter):
    ''' A writer that renders into memory. '''
    def __init__(self, namespaces, default_namespace):
        super().__init__(io.StringIO(), namespaces, default_namespace)

    def getvalue(self):
        ''' Return everything written so far. '''
        self._close_start_tag()
        return self._stream.getvalue()


class ExtensionWriter:
    '''
    Restrict an ``XmlStreamWriter`` to one namespace.

    Elements are always written in the bound namespace. Passing any other
    namespace raises ``ValueError``. Operations that affect the document as a
    whole are not available, because the document belongs to the sitemap
    builder.
    '''
    def __init__(self, delegate, namespace):
        '''
        Constructor.

        :param XmlStreamWriter delegate:
        :param str namespace: The namespace URI this writer is bound to.
        '''
        self._delegate = delegate
        self._namespace = namespace

    def __repr__(self):
        return '<ExtensionWriter namespace={}>'.format(self._namespace)

    @property
    def namespace(self):
        return self._namespace

    def write_start_element(self, local_name, namespace=None, prefix=None):
        '''
        Start an element in the bound namespace.

        :param str prefix: Accepted for symmetry with the underlying writer
            and ignored; the bound namespace decides the prefix.
        '''
        self._check_namespace(namespace)
        self._delegate.write_start_element(local_name, self._namespace)

    def write_empty_element(self, local_name, namespace=None, prefix=None):
        self._check_namespace(namespace)
        self._delegate.write_empty_element(local_name, self._namespace)

    def write_end_element(self):
        self._delegate.write_end_element()

    def write_attribute(self, local_name, value, namespace=None, prefix=None):
        '''
        Write an attribute. Without a namespace the attribute is unqualified,
        which is what the sitemap extension schemas expect.
        '''
        if namespace is None:
            self._delegate.write_attribute(local_name, value)
        else:
            self._check_namespace(namespace)
            self._delegate.write_attribute(local_name, value, self._namespace)

    def write_characters(self, text):
        self._delegate.write_characters(text)

    def write_cdata(self, data):
        self._delegate.write_cdata(data)

    def get_prefix(self, namespace):
        return self._delegate.get_prefix(namespace)

    @property
    def namespace_context(self):
        return self._delegate.namespace_context

    def get_property(self, name):
        return self._delegate.get_property(name)

    def write_start_document(self, encoding=None, version=None):
        raise NotImplementedError('write_start_document')

    def write_end_document(self):
        raise NotImplementedError('write_end_document')

    def flush(self):
        raise NotImplementedError('flush')

    def close(self):
        raise NotImplementedError('close')

    def write_namespace(self, prefix, namespace):
        raise NotImplementedError('write_namespace')

    def write_default_namespace(self, namespace):
        raise NotImplementedError('write_default_namespace')

    def write_comment(self, text):
        raise NotImplementedError('write_comment')

    def write_processing_instruction(self, target, data=None):
        raise NotImplementedError('write_processing_instruction')

    def write_dtd(self, dtd):
        raise NotImplementedError('write_dtd')

    def write_entity_ref(self, name):
        raise NotImplementedError('write_entity_ref')

    def set_prefix(self, prefix, namespace):
        raise NotImplementedError('set_prefix')

    def set_default_namespace(self, namespace):
        raise NotImplementedError('set_default_namespace')

    def set_namespace_context(self, namespaces):
        raise NotImplementedError('set_namespace_context')

    def _check_namespace(self, namespace):
        if namespace is not None and namespace != self._namespace:
            raise ValueError('Namespace {} does not match {}'.format(
                namespace, self._namespace))
