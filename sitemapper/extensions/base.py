import logging

from .. import SitemapException


logger = logging.getLogger(__name__)


class MissingFieldError(SitemapException):
    '''
    A mandatory field of an extension is not set.

    The sitemap builder catches this error and leaves the extension out of
    the document.
    '''


class Extension:
    '''
    Base class for the data of one sitemap extension element.

    Subclasses collect their fields through setters that return ``self`` and
    render them in ``write_to()``. An extension belongs to exactly one url and
    is rendered exactly once.
    '''

    def write_to(self, writer):
        '''
        Render the extension's child elements.

        The builder has already opened the extension's own element (e.g.
        ``<image:image>``) when this is called.

        :param sitemapper.xmlstream.ExtensionWriter writer:
        :raises MissingFieldError: If a mandatory field is not set.
        '''
        raise NotImplementedError()

    @staticmethod
    def required(value, message):
        ''' Return ``value``, or raise ``MissingFieldError`` if it is None. '''
        if value is None:
            raise MissingFieldError(message)
        return value

    @staticmethod
    def write_element(writer, local_name, text):
        ''' Write ``<local_name>text</local_name>``. '''
        writer.write_start_element(local_name)
        writer.write_characters(text)
        writer.write_end_element()

    @classmethod
    def write_optional(cls, writer, local_name, text):
        ''' Write an element only if ``text`` is not None. '''
        if text is not None:
            cls.write_element(writer, local_name, text)
