from .. import codec
from .base import Extension


NAMESPACE = 'http://www.w3.org/1999/xhtml'
DEFAULT_HREFLANG = 'x-default'


class AlternateLanguageExtension(Extension):
    '''
    An ``<xhtml:link rel="alternate" hreflang="..." href="..."/>`` annotation
    pointing at a translation of the url.

    Both a locale (or the default marker) and an href are required.
    '''
    def __init__(self):
        self._hreflang = None
        self._href = None

    def set_locale(self, locale):
        ''' :param str locale: A locale such as ``fr-ch``, written as BCP-47.
        '''
        self._hreflang = codec.to_language_tag(locale)
        return self

    def set_default_locale(self):
        ''' Mark the href as the fallback for unmatched languages. '''
        self._hreflang = DEFAULT_HREFLANG
        return self

    def set_href(self, href):
        self._href = href
        return self

    def write_to(self, writer):
        hreflang = self.required(self._hreflang, 'hreflang missing')
        href = self.required(self._href, 'href missing')
        writer.write_attribute('rel', 'alternate')
        writer.write_attribute('hreflang', hreflang)
        writer.write_attribute('href', href)
