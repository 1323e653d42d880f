'''
Serve sitemaps and sitemap indexes for requests to a top level sitemap root.

The handler is not tied to any web framework. It takes the requested resource
and the request's selector string and returns a ``SitemapResponse``:

* ``/content/site/de.sitemap-index.xml`` serves the sitemap index,
* ``/content/site/de.sitemap.<selector>.xml`` serves one sitemap file.
'''
from dataclasses import dataclass
import logging

from yarl import URL

from . import CONTENT_TYPE, SitemapException
from .builder import Sitemap, SitemapIndex, TextBuffer
from .chain import ChainedIterator
from .extensions import default_registry
from .generator import GeneratorContext
from .selector import (
    SITEMAP_SELECTOR,
    find_sitemap_roots,
    get_sitemap_selector,
    is_top_level_sitemap_root,
    parse_file_index,
    resolve_sitemap_roots,
)


logger = logging.getLogger(__name__)
SITEMAP_INDEX_SELECTOR = 'sitemap-index'


@dataclass
class SitemapResponse:
    ''' The outcome of a sitemap request. '''
    status: int
    body: bytes = b''
    content_type: str = None

    def __repr__(self):
        return '<SitemapResponse status={} size={}>'.format(self.status,
            len(self.body))

    @property
    def text(self):
        return self.body.decode('utf8')


class LinkExternalizer:
    '''
    Turn resource paths into the urls that appear in sitemap indexes.

    Path prefixes are rewritten first, e.g. with the mapping
    ``{'/content': ''}`` the path ``/content/site/de`` becomes ``/site/de``.
    If a base url is configured the result is resolved against it.
    '''
    def __init__(self, base_url=None, mappings=None):
        '''
        Constructor.

        :param str base_url: e.g. ``https://www.example.com``.
        :param dict mappings: Path prefix to replacement, tried in order.
        '''
        self._base_url = URL(base_url) if base_url else None
        self._mappings = list((mappings or {}).items())

    def __repr__(self):
        return '<LinkExternalizer base_url={}>'.format(self._base_url)

    def __call__(self, path):
        for prefix, replacement in self._mappings:
            if path == prefix or path.startswith(prefix + '/'):
                path = replacement + path[len(prefix):]
                break
        if self._base_url is None:
            return path
        base_path = self._base_url.path.rstrip('/')
        return str(self._base_url.with_path(base_path + path))


class SitemapHandler:
    ''' Dispatch sitemap and sitemap index requests. '''
    def __init__(self, tree, storage, generators, registry=None,
            externalizer=None):
        '''
        Constructor.

        :param sitemapper.resource.ResourceTree tree:
        :param sitemapper.storage.SitemapStorage storage:
        :param sitemapper.generator.SitemapGeneratorManager generators:
        :param sitemapper.extensions.ExtensionRegistry registry: Extensions
            available to sitemaps generated on demand.
        :param externalizer: Callable that maps a path to a url. Defaults to
            a ``LinkExternalizer`` that leaves paths unchanged.
        '''
        self._tree = tree
        self._storage = storage
        self._generators = generators
        self._registry = registry if registry is not None \
            else default_registry()
        self._externalizer = externalizer or LinkExternalizer()

    def __repr__(self):
        return '<SitemapHandler>'

    def handle(self, resource, selectors):
        '''
        Handle a request.

        :param sitemapper.resource.Resource resource: The requested resource.
        :param selectors: The dot-separated selector string of the request,
            or a list of selectors.
        :rtype: SitemapResponse
        '''
        if isinstance(selectors, str):
            selectors = selectors.split('.') if selectors else []

        if not is_top_level_sitemap_root(resource):
            logger.debug('%r is not a top level sitemap root', resource)
            return SitemapResponse(400)

        if selectors == [SITEMAP_INDEX_SELECTOR]:
            return self._serve_index(resource)
        elif len(selectors) == 2 and selectors[0] == SITEMAP_SELECTOR:
            return self._serve_sitemap(resource, selectors[1])

        logger.debug('Invalid selectors for %r: %s', resource,
            '.'.join(selectors))
        return SitemapResponse(400)

    def get_location(self, top_level_root, selector):
        ''' Return the url of a sitemap file below ``top_level_root``. '''
        if selector == SITEMAP_SELECTOR:
            path = '{}.sitemap.xml'.format(top_level_root.path)
        else:
            path = '{}.sitemap.{}.xml'.format(top_level_root.path, selector)
        return self._externalizer(path)

    def _serve_index(self, top_level_root):
        body = TextBuffer()
        index = SitemapIndex(body)
        on_demand = set()
        roots = ChainedIterator(
            find_sitemap_roots(self._tree, top_level_root.path),
            [top_level_root],
        )

        for root in roots:
            for name in self._generators.get_on_demand_names(root):
                on_demand.add((root.path, name))
                selector = get_sitemap_selector(root, top_level_root, name)
                index.add_sitemap(self.get_location(top_level_root, selector))

        for info in self._storage.get_sitemaps(top_level_root):
            if (info.root_path, info.name) in on_demand:
                logger.debug('Not listing stored %s, it is served on demand',
                    info.path)
                continue
            index.add_sitemap(self.get_location(top_level_root, info.selector),
                info.last_modified)

        index.close()
        data = body.getvalue().encode('utf8')
        return SitemapResponse(200, data, CONTENT_TYPE)

    def _serve_sitemap(self, top_level_root, selector):
        file_index = parse_file_index(selector)
        candidates = resolve_sitemap_roots(top_level_root, selector)

        for root, name in candidates.items():
            if file_index == 1 and \
                    name in self._generators.get_on_demand_names(root):
                return self._generate(root, name)
            data = self._storage.read_sitemap(root, name, file_index)
            if data is not None:
                return SitemapResponse(200, data, CONTENT_TYPE)

        logger.debug('No sitemap for selector %s of %r', selector,
            top_level_root)
        return SitemapResponse(404)

    def _generate(self, root, name):
        generator = self._generators.get_generator(root, name)
        body = TextBuffer()
        try:
            sitemap = Sitemap(body, self._registry)
            generator.generate(root, name, sitemap, GeneratorContext())
            sitemap.close()
        except SitemapException:
            logger.exception('Failed to generate sitemap %s of %s', name,
                root.path)
            return SitemapResponse(500)
        logger.info('Generated sitemap %s of %s on demand', name, root.path)
        data = body.getvalue().encode('utf8')
        return SitemapResponse(200, data, CONTENT_TYPE)
