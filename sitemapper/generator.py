'''
Sitemap generators and the registry that picks a generator per sitemap name.
'''
from collections import OrderedDict
import logging

from . import CONTENT_NODE_NAME, DEFAULT_SITEMAP_NAME
from .selector import is_sitemap_root


logger = logging.getLogger(__name__)
PROPERTY_LAST_MODIFIED = 'lastModified'


class GeneratorContext:
    ''' A property bag that a generator can use to keep state while it
    generates a sitemap. '''
    def __init__(self, properties=None):
        self._properties = dict(properties or {})

    def __repr__(self):
        return '<GeneratorContext {!r}>'.format(self._properties)

    def get_property(self, name, default=None):
        return self._properties.get(name, default)

    def set_property(self, name, value):
        ''' Set a property. Setting it to None removes it. '''
        if value is None:
            self._properties.pop(name, None)
        else:
            self._properties[name] = value


class SitemapGenerator:
    '''
    Base class for sitemap generators.

    A generator decides which sitemaps a sitemap root has and writes their
    urls. Subclasses must implement ``generate()``.
    '''
    def get_names(self, sitemap_root):
        '''
        Return the names of the sitemaps this generator provides for
        ``sitemap_root``.

        :param sitemapper.resource.Resource sitemap_root:
        :rtype: list[str]
        '''
        return [DEFAULT_SITEMAP_NAME]

    def get_on_demand_names(self, sitemap_root):
        '''
        Return the subset of ``get_names()`` that is generated when requested
        instead of being stored ahead of time.

        :rtype: list[str]
        '''
        return []

    def generate(self, sitemap_root, name, sitemap, context):
        '''
        Write the urls of one sitemap.

        :param sitemapper.resource.Resource sitemap_root:
        :param str name:
        :param sitemapper.builder.Sitemap sitemap:
        :param GeneratorContext context:
        :raises sitemapper.SitemapException: If the sitemap cannot be
            generated.
        '''
        raise NotImplementedError()


class ResourceTreeSitemapGenerator(SitemapGenerator):
    '''
    Add a url for the sitemap root and every resource below it.

    ``jcr:content`` nodes are skipped, and so is everything below a nested
    sitemap root, which has sitemaps of its own.
    '''
    def __init__(self, names=None, on_demand=False, externalizer=None):
        '''
        Constructor.

        :param list names: The sitemap names to provide. Defaults to the
            default sitemap only.
        :param bool on_demand: Serve all names on demand.
        :param externalizer: Optional callable that turns a resource path into
            a url. By default the resource path is used.
        '''
        self._names = list(names or [DEFAULT_SITEMAP_NAME])
        self._on_demand = on_demand
        self._externalizer = externalizer

    def __repr__(self):
        return '<ResourceTreeSitemapGenerator names={}>'.format(
            ','.join(self._names))

    def get_names(self, sitemap_root):
        return list(self._names)

    def get_on_demand_names(self, sitemap_root):
        return list(self._names) if self._on_demand else []

    def generate(self, sitemap_root, name, sitemap, context):
        for resource in self._walk(sitemap_root):
            location = resource.path
            if self._externalizer is not None:
                location = self._externalizer(location)
            url = sitemap.add_url(location)
            last_modified = self._get_last_modified(resource)
            if last_modified is not None:
                url.set_last_modified(last_modified)

    def _walk(self, resource):
        yield resource
        for child in resource.children:
            if child.name == CONTENT_NODE_NAME or is_sitemap_root(child):
                continue
            yield from self._walk(child)

    @staticmethod
    def _get_last_modified(resource):
        last_modified = resource.properties.get(PROPERTY_LAST_MODIFIED)
        if last_modified is None:
            content = resource.get_child(CONTENT_NODE_NAME)
            if content is not None:
                last_modified = content.properties.get(PROPERTY_LAST_MODIFIED)
        return last_modified


class SitemapGeneratorManager:
    '''
    Pick a generator for each sitemap name of a sitemap root.

    Generators are asked in registration order, and the first generator that
    provides a name owns it.
    '''
    def __init__(self, generators=()):
        self._generators = list(generators)

    def __repr__(self):
        return '<SitemapGeneratorManager generators={}>'.format(
            len(self._generators))

    def register(self, generator):
        ''' Add a generator with the lowest precedence. '''
        self._generators.append(generator)

    def get_generators(self, sitemap_root, names=None):
        '''
        Map each sitemap name of ``sitemap_root`` to its generator.

        :param sitemapper.resource.Resource sitemap_root:
        :param names: Only include these names.
        :rtype: OrderedDict
        '''
        generators = OrderedDict()
        for generator in self._generators:
            for name in generator.get_names(sitemap_root):
                if names is not None and name not in names:
                    continue
                if name in generators:
                    logger.debug('Sitemap %s of %s is already provided by %r',
                        name, sitemap_root.path, generators[name])
                    continue
                generators[name] = generator
        return generators

    def get_generator(self, sitemap_root, name):
        ''' Return the generator for one name, or None. '''
        return self.get_generators(sitemap_root, [name]).get(name)

    def get_names(self, sitemap_root):
        ''' All sitemap names of ``sitemap_root``. '''
        return list(self.get_generators(sitemap_root))

    def get_on_demand_names(self, sitemap_root):
        ''' The names of ``sitemap_root`` that are served on demand. '''
        return [name for name, generator
            in self.get_generators(sitemap_root).items()
            if name in generator.get_on_demand_names(sitemap_root)]

    def get_stored_names(self, sitemap_root):
        ''' The names of ``sitemap_root`` that are generated ahead of time. '''
        on_demand = set(self.get_on_demand_names(sitemap_root))
        return [name for name in self.get_names(sitemap_root)
            if name not in on_demand]
