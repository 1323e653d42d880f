from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from . import XML_HEADER, SITEMAP_NS, URLSET, make_site_tree
from sitemapper import CONTENT_TYPE, DEFAULT_SITEMAP_NAME, SitemapException
from sitemapper.extensions import ExtensionRegistry
from sitemapper.generator import (
    ResourceTreeSitemapGenerator,
    SitemapGenerator,
    SitemapGeneratorManager,
)
from sitemapper.server import LinkExternalizer, SitemapHandler
from sitemapper.storage import SitemapStorage


POINT_IN_TIME = datetime(2021, 5, 27, 13, 36, 34, tzinfo=timezone.utc)
LASTMOD = '<lastmod>2021-05-27T13:36:34Z</lastmod>'
INDEX = '<sitemapindex xmlns="{}">'.format(SITEMAP_NS)


class RootOnlyGenerator(ResourceTreeSitemapGenerator):
    ''' Provides its names for a single sitemap root only. '''
    def __init__(self, root_path, names, on_demand=False):
        super().__init__(names, on_demand)
        self._root_path = root_path

    def get_names(self, sitemap_root):
        if sitemap_root.path != self._root_path:
            return []
        return super().get_names(sitemap_root)


class Site:
    ''' The collaborators of a handler for ``/content/site/de``. '''
    def __init__(self, on_demand=False, news_on_demand=False):
        self.tree, self.root = make_site_tree()
        self.storage = SitemapStorage()
        self.news_generator = RootOnlyGenerator(self.root.path, ['news'],
            on_demand=news_on_demand)
        self.generator = ResourceTreeSitemapGenerator(on_demand=on_demand)
        self.generators = SitemapGeneratorManager([self.news_generator,
            self.generator])
        self.handler = SitemapHandler(self.tree, self.storage,
            self.generators, registry=ExtensionRegistry(),
            externalizer=LinkExternalizer(mappings={'/content': ''}))

    def store(self, name, file_index=1, data=b''):
        info = self.storage.write_sitemap(self.root, name, data, file_index,
            len(data), 0)
        info.last_modified = POINT_IN_TIME
        return info


@pytest.fixture
def site():
    return Site()


def test_bad_request_for_resources_that_are_not_sitemap_roots(site):
    not_a_root = site.tree.create('/content/site/en')
    nested = site.tree.create('/content/site/de/news', {'sitemapRoot': True})
    assert site.handler.handle(not_a_root, 'sitemap-index').status == 400
    assert site.handler.handle(nested, 'sitemap-index').status == 400
    assert site.handler.handle(None, 'sitemap-index').status == 400


def test_bad_request_for_invalid_selectors(site):
    handle = site.handler.handle
    assert handle(site.root, 'sitemap-index.somethingelse').status == 400
    assert handle(site.root, 'sitemap.something.else').status == 400
    assert handle(site.root, 'unknown').status == 400
    assert handle(site.root, '').status == 400


def test_index_contains_only_sitemaps_from_storage(site):
    site.store(DEFAULT_SITEMAP_NAME)
    site.store('news')

    response = site.handler.handle(site.root, 'sitemap-index')

    assert response.status == 200
    assert response.content_type == CONTENT_TYPE
    assert response.text == XML_HEADER + INDEX + \
        '<sitemap><loc>/site/de.sitemap.xml</loc>' + LASTMOD + '</sitemap>' \
        '<sitemap><loc>/site/de.sitemap.news-sitemap.xml</loc>' + LASTMOD + \
        '</sitemap>' \
        '</sitemapindex>'


def test_index_contains_multi_file_sitemaps(site):
    for file_index in (1, 2, 3):
        site.store(DEFAULT_SITEMAP_NAME, file_index)

    response = site.handler.handle(site.root, ['sitemap-index'])

    assert response.status == 200
    assert response.text == XML_HEADER + INDEX + \
        '<sitemap><loc>/site/de.sitemap.xml</loc>' + LASTMOD + '</sitemap>' \
        '<sitemap><loc>/site/de.sitemap.sitemap-2.xml</loc>' + LASTMOD + \
        '</sitemap>' \
        '<sitemap><loc>/site/de.sitemap.sitemap-3.xml</loc>' + LASTMOD + \
        '</sitemap>' \
        '</sitemapindex>'


def test_index_contains_on_demand_sitemaps_and_sitemaps_from_storage():
    site = Site(news_on_demand=True)
    site.store(DEFAULT_SITEMAP_NAME)

    response = site.handler.handle(site.root, 'sitemap-index')

    assert response.status == 200
    assert response.text == XML_HEADER + INDEX + \
        '<sitemap><loc>/site/de.sitemap.news-sitemap.xml</loc></sitemap>' \
        '<sitemap><loc>/site/de.sitemap.xml</loc>' + LASTMOD + '</sitemap>' \
        '</sitemapindex>'


def test_index_does_not_list_stale_files_of_on_demand_sitemaps():
    site = Site(news_on_demand=True)
    site.store('news')

    response = site.handler.handle(site.root, 'sitemap-index')

    assert response.text == XML_HEADER + INDEX + \
        '<sitemap><loc>/site/de.sitemap.news-sitemap.xml</loc></sitemap>' \
        '</sitemapindex>'


def test_index_contains_nested_on_demand_sitemaps():
    site = Site(on_demand=True, news_on_demand=True)
    site.tree.create('/content/site/de/products/jcr:content',
        {'sitemapRoot': True})
    site.tree.create('/content/site/de/categories/jcr:content',
        {'sitemapRoot': True})

    response = site.handler.handle(site.root, 'sitemap-index')

    assert response.status == 200
    assert response.text == XML_HEADER + INDEX + \
        '<sitemap><loc>/site/de.sitemap.products-sitemap.xml</loc>' \
        '</sitemap>' \
        '<sitemap><loc>/site/de.sitemap.categories-sitemap.xml</loc>' \
        '</sitemap>' \
        '<sitemap><loc>/site/de.sitemap.news-sitemap.xml</loc></sitemap>' \
        '<sitemap><loc>/site/de.sitemap.xml</loc></sitemap>' \
        '</sitemapindex>'


def test_sitemap_served_on_demand():
    site = Site(news_on_demand=True)

    response = site.handler.handle(site.root, 'sitemap.news-sitemap')

    assert response.status == 200
    assert response.content_type == CONTENT_TYPE
    assert response.text == XML_HEADER + URLSET + \
        '<url><loc>/content/site/de</loc></url>' \
        '</urlset>'


def test_only_first_file_is_served_on_demand():
    site = Site(news_on_demand=True)
    response = site.handler.handle(site.root, 'sitemap.news-sitemap-2')
    assert response.status == 404


def test_sitemap_served_from_storage(site):
    expected = XML_HEADER + URLSET + \
        '<url><loc>/content/site/en</loc></url>' \
        '</urlset>'
    site.store('foo', data=expected.encode('utf8'))

    response = site.handler.handle(site.root, 'sitemap.foo-sitemap')

    assert response.status == 200
    assert response.content_type == CONTENT_TYPE
    assert response.text == expected


def test_multi_file_sitemap_served_from_storage(site):
    expected = XML_HEADER + URLSET + \
        '<url><loc>/content/site/en</loc></url>' \
        '</urlset>'
    site.store('foo', file_index=2, data=expected.encode('utf8'))

    response = site.handler.handle(site.root, 'sitemap.foo-sitemap-2')

    assert response.status == 200
    assert response.text == expected
    assert site.handler.handle(site.root, 'sitemap.foo-sitemap').status == \
        404


def test_nested_sitemap_served_from_storage(site):
    products = site.tree.create('/content/site/de/products',
        {'sitemapRoot': True})
    site.storage.write_sitemap(products, DEFAULT_SITEMAP_NAME, b'products',
        1, 8, 0)

    response = site.handler.handle(site.root, 'sitemap.products-sitemap')

    assert response.status == 200
    assert response.body == b'products'


def test_sitemap_not_served(site):
    response = site.handler.handle(site.root, 'sitemap.sitemap')
    assert response.status == 404


def test_failing_generator(site):
    generator = Mock(SitemapGenerator)
    generator.get_names.return_value = ['broken']
    generator.get_on_demand_names.return_value = ['broken']
    generator.generate.side_effect = SitemapException('boom')
    site.generators.register(generator)

    response = site.handler.handle(site.root, 'sitemap.broken-sitemap')

    assert response.status == 500
    assert response.body == b''


def test_get_location(site):
    assert site.handler.get_location(site.root, 'sitemap') == \
        '/site/de.sitemap.xml'
    assert site.handler.get_location(site.root, 'news-sitemap-2') == \
        '/site/de.sitemap.news-sitemap-2.xml'


def test_link_externalizer():
    externalizer = LinkExternalizer('https://www.example.com/',
        {'/content/site': '', '/content': '/c'})
    assert externalizer('/content/site/de.sitemap.xml') == \
        'https://www.example.com/de.sitemap.xml'
    assert externalizer('/content/other') == 'https://www.example.com/c/other'
    assert externalizer('/contentious') == 'https://www.example.com/contentious'
    assert LinkExternalizer()('/content/site') == '/content/site'
