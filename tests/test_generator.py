from unittest.mock import Mock

import pytest

from . import make_site_tree
from sitemapper import DEFAULT_SITEMAP_NAME
from sitemapper.generator import (
    GeneratorContext,
    ResourceTreeSitemapGenerator,
    SitemapGenerator,
    SitemapGeneratorManager,
)


def make_generator(names, on_demand=()):
    generator = Mock(SitemapGenerator)
    generator.get_names.return_value = list(names)
    generator.get_on_demand_names.return_value = list(on_demand)
    return generator


def test_context_properties():
    context = GeneratorContext({'offset': 10})
    assert context.get_property('offset') == 10
    assert context.get_property('missing', 'x') == 'x'
    context.set_property('offset', 20)
    assert context.get_property('offset') == 20
    context.set_property('offset', None)
    assert context.get_property('offset') is None


def test_base_generator():
    _, root = make_site_tree()
    generator = SitemapGenerator()
    assert generator.get_names(root) == [DEFAULT_SITEMAP_NAME]
    assert generator.get_on_demand_names(root) == []
    with pytest.raises(NotImplementedError):
        generator.generate(root, DEFAULT_SITEMAP_NAME, Mock(),
            GeneratorContext())


def test_first_generator_wins():
    _, root = make_site_tree()
    first = make_generator(['news', 'images'])
    second = make_generator(['images', 'videos'])
    manager = SitemapGeneratorManager([first])
    manager.register(second)
    generators = manager.get_generators(root)
    assert list(generators) == ['news', 'images', 'videos']
    assert generators['images'] is first
    assert generators['videos'] is second
    assert manager.get_generator(root, 'videos') is second
    assert manager.get_generator(root, 'missing') is None
    assert list(manager.get_generators(root, ['videos'])) == ['videos']


def test_stored_and_on_demand_names():
    _, root = make_site_tree()
    first = make_generator(['news', 'images'], on_demand=['news'])
    # 'images' belongs to the first generator, so the on demand flag of the
    # second one is ignored.
    second = make_generator(['images', DEFAULT_SITEMAP_NAME],
        on_demand=['images'])
    manager = SitemapGeneratorManager([first, second])
    assert manager.get_names(root) == ['news', 'images', DEFAULT_SITEMAP_NAME]
    assert manager.get_on_demand_names(root) == ['news']
    assert manager.get_stored_names(root) == ['images', DEFAULT_SITEMAP_NAME]


def test_resource_tree_generator():
    tree, root = make_site_tree()
    tree.create('/content/site/de/about', {'lastModified': '2021-05-27'})
    tree.create('/content/site/de/about/team/jcr:content',
        {'lastModified': '2021-05-27T13:36:34Z'})
    tree.create('/content/site/de/news', {'sitemapRoot': True})
    tree.create('/content/site/de/news/article')
    generator = ResourceTreeSitemapGenerator(
        externalizer=lambda path: 'https://example.com' + path)
    sitemap = Mock()

    generator.generate(root, DEFAULT_SITEMAP_NAME, sitemap, GeneratorContext())

    locations = [c[0][0] for c in sitemap.add_url.call_args_list]
    assert locations == [
        'https://example.com/content/site/de',
        'https://example.com/content/site/de/about',
        'https://example.com/content/site/de/about/team',
    ]
    url = sitemap.add_url.return_value
    assert [c[0][0] for c in url.set_last_modified.call_args_list] == \
        ['2021-05-27', '2021-05-27T13:36:34Z']


def test_resource_tree_generator_names():
    _, root = make_site_tree()
    stored = ResourceTreeSitemapGenerator()
    assert stored.get_names(root) == [DEFAULT_SITEMAP_NAME]
    assert stored.get_on_demand_names(root) == []
    on_demand = ResourceTreeSitemapGenerator(['news'], on_demand=True)
    assert on_demand.get_names(root) == ['news']
    assert on_demand.get_on_demand_names(root) == ['news']
