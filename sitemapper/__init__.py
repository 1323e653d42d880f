# The name of a sitemap that is not distinguished by name. It never appears in
# a selector.
DEFAULT_SITEMAP_NAME = '<default>'

# The boolean property that flags a resource as sitemap root. It is read from
# the resource itself or from its content node.
PROPERTY_SITEMAP_ROOT = 'sitemapRoot'

CONTENT_NODE_NAME = 'jcr:content'

SITEMAP_NAMESPACE = 'http://www.sitemaps.org/schemas/sitemap/0.9'

CONTENT_TYPE = 'application/xml;charset=utf-8'


class SitemapException(Exception):
    ''' Indicates that a sitemap or sitemap index could not be built. '''
