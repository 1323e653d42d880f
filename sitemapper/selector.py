'''
Map sitemap roots to request selectors and back.

A sitemap of the root ``/content/site/de/products`` below the top level
sitemap root ``/content/site/de`` with the name ``news`` is addressed by the
selector ``products-news-sitemap``. Its second file part is
``products-news-sitemap-2``. Because both names and paths may contain dashes,
resolving a selector can be ambiguous. All candidates are returned, the ones
closest to the top level root first.

Everything in this module is a pure function of the content tree.
'''
from collections import OrderedDict
import logging
import re

from . import CONTENT_NODE_NAME, DEFAULT_SITEMAP_NAME, PROPERTY_SITEMAP_ROOT


logger = logging.getLogger(__name__)
SITEMAP_SELECTOR = 'sitemap'
SITEMAP_SELECTOR_SUFFIX = '-' + SITEMAP_SELECTOR
JCR_SYSTEM_PATH = '/jcr:system/'
_UNSIGNED_INTEGER = re.compile(r'[0-9]+')


def is_sitemap_root(resource):
    '''
    Return True if ``resource`` is flagged as a sitemap root, either by its
    own property or by the property of its ``jcr:content`` child.

    :param sitemapper.resource.Resource resource: May be None.
    :rtype: bool
    '''
    if resource is None:
        return False
    flag = resource.properties.get(PROPERTY_SITEMAP_ROOT)
    if flag is None:
        content = resource.get_child(CONTENT_NODE_NAME)
        if content is not None:
            flag = content.properties.get(PROPERTY_SITEMAP_ROOT, False)
        else:
            flag = False
    return bool(flag)


def get_top_level_sitemap_root(sitemap_root):
    ''' Return the sitemap root closest to the tree root among
    ``sitemap_root`` and its ancestors. '''
    top_level = sitemap_root
    parent = sitemap_root.parent
    while parent is not None:
        if is_sitemap_root(parent):
            top_level = parent
        parent = parent.parent
    return top_level


def is_top_level_sitemap_root(resource):
    ''' Return True if ``resource`` is a sitemap root without a sitemap root
    ancestor. '''
    return is_sitemap_root(resource) and \
        get_top_level_sitemap_root(resource).path == resource.path


def normalize_sitemap_root(resource):
    '''
    Return the resource a sitemap root flag refers to.

    A flagged ``jcr:content`` node stands for its parent.

    :returns: The normalized resource, or None if ``resource`` is not a
        sitemap root.
    '''
    if not is_sitemap_root(resource):
        return None
    if resource.name == CONTENT_NODE_NAME:
        return resource.parent
    return resource


def get_sitemap_selector(sitemap_root, top_level_root, name):
    '''
    Return the selector that addresses the sitemap ``name`` of
    ``sitemap_root``.

    :param sitemapper.resource.Resource sitemap_root:
    :param sitemapper.resource.Resource top_level_root: The top level sitemap
        root that ``sitemap_root`` belongs to.
    :param str name:
    :rtype: str
    '''
    if name == DEFAULT_SITEMAP_NAME:
        selector = SITEMAP_SELECTOR
    else:
        selector = name + SITEMAP_SELECTOR_SUFFIX

    if sitemap_root.path != top_level_root.path:
        sub_path = sitemap_root.path[len(top_level_root.path) + 1:]
        selector = sub_path.replace('/', '-') + '-' + selector

    return selector


def resolve_sitemap_roots(top_level_root, selector):
    '''
    Find every sitemap root and name below ``top_level_root`` that
    ``selector`` may address.

    This inverts ``get_sitemap_selector()``. The optional file index suffix of
    the selector is ignored.

    :param sitemapper.resource.Resource top_level_root:
    :param str selector:
    :returns: An ordered mapping of sitemap root to sitemap name, shallowest
        first. Empty if nothing matches or ``top_level_root`` is not a top
        level sitemap root.
    :rtype: OrderedDict
    '''
    roots = OrderedDict()
    if not is_top_level_sitemap_root(top_level_root):
        return roots
    if selector == SITEMAP_SELECTOR:
        roots[top_level_root] = DEFAULT_SITEMAP_NAME
        return roots

    parts = selector.split('-')
    if len(parts) == 2 and parts[0] == SITEMAP_SELECTOR and \
            _is_integer(parts[1]):
        roots[top_level_root] = DEFAULT_SITEMAP_NAME
        return roots
    elif len(parts) > 1 and parts[-1] == SITEMAP_SELECTOR:
        parts = parts[:-1]
    elif len(parts) > 2 and parts[-2] == SITEMAP_SELECTOR and \
            _is_integer(parts[-1]):
        parts = parts[:-2]
    else:
        logger.debug('Not a sitemap selector: %s', selector)
        return roots

    _resolve(top_level_root, parts, roots)
    return roots


def _resolve(resource, parts, roots):
    if is_sitemap_root(resource) and resource not in roots:
        roots[resource] = '-'.join(parts)
    for j in range(1, len(parts) + 1):
        child = resource.get_child('-'.join(parts[:j]))
        if child is None:
            continue
        if j == len(parts):
            if is_sitemap_root(child) and child not in roots:
                roots[child] = DEFAULT_SITEMAP_NAME
        else:
            _resolve(child, parts[j:], roots)


def find_sitemap_roots(tree, search_path=None):
    '''
    Lazily yield the normalized sitemap roots below ``search_path``.

    The search path itself is never yielded, even when it is a sitemap root,
    and neither is anything under ``/jcr:system/``. A root flagged both on
    itself and on its ``jcr:content`` node is yielded once.

    :param sitemapper.resource.ResourceTree tree:
    :param str search_path: Defaults to ``/``.
    '''
    search_path = search_path or '/'
    seen = set()
    for hit in tree.find_resources(search_path):
        root = normalize_sitemap_root(hit)
        if root is None or root.path == search_path or \
                root.path.startswith(JCR_SYSTEM_PATH) or root.path in seen:
            continue
        seen.add(root.path)
        yield root


def parse_file_index(selector):
    '''
    Return the file index of a sitemap selector: ``N`` for a selector ending
    in ``sitemap-N``, otherwise 1.

    :param str selector:
    :rtype: int
    '''
    parts = selector.split('-')
    if len(parts) >= 2 and parts[-2] == SITEMAP_SELECTOR and \
            _is_integer(parts[-1]):
        return int(parts[-1])
    return 1


def get_file_selector(selector, file_index):
    ''' Address file part ``file_index`` of the sitemap ``selector``. The
    first part has no suffix. '''
    if file_index > 1:
        return '{}-{}'.format(selector, file_index)
    return selector


def _is_integer(text):
    return _UNSIGNED_INTEGER.fullmatch(text) is not None
