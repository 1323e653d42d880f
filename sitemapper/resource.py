'''
An in-memory content tree.

Resources are addressed by absolute, slash-separated paths. A resource has
properties and ordered children. The tree answers the one query sitemap
generation needs: which resources below a path are flagged as sitemap roots.
'''
from collections import OrderedDict
import logging

from . import PROPERTY_SITEMAP_ROOT


logger = logging.getLogger(__name__)


class Resource:
    ''' A node of the content tree. '''
    def __init__(self, name, parent=None, properties=None):
        '''
        Constructor.

        :param str name: The name of this node; empty for the tree root.
        :param Resource parent:
        :param dict properties:
        '''
        self._name = name
        self._parent = parent
        self._children = OrderedDict()
        self.properties = dict(properties or {})
        if parent is None:
            self._path = '/'
        elif parent.path == '/':
            self._path = '/' + name
        else:
            self._path = parent.path + '/' + name

    def __repr__(self):
        return '<Resource {}>'.format(self._path)

    @property
    def name(self):
        return self._name

    @property
    def path(self):
        return self._path

    @property
    def parent(self):
        return self._parent

    @property
    def children(self):
        ''' Child resources in insertion order. '''
        return list(self._children.values())

    def get_child(self, name):
        '''
        Return the direct child called ``name``.

        :param str name: A single path segment. It may contain dashes, dots or
            colons but no slash.
        :rtype: Resource or None
        '''
        return self._children.get(name)

    def walk(self):
        ''' Yield the descendants of this resource in document order. '''
        for child in self._children.values():
            yield child
            yield from child.walk()

    def _add_child(self, name, properties=None):
        child = Resource(name, self, properties)
        self._children[name] = child
        return child


class ResourceTree:
    ''' A tree of resources under a single root ``/``. '''
    def __init__(self):
        self._root = Resource('')

    def __repr__(self):
        return '<ResourceTree>'

    @property
    def root(self):
        return self._root

    @classmethod
    def from_dict(cls, document):
        '''
        Build a tree from a nested mapping, e.g. as loaded from JSON.

        Keys whose values are mappings become child resources; all other keys
        are properties of the enclosing resource. The top level mapping
        describes the tree root.

        :param dict document:
        :rtype: ResourceTree
        '''
        tree = cls()
        tree._load(tree.root, document)
        return tree

    def _load(self, resource, document):
        for key, value in document.items():
            if isinstance(value, dict):
                child = resource.get_child(key)
                if child is None:
                    child = resource._add_child(key)
                self._load(child, value)
            else:
                resource.properties[key] = value

    def create(self, path, properties=None):
        '''
        Create the resource at ``path`` along with any missing ancestors.

        If the resource already exists its properties are updated.

        :param str path: An absolute path.
        :param dict properties:
        :rtype: Resource
        '''
        resource = self._root
        for segment in self._split(path):
            child = resource.get_child(segment)
            if child is None:
                child = resource._add_child(segment)
            resource = child
        if properties:
            resource.properties.update(properties)
        return resource

    def get(self, path):
        '''
        Return the resource at ``path``.

        :param str path: An absolute path.
        :rtype: Resource or None
        '''
        resource = self._root
        for segment in self._split(path):
            resource = resource.get_child(segment)
            if resource is None:
                return None
        return resource

    def find_resources(self, search_path):
        '''
        Yield every resource below ``search_path`` whose sitemap root property
        is true, in document order.

        :param str search_path: An absolute path. A missing path yields
            nothing.
        '''
        start = self.get(search_path or '/')
        if start is None:
            logger.debug('Search path %s does not exist', search_path)
            return
        for resource in start.walk():
            if resource.properties.get(PROPERTY_SITEMAP_ROOT) is True:
                yield resource

    @staticmethod
    def _split(path):
        if not path.startswith('/'):
            raise ValueError('Path must be absolute: {}'.format(path))
        return [segment for segment in path.split('/') if segment]
