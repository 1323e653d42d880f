'''
Map extension capabilities to the factories, namespaces and element names
used to write them.
'''
from collections import OrderedDict
from dataclasses import dataclass
import logging
from typing import Any, Callable, Optional


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtensionProvider:
    '''
    Describes an extension as registered by whoever provides it.

    ``prefix`` is only the prefix the provider asks for. Providers sharing a
    namespace are all given the prefix of the first one registered. An
    extension with ``empty_element`` set renders attributes only, e.g.
    ``<xhtml:link .../>``.
    '''
    capability: str
    namespace: str
    prefix: str
    local_name: str
    factory: Callable[[], Any]
    empty_element: bool = False


@dataclass(frozen=True)
class ExtensionFactory:
    ''' A registered extension with its negotiated prefix. '''
    capability: str
    namespace: str
    prefix: str
    local_name: str
    factory: Callable[[], Any]
    empty_element: bool = False

    def new_instance(self):
        ''' Create a new, empty extension. '''
        return self.factory()


@dataclass(frozen=True)
class ExtensionResult:
    '''
    The outcome of adding an extension to a url.

    Asking for a capability that no provider is registered for is a normal
    outcome: ``found`` is False and ``extension`` is None.
    '''
    capability: str
    extension: Optional[Any] = None

    @property
    def found(self):
        return self.extension is not None

    def __bool__(self):
        return self.found


class ExtensionRegistry:
    '''
    An immutable registry of extension providers.

    Build a new registry when the set of providers changes.
    '''
    def __init__(self, providers=()):
        '''
        Constructor.

        :param providers: An iterable of ``ExtensionProvider`` in
            registration order.
        '''
        self._namespaces = OrderedDict()
        self._factories = OrderedDict()

        for provider in providers:
            if provider.capability in self._factories:
                logger.warning('Ignoring second provider for extension %s',
                    provider.capability)
                continue
            prefix = self._namespaces.setdefault(provider.namespace,
                provider.prefix)
            if prefix != provider.prefix:
                logger.debug('Extension %s uses prefix %s instead of %s for'
                    ' namespace %s', provider.capability, prefix,
                    provider.prefix, provider.namespace)
            self._factories[provider.capability] = ExtensionFactory(
                provider.capability,
                provider.namespace,
                prefix,
                provider.local_name,
                provider.factory,
                provider.empty_element,
            )

    def __repr__(self):
        return '<ExtensionRegistry capabilities={}>'.format(
            ','.join(self._factories))

    def __contains__(self, capability):
        return capability in self._factories

    @property
    def capabilities(self):
        ''' Registered capabilities in registration order. '''
        return tuple(self._factories)

    @property
    def namespaces(self):
        ''' An ordered mapping of namespace URI to prefix. '''
        return OrderedDict(self._namespaces)

    def get_factory(self, capability):
        '''
        Return the factory registered for ``capability``.

        :param str capability:
        :rtype: ExtensionFactory or None
        '''
        return self._factories.get(capability)

    def get_prefix(self, namespace):
        ''' Return the prefix used for ``namespace``, or None. '''
        return self._namespaces.get(namespace)
