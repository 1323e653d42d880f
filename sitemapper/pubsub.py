from dataclasses import dataclass, field
import logging


logger = logging.getLogger(__name__)
TOPIC_SITEMAP_UPDATED = 'sitemapper/UPDATED'
TOPIC_SITEMAP_PURGED = 'sitemapper/PURGED'
EVENT_PROPERTY_SITEMAP_NAME = 'sitemap.name'
EVENT_PROPERTY_SITEMAP_ROOT = 'sitemap.root'
EVENT_PROPERTY_SITEMAP_URLS = 'sitemap.urls'
EVENT_PROPERTY_SITEMAP_STORAGE_PATH = 'sitemap.storagePath'
EVENT_PROPERTY_SITEMAP_STORAGE_SIZE = 'sitemap.storageSize'


@dataclass
class Event:
    ''' A notification about stored sitemaps. '''
    topic: str
    properties: dict = field(default_factory=dict)

    def __repr__(self):
        return '<Event topic={} properties={!r}>'.format(self.topic,
            self.properties)


def new_update_event(name, root_path, url_count, storage_path, storage_size):
    '''
    Create the event sent after a sitemap file was written.

    :param str name: The sitemap name.
    :param str root_path: The path of the sitemap root.
    :param int url_count: The number of urls in the file.
    :param str storage_path: Where the file is stored.
    :param int storage_size: The size of the file in bytes.
    :rtype: Event
    '''
    return Event(TOPIC_SITEMAP_UPDATED, {
        EVENT_PROPERTY_SITEMAP_NAME: name,
        EVENT_PROPERTY_SITEMAP_ROOT: root_path,
        EVENT_PROPERTY_SITEMAP_URLS: url_count,
        EVENT_PROPERTY_SITEMAP_STORAGE_PATH: storage_path,
        EVENT_PROPERTY_SITEMAP_STORAGE_SIZE: storage_size,
    })


def new_purge_event(storage_path):
    ''' Create the event sent after a sitemap file was deleted. '''
    return Event(TOPIC_SITEMAP_PURGED, {
        EVENT_PROPERTY_SITEMAP_STORAGE_PATH: storage_path,
    })


class PubSub:
    ''' A really simple, in-memory publish-subscribe system. '''

    def __init__(self):
        ''' Constructor. '''
        self._callbacks = dict()

    def cancel(self, callback):
        ''' Remove a subscription. '''
        del self._callbacks[callback]

    def listen(self, callback, topic=None):
        '''
        Subscribe to events.

        :param callback: Called with each ``Event``.
        :param str topic: Only receive events of this topic. By default all
            events are received.
        '''
        self._callbacks[callback] = topic

    def publish(self, event):
        ''' Send an event to all subscribers of its topic. '''
        logger.debug('Publishing %r', event)
        for callback, topic in list(self._callbacks.items()):
            if topic is None or topic == event.topic:
                callback(event)
