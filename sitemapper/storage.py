'''
Keep generated sitemap files so that they can be served without generating
them on every request.
'''
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime
import logging
import threading

from . import codec
from .pubsub import new_purge_event, new_update_event
from .selector import (
    get_file_selector,
    get_sitemap_selector,
    get_top_level_sitemap_root,
)


logger = logging.getLogger(__name__)


@dataclass
class SitemapStorageInfo:
    ''' Describes one stored sitemap file. '''
    path: str
    selector: str
    root_path: str
    name: str
    file_index: int
    size: int
    entries: int
    last_modified: datetime


class SitemapStorage:
    '''
    An in-memory store of sitemap files.

    Files are keyed by a storage path made of the base path, the path of the
    top level sitemap root and the selector, e.g.
    ``/var/sitemaps/content/site/de/products-news-sitemap-2.xml``. Every
    write publishes an update event, every deletion a purge event.

    Generation jobs write from worker threads, so all access is serialized
    with a lock.
    '''
    def __init__(self, pubsub=None, base_path='/var/sitemaps'):
        '''
        Constructor.

        :param sitemapper.pubsub.PubSub pubsub: Receives storage events.
        :param str base_path:
        '''
        self._pubsub = pubsub
        self._base_path = base_path.rstrip('/')
        self._files = OrderedDict()
        self._lock = threading.Lock()

    def __repr__(self):
        return '<SitemapStorage base_path={} files={}>'.format(
            self._base_path, len(self._files))

    @property
    def base_path(self):
        return self._base_path

    def get_storage_path(self, root, name, file_index=1):
        '''
        Return the storage path of a sitemap file.

        :param sitemapper.resource.Resource root: A sitemap root.
        :param str name:
        :param int file_index:
        :rtype: str
        '''
        return self._locate(root, name, file_index)[1]

    def write_sitemap(self, root, name, data, file_index, size, entries):
        '''
        Store one file of a sitemap, replacing any previous version.

        :param sitemapper.resource.Resource root:
        :param str name:
        :param bytes data:
        :param int file_index: The file part, starting at 1.
        :param int size: The size of ``data`` in bytes.
        :param int entries: The number of urls in the file.
        :rtype: SitemapStorageInfo
        '''
        selector, path = self._locate(root, name, file_index)
        info = SitemapStorageInfo(
            path=path,
            selector=selector,
            root_path=root.path,
            name=name,
            file_index=file_index,
            size=size,
            entries=entries,
            last_modified=datetime.now(codec.UTC),
        )
        with self._lock:
            self._files[path] = (info, bytes(data))
        logger.info('Stored %s (%d urls, %d bytes)', path, entries, size)
        self._publish(new_update_event(name, root.path, entries, path, size))
        return info

    def get_sitemaps(self, top_level_root, names=None):
        '''
        List the stored files of every sitemap root below (and including)
        ``top_level_root``.

        :param sitemapper.resource.Resource top_level_root:
        :param names: Only list files of these sitemap names.
        :rtype: list[SitemapStorageInfo]
        '''
        directory = self._get_directory(top_level_root)
        with self._lock:
            infos = [info for path, (info, _) in self._files.items()
                if path.startswith(directory)]
        if names is not None:
            names = set(names)
            infos = [info for info in infos if info.name in names]
        return infos

    def read_sitemap(self, root, name, file_index=1):
        '''
        Return the content of a stored file.

        :rtype: bytes or None
        '''
        return self.read_file(self.get_storage_path(root, name, file_index))

    def read_file(self, path):
        ''' Return the content stored at a storage path, or None. '''
        with self._lock:
            entry = self._files.get(path)
        return entry[1] if entry is not None else None

    def delete_sitemaps(self, root, name, keep=0):
        '''
        Delete the stored files of one sitemap.

        :param sitemapper.resource.Resource root:
        :param str name:
        :param int keep: Keep the files with an index up to this one.
        :returns: The number of deleted files.
        :rtype: int
        '''
        with self._lock:
            purged = [path for path, (info, _) in self._files.items()
                if info.root_path == root.path and info.name == name and
                info.file_index > keep]
            for path in purged:
                del self._files[path]
        for path in purged:
            logger.info('Purged %s', path)
            self._publish(new_purge_event(path))
        return len(purged)

    def _locate(self, root, name, file_index):
        top_level_root = get_top_level_sitemap_root(root)
        selector = get_file_selector(
            get_sitemap_selector(root, top_level_root, name), file_index)
        path = self._get_directory(top_level_root) + selector + '.xml'
        return selector, path

    def _get_directory(self, top_level_root):
        return '{}{}/'.format(self._base_path, top_level_root.path.rstrip('/'))

    def _publish(self, event):
        if self._pubsub is not None:
            self._pubsub.publish(event)
