'''
Generate sitemaps ahead of time and keep them in storage.
'''
from dataclasses import dataclass, field
from datetime import datetime
import logging

import trio

from . import SitemapException, codec
from .builder import Sitemap, TextBuffer
from .chain import ChainedIterator
from .generator import GeneratorContext
from .selector import find_sitemap_roots


logger = logging.getLogger(__name__)


class JobState:
    '''
    The states of a sitemap generation job.

    Unlike an enum, the values are also strings, which makes them easy to log.
    '''
    PENDING = 'pending'
    RUNNING = 'running'
    COMPLETED = 'completed'
    FAILED = 'failed'


FINISHED_STATES = (JobState.COMPLETED, JobState.FAILED)


@dataclass
class JobStateEvent:
    ''' Reports a state change of one generation job. '''
    root_path: str
    name: str
    state: str
    event_time: datetime
    files: list = field(default_factory=list)


class _MultiFileSitemap:
    '''
    Look like a single ``Sitemap`` to a generator while writing as many file
    parts as needed.

    A new part is started when the current one has reached the maximum number
    of entries or the maximum size. The size check only considers urls that
    were already written, so a part may exceed the maximum size by about one
    url.
    '''
    def __init__(self, executor, root, name):
        self._executor = executor
        self._root = root
        self._name = name
        self._buffer = None
        self._current = None
        self._file_index = 0
        self._entries = 0
        self._size = 0
        self.files = list()

    @property
    def entries(self):
        return self._entries

    @property
    def size(self):
        current = self._current.size if self._current is not None else 0
        return self._size + current

    def add_url(self, location):
        if self._current is not None and self._is_full():
            self._finish_file()
        if self._current is None:
            self._start_file()
        self._entries += 1
        return self._current.add_url(location)

    def close(self):
        ''' Write the last part. Returns the number of parts written. '''
        if self._current is not None:
            self._finish_file()
        return self._file_index

    def _is_full(self):
        executor = self._executor
        return self._current.entries >= executor.max_entries or \
            self._current.size >= executor.max_size

    def _start_file(self):
        self._file_index += 1
        self._buffer = TextBuffer()
        self._current = Sitemap(self._buffer, self._executor.registry)

    def _finish_file(self):
        sitemap, self._current = self._current, None
        sitemap.close()
        data = self._buffer.getvalue().encode('utf8')
        self._size += len(data)
        info = self._executor.storage.write_sitemap(self._root, self._name,
            data, self._file_index, len(data), sitemap.entries)
        self.files.append(info)


class SitemapGeneratorExecutor:
    '''
    Run the generator of one sitemap and store its output.

    This class is synchronous. The scheduler runs it in worker threads.
    '''
    def __init__(self, storage, generators, registry, max_entries=50000,
            max_size=50 * 1024 * 1024):
        '''
        Constructor.

        :param sitemapper.storage.SitemapStorage storage:
        :param sitemapper.generator.SitemapGeneratorManager generators:
        :param sitemapper.extensions.ExtensionRegistry registry:
        :param int max_entries: The maximum number of urls per file.
        :param int max_size: The maximum size of a file in bytes.
        '''
        if max_entries < 1 or max_size < 1:
            raise ValueError('max_entries and max_size must be positive')
        self.storage = storage
        self.generators = generators
        self.registry = registry
        self.max_entries = max_entries
        self.max_size = max_size

    def __repr__(self):
        return '<SitemapGeneratorExecutor max_entries={} max_size={}>'.format(
            self.max_entries, self.max_size)

    def execute(self, root, name, context=None):
        '''
        Generate the sitemap ``name`` of ``root`` into storage.

        File parts left over from an earlier, larger run are deleted. If the
        generator produces no urls at all, every stored part is deleted.

        :param sitemapper.resource.Resource root:
        :param str name:
        :param sitemapper.generator.GeneratorContext context:
        :returns: The stored files.
        :rtype: list[sitemapper.storage.SitemapStorageInfo]
        :raises SitemapException: If there is no generator for the name or
            the generator fails.
        '''
        generator = self.generators.get_generator(root, name)
        if generator is None:
            raise SitemapException('No generator for sitemap {} of {}'
                .format(name, root.path))

        logger.info('%r Generating sitemap %s of %s', self, name, root.path)
        sitemap = _MultiFileSitemap(self, root, name)
        generator.generate(root, name, sitemap, context or GeneratorContext())
        file_count = sitemap.close()
        purged = self.storage.delete_sitemaps(root, name, keep=file_count)
        logger.info('%r Generated sitemap %s of %s: %d urls in %d files'
            ' (%d purged)', self, name, root.path, sitemap.entries, file_count,
            purged)
        return sitemap.files


class SitemapScheduler:
    '''
    Run sitemap generation jobs in the background.

    Each job runs a ``SitemapGeneratorExecutor`` in a worker thread. The
    number of concurrent jobs is bounded by a capacity limiter.
    '''
    def __init__(self, tree, executor, generators, max_concurrent_jobs=4):
        '''
        Constructor.

        :param sitemapper.resource.ResourceTree tree:
        :param SitemapGeneratorExecutor executor:
        :param sitemapper.generator.SitemapGeneratorManager generators:
        :param int max_concurrent_jobs:
        '''
        self._tree = tree
        self._executor = executor
        self._generators = generators
        self._limiter = trio.CapacityLimiter(max_concurrent_jobs)
        self._nursery = None
        self._pending = 0
        self._idle = trio.Event()
        self._idle.set()
        self._job_state_channels = dict()

    def __repr__(self):
        return '<SitemapScheduler>'

    @property
    def pending_jobs(self):
        ''' The number of jobs that are queued or running. '''
        return self._pending

    def get_job_state_channel(self, size=10):
        '''
        Open a new job state channel.

        ``JobStateEvent`` objects are sent to this channel when a job changes
        state. When the channel is full, events are dropped, so consumers need
        to read events continually.

        :param int size: The size of the channel.
        :rtype: trio.MemoryReceiveChannel
        '''
        send_channel, recv_channel = trio.open_memory_channel(size)
        self._job_state_channels[recv_channel] = send_channel
        return recv_channel

    async def run(self, *, task_status=trio.TASK_STATUS_IGNORED):
        '''
        Run the scheduler.

        Call ``await nursery.start(scheduler.run)`` to make sure the scheduler
        is ready before scheduling any jobs.

        :returns: This function runs until cancelled.
        '''
        async with trio.open_nursery() as nursery:
            self._nursery = nursery
            task_status.started()
            await trio.sleep_forever()

    def schedule(self, root, names=None):
        '''
        Queue generation jobs for a sitemap root.

        :param sitemapper.resource.Resource root:
        :param names: The names to generate. By default every name of the
            root that is not served on demand.
        :returns: The number of queued jobs.
        :rtype: int
        '''
        if self._nursery is None:
            raise RuntimeError('{!r} is not running'.format(self))
        if names is None:
            names = self._generators.get_stored_names(root)
        count = 0
        for name in names:
            if self._pending == 0:
                self._idle = trio.Event()
            self._pending += 1
            self._send_job_state_event(root, name, JobState.PENDING)
            self._nursery.start_soon(self._run_job, root, name)
            count += 1
        return count

    def generate_all(self, top_level_root):
        '''
        Queue generation of every stored sitemap of a top level sitemap root
        and all sitemap roots below it.

        :param sitemapper.resource.Resource top_level_root:
        :returns: The number of queued jobs.
        :rtype: int
        '''
        roots = ChainedIterator([top_level_root],
            find_sitemap_roots(self._tree, top_level_root.path))
        return sum(self.schedule(root) for root in roots)

    async def join(self):
        ''' Wait until every queued job has finished. '''
        await self._idle.wait()

    async def _run_job(self, root, name):
        try:
            async with self._limiter:
                self._send_job_state_event(root, name, JobState.RUNNING)
                try:
                    files = await trio.to_thread.run_sync(
                        self._executor.execute, root, name)
                except Exception:
                    logger.exception('%r Failed to generate sitemap %s of %s',
                        self, name, root.path)
                    self._send_job_state_event(root, name, JobState.FAILED)
                else:
                    self._send_job_state_event(root, name, JobState.COMPLETED,
                        files)
        finally:
            self._pending -= 1
            if self._pending == 0:
                self._idle.set()

    def _send_job_state_event(self, root, name, state, files=None):
        '''
        Send a job state event to all listeners.

        If a listener's channel is full, then the event is not sent to that
        listener. If the listener's channel is closed, then that channel is
        removed and will not be sent to in the future.
        '''
        event = JobStateEvent(root.path, name, state,
            datetime.now(codec.UTC), files or [])
        to_remove = list()
        for recv_channel, send_channel in self._job_state_channels.items():
            try:
                send_channel.send_nowait(event)
            except trio.WouldBlock:
                # The channel is full. Drop this message and move on.
                pass
            except trio.BrokenResourceError:
                to_remove.append(recv_channel)
        for recv_channel in to_remove:
            del self._job_state_channels[recv_channel]
