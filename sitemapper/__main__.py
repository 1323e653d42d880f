import argparse
import json
import logging
import pathlib
import sys

import trio

from .config import SitemapConfig, get_config
from .extensions import default_registry
from .generator import ResourceTreeSitemapGenerator, SitemapGeneratorManager
from .job import SitemapGeneratorExecutor, SitemapScheduler
from .pubsub import PubSub
from .resource import ResourceTree
from .selector import find_sitemap_roots, is_top_level_sitemap_root
from .server import LinkExternalizer, SitemapHandler
from .storage import SitemapStorage


logger = logging.getLogger('sitemapper')


def configure_logging(log_level, error_log):
    ''' Set default format and output stream for logging. '''
    log_format = '%(asctime)s [%(name)s] %(levelname)s: %(message)s'
    log_date_format = '%Y-%m-%d %H:%M:%S'
    log_formatter = logging.Formatter(log_format, log_date_format)
    log_level = getattr(logging, log_level.upper())
    log_handler = logging.StreamHandler(sys.stderr)
    log_handler.setFormatter(log_formatter)
    log_handler.setLevel(log_level)
    root_logger = logging.getLogger()
    root_logger.addHandler(log_handler)
    root_logger.setLevel(log_level)

    if error_log is not None:
        exc_handler = logging.FileHandler(error_log)
        exc_handler.setFormatter(log_formatter)
        exc_handler.setLevel(logging.ERROR)
        root_logger.addHandler(exc_handler)


def get_args(argv=None):
    ''' Parse command line arguments. '''
    arg_parser = argparse.ArgumentParser(
        prog='sitemapper',
        description='Generate sitemaps and sitemap indexes for a content tree'
    )
    arg_parser.add_argument(
        'tree',
        metavar='TREE_JSON',
        help='A JSON file describing the content tree'
    )
    arg_parser.add_argument(
        'output',
        metavar='OUTPUT_DIR',
        help='The directory to write sitemaps to'
    )
    arg_parser.add_argument(
        '--root',
        metavar='PATH',
        help='Only generate the sitemaps of this top level sitemap root'
            ' (default: all)'
    )
    arg_parser.add_argument(
        '--log-level',
        default='warning',
        metavar='LEVEL',
        choices=['debug', 'info', 'warning', 'error', 'critical'],
        help='Set logging verbosity (default: warning)'
    )
    arg_parser.add_argument(
        '--error-log',
        help='Copy error logs to the specified file.'
    )
    return arg_parser.parse_args(argv)


def get_top_level_roots(tree, path=None):
    '''
    Return the top level sitemap roots to generate.

    :param sitemapper.resource.ResourceTree tree:
    :param str path: A single top level root, or None for all of them.
    :rtype: list
    '''
    if path is not None:
        resource = tree.get(path)
        if not is_top_level_sitemap_root(resource):
            raise ValueError('Not a top level sitemap root: {}'.format(path))
        return [resource]
    return [root for root in find_sitemap_roots(tree, '/')
        if is_top_level_sitemap_root(root)]


async def generate(scheduler, roots):
    ''' Run the scheduler until all sitemaps of ``roots`` are generated. '''
    async with trio.open_nursery() as nursery:
        await nursery.start(scheduler.run)
        for root in roots:
            count = scheduler.generate_all(root)
            logger.info('Scheduled %d sitemaps for %s', count, root.path)
        await scheduler.join()
        nursery.cancel_scope.cancel()


def write_output(output_dir, storage, handler, roots):
    '''
    Copy stored sitemaps and a sitemap index per root into ``output_dir``.

    :returns: The number of files written.
    '''
    count = 0
    for root in roots:
        for info in storage.get_sitemaps(root):
            relpath = info.path[len(storage.base_path):].lstrip('/')
            _write_file(output_dir / relpath, storage.read_file(info.path))
            count += 1
        response = handler.handle(root, 'sitemap-index')
        index_path = output_dir / root.path.lstrip('/') / 'sitemap-index.xml'
        _write_file(index_path, response.body)
        count += 1
    return count


def _write_file(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open('wb') as f:
        f.write(data)
    logger.debug('Wrote %s', path)


def main(argv=None):
    ''' Generate sitemaps for a content tree. '''
    args = get_args(argv)
    configure_logging(args.log_level, args.error_log)
    config = SitemapConfig.from_config(get_config())

    with open(args.tree) as f:
        tree = ResourceTree.from_dict(json.load(f))
    roots = get_top_level_roots(tree, args.root)
    if not roots:
        logger.warning('No sitemap roots found in %s', args.tree)

    externalizer = LinkExternalizer(config.base_url, config.path_mappings)
    registry = default_registry()
    storage = SitemapStorage(PubSub(), config.storage_path)
    generators = SitemapGeneratorManager([
        ResourceTreeSitemapGenerator(externalizer=externalizer),
    ])
    executor = SitemapGeneratorExecutor(storage, generators, registry,
        config.max_entries, config.max_size)
    scheduler = SitemapScheduler(tree, executor, generators,
        config.max_concurrent_jobs)
    handler = SitemapHandler(tree, storage, generators, registry,
        externalizer)

    trio.run(generate, scheduler, roots)
    count = write_output(pathlib.Path(args.output), storage, handler, roots)
    logger.info('Wrote %d files to %s', count, args.output)


if __name__ == '__main__':
    main()
