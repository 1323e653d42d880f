import configparser
from dataclasses import dataclass
import pathlib


_root = pathlib.Path(__file__).resolve().parent.parent


def get_path(relpath):
    ''' Get absolute path to a project-relative path. '''
    return _root / relpath


def get_config():
    '''
    Read the application configuration from the standard configuration files.

    :rtype: ConfigParser
    '''
    config_dir = get_path("conf")
    config_files = [
        config_dir / "system.ini",
        config_dir / "local.ini",
    ]
    config = configparser.ConfigParser()
    config.optionxform = str
    config.read(config_files)
    return config


def parse_path_mappings(text):
    '''
    Parse path mappings of the form ``/content=, /var/www=/www`` into an
    ordered dict of prefix to replacement.
    '''
    mappings = dict()
    for item in text.split(','):
        item = item.strip()
        if not item:
            continue
        prefix, sep, replacement = item.partition('=')
        if not sep:
            raise ValueError('Invalid path mapping: {}'.format(item))
        mappings[prefix.strip()] = replacement.strip()
    return mappings


@dataclass
class SitemapConfig:
    ''' Typed settings for sitemap generation and serving. '''
    max_size: int = 50 * 1024 * 1024
    max_entries: int = 50000
    base_url: str = None
    path_mappings: dict = None
    storage_path: str = '/var/sitemaps'
    max_concurrent_jobs: int = 4

    @classmethod
    def from_config(cls, config=None):
        '''
        Read settings from the ``[sitemap]`` and ``[scheduler]`` sections.
        Missing settings keep their defaults.

        :param configparser.ConfigParser config: Defaults to
            ``get_config()``.
        :rtype: SitemapConfig
        '''
        if config is None:
            config = get_config()
        defaults = cls()
        return cls(
            max_size=config.getint('sitemap', 'max_size',
                fallback=defaults.max_size),
            max_entries=config.getint('sitemap', 'max_entries',
                fallback=defaults.max_entries),
            base_url=config.get('sitemap', 'base_url', fallback=None) or None,
            path_mappings=parse_path_mappings(
                config.get('sitemap', 'path_mappings', fallback='')),
            storage_path=config.get('sitemap', 'storage_path',
                fallback=defaults.storage_path),
            max_concurrent_jobs=config.getint('scheduler',
                'max_concurrent_jobs', fallback=defaults.max_concurrent_jobs),
        )
