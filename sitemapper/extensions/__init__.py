'''
Pluggable sitemap extensions.

An extension is requested by its capability tag, e.g.
``url.add_extension(IMAGE)``. The built-in capabilities are the Google image,
video and news extensions and alternate language links.
'''
from .alternate import AlternateLanguageExtension
from .base import Extension, MissingFieldError
from .image import ImageExtension
from .news import NewsExtension
from .registry import (
    ExtensionFactory,
    ExtensionProvider,
    ExtensionRegistry,
    ExtensionResult,
)
from .video import VideoExtension, VideoValidationError
from . import alternate, image, news, video


IMAGE = 'image'
VIDEO = 'video'
NEWS = 'news'
ALTERNATE_LANGUAGE = 'alternate_language'

BUILTIN_PROVIDERS = (
    ExtensionProvider(IMAGE, image.NAMESPACE, 'image', 'image',
        ImageExtension),
    ExtensionProvider(VIDEO, video.NAMESPACE, 'video', 'video',
        VideoExtension),
    ExtensionProvider(NEWS, news.NAMESPACE, 'news', 'news', NewsExtension),
    ExtensionProvider(ALTERNATE_LANGUAGE, alternate.NAMESPACE, 'xhtml', 'link',
        AlternateLanguageExtension, empty_element=True),
)


def default_registry():
    ''' Return a registry of the built-in extensions. '''
    return ExtensionRegistry(BUILTIN_PROVIDERS)
