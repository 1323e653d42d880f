from .base import Extension


NAMESPACE = 'http://www.google.com/schemas/sitemap-image/1.1'


class ImageExtension(Extension):
    ''' An ``<image:image>`` entry of a url. Only the location is required. '''
    def __init__(self):
        self._location = None
        self._caption = None
        self._geo_location = None
        self._title = None
        self._license = None

    def set_url(self, location):
        self._location = location
        return self

    def set_caption(self, caption):
        self._caption = caption
        return self

    def set_geo_location(self, geo_location):
        self._geo_location = geo_location
        return self

    def set_title(self, title):
        self._title = title
        return self

    def set_license(self, license_location):
        self._license = license_location
        return self

    def write_to(self, writer):
        self.write_element(writer, 'loc',
            self.required(self._location, 'image:loc is missing'))
        self.write_optional(writer, 'caption', self._caption)
        self.write_optional(writer, 'geo_location', self._geo_location)
        self.write_optional(writer, 'title', self._title)
        self.write_optional(writer, 'license', self._license)
