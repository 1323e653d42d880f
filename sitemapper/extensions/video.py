'''
Google video sitemap entries.

Numeric fields are clamped into the ranges allowed by the video sitemap
schema instead of being rejected.
'''
from dataclasses import dataclass
import logging
from typing import Optional

from .. import SitemapException, codec
from .base import Extension


logger = logging.getLogger(__name__)
NAMESPACE = 'http://www.google.com/schemas/sitemap-video/1.1'
MAX_DURATION = 28800
MAX_RATING = 5.0
MAX_TAGS = 32


class VideoValidationError(SitemapException):
    ''' A video has neither a content location nor a player location. '''


class Access:
    ''' Relationship of a restriction. '''
    ALLOW = 'allow'
    DENY = 'deny'


class Platform:
    WEB = 'web'
    MOBILE = 'mobile'
    TV = 'tv'


class PriceType:
    PURCHASE = 'purchase'
    RENT = 'rent'


class Resolution:
    STANDARD_DEFINITION = 'sd'
    HIGH_DEFINITION = 'hd'


ACCESS_VALUES = (Access.ALLOW, Access.DENY)
PLATFORMS = (Platform.WEB, Platform.MOBILE, Platform.TV)


@dataclass
class Price:
    ''' One ``<video:price>`` element. '''
    price: str
    currency: str
    type: Optional[str] = None
    resolution: Optional[str] = None


class VideoExtension(Extension):
    '''
    A ``<video:video>`` entry of a url.

    Thumbnail location, title and description are required; without them the
    video is left out of the sitemap. A video that has those but neither a
    content location nor a player location cannot be written at all and fails
    the build.
    '''
    def __init__(self):
        self._thumbnail_location = None
        self._title = None
        self._description = None
        self._content_location = None
        self._player_location = None
        self._duration = None
        self._expiration_date = None
        self._rating = None
        self._view_count = None
        self._publication_date = None
        self._tags = None
        self._category = None
        self._family_friendly = None
        self._access_restrictions = None
        self._access_restrictions_rel = None
        self._platform_restrictions = None
        self._platform_restrictions_rel = None
        self._prices = list()
        self._requires_subscription = None
        self._uploader = None
        self._uploader_info = None
        self._live = None

    def set_thumbnail(self, thumbnail_location):
        self._thumbnail_location = thumbnail_location
        return self

    def set_title(self, title):
        self._title = title
        return self

    def set_description(self, description):
        self._description = description
        return self

    def set_url(self, content_location):
        self._content_location = content_location
        return self

    def set_player_url(self, player_location):
        self._player_location = player_location
        return self

    def set_duration(self, duration):
        ''' :param int duration: Seconds, clamped into [0, 28800]. '''
        if duration is None:
            self._duration = None
        else:
            self._duration = str(codec.clamp(int(duration), 0, MAX_DURATION,
                'duration'))
        return self

    def set_expiration_date(self, date):
        self._expiration_date = None if date is None \
            else codec.encode_temporal(date)
        return self

    def set_rating(self, rating):
        ''' :param float rating: Clamped into [0.0, 5.0]. '''
        if rating is None:
            self._rating = None
        else:
            self._rating = codec.encode_float(codec.clamp(float(rating), 0.0,
                MAX_RATING, 'rating'))
        return self

    def set_view_count(self, view_count):
        if view_count is None:
            self._view_count = None
        else:
            self._view_count = str(codec.clamp(int(view_count), 0, None,
                'view count'))
        return self

    def set_publication_date(self, date):
        self._publication_date = None if date is None \
            else codec.encode_temporal(date)
        return self

    def set_tags(self, tags):
        self._tags = None if tags is None else list(tags)
        return self

    def set_category(self, category):
        self._category = category
        return self

    def set_family_friendly(self, family_friendly):
        self._family_friendly = codec.encode_bool(family_friendly)
        return self

    def set_access_restriction(self, restriction, country_codes):
        '''
        Restrict the video to (or from) a list of countries.

        Country codes are upper-cased and anything that is not two letters
        long is dropped. If no relationship or no valid code remains, the
        restriction is removed.

        :param str restriction: ``Access.ALLOW`` or ``Access.DENY``.
        :param country_codes: ISO 3166 country codes.
        '''
        codes = codec.filter_country_codes(country_codes or ())
        if restriction is not None and codes:
            self._check_access(restriction)
            self._access_restrictions = ' '.join(codes)
            self._access_restrictions_rel = restriction
        else:
            self._access_restrictions = None
            self._access_restrictions_rel = None
        return self

    def set_platform_restriction(self, restriction, platforms):
        if restriction is not None and platforms is not None:
            self._check_access(restriction)
            for platform in platforms:
                if platform not in PLATFORMS:
                    raise ValueError('Invalid platform: {}'.format(platform))
            self._platform_restrictions = ' '.join(platforms)
            self._platform_restrictions_rel = restriction
        else:
            self._platform_restrictions = None
            self._platform_restrictions_rel = None
        return self

    def add_price(self, price, currency, price_type=None, resolution=None):
        self._prices.append(Price(codec.encode_float(price), currency,
            price_type, resolution))
        return self

    def set_requires_subscription(self, requires_subscription):
        self._requires_subscription = codec.encode_bool(requires_subscription)
        return self

    def set_uploader(self, uploader):
        self._uploader = uploader
        return self

    def set_uploader_url(self, uploader_info):
        self._uploader_info = uploader_info
        return self

    def set_live(self, live):
        self._live = codec.encode_bool(live)
        return self

    def write_to(self, writer):
        thumbnail = self.required(self._thumbnail_location,
            'thumbnail location missing')
        title = self.required(self._title, 'title missing')
        description = self.required(self._description, 'description missing')
        if self._content_location is None and self._player_location is None:
            raise VideoValidationError('either content location or player'
                ' location is required')

        self.write_element(writer, 'thumbnail_loc', thumbnail)
        self.write_element(writer, 'title', title)
        self.write_element(writer, 'description', description)
        if self._content_location is not None:
            self.write_element(writer, 'content_loc', self._content_location)
        else:
            self.write_element(writer, 'player_loc', self._player_location)

        self.write_optional(writer, 'duration', self._duration)
        self.write_optional(writer, 'expiration_date', self._expiration_date)
        self.write_optional(writer, 'rating', self._rating)
        self.write_optional(writer, 'view_count', self._view_count)
        self.write_optional(writer, 'publication_date',
            self._publication_date)
        for tag in codec.truncate(self._tags or (), MAX_TAGS, 'tags'):
            self.write_element(writer, 'tag', tag)
        self.write_optional(writer, 'category', self._category)
        self.write_optional(writer, 'family_friendly', self._family_friendly)
        self._write_restriction(writer, 'restriction',
            self._access_restrictions, self._access_restrictions_rel)
        for price in self._prices:
            writer.write_start_element('price')
            writer.write_attribute('currency', price.currency)
            if price.type is not None:
                writer.write_attribute('type', price.type)
            if price.resolution is not None:
                writer.write_attribute('resolution', price.resolution)
            writer.write_characters(price.price)
            writer.write_end_element()
        self.write_optional(writer, 'requires_subscription',
            self._requires_subscription)
        if self._uploader is not None:
            writer.write_start_element('uploader')
            if self._uploader_info is not None:
                writer.write_attribute('info', self._uploader_info)
            writer.write_characters(self._uploader)
            writer.write_end_element()
        self._write_restriction(writer, 'platform',
            self._platform_restrictions, self._platform_restrictions_rel)
        self.write_optional(writer, 'live', self._live)

    @staticmethod
    def _check_access(restriction):
        if restriction not in ACCESS_VALUES:
            raise ValueError('Invalid relationship: {}'.format(restriction))

    @staticmethod
    def _write_restriction(writer, local_name, value, relationship):
        if value is not None:
            writer.write_start_element(local_name)
            writer.write_attribute('relationship', relationship)
            writer.write_characters(value)
            writer.write_end_element()
