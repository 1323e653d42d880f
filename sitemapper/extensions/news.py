'''
Google News sitemap entries.

See https://developers.google.com/search/docs/crawling-indexing/sitemaps/news-sitemap
'''
import logging

from .. import codec
from .base import Extension


logger = logging.getLogger(__name__)
NAMESPACE = 'http://www.google.com/schemas/sitemap-news/0.9'
MAX_STOCK_TICKERS = 5


class AccessRestriction:
    ''' Allowed values of ``<news:access>``. '''
    SUBSCRIPTION = 'Subscription'
    REGISTRATION = 'Registration'


class Genre:
    ''' Allowed values of ``<news:genres>``. '''
    PRESS_RELEASE = 'PressRelease'
    SATIRE = 'Satire'
    BLOG = 'Blog'
    OP_ED = 'OpEd'
    OPINION = 'Opinion'
    USER_GENERATED = 'UserGenerated'


ACCESS_RESTRICTIONS = (AccessRestriction.SUBSCRIPTION,
    AccessRestriction.REGISTRATION)
GENRES = (Genre.PRESS_RELEASE, Genre.SATIRE, Genre.BLOG, Genre.OP_ED,
    Genre.OPINION, Genre.USER_GENERATED)


class NewsExtension(Extension):
    '''
    A ``<news:news>`` entry of a url.

    Publication name, publication language, publication date and title are
    required.
    '''
    def __init__(self):
        self._publication_name = None
        self._publication_language = None
        self._publication_date = None
        self._title = None
        self._access_restriction = None
        self._genres = None
        self._keywords = None
        self._stock_tickers = None

    def set_publication_name(self, name):
        self._publication_name = name
        return self

    def set_publication_language(self, locale):
        '''
        :param str locale: A locale such as ``en``, ``de-CH`` or ``zh_TW``.
        '''
        self._publication_language = codec.to_news_language(locale)
        return self

    def set_publication_date(self, date):
        '''
        :param date: A date, a datetime or an ISO-8601 string. Datetimes keep
            their UTC offset.
        '''
        self._publication_date = codec.encode_temporal(date)
        return self

    def set_title(self, title):
        self._title = title
        return self

    def set_access_restriction(self, access_restriction):
        if access_restriction is not None and \
                access_restriction not in ACCESS_RESTRICTIONS:
            raise ValueError('Invalid access restriction: {}'
                .format(access_restriction))
        self._access_restriction = access_restriction
        return self

    def set_genres(self, *genres):
        for genre in genres:
            if genre not in GENRES:
                raise ValueError('Invalid genre: {}'.format(genre))
        unique = list(dict.fromkeys(genres))
        self._genres = ','.join(unique) if unique else None
        return self

    def set_keywords(self, *keywords):
        self._keywords = ','.join(keywords) if keywords else None
        return self

    def set_stock_tickers(self, *stock_tickers):
        '''
        Only tickers of the form ``EXCHANGE:SYMBOL`` are kept, and at most
        five of them.
        '''
        tickers = codec.filter_stock_tickers(stock_tickers, MAX_STOCK_TICKERS)
        self._stock_tickers = ','.join(tickers) if tickers else None
        return self

    def write_to(self, writer):
        name = self.required(self._publication_name,
            'publication name missing')
        language = self.required(self._publication_language,
            'publication language missing')
        date = self.required(self._publication_date,
            'publication date missing')
        title = self.required(self._title, 'title missing')

        writer.write_start_element('publication')
        self.write_element(writer, 'name', name)
        self.write_element(writer, 'language', language)
        writer.write_end_element()
        self.write_optional(writer, 'access', self._access_restriction)
        self.write_optional(writer, 'genres', self._genres)
        self.write_element(writer, 'publication_date', date)
        self.write_element(writer, 'title', title)
        self.write_optional(writer, 'keywords', self._keywords)
        self.write_optional(writer, 'stock_tickers', self._stock_tickers)
