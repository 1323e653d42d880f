'''
Normalize primitive field values into the strings that the sitemap XML
formats require.

All functions in this module are pure. Values that are out of range are
clamped (with a warning) rather than rejected.
'''
from datetime import date, datetime
import logging
import re

import dateutil.parser
from dateutil.tz import tzutc


logger = logging.getLogger(__name__)
UTC = tzutc()
STOCK_TICKER_PATTERN = re.compile(r'\w+:\w+')
_LOCALE_SPLIT = re.compile(r'[-_]')


def clamp(value, min_, max_, label=None):
    '''
    Clamp ``value`` into the closed range ``[min_, max_]``.

    Clamping a value that is already in range returns it unchanged, so this
    function is idempotent.

    :param value: A number.
    :param min_: The lower bound.
    :param max_: The upper bound, or None for no upper bound.
    :param str label: If given, log a warning naming this field when the value
        had to be adjusted.
    :returns: The clamped value.
    '''
    clamped = max(min_, value)
    if max_ is not None:
        clamped = min(clamped, max_)
    if clamped != value and label is not None:
        if max_ is None:
            logger.warning('Adjusting %s as it is out of bounds (>= %s): %s',
                label, min_, value)
        else:
            logger.warning('Adjusting %s as it is out of bounds (%s, %s): %s',
                label, min_, max_, value)
    return clamped


def truncate(items, limit, label=None):
    ''' Return the first ``limit`` items, logging a warning if any were
    dropped. '''
    items = list(items)
    if len(items) > limit and label is not None:
        logger.warning('Truncating %s as more than %d were given: %d', label,
            limit, len(items))
    return items[:limit]


def encode_bool(value):
    ''' Encode a boolean as ``yes`` or ``no``. None stays None. '''
    if value is None:
        return None
    return 'yes' if value else 'no'


def encode_float(value):
    ''' Encode a float in its shortest round-trip form, e.g. ``4.7`` or
    ``5.0``. '''
    return repr(float(value))


def encode_priority(value):
    ''' Clamp a url priority into [0, 1] and encode it with one decimal
    place. '''
    return '{:.1f}'.format(clamp(float(value), 0.0, 1.0))


def to_utc(value):
    '''
    Convert a datetime to UTC.

    A naive datetime is assumed to already be in UTC.

    :param datetime value:
    :rtype: datetime
    '''
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _isoformat(value):
    if value.microsecond == 0:
        text = value.isoformat()
    elif value.microsecond % 1000 == 0:
        text = value.isoformat(timespec='milliseconds')
    else:
        text = value.isoformat(timespec='microseconds')
    if text.endswith('+00:00'):
        text = text[:-6] + 'Z'
    return text


def encode_datetime_utc(value):
    '''
    Encode a point in time as an ISO-8601 timestamp in UTC, e.g.
    ``2021-05-27T13:36:34Z``.

    :param datetime value:
    :rtype: str
    '''
    return _isoformat(to_utc(value))


def parse_temporal(value):
    '''
    Accept a date, a datetime or an ISO-8601 string and return a date or a
    timezone-aware datetime.

    Strings without a time part become dates. Naive datetimes are taken as
    UTC.
    '''
    if isinstance(value, str):
        parsed = dateutil.parser.isoparse(value)
        if 'T' not in value:
            return parsed.date()
        value = parsed
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value
    if isinstance(value, date):
        return value
    raise TypeError('Expected date, datetime or ISO string, got {!r}'
        .format(value))


def encode_temporal(value):
    '''
    Encode a date as ``YYYY-MM-DD`` or a datetime as an ISO-8601 timestamp
    that keeps its UTC offset.

    :param value: date, datetime or ISO string.
    :rtype: str
    '''
    value = parse_temporal(value)
    if isinstance(value, datetime):
        return _isoformat(value)
    return value.isoformat()


def encode_lastmod(value):
    '''
    Encode a ``<lastmod>`` value: datetimes in UTC with a ``Z`` designator,
    dates as ``YYYY-MM-DD``.

    :param value: date, datetime or ISO string.
    :rtype: str
    '''
    value = parse_temporal(value)
    if isinstance(value, datetime):
        return encode_datetime_utc(value)
    return value.isoformat()


def parse_locale(locale):
    '''
    Split a locale such as ``fr-ch``, ``fr_CH`` or ``zh-Hant-TW`` into its
    language, script and region subtags.

    :param str locale:
    :returns: A tuple of (language, script, region). Missing subtags are
        None.
    :raises ValueError: If the locale has no language subtag.
    '''
    parts = [part for part in _LOCALE_SPLIT.split(locale.strip()) if part]
    if not parts or not parts[0].isalpha():
        raise ValueError('Invalid locale: {!r}'.format(locale))
    language = parts[0].lower()
    script = None
    region = None
    for part in parts[1:]:
        if len(part) == 4 and part.isalpha() and script is None \
                and region is None:
            script = part.title()
        elif (len(part) == 2 and part.isalpha()) or \
                (len(part) == 3 and part.isdigit()):
            if region is None:
                region = part.upper()
    return language, script, region


def to_language_tag(locale):
    ''' Return the canonical BCP-47 form of a locale, e.g. ``fr-CH``. '''
    language, script, region = parse_locale(locale)
    return '-'.join(tag for tag in (language, script, region) if tag)


def to_news_language(locale):
    '''
    Return the publication language of a news sitemap.

    Chinese keeps its simplified/traditional distinction as ``zh-cn`` or
    ``zh-tw``. Every other locale is reduced to its language code.
    '''
    language, script, region = parse_locale(locale)
    if language == 'zh':
        if region is not None:
            return 'zh-{}'.format(region.lower())
        if script == 'Hans':
            return 'zh-cn'
        if script == 'Hant':
            return 'zh-tw'
    return language


def filter_country_codes(codes):
    ''' Upper-case country codes and keep only the two-letter ones. '''
    corrected = (code.upper() for code in codes)
    return [code for code in corrected if len(code) == 2 and code.isalpha()]


def filter_stock_tickers(tickers, limit=5):
    ''' Keep the first ``limit`` tickers of the form ``EXCHANGE:SYMBOL``. '''
    valid = [ticker for ticker in tickers
        if STOCK_TICKER_PATTERN.fullmatch(ticker)]
    return truncate(valid, limit, 'stock tickers')
