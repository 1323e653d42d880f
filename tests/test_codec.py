from datetime import date, datetime, timedelta, timezone
import logging

import pytest

from sitemapper import codec


def test_clamp_in_range():
    assert codec.clamp(3, 0, 5) == 3


def test_clamp_bounds(caplog):
    with caplog.at_level(logging.WARNING):
        assert codec.clamp(2 ** 31 - 1, 0, 28800, 'duration') == 28800
        assert codec.clamp(-5, 0, None, 'view count') == 0
    assert 'duration' in caplog.text
    assert 'view count' in caplog.text


def test_clamp_is_idempotent():
    for value in (-10.0, 0.0, 0.5, 1.0, 10.0):
        once = codec.clamp(value, 0.0, 1.0)
        assert codec.clamp(once, 0.0, 1.0) == once


def test_clamp_without_label_does_not_log(caplog):
    with caplog.at_level(logging.WARNING):
        codec.clamp(100, 0, 5)
    assert caplog.text == ''


def test_truncate():
    assert codec.truncate(range(49), 32) == list(range(32))
    assert codec.truncate(['a'], 32) == ['a']


def test_encode_bool():
    assert codec.encode_bool(True) == 'yes'
    assert codec.encode_bool(False) == 'no'
    assert codec.encode_bool(None) is None


def test_encode_float():
    assert codec.encode_float(4.7) == '4.7'
    assert codec.encode_float(5) == '5.0'
    assert codec.encode_float(9.99) == '9.99'


def test_encode_priority():
    assert codec.encode_priority(0.6) == '0.6'
    assert codec.encode_priority(1.5) == '1.0'
    assert codec.encode_priority(-1) == '0.0'
    assert codec.encode_priority(0.25) == '0.2'


def test_encode_datetime_utc():
    cet = timezone(timedelta(hours=1))
    value = datetime(2021, 5, 27, 14, 36, 34, tzinfo=cet)
    assert codec.encode_datetime_utc(value) == '2021-05-27T13:36:34Z'


def test_encode_datetime_utc_naive_is_utc():
    value = datetime(2021, 5, 27, 13, 36, 34)
    assert codec.encode_datetime_utc(value) == '2021-05-27T13:36:34Z'


def test_encode_datetime_utc_milliseconds():
    value = datetime(1970, 1, 2, 10, 17, 36, 789000, tzinfo=timezone.utc)
    assert codec.encode_datetime_utc(value) == '1970-01-02T10:17:36.789Z'


def test_encode_temporal_keeps_offset():
    assert codec.encode_temporal('2022-12-31T12:34:56.000+01:00') == \
        '2022-12-31T12:34:56+01:00'


def test_encode_temporal_date():
    assert codec.encode_temporal(date(2022, 12, 31)) == '2022-12-31'
    assert codec.encode_temporal('2021-12-31') == '2021-12-31'


def test_encode_temporal_rejects_other_types():
    with pytest.raises(TypeError):
        codec.encode_temporal(12345)


def test_encode_lastmod():
    assert codec.encode_lastmod('2021-05-27T15:36:34+02:00') == \
        '2021-05-27T13:36:34Z'
    assert codec.encode_lastmod(date(2021, 5, 27)) == '2021-05-27'


def test_parse_locale():
    assert codec.parse_locale('fr-ch') == ('fr', None, 'CH')
    assert codec.parse_locale('de_CH') == ('de', None, 'CH')
    assert codec.parse_locale('zh-Hant-TW') == ('zh', 'Hant', 'TW')
    assert codec.parse_locale('es-419') == ('es', None, '419')
    with pytest.raises(ValueError):
        codec.parse_locale('')


def test_to_language_tag():
    assert codec.to_language_tag('fr_ch') == 'fr-CH'
    assert codec.to_language_tag('en') == 'en'


def test_to_news_language():
    assert codec.to_news_language('en') == 'en'
    assert codec.to_news_language('de-CH') == 'de'
    assert codec.to_news_language('zh_TW') == 'zh-tw'
    assert codec.to_news_language('zh-Hans') == 'zh-cn'
    assert codec.to_news_language('zh-Hant') == 'zh-tw'
    assert codec.to_news_language('zh') == 'zh'


def test_filter_country_codes():
    assert codec.filter_country_codes(['de', 'ch', 'at']) == ['DE', 'CH', 'AT']
    assert codec.filter_country_codes(['invalid', 'd1']) == []


def test_filter_stock_tickers():
    tickers = ['NASDAQ:FOO', 'invalid', 'NYSE:A', 'B:C', 'D:E', 'F:G', 'H:I']
    assert codec.filter_stock_tickers(tickers) == \
        ['NASDAQ:FOO', 'NYSE:A', 'B:C', 'D:E', 'F:G']
