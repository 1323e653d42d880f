from unittest.mock import Mock

from sitemapper.pubsub import (
    EVENT_PROPERTY_SITEMAP_NAME,
    EVENT_PROPERTY_SITEMAP_ROOT,
    EVENT_PROPERTY_SITEMAP_STORAGE_PATH,
    EVENT_PROPERTY_SITEMAP_STORAGE_SIZE,
    EVENT_PROPERTY_SITEMAP_URLS,
    PubSub,
    TOPIC_SITEMAP_PURGED,
    TOPIC_SITEMAP_UPDATED,
    new_purge_event,
    new_update_event,
)


def test_update_event():
    event = new_update_event('news', '/content/site/de', 12,
        '/var/sitemaps/content/site/de/news-sitemap.xml', 2048)
    assert event.topic == TOPIC_SITEMAP_UPDATED
    assert event.properties == {
        EVENT_PROPERTY_SITEMAP_NAME: 'news',
        EVENT_PROPERTY_SITEMAP_ROOT: '/content/site/de',
        EVENT_PROPERTY_SITEMAP_URLS: 12,
        EVENT_PROPERTY_SITEMAP_STORAGE_PATH:
            '/var/sitemaps/content/site/de/news-sitemap.xml',
        EVENT_PROPERTY_SITEMAP_STORAGE_SIZE: 2048,
    }


def test_purge_event():
    event = new_purge_event('/var/sitemaps/content/site/de/sitemap-2.xml')
    assert event.topic == TOPIC_SITEMAP_PURGED
    assert event.properties == {EVENT_PROPERTY_SITEMAP_STORAGE_PATH:
        '/var/sitemaps/content/site/de/sitemap-2.xml'}


def test_listen_by_topic():
    pubsub = PubSub()
    everything = Mock()
    updates = Mock()
    pubsub.listen(everything)
    pubsub.listen(updates, TOPIC_SITEMAP_UPDATED)
    update = new_update_event('news', '/a', 1, '/var/a.xml', 10)
    purge = new_purge_event('/var/a.xml')
    pubsub.publish(update)
    pubsub.publish(purge)
    assert [c[0][0] for c in everything.call_args_list] == [update, purge]
    updates.assert_called_once_with(update)


def test_cancel():
    pubsub = PubSub()
    callback = Mock()
    pubsub.listen(callback)
    pubsub.cancel(callback)
    pubsub.publish(new_purge_event('/var/a.xml'))
    callback.assert_not_called()
