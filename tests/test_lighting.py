import math
import threading

import pytest

from config import LIGHT_DIRECTION_DEFAULT, LIGHT_FEED_MAXSIZE
from lighting import LightFeed, ShadingParams, light_angle, simulate_sensor


def test_default_direction():
    feed = LightFeed()
    assert feed.drain() == pytest.approx(LIGHT_DIRECTION_DEFAULT)
    assert math.hypot(*feed.current) == pytest.approx(1.0)


def test_angle_from_roll_in_portrait_and_yaw_otherwise():
    assert light_angle(0.3, 1.2, portrait=True) == 0.3
    assert light_angle(0.3, 1.2, portrait=False) == 1.2


def test_drain_keeps_newest_sample():
    feed = LightFeed()
    feed.publish(roll=0.0, yaw=1.0)
    feed.publish(roll=math.pi / 2, yaw=1.0)

    assert feed.drain() == pytest.approx((0.0, 1.0), abs=1e-9)
    # Nothing pending: previous value sticks
    assert feed.drain() == pytest.approx((0.0, 1.0), abs=1e-9)


def test_full_feed_drops_oldest_without_blocking():
    feed = LightFeed()
    for i in range(LIGHT_FEED_MAXSIZE + 5):
        feed.publish(roll=0.0, yaw=i * 0.01, portrait=False)

    last = (LIGHT_FEED_MAXSIZE + 4) * 0.01
    assert feed.drain() == pytest.approx((math.cos(last), math.sin(last)))


def test_gradient_scale_per_axis():
    params = ShadingParams.for_grid((1.0, 0.0), 300, 150)
    assert params.gradient_scale == pytest.approx((0.1, 0.2))
    assert params.light_direction == (1.0, 0.0)


def test_sensor_thread_feeds_render_loop():
    feed = LightFeed()
    stop = threading.Event()
    producer = threading.Thread(target=simulate_sensor,
                                kwargs=dict(feed=feed, stop=stop, step=0.01,
                                            interval=0.0, max_samples=500))
    producer.start()
    # Consumer drains concurrently, like the render loop
    while producer.is_alive():
        direction = feed.drain()
        assert math.hypot(*direction) == pytest.approx(1.0)
    producer.join()

    assert feed.drain() == pytest.approx((math.cos(5.0), math.sin(5.0)), abs=1e-9)


def test_sensor_stops_on_event():
    feed = LightFeed()
    stop = threading.Event()
    stop.set()

    assert simulate_sensor(feed, stop, interval=0.0) == 0
    assert feed.drain() == pytest.approx(LIGHT_DIRECTION_DEFAULT)
