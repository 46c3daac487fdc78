"""
Pytest configuration and fixtures for Pixel Flow tests
"""

import pytest
import numpy as np
import cv2

from pixelflow.config import get_settings
from pixelflow.core.enums import Encoding
from pixelflow.core.image import Image
from pixelflow.parallel.scheduler import ParallelScheduler, set_default_scheduler


@pytest.fixture(autouse=True)
def reset_defaults():
    """Isolate the cached settings and the process-wide scheduler per test"""
    get_settings.cache_clear()
    set_default_scheduler(None)
    yield
    set_default_scheduler(None)
    get_settings.cache_clear()


@pytest.fixture
def sequential_scheduler():
    """Scheduler that always runs on the calling thread"""
    scheduler = ParallelScheduler(min_work_size=1, worker_count=1)
    yield scheduler
    scheduler.shutdown()


@pytest.fixture
def parallel_scheduler():
    """Scheduler that splits even tiny images across four workers"""
    scheduler = ParallelScheduler(min_work_size=1, worker_count=4)
    yield scheduler
    scheduler.shutdown()


@pytest.fixture
def test_array():
    """Create a 3-channel test array with some content"""
    array = np.zeros((48, 64, 3), dtype=np.uint8)
    cv2.rectangle(array, (10, 10), (30, 30), (255, 255, 255), -1)
    cv2.circle(array, (45, 30), 8, (128, 64, 32), -1)
    return array


@pytest.fixture
def test_image(test_array):
    """Narrow 3-channel Image built from test_array"""
    return Image.from_array(test_array)


@pytest.fixture
def gray_image():
    """Narrow single-channel 8x6 image with a gradient and one bright spot"""
    array = np.tile(np.arange(8, dtype=np.uint8) * 10, (6, 1))
    array[2, 3] = 250
    return Image.from_array(array)


@pytest.fixture
def wide_image():
    """Wide single-channel 5x4 image holding fractional values"""
    array = np.arange(20, dtype=np.float64).reshape(4, 5) * 1.25
    return Image.from_array(array, Encoding.WIDE)


@pytest.fixture
def ramp_5x3():
    """5x3 single-channel image with row-major values 0..14 and (4, 1) set to 3"""
    array = np.arange(15, dtype=np.uint8).reshape(3, 5)
    array[1, 4] = 3
    return Image.from_array(array)
