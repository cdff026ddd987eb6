"""Shared test fixtures."""

import datetime
import random

import numpy as np
import pytest

from lovestruck.pipeline.clock import ManualClock
from lovestruck.pipeline.compositor import StripCompositor

FIXED_DATE = datetime.date(2024, 2, 14)

RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)


def solid(color, width=800, height=600) -> np.ndarray:
    frame = np.empty((height, width, 3), dtype=np.uint8)
    frame[:] = color
    return frame


class FakeVideoSource:
    """In-memory video source returning a fixed RGB frame."""

    def __init__(self, frame: np.ndarray):
        self.frame = frame
        self.ready = True
        self.reads = 0
        self.released = False

    @property
    def width(self) -> int:
        return self.frame.shape[1] if self.ready else 0

    @property
    def height(self) -> int:
        return self.frame.shape[0] if self.ready else 0

    def read(self):
        self.reads += 1
        return self.frame.copy() if self.ready else None

    def release(self):
        self.released = True


@pytest.fixture
def rgb_frames():
    return [solid(RED), solid(GREEN), solid(BLUE)]


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def source():
    frame = solid((200, 120, 60), width=640, height=480)
    frame[:, :320] = (10, 20, 30)  # left half differs so mirroring is visible
    return FakeVideoSource(frame)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def compositor():
    return StripCompositor(today=lambda: FIXED_DATE)
