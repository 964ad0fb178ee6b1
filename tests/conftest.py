"""
Shared fixtures: a counting fake decoder and synthetic images
"""

import numpy as np
import pytest

from darkroom.api import RawEditor
from darkroom.config import get_default_config
from darkroom.core.result import ErrorKind, ProcessingError
from darkroom.io.decoder import EmbeddedThumbnail, RawDecoder, RawFields
from darkroom.session.session import ProcessingSession


class FakeDecoder(RawDecoder):
    """In-memory decoder that counts how often it develops"""

    def __init__(self, image=None, thumbnail=None, fields=None,
                 fail_open=None, fail_unpack=None, fail_develop=None,
                 fail_thumbnail=None, fail_fields=None):
        self.image = image if image is not None else mid_gray_rgb(100, 100)
        self.thumbnail = thumbnail
        self.fields = fields or RawFields(
            make="Sony", model="ILCE-7M3", lens="FE 35mm F1.8",
            iso=400, aperture=2.8, focal_length=35.0, shutter=1 / 250,
            flash_used=False, flip=0, white_balance="Auto",
            width=100, height=100, wb_coeffs=(2.0, 1.0, 1.5, 1.0)
        )
        self.fail_open = fail_open
        self.fail_unpack = fail_unpack
        self.fail_develop = fail_develop
        self.fail_thumbnail = fail_thumbnail
        self.fail_fields = fail_fields

        self.is_open = False
        self.open_calls = 0
        self.develop_calls = 0
        self.recycle_calls = 0
        self.half_size_requests = []

    def open(self, path):
        self.open_calls += 1
        if self.fail_open is not None:
            raise self.fail_open
        self.is_open = True

    def unpack(self):
        if self.fail_unpack is not None:
            raise self.fail_unpack

    def unpack_thumbnail(self):
        if self.fail_thumbnail is not None:
            raise self.fail_thumbnail
        return self.thumbnail

    def develop(self, half_size=False):
        self.develop_calls += 1
        self.half_size_requests.append(half_size)
        if self.fail_develop is not None:
            raise self.fail_develop
        return self.image.copy()

    def read_fields(self):
        if self.fail_fields is not None:
            raise self.fail_fields
        return self.fields

    def recycle(self):
        self.recycle_calls += 1
        self.is_open = False


def mid_gray_rgb(width, height, value=128):
    return np.full((height, width, 3), value, dtype=np.uint8)


def solid_bgr(b, g, r, size=16):
    image = np.zeros((size, size, 3), dtype=np.uint8)
    image[:, :] = (b, g, r)
    return image


def noisy_bgr(size=64, seed=0):
    rng = np.random.default_rng(seed)
    base = np.full((size, size, 3), 128.0)
    return np.clip(base + rng.normal(0, 20, base.shape), 0, 255).astype(np.uint8)


@pytest.fixture
def raw_file(tmp_path):
    """Placeholder RAW file; the fake decoder never reads it"""
    path = tmp_path / "DSC00001.ARW"
    path.write_bytes(b"not really a raw file")
    return path


@pytest.fixture
def fake_decoder():
    return FakeDecoder()


@pytest.fixture
def session(fake_decoder):
    return ProcessingSession(fake_decoder)


@pytest.fixture
def loaded_session(session, raw_file):
    assert session.load(raw_file).is_success
    return session


@pytest.fixture
def editor(fake_decoder):
    return RawEditor(config=get_default_config(), decoder_factory=lambda: fake_decoder)


@pytest.fixture
def decode_error():
    return ProcessingError(ErrorKind.INVALID_FORMAT, "Failed to open RAW file: Unsupported file format")


@pytest.fixture
def bitmap_thumbnail():
    image = np.zeros((120, 160, 3), dtype=np.uint8)
    image[:, :, 0] = 200
    return EmbeddedThumbnail(format="bitmap", data=image)
