"""Unit tests for QR code rendering in qr.py

Test coverage includes:

1. PNG output
   - Ensures a PNG is produced and larger sizes scale the modules up.

2. Encoding parameters
   - Ensures medium error correction and a full-size (not micro) QR code are used.
   - Confirms content too long for a QR code raises DataOverflowError.
"""

import struct
from unittest.mock import patch

import pytest
import segno

from shortlinks.utils.qr import render_png


PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'


def _png_width(png):
    # IHDR is the first chunk: width is the big-endian int right after its type
    return struct.unpack('>I', png[16:20])[0]


# -------------------------------
# 1. PNG output
# -------------------------------


def test_render_png():
    """Ensure a PNG of roughly the requested size is produced."""
    png = render_png('https://sho.rt/a1b2c3')

    assert png.startswith(PNG_SIGNATURE)
    assert 100 < _png_width(png) <= 200


def test_render_png_scales_with_size():
    """Ensure larger sizes render larger images."""
    assert _png_width(render_png('https://sho.rt/a1b2c3', size=400)) > _png_width(render_png('https://sho.rt/a1b2c3', size=100))


# -------------------------------
# 2. Encoding parameters
# -------------------------------


def test_render_png_uses_medium_error_correction():
    """Ensure a regular QR code with medium error correction is requested."""
    with patch('shortlinks.utils.qr.segno.make_qr', wraps=segno.make_qr) as make_qr_mock:
        render_png('https://sho.rt/a1b2c3')

    make_qr_mock.assert_called_once_with('https://sho.rt/a1b2c3', error='m')


def test_render_png_overflow():
    """Ensure content beyond QR capacity is reported."""
    with pytest.raises(segno.DataOverflowError):
        render_png('https://sho.rt/' + 'x' * 5000)
