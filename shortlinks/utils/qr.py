"""QR code rendering for short links

Functions:
    render_png(content: str, size: int = Defaults.QR_SIZE) -> bytes
        Encode content as a QR code (medium error correction) and return it as
        a PNG roughly `size` pixels wide.

Example:
    >>> png = render_png('https://sho.rt/a1b2c3')
    >>> png[:8]
    b'\\x89PNG\\r\\n\\x1a\\n'
"""

import io

import segno

from shortlinks.constants import Defaults


def render_png(content: str, size: int = Defaults.QR_SIZE) -> bytes:
    """Raises segno.DataOverflowError if content does not fit in a QR code."""
    qr = segno.make_qr(content, error='m')
    width, _ = qr.symbol_size(scale=1)
    buffer = io.BytesIO()
    qr.save(buffer, kind='png', scale=max(1, size // width))
    return buffer.getvalue()
