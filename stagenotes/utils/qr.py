"""Join QR code shown on the board page."""

import qrcode
from qrcode.image.svg import SvgPathImage


def join_qr_svg(url: str) -> str:
    """Render ``url`` as an inline SVG QR code (medium error correction)."""
    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=2,
        image_factory=SvgPathImage,
    )
    qr.add_data(url)
    qr.make(fit=True)
    return qr.make_image().to_string(encoding="unicode")
