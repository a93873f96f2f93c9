# services/qr_service.py
"""
QR codes that point a phone at a certificate's public verification page.
"""
import io
from flask import current_app
import qrcode
from qrcode.image.pil import PilImage

def build_verification_url(token_id: int) -> str:
    base_url = current_app.config.get("BASE_VERIFICATION_URL", "http://127.0.0.1:5000").rstrip("/")
    return f"{base_url}/certificates/{token_id}"

def generate_verification_qr(token_id: int) -> bytes:
    """
    Renders a PNG QR code encoding the verification URL of a certificate.

    Args:
        token_id: The registry identifier of the certificate.

    Returns:
        The PNG image bytes.
    """
    verification_url = build_verification_url(token_id)

    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(verification_url)
    qr.make(fit=True)

    img: PilImage = qr.make_image(image_factory=PilImage, fill_color="black", back_color="white")
    buffer = io.BytesIO()
    img.save(buffer)
    current_app.logger.info(f"Generated QR code for certificate {token_id}")
    return buffer.getvalue()
