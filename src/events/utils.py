from io import BytesIO

import qrcode


def render_code(payload: str) -> bytes:
    """Render a QR code for a ticket or card code.

    Args:
        payload: The machine-readable code to encode.

    Returns:
        The PNG image as bytes.
    """
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(payload)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buffered = BytesIO()
    img.save(buffered, "PNG")
    return buffered.getvalue()
