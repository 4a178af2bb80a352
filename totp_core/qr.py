import base64
import io

import qrcode


def qr_code_data_uri(uri: str) -> str:
    """Render an otpauth URI as a PNG QR code and return it as a data URI."""
    img = qrcode.make(uri)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    b64 = base64.b64encode(buf.getvalue()).decode()
    return f"data:image/png;base64,{b64}"
