"""
PDF attachment responses.

Header values go out as latin-1, so user-supplied names are sent as an
ASCII `filename` plus an RFC 5987 `filename*` carrying the UTF-8 name.
"""
import re
import unicodedata
from urllib.parse import quote

from fastapi import Response


def ascii_filename(filename: str, default: str = "download.pdf") -> str:
    """'Système IA ✓.pdf' -> 'Systeme IA .pdf'"""
    folded = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    folded = re.sub(r'[^\w .()-]', "", folded, flags=re.ASCII).strip()
    return folded or default


def content_disposition(filename: str) -> str:
    fallback = ascii_filename(filename)
    encoded = quote(filename, safe="")
    if fallback == filename and encoded == filename:
        return f'attachment; filename="{filename}"'
    return f"attachment; filename=\"{fallback}\"; filename*=utf-8''{encoded}"


def pdf_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": content_disposition(filename)},
    )
