"""Content-type and extension detection for raw upload bytes.

Detection is content based (libmagic through ``python-magic``); the
extension is looked up from the detected MIME type.
"""

import mimetypes
from typing import Optional, Tuple

OCTET_STREAM = "application/octet-stream"

# libmagic only needs the leading bytes to recognise a format.
_SNIFF_BYTES = 4096


def sniff(data: bytes) -> Tuple[Optional[str], str]:
    """Return ``(mime_type, extension)`` for *data*.

    ``mime_type`` is ``None`` and ``extension`` is ``""`` when the content is
    not recognised.  The extension carries no leading dot.
    """
    if not data:
        return None, ""

    import magic

    mime_type = magic.from_buffer(bytes(data[:_SNIFF_BYTES]), mime=True)
    if not mime_type or mime_type == OCTET_STREAM:
        return None, ""

    extension = mimetypes.guess_extension(mime_type) or ""
    return mime_type, extension.lstrip(".")
