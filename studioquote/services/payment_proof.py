from __future__ import annotations

import base64
from typing import Optional

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def encode_proof_file(content: bytes, content_type: Optional[str] = None) -> str:
    """
    Uploaded payment proof (receipt photo, PDF ...) -> data URL that is stored
    on the milestone: "data:image/png;base64,iVBORw0...".
    """
    mime = (content_type or "").strip() or DEFAULT_CONTENT_TYPE
    encoded = base64.b64encode(content or b"").decode("ascii")
    return f"data:{mime};base64,{encoded}"
