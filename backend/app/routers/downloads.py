from __future__ import annotations

import hashlib

from fastapi.responses import StreamingResponse


def payload_response(payload: bytes, *, filename: str) -> StreamingResponse:
    headers = {
        "Content-Disposition": f'attachment; filename="{filename}"',
        "X-MEDVAULT-SHA256": hashlib.sha256(payload).hexdigest(),
        "X-MEDVAULT-Size": str(len(payload)),
    }
    return StreamingResponse(
        content=iter([payload]),
        media_type="application/octet-stream",
        headers=headers,
    )
