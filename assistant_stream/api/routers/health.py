from fastapi import APIRouter

from assistant_stream.protocol.stream_parts import StreamPartType

router = APIRouter(tags=["health"])


@router.get("/healthz")
def healthz() -> dict[str, object]:
    return {"status": "ok", "stream_part_types": [part_type.value for part_type in StreamPartType]}
