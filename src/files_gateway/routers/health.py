from fastapi import APIRouter

from files_gateway.schemas import MessageResponse

router = APIRouter()


@router.get("/", response_model=MessageResponse)
async def hello() -> MessageResponse:
    """Fixed liveness payload. Never touches the storage backend."""
    return MessageResponse(message="Hello World!")
