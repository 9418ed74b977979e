####################################
# --- Request/response schemas --- #
####################################

from pydantic import BaseModel, ConfigDict, Field


class MessageResponse(BaseModel):
    """Response model for `GET /`."""
    message: str

    model_config = ConfigDict(json_schema_extra={"example": {"message": "Hello World!"}})


class UploadResponse(BaseModel):
    """Response model for `POST /upload`."""
    key: str = Field(
        description="Generated key of the stored object. Use it with `GET /download/{key}`.",
        json_schema_extra={"example": "1b4e28ba-2fa1-11d2-883f-0016d3cca427"},
    )


class ErrorResponse(BaseModel):
    """Body of every error response."""
    error: str = Field(description="What went wrong.")

    model_config = ConfigDict(
        json_schema_extra={"example": {"error": "multipart field 'file' is required"}}
    )
