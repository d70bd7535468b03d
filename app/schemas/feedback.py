from app.schemas.base import CamelModel


class FeedbackCreate(CamelModel):
    feedback: str = ""


class MessageResponse(CamelModel):
    message: str
