from pydantic import BaseModel
from datetime import datetime


class DocumentRead(BaseModel):
    id: int
    application_id: int
    student_id: int
    document_type: str
    file_name: str
    file_url: str
    uploaded_at: datetime

    class Config:
        from_attributes = True
