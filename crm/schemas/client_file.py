"""Client file metadata schemas"""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from crm.timeutils import UTCDateTime


class ClientFileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    client_id: int
    file_name: str
    original_name: str
    file_size: int
    mime_type: Optional[str] = None
    uploaded_by: Optional[str] = None
    created_at: UTCDateTime
    updated_at: Optional[UTCDateTime] = None
