from datetime import datetime

from pydantic import BaseModel


class LookerCreativeIn(BaseModel):
    image_url: str | None = None
    ad_preview_link: str | None = None


class LookerCreativeResponse(BaseModel):
    client_id: str
    ad_name: str
    image_url: str | None
    ad_preview_link: str | None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


# client id -> ad name -> creative
LookerDataRequest = dict[str, dict[str, LookerCreativeIn]]
