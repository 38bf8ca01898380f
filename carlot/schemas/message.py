from pydantic import BaseModel, field_validator

class MessageCreate(BaseModel):
    receiver_id: str
    content: str

    @field_validator('receiver_id', 'content')
    def no_empty(cls, v, info):
        if not v:
            raise ValueError(f"Please provide {info.field_name.replace('_', ' ')}")
        return v
