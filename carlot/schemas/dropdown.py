from pydantic import BaseModel, field_validator


class DropdownOption(BaseModel):
    label: str
    value: str


class DropdownSettingCreate(BaseModel):
    category: str
    label: str
    value: str
    is_active: bool = True

    @field_validator('category', 'label', 'value')
    def trimmed_not_empty(cls, v, info):
        v = v.strip()
        if not v:
            raise ValueError(f"{info.field_name.capitalize()} is required")
        return v
