from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional

MAX_PHOTOS = 2

class CoinForm(BaseModel):
    """Campos que introduce el usuario en el formulario de alta"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    coin_no: str = Field(min_length=1)
    value: str = Field(min_length=1)
    material: str = Field(min_length=1)
    country: str = Field(min_length=1)
    year: str = Field(min_length=1)
    mint: str = Field(min_length=1)
    coin_present_value: str = Field(min_length=1)
    description: str = Field(min_length=1)
    remark: str = ""

class CoinRecord(BaseModel):
    # Documentos antiguos pueden no traer todos los campos: todo con default
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = None
    coin_no: str = ""
    value: str = ""
    material: str = ""
    country: str = ""
    year: str = ""
    mint: str = ""
    coin_present_value: str = ""
    description: str = ""
    remark: str = ""
    photos: List[str] = Field(default_factory=list, max_length=MAX_PHOTOS)
    created_at: str = ""

    @classmethod
    def from_form(cls, form: CoinForm, photos: List[str], created_at: str) -> "CoinRecord":
        return cls(**form.model_dump(), photos=photos, created_at=created_at)

    def to_document(self) -> Dict[str, Any]:
        """Cuerpo del documento tal y como se persiste (sin id, claves camelCase)"""
        return self.model_dump(by_alias=True, exclude={"id"})
