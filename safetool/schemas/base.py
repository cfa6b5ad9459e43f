# safetool/schemas/base.py
from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base de los DTOs expuestos por la API.

    El front envía y recibe camelCase ({"demandRate": 0.5}); internamente
    trabajamos con snake_case. Se aceptan ambas formas al validar.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
