"""Modelos do cardápio (pydantic, imutáveis) com aliases camelCase no JSON."""
from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True, extra="forbid")

class NutritionInfo(_Frozen):
    """Informação nutricional por porção. Inteiros saem como inteiros no JSON."""
    calories: int | float = Field(ge=0)
    protein: int | float = Field(ge=0)
    carbohydrates: int | float = Field(ge=0)
    fat: int | float = Field(ge=0)
    fiber: int | float = Field(ge=0)

class MenuItem(_Frozen):
    """Item do cardápio. Valor fixo durante toda a vida do processo.

    `category` é aberta (breakfast, lunch, dinner, snack, ...), por isso str.
    `allergens` mantém a ordem de definição no JSON.
    """
    id: str = Field(min_length=1)
    name: str
    description: str
    price: float = Field(ge=0)
    category: str
    nutrition_info: NutritionInfo
    ingredients: tuple[str, ...] = ()
    allergens: tuple[str, ...] = ()
    is_vegetarian: bool = False
    is_vegan: bool = False
    is_gluten_free: bool = False
    is_available: bool = True

    def to_wire(self) -> dict:
        """Dict pronto para JSON, com nomes camelCase."""
        return self.model_dump(mode="json", by_alias=True)
