"""Serviço de cardápio: dados estáticos e o MenuStore imutável."""
from __future__ import annotations
from typing import Iterable, Iterator
from ..models import MenuItem
from ...core.logging import get_logger

log = get_logger()

DEFAULT_MENU: list[dict] = [
    {
        "id": "item_001",
        "name": "Vegetable Rice Bowl",
        "description": "Nutritious rice bowl with seasonal vegetables, dal, and yogurt",
        "price": 45.00,
        "category": "lunch",
        "nutritionInfo": {"calories": 380, "protein": 12, "carbohydrates": 65, "fat": 8, "fiber": 6},
        "ingredients": ["Basmati Rice", "Mixed Vegetables", "Dal", "Yogurt", "Spices"],
        "allergens": ["Dairy"],
        "isVegetarian": True,
        "isVegan": False,
        "isGlutenFree": True,
        "isAvailable": True,
    },
    {
        "id": "item_002",
        "name": "Chicken Curry with Roti",
        "description": "Tender chicken curry served with whole wheat roti and salad",
        "price": 65.00,
        "category": "lunch",
        "nutritionInfo": {"calories": 520, "protein": 28, "carbohydrates": 45, "fat": 18, "fiber": 8},
        "ingredients": ["Chicken", "Whole Wheat Flour", "Onions", "Tomatoes", "Spices", "Mixed Salad"],
        "allergens": ["Gluten"],
        "isVegetarian": False,
        "isVegan": False,
        "isGlutenFree": False,
        "isAvailable": True,
    },
    {
        "id": "item_003",
        "name": "Fresh Fruit Salad",
        "description": "Seasonal mixed fruit salad with honey dressing",
        "price": 25.00,
        "category": "snack",
        "nutritionInfo": {"calories": 120, "protein": 2, "carbohydrates": 30, "fat": 1, "fiber": 4},
        "ingredients": ["Apple", "Banana", "Orange", "Grapes", "Honey", "Mint"],
        "allergens": [],
        "isVegetarian": True,
        "isVegan": True,
        "isGlutenFree": True,
        "isAvailable": True,
    },
    {
        "id": "item_004",
        "name": "Masala Dosa",
        "description": "Crispy dosa with spiced potato filling, served with sambar and chutney",
        "price": 55.00,
        "category": "breakfast",
        "nutritionInfo": {"calories": 420, "protein": 8, "carbohydrates": 58, "fat": 16, "fiber": 5},
        "ingredients": ["Rice", "Lentils", "Potatoes", "Onions", "Curry Leaves", "Coconut"],
        "allergens": [],
        "isVegetarian": True,
        "isVegan": True,
        "isGlutenFree": True,
        "isAvailable": True,
    },
    {
        "id": "item_005",
        "name": "Grilled Fish with Quinoa",
        "description": "Grilled fish fillet with quinoa pilaf and steamed vegetables",
        "price": 85.00,
        "category": "dinner",
        "nutritionInfo": {"calories": 450, "protein": 32, "carbohydrates": 35, "fat": 15, "fiber": 6},
        "ingredients": ["Fish Fillet", "Quinoa", "Broccoli", "Carrots", "Bell Peppers", "Lemon"],
        "allergens": ["Fish"],
        "isVegetarian": False,
        "isVegan": False,
        "isGlutenFree": True,
        "isAvailable": True,
    },
]

class MenuStore:
    """Coleção ordenada e imutável de MenuItem, única por id.

    Construída uma vez no bootstrap e injetada no app; nunca é alterada depois.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[MenuItem]):
        items = tuple(items)
        seen: set[str] = set()
        for it in items:
            if it.id in seen:
                raise ValueError(f"duplicate menu item id: {it.id}")
            seen.add(it.id)
            if it.is_vegan and not it.is_vegetarian:
                log.warning("vegan_not_vegetarian", item_id=it.id)
        object.__setattr__(self, "_items", items)

    def __setattr__(self, name, value):
        raise AttributeError("MenuStore is immutable")

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> "MenuStore":
        """Valida registros no formato do JSON (camelCase) e monta o store."""
        return cls(MenuItem.model_validate(r) for r in records)

    @property
    def items(self) -> tuple[MenuItem, ...]:
        return self._items

    def __iter__(self) -> Iterator[MenuItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def get(self, item_id: str) -> MenuItem | None:
        return next((it for it in self._items if it.id == item_id), None)

def get_menu(store: MenuStore) -> list[dict]:
    """Retorna o cardápio serializado, na ordem original (idempotente)."""
    return [it.to_wire() for it in store]

def default_store() -> MenuStore:
    return MenuStore.from_records(DEFAULT_MENU)
