"""
Ingredient List
The active set of ingredients a recipe is requested for
"""

from typing import Optional


EMPTY_INGREDIENT = "Please enter an ingredient"
DUPLICATE_INGREDIENT = "This ingredient is already in your list"


class IngredientList:
    """Ordered, trimmed ingredients, unique ignoring case"""

    def __init__(self, initial: Optional[list[str]] = None):
        self._items: list[str] = []
        self.error_message = ""
        for item in initial or []:
            self.add(item)
        self.error_message = ""

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(self._items)

    def validate(self, value: str) -> Optional[str]:
        """Return a user-facing error, or None if ``value`` can be added"""
        trimmed = (value or "").strip()
        if not trimmed:
            return EMPTY_INGREDIENT
        if any(item.lower() == trimmed.lower() for item in self._items):
            return DUPLICATE_INGREDIENT
        return None

    def add(self, value: str) -> bool:
        error = self.validate(value)
        if error:
            self.error_message = error
            return False
        self._items.append(value.strip())
        self.error_message = ""
        return True

    def remove(self, index: int) -> None:
        if 0 <= index < len(self._items):
            del self._items[index]

    def clear(self) -> None:
        self._items.clear()
        self.error_message = ""

    def snapshot(self) -> list[str]:
        """Copy handed to a generation request"""
        return list(self._items)
