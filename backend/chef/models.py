"""
Recipe Data Model
Defines the Recipe dataclass and the tagged outcome of a generation attempt
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from chef.errors import ErrorKind


@dataclass
class Recipe:
    """A generated recipe"""
    name: str
    ingredients: list[str] = field(default_factory=list)
    instructions: list[str] = field(default_factory=list)

    def is_valid(self) -> bool:
        """A recipe needs a name and at least one instruction"""
        if not isinstance(self.name, str) or not self.name.strip():
            return False
        if not isinstance(self.instructions, list):
            return False
        return any(isinstance(step, str) and step.strip() for step in self.instructions)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "ingredients": list(self.ingredients),
            "instructions": list(self.instructions)
        }

    @classmethod
    def from_dict(cls, data: dict, default_ingredients: Optional[list[str]] = None) -> "Recipe":
        ingredients = data.get("ingredients")
        if not isinstance(ingredients, list) or not all(isinstance(i, str) for i in ingredients):
            ingredients = list(default_ingredients or [])

        instructions = data.get("instructions", [])
        if isinstance(instructions, list):
            instructions = [str(step).strip() for step in instructions if str(step).strip()]
        else:
            instructions = []

        name = data.get("name", "")
        return cls(
            name=name.strip() if isinstance(name, str) else "",
            ingredients=ingredients,
            instructions=instructions
        )


@dataclass(frozen=True)
class Success:
    """A provider returned a valid recipe"""
    recipe: Recipe
    provider_id: str
    is_fallback = False


@dataclass(frozen=True)
class FallbackSignal:
    """No provider produced a recipe; the caller should synthesize one locally"""
    reason: str = ""
    is_fallback = True


@dataclass(frozen=True)
class Failure:
    """A terminal error the user needs to see (e.g. nothing is configured)"""
    kind: ErrorKind
    message: str
    is_fallback = False


GenerationOutcome = Union[Success, FallbackSignal, Failure]
