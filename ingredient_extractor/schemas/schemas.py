from pydantic import BaseModel
from typing import List


class RecipeURL(BaseModel):
    url: str


class Ingredient(BaseModel):
    name: str
    amount: str


class ExtractionResult(BaseModel):
    ingredients: List[Ingredient]
