"""Schemas for recipe and review requests and responses."""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional

from .enums import Category, Difficulty
from .user_schema import UserSummary


class Ingredient(BaseModel):
    name: str = Field(..., min_length=1, examples=["Eggs"])
    amount: str = Field(..., min_length=1, examples=["2 large"])


class InstructionStep(BaseModel):
    text: str = Field(..., min_length=1, examples=["Whisk the eggs."])
    image_url: Optional[str] = None


class Nutrition(BaseModel):
    calories: float = 0
    carbs: float = 0
    protein: float = 0
    fat: float = 0


class RecipeCreateRequest(BaseModel):
    """Payload for publishing a recipe.

    Ingredients and instructions must be structured lists; string-encoded JSON
    is rejected rather than parsed.
    """

    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1, max_length=200, examples=["Shakshuka"])
    description: str = Field(..., min_length=1, examples=["Eggs poached in spiced tomato sauce"])
    ingredients: List[Ingredient] = Field(default_factory=list)
    instructions: List[InstructionStep] = Field(default_factory=list)
    prep_time: int = Field(..., ge=0, examples=[10], description="Preparation time in minutes")
    cook_time: int = Field(..., ge=0, examples=[20], description="Cooking time in minutes")
    servings: int = Field(..., ge=1, examples=[2])
    difficulty: Difficulty
    category: Category
    nutrition: Nutrition = Field(default_factory=Nutrition)
    notes: str = ""


class RecipeUpdateRequest(BaseModel):
    """Partial update of a recipe; only provided fields are changed."""

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    ingredients: Optional[List[Ingredient]] = None
    instructions: Optional[List[InstructionStep]] = None
    prep_time: Optional[int] = Field(None, ge=0)
    cook_time: Optional[int] = Field(None, ge=0)
    servings: Optional[int] = Field(None, ge=1)
    difficulty: Optional[Difficulty] = None
    category: Optional[Category] = None
    nutrition: Optional[Nutrition] = None
    notes: Optional[str] = None
    remove_image: bool = False


class RecipeSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    image_url: Optional[str] = None
    rating: float = 0
    created_at: Optional[datetime] = None


class RecipeDetail(BaseModel):
    """Recipe representation returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    ingredients: List[Ingredient] = []
    instructions: List[InstructionStep] = []
    prep_time: int
    cook_time: int
    servings: int
    difficulty: str
    category: str
    image_url: Optional[str] = None
    author_id: int
    author: Optional[UserSummary] = None
    rating: float = 0
    review_count: int = 0
    views: int = 0
    likes_count: int = 0
    nutrition: Optional[Nutrition] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ReviewCreateRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5, examples=[4], description="Rating from 1 (poor) to 5 (excellent)")
    comment: str = Field(..., min_length=1, max_length=1000, examples=["Lovely breakfast"])


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    rating: int
    comment: str
    recipe_id: int
    author_id: int
    author: Optional[UserSummary] = None
    recipe_title: Optional[str] = None
    created_at: Optional[datetime] = None


class RecipePage(BaseModel):
    """Paginated envelope used by every recipe listing endpoint."""

    recipes: List[RecipeDetail]
    page: int
    limit: int
    total: int
    pages: int
    query: Optional[str] = None


class ReviewPage(BaseModel):
    reviews: List[ReviewResponse]
    page: int
    limit: int
    total: int
    pages: int


class RecipeView(RecipeDetail):
    """Single recipe page: the recipe plus its surrounding context."""

    reviews: List[ReviewResponse] = []
    similar_recipes: List[RecipeSummary] = []
    is_favorite: bool = False
    is_saved: bool = False
    average_rating: float = 0


class ShareRequest(BaseModel):
    platform: str = Field(..., examples=["twitter"])


class ShareResponse(BaseModel):
    url: str
    message: str


class ReportRequest(BaseModel):
    reason: str = ""


class DeleteResponse(BaseModel):
    id: int
    message: str
    cleanup: Dict[str, int] = {}
