"""Pydantic models for HTTP payloads."""

from datetime import UTC, date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from nutrition_journal.domain.entries import FoodEntry, FoodItem, Meal, NutritionFacts
from nutrition_journal.domain.records import timestamp_from_value


class NutritionPayload(BaseModel):
    """Nutrient values per 100 units of the serving unit."""

    calories: float = Field(ge=0)
    protein: float = Field(ge=0)
    carbs: float = Field(ge=0)
    fat: float = Field(ge=0)
    fiber: float | None = Field(default=None, ge=0)
    sugar: float | None = Field(default=None, ge=0)
    sodium: float | None = Field(default=None, ge=0)
    water: float | None = Field(default=None, ge=0)


class FoodItemPayload(BaseModel):
    """Food item snapshot embedded in an entry."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    serving_size: float = Field(gt=0, alias="servingSize")
    serving_unit: str = Field(min_length=1, alias="servingUnit")
    nutrition: NutritionPayload


class FoodEntryPayload(BaseModel):
    """Entry submitted for saving or updating."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = None
    date: date
    timestamp: datetime | None = None
    food_item: FoodItemPayload = Field(alias="foodItem")
    quantity: float = Field(gt=0)
    meal: Literal["breakfast", "lunch", "dinner", "snack"]
    notes: str | None = None

    @field_validator("timestamp", mode="before")
    @classmethod
    def parse_timestamp(cls, value: object) -> datetime | None:
        """Accept epoch milliseconds or an ISO 8601 string."""
        if value is None:
            return None
        return timestamp_from_value(value)

    def to_entry(self, now: datetime | None = None) -> FoodEntry:
        item = self.food_item
        timestamp = self.timestamp or now or datetime.now(tz=UTC)
        return FoodEntry(
            id=self.id or "",
            date=self.date,
            timestamp=timestamp,
            food_item=FoodItem(
                id=item.id,
                name=item.name,
                category=item.category,
                serving_size=item.serving_size,
                serving_unit=item.serving_unit,
                nutrition=NutritionFacts(**item.nutrition.model_dump()),
            ),
            quantity=self.quantity,
            meal=Meal(self.meal),
            notes=self.notes,
        )


class ImportPayload(BaseModel):
    """Batch of raw entry records to import."""

    entries: list[dict[str, object]]
