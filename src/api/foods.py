"""Read-only catalog API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from src.api.dependencies import get_current_user
from src.database import get_db
from src.models.food_item import FoodItem
from src.models.user import User
from src.schemas.food_item import FoodItemResponse

router = APIRouter(prefix="/api/v1/foods", tags=["foods"])


@router.get("", response_model=list[FoodItemResponse])
def get_food_items(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    category: str | None = None,
    min_expiration: int | None = Query(default=None, ge=0),
    max_expiration: int | None = Query(default=None, ge=0),
):
    """List catalog food items, optionally filtered by category and shelf life."""
    query = db.query(FoodItem).filter(FoodItem.not_deleted())

    if category:
        query = query.filter(FoodItem.category.icontains(category, autoescape=True))
    if min_expiration is not None:
        query = query.filter(FoodItem.typical_expiration_days >= min_expiration)
    if max_expiration is not None:
        query = query.filter(FoodItem.typical_expiration_days <= max_expiration)

    return query.order_by(FoodItem.name).all()


@router.get("/{food_item_id}", response_model=FoodItemResponse)
def get_food_item(
    food_item_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a catalog food item."""
    food_item = (
        db.query(FoodItem).filter(FoodItem.id == food_item_id, FoodItem.not_deleted()).first()
    )
    if not food_item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Food item not found")
    return food_item
