from sqlalchemy.orm import Session
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from typing import List, Optional

from wallet_api.db.core import CategoryDB, NotFoundError, TransactionType, utcnow
from wallet_api.models.category import CategoryCreate, CategoryUpdate


def _dump_sub_categories(sub_categories) -> list:
    return [sub.model_dump(mode="json") for sub in sub_categories]


def create_db_category(db: Session, user_id: str, category_data: CategoryCreate) -> CategoryDB:
    """Create a new category for a user"""

    name = category_data.name.strip()
    existing_category = db.query(CategoryDB).filter(
        CategoryDB.user_id == user_id,
        func.lower(CategoryDB.name) == name.lower()
    ).first()
    if existing_category:
        raise ValueError(f"Category with name '{name}' already exists")

    db_category = CategoryDB(
        user_id=user_id,
        name=name,
        category_type=category_data.category_type,
        sub_categories=_dump_sub_categories(category_data.sub_categories),
        budget=category_data.budget,
    )

    try:
        db.add(db_category)
        db.commit()
        db.refresh(db_category)
        return db_category
    except IntegrityError:
        db.rollback()
        raise ValueError("Category creation failed due to a database constraint.")


def read_db_categories(db: Session, user_id: str, category_type: Optional[TransactionType] = None,
                       skip: int = 0, limit: int = 100) -> List[CategoryDB]:
    """Read a user's categories"""
    query = db.query(CategoryDB).filter(CategoryDB.user_id == user_id)
    if category_type:
        query = query.filter(CategoryDB.category_type == category_type)
    return query.order_by(CategoryDB.name).offset(skip).limit(limit).all()


def read_db_category(db: Session, category_id: int, user_id: str) -> Optional[CategoryDB]:
    """Read a single category by its ID"""
    return db.query(CategoryDB).filter(
        CategoryDB.id == category_id,
        CategoryDB.user_id == user_id
    ).first()


def update_db_category(db: Session, user_id: str, category_updates: CategoryUpdate) -> CategoryDB:
    """Update a category's details"""
    db_category = read_db_category(db, category_updates.id, user_id)
    if not db_category:
        raise NotFoundError(f"Category with id {category_updates.id} not found")

    update_data = category_updates.model_dump(exclude_unset=True, exclude={"id"})

    if update_data.get("name"):
        new_name = update_data["name"].strip()
        existing = db.query(CategoryDB).filter(
            CategoryDB.user_id == user_id,
            func.lower(CategoryDB.name) == new_name.lower(),
            CategoryDB.id != db_category.id
        ).first()
        if existing:
            raise ValueError(f"Category with name '{new_name}' already exists")
        db_category.name = new_name

    if update_data.get("category_type"):
        db_category.category_type = category_updates.category_type

    if category_updates.sub_categories is not None:
        db_category.sub_categories = _dump_sub_categories(category_updates.sub_categories)

    if "budget" in update_data:
        db_category.budget = update_data["budget"]

    db_category.updated_at = utcnow()

    try:
        db.commit()
        db.refresh(db_category)
        return db_category
    except IntegrityError:
        db.rollback()
        raise ValueError("Category update failed due to a database constraint.")


def delete_db_category(db: Session, category_id: int, user_id: str) -> bool:
    """Delete a category. Transactions keep their embedded copy of the category."""
    db_category = read_db_category(db, category_id, user_id)
    if not db_category:
        raise NotFoundError(f"Category with id {category_id} not found")

    try:
        db.delete(db_category)
        db.commit()
        return True
    except IntegrityError:
        db.rollback()
        raise ValueError("Cannot delete category as it is currently in use.")
