"""Category domain service."""

from typing import Optional, Any
from pocketledger.database.base import Database
from pocketledger.domain.entities import Category, CategoryType
from pocketledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    category_path_not_found,
)


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(
        self,
        name: str,
        parent_path: Optional[str] = None,
        category_type: CategoryType | str = CategoryType.EXPENSE,
    ) -> int:
        """Create a category.

        Args:
            name: Category name
            parent_path: Optional parent category path (e.g., "Food")
            category_type: income or expense; children inherit nothing implicitly

        Returns:
            Category ID

        Raises:
            ValidationError: If the name or type is invalid
            NotFoundError: If parent category doesn't exist
            ConflictError: If a sibling with the same name exists
        """
        if not name or not name.strip() or ">" in name:
            raise ValidationError(f"Invalid category name '{name}'")
        try:
            category_type = CategoryType(category_type)
        except ValueError:
            raise ValidationError(f"Unknown category type '{category_type}'")

        parent_id = None
        full_path = name
        if parent_path is not None:
            parent = self.require_category_by_path(parent_path)
            parent_id = parent.id
            full_path = f"{parent_path} > {name}"

        if self.db.get_category_by_path(full_path) is not None:
            raise ConflictError(f"Category '{full_path}' already exists")

        return self.db.create_category(name=name, parent_id=parent_id, category_type=category_type)

    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        return self.db.get_category(category_id)

    def get_category_by_path(self, path: str) -> Optional[Category]:
        """Get category by path (e.g., "Food > Groceries")."""
        return self.db.get_category_by_path(path)

    def require_category_by_path(self, path: str) -> Category:
        """Get category by path or raise NotFoundError."""
        category = self.db.get_category_by_path(path)
        if category is None:
            raise NotFoundError(category_path_not_found(path))
        return category

    def list_categories(self) -> list[Category]:
        """List every category."""
        return self.db.list_all_categories()

    def get_category_tree(self) -> list[dict[str, Any]]:
        """Get full category tree."""
        return self.db.get_category_tree()

    def format_category_path(self, category_id: int) -> str:
        """Get full path for a category.

        Args:
            category_id: Category ID

        Returns:
            Full category path (e.g., "Food > Groceries"), empty if unknown
        """
        cat = self.get_category(category_id)
        if cat is None:
            return ""

        path_parts = [cat.name]
        current_parent_id = cat.parent_id
        while current_parent_id is not None:
            parent = self.get_category(current_parent_id)
            if parent is None:
                break
            path_parts.append(parent.name)
            current_parent_id = parent.parent_id

        return " > ".join(reversed(path_parts))
