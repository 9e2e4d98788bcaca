"""
Product Repository - Data Access Layer for Products

Handles all database queries for products and returns Product domain models.
This is the catalog store: every stock mutation, whether from checkout or
from a manual product edit, goes through here.

Author: TM3
Date: 2026-10-06
"""
import logging
from typing import List, Optional

from pydantic import ValidationError

from storepos.domain.product import Product, ProductCreate, ProductUpdate, DEFAULT_CATEGORY
from storepos.core.database import get_db_connection_dict_with_retry

logger = logging.getLogger(__name__)

PRODUCT_COLUMNS = """
    id, name, category, price, stock, description, image_url,
    created_at, updated_at
"""


class ProductRepository:
    """
    Repository for Product data access

    All SQL queries for products are centralized here.
    Returns Product domain models, not raw dictionaries.
    """

    @staticmethod
    def _map_row_to_product(row: dict) -> Product:
        """Map a database row to the Product domain model"""
        return Product(
            id=str(row['id']),
            name=row['name'] or "",
            category=row['category'] or DEFAULT_CATEGORY,
            price=row['price'] if row['price'] is not None else 0,
            stock=row['stock'] if row['stock'] is not None else 0,
            description=row.get('description'),
            image_url=row.get('image_url'),
            created_at=row['created_at'],
            updated_at=row.get('updated_at')
        )

    def _map_rows(self, rows: List[dict]) -> List[Product]:
        products = []
        for row in rows:
            try:
                products.append(self._map_row_to_product(row))
            except ValidationError as e:
                logger.warning(f"Skipping malformed product row {row.get('id')}: {e}")
        return products

    def find_by_id(self, product_id: str) -> Optional[Product]:
        """
        Find product by ID

        Args:
            product_id: Store-assigned product ID

        Returns:
            Product or None if not found
        """
        conn = get_db_connection_dict_with_retry()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products
                WHERE id = %s
            """, (product_id,))

            row = cursor.fetchone()
            if not row:
                return None

            return self._map_row_to_product(row)

        finally:
            cursor.close()
            conn.close()

    def find_all(self, category: Optional[str] = None) -> List[Product]:
        """
        Find all products, optionally limited to one category

        Args:
            category: Category name ("all" or None for every product)

        Returns:
            List of products ordered by name
        """
        conn = get_db_connection_dict_with_retry()
        cursor = conn.cursor()

        try:
            if category and category != "all":
                cursor.execute(f"""
                    SELECT {PRODUCT_COLUMNS}
                    FROM products
                    WHERE category = %s
                    ORDER BY name
                """, (category,))
            else:
                cursor.execute(f"""
                    SELECT {PRODUCT_COLUMNS}
                    FROM products
                    ORDER BY name
                """)

            return self._map_rows(cursor.fetchall())

        finally:
            cursor.close()
            conn.close()

    def find_by_category(self, category: str) -> List[Product]:
        """Products of one category ("all" returns every product)"""
        return self.find_all(category=category)

    def find_low_stock(self, threshold: int, category: Optional[str] = None) -> List[Product]:
        """
        Find products with stock below threshold

        Args:
            threshold: Products with stock strictly below this are returned
            category: Optional category filter ("all" for every category)

        Returns:
            Products ordered by stock ascending
        """
        conn = get_db_connection_dict_with_retry()
        cursor = conn.cursor()

        try:
            conditions = ["stock < %s"]
            params = [threshold]

            if category and category != "all":
                conditions.append("category = %s")
                params.append(category)

            where_clause = " AND ".join(conditions)

            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products
                WHERE {where_clause}
                ORDER BY stock ASC, name
            """, params)

            return self._map_rows(cursor.fetchall())

        finally:
            cursor.close()
            conn.close()

    def create(self, data: ProductCreate) -> Product:
        """Insert a product and return it with its assigned id"""
        conn = get_db_connection_dict_with_retry()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO products (name, category, price, stock, description, image_url)
                VALUES (%s, %s, %s, %s, %s, %s)
                RETURNING {PRODUCT_COLUMNS}
            """, (
                data.name,
                data.category or DEFAULT_CATEGORY,
                data.price,
                data.stock,
                data.description,
                data.image_url
            ))

            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_product(row)

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def update(self, product_id: str, data: ProductUpdate) -> Optional[Product]:
        """
        Update the provided fields of a product

        Returns:
            Updated product, or None if the id does not exist
        """
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            return self.find_by_id(product_id)

        assignments = ", ".join(f"{column} = %s" for column in changes)
        params = list(changes.values()) + [product_id]

        conn = get_db_connection_dict_with_retry()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE products
                SET {assignments}, updated_at = NOW()
                WHERE id = %s
                RETURNING {PRODUCT_COLUMNS}
            """, params)

            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_product(row) if row else None

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def delete(self, product_id: str) -> bool:
        """Delete a product; returns False when it did not exist"""
        conn = get_db_connection_dict_with_retry()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM products WHERE id = %s", (product_id,))
            deleted = cursor.rowcount > 0
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def update_stock(self, product_id: str, new_stock: int) -> bool:
        """
        Overwrite the stock level (manual product edits)

        Returns:
            True if a row was updated
        """
        if new_stock < 0:
            raise ValueError("Stock cannot be negative")

        conn = get_db_connection_dict_with_retry()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                UPDATE products
                SET stock = %s, updated_at = NOW()
                WHERE id = %s
            """, (new_stock, product_id))

            updated = cursor.rowcount > 0
            conn.commit()
            return updated

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def decrement_stock_if_available(self, product_id: str, quantity: int) -> bool:
        """
        Atomically decrease stock by quantity only if enough is available

        The check and the write happen in one UPDATE statement, so two
        concurrent checkouts can never both consume the same units.

        Returns:
            True if the stock was decremented, False if the product is
            missing or has fewer than quantity units
        """
        if quantity < 0:
            raise ValueError("Quantity to decrease must be non-negative")

        conn = get_db_connection_dict_with_retry()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                UPDATE products
                SET stock = stock - %s, updated_at = NOW()
                WHERE id = %s AND stock >= %s
            """, (quantity, product_id, quantity))

            decremented = cursor.rowcount > 0
            conn.commit()
            return decremented

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()
