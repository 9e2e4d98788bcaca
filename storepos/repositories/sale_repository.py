"""
Sale Repository - Data Access Layer for Sales

Handles all database queries for sales and returns Sale domain models.
Sales are append-only: there is no update or delete.

Author: TM3
Date: 2026-10-07
"""
import logging
from datetime import datetime
from typing import List, Optional, Dict

from pydantic import ValidationError

from storepos.domain.sale import Sale, SaleItem, SaleCreate
from storepos.core.database import get_db_connection_dict_with_retry

logger = logging.getLogger(__name__)

SALE_COLUMNS = """
    s.id, s.invoice_number, s.total_amount, s.sale_date,
    s.customer_id, s.customer_name, s.payment_method, s.status, s.notes,
    s.created_at
"""


class SaleRepository:
    """
    Repository for Sale data access

    All SQL queries for sales are centralized here.
    Returns Sale domain models with their items attached.
    """

    @staticmethod
    def _map_row_to_item(row: dict) -> SaleItem:
        return SaleItem(
            product_id=str(row['product_id']),
            product_name=row['product_name'] or "",
            quantity=row['quantity'],
            price=row['unit_price'],
            total=row['total']
        )

    @staticmethod
    def _map_row_to_sale(row: dict, items: List[SaleItem]) -> Sale:
        return Sale(
            id=str(row['id']),
            items=items,
            total_amount=row['total_amount'] if row['total_amount'] is not None else 0,
            date=row['sale_date'],
            invoice_number=row.get('invoice_number'),
            customer_id=row.get('customer_id'),
            customer_name=row.get('customer_name'),
            payment_method=row.get('payment_method') or "cash",
            status=row.get('status') or "completed",
            notes=row.get('notes'),
            created_at=row.get('created_at')
        )

    def _fetch_items(self, cursor, sale_ids: List) -> Dict[str, List[SaleItem]]:
        """Load items for many sales in one query, grouped by sale id"""
        items_by_sale: Dict[str, List[SaleItem]] = {}
        if not sale_ids:
            return items_by_sale

        cursor.execute("""
            SELECT sale_id, product_id, product_name, quantity, unit_price, total
            FROM sale_items
            WHERE sale_id = ANY(%s)
            ORDER BY sale_id, position
        """, (list(sale_ids),))

        for row in cursor.fetchall():
            sale_id = str(row['sale_id'])
            try:
                item = self._map_row_to_item(row)
            except ValidationError as e:
                logger.warning(f"Skipping malformed item of sale {sale_id}: {e}")
                continue
            items_by_sale.setdefault(sale_id, []).append(item)

        return items_by_sale

    def _build_sales(self, cursor, sale_rows: List[dict]) -> List[Sale]:
        items_by_sale = self._fetch_items(cursor, [row['id'] for row in sale_rows])

        sales = []
        for row in sale_rows:
            try:
                sales.append(self._map_row_to_sale(row, items_by_sale.get(str(row['id']), [])))
            except ValidationError as e:
                logger.warning(f"Skipping malformed sale row {row.get('id')}: {e}")
        return sales

    def create(self, data: SaleCreate) -> Sale:
        """
        Persist a sale and all of its items in one transaction

        Args:
            data: Validated sale payload

        Returns:
            The stored Sale with its assigned id

        Raises:
            psycopg2.Error: if the write fails (nothing is committed)
        """
        conn = get_db_connection_dict_with_retry()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO sales (
                    invoice_number, total_amount, sale_date,
                    customer_id, customer_name, payment_method, status, notes
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING {SALE_COLUMNS.replace('s.', '')}
            """, (
                data.invoice_number,
                data.total_amount,
                data.date,
                data.customer_id,
                data.customer_name,
                data.payment_method,
                data.status,
                data.notes
            ))
            sale_row = cursor.fetchone()

            for position, item in enumerate(data.items):
                cursor.execute("""
                    INSERT INTO sale_items (
                        sale_id, position, product_id, product_name,
                        quantity, unit_price, total
                    )
                    VALUES (%s, %s, %s, %s, %s, %s, %s)
                """, (
                    sale_row['id'],
                    position,
                    item.product_id,
                    item.product_name,
                    item.quantity,
                    item.price,
                    item.total
                ))

            conn.commit()
            return self._map_row_to_sale(sale_row, list(data.items))

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, sale_id: str) -> Optional[Sale]:
        """
        Find sale by ID with its items

        Returns:
            Sale or None if not found
        """
        conn = get_db_connection_dict_with_retry()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {SALE_COLUMNS}
                FROM sales s
                WHERE s.id = %s
            """, (sale_id,))

            row = cursor.fetchone()
            if not row:
                return None

            items = self._fetch_items(cursor, [row['id']])
            return self._map_row_to_sale(row, items.get(str(row['id']), []))

        finally:
            cursor.close()
            conn.close()

    def find_all(self) -> List[Sale]:
        """Every recorded sale, oldest first"""
        conn = get_db_connection_dict_with_retry()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {SALE_COLUMNS}
                FROM sales s
                ORDER BY s.sale_date, s.id
            """)

            return self._build_sales(cursor, cursor.fetchall())

        finally:
            cursor.close()
            conn.close()

    def find_in_range(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> List[Sale]:
        """
        Sales whose date falls inside [start, end]

        Args:
            start: Inclusive lower bound (None for unbounded)
            end: Inclusive upper bound (None for unbounded)

        Returns:
            Sales ordered by date
        """
        conn = get_db_connection_dict_with_retry()
        cursor = conn.cursor()

        try:
            conditions = []
            params = []

            if start:
                conditions.append("s.sale_date >= %s")
                params.append(start)

            if end:
                conditions.append("s.sale_date <= %s")
                params.append(end)

            where_clause = " AND ".join(conditions) if conditions else "1=1"

            cursor.execute(f"""
                SELECT {SALE_COLUMNS}
                FROM sales s
                WHERE {where_clause}
                ORDER BY s.sale_date, s.id
            """, params)

            return self._build_sales(cursor, cursor.fetchall())

        finally:
            cursor.close()
            conn.close()
