"""
Invoice listing endpoint. The PDF itself is served by /trips/{id}/invoice.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from fuelwale.app.db.session import get_db
from fuelwale.app.schemas.invoice import InvoiceListItem
from fuelwale.app.core.guards import require_role, INVOICE_ROLES
from fuelwale.app.services.listings import list_invoices

router = APIRouter(prefix="/invoices", tags=["Invoices"])


@router.get("", response_model=List[InvoiceListItem])
async def get_invoices(
    search: Optional[str] = Query(None),
    current_user: dict = Depends(require_role(INVOICE_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    return await list_invoices(db, search)
