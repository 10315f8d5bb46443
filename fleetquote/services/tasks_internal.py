import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker, selectinload
from sqlalchemy.future import select
from fleetquote.core.config import settings
from fleetquote.core.enums import QuotationStatus
from fleetquote.models.quotation import Quotation
from fleetquote.services.parameters import get_active_parameters
from fleetquote.services.quotations import apply_quote, price_quotation, stored_request
from fleetquote.services.webhook import send_webhook

logger = logging.getLogger(__name__)

engine_worker = create_async_engine(settings.DATABASE_URL, future=True, echo=False)
AsyncSessionWorker = sessionmaker(engine_worker, class_=AsyncSession, expire_on_commit=False)


async def recalculate_in_session(db: AsyncSession, quotation_id: int) -> Optional[Quotation]:
    """Re-price a draft quotation with the tenant's current active parameters"""
    res = await db.execute(
        select(Quotation).where(Quotation.id == quotation_id).options(selectinload(Quotation.vehicle))
    )
    quotation = res.scalars().first()
    if not quotation or quotation.status != QuotationStatus.DRAFT:
        return None
    if quotation.vehicle is None:
        logger.warning(f"Quotation {quotation_id} has no vehicle, skipping recalculation")
        return None

    params = await get_active_parameters(db, quotation.tenant_id)
    if params is None:
        logger.warning(f"No active parameters for tenant {quotation.tenant_id}, skipping recalculation")
        return None

    quote = await price_quotation(stored_request(quotation), params, quotation.discount_percentage)

    old_price = quotation.sale_price_hnl
    markup = quotation.selected_markup if quotation.selected_markup in params.markup_options else None
    apply_quote(quotation, quote, markup, quotation.discount_percentage)
    db.add(quotation)
    await db.commit()

    # notify only when the quoted price moved
    if old_price != quotation.sale_price_hnl:
        await send_webhook({
            "quotation_id": quotation.id,
            "quotation_number": quotation.quotation_number,
            "sale_price_hnl": quotation.sale_price_hnl,
            "old_price": old_price,
            "status": str(quotation.status)
        })
    return quotation


async def recalculate_quotation_async(quotation_id: int):
    """Background task to recalculate a quotation"""
    async with AsyncSessionWorker() as db:
        await recalculate_in_session(db, quotation_id)
