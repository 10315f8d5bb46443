import httpx
import asyncio
import logging
import time
from fleetquote.core.config import settings
from fleetquote.core.metrics import webhook_deliveries, webhook_duration

logger = logging.getLogger(__name__)


async def send_webhook(payload: dict, retries: int | None = None) -> bool:

    if retries is None:
        retries = settings.WEBHOOK_RETRIES
    
    backoff = 1.0
    quotation = payload.get("quotation_number") or payload.get("quotation_id")
    
    for attempt in range(1, retries + 1):
        start_time = time.time()
        try:
            async with httpx.AsyncClient(timeout=settings.WEBHOOK_TIMEOUT) as client:
                response = await client.post(settings.WEBHOOK_URL, json=payload)
                
                if 200 <= response.status_code < 300:
                    webhook_deliveries.labels(status="success", retry_count=str(attempt - 1)).inc()
                    webhook_duration.labels(status="success").observe(time.time() - start_time)
                    logger.info(f"Webhook delivery succeeded for quotation {quotation}")
                    return True
                else:
                    logger.warning(
                        f"Webhook delivery failed (attempt {attempt}/{retries}): "
                        f"Status {response.status_code} for quotation {quotation}"
                    )
        except httpx.TimeoutException:
            logger.warning(
                f"Webhook timeout (attempt {attempt}/{retries}) for quotation {quotation}"
            )
        except httpx.HTTPError as e:
            logger.warning(
                f"Webhook delivery error (attempt {attempt}/{retries}): {e} "
                f"for quotation {quotation}"
            )
        webhook_deliveries.labels(status="failure", retry_count=str(attempt - 1)).inc()
        webhook_duration.labels(status="failure").observe(time.time() - start_time)
        
        if attempt < retries:
            await asyncio.sleep(backoff)
            backoff *= 2.0
    
    logger.error(f"Webhook delivery failed after {retries} attempts for quotation {quotation}")
    return False
