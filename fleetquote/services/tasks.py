from celery import Celery
from fleetquote.core.config import settings

celery_app = Celery(
    "worker",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_BACKEND,
)
celery_app.conf.task_routes = {"fleetquote.services.tasks.recalculate_quotation": {"queue": "recalculate"}}

@celery_app.task(bind=True, max_retries=3)
def recalculate_quotation(self, quotation_id: int):
    import asyncio
    from fleetquote.services.tasks_internal import recalculate_quotation_async
    
    try:
        asyncio.run(recalculate_quotation_async(quotation_id))
    except Exception as e:
        retry_kwargs = {"countdown": 2 ** self.request.retries}
        raise self.retry(exc=e, **retry_kwargs)
