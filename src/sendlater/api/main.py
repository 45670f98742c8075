from fastapi import APIRouter

from sendlater.api.routes.emails import emails_router
from sendlater.config import get_config

api_router = APIRouter(prefix=get_config().api_prefix, tags=["api"])
api_router.include_router(emails_router)
