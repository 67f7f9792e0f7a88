from fastapi import APIRouter

from fetcher.docs.route import router as docs_router
from fetcher.relay.route import router as relay_router

router = APIRouter()
router.include_router(relay_router)
router.include_router(docs_router)
