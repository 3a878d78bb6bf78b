from fastapi import APIRouter, Depends

from groupledger.db.store import KeyValueStore, get_store
from groupledger.services.system_services import system_health, system_metrics

router = APIRouter()

@router.get("/metrics")
async def metrics(
    store: KeyValueStore = Depends(get_store)
):
    return await system_metrics(store)

@router.get("/health")
async def health():
    return await system_health()
