from typing import Optional

from fastapi import Depends, Header

from groupledger.db.store import KeyValueStore, get_store
from groupledger.models.group import Group
from groupledger.services.group_services import get_group


async def get_actor(x_member_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """Id of the member making the request; authentication happens upstream."""
    return x_member_id


async def check_group(group_id: str, store: KeyValueStore = Depends(get_store)) -> Group:
    return await get_group(store, group_id)
