from fastapi import APIRouter, Depends

from groupledger.core.dependencies import check_group
from groupledger.db.store import KeyValueStore, get_store
from groupledger.models.group import Group
from groupledger.schemas.group import GroupCreate, GroupOut, MemberIn, MemberOut
from groupledger.services.group_services import add_member, create_group, get_members, remove_member

router = APIRouter()

@router.post("/", response_model=GroupOut, status_code=201)
async def create_new_group(data: GroupCreate, store: KeyValueStore = Depends(get_store)):
    group, members = await create_group(store, data)
    return GroupOut.from_group(group, members)

@router.get("/{group_id}", response_model=GroupOut)
async def fetch_group(group: Group = Depends(check_group), store: KeyValueStore = Depends(get_store)):
    members = await get_members(store, group.id)
    return GroupOut.from_group(group, members)

@router.post("/{group_id}/members", response_model=MemberOut, status_code=201)
async def add_member_to_group(group_id: str, data: MemberIn, store: KeyValueStore = Depends(get_store)):
    member = await add_member(store, group_id, data.to_member())
    return MemberOut(id=member.id, display_name=member.display_name)

@router.delete("/{group_id}/members/{member_id}", status_code=204)
async def remove_member_from_group(group_id: str, member_id: str, store: KeyValueStore = Depends(get_store)):
    await remove_member(store, group_id, member_id)
