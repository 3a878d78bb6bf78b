from groupledger.db.store import KeyValueStore, group_key
from groupledger.services.group_services import list_groups

async def system_health():
    return {
        "status": "ok"
    }

async def system_metrics(store: KeyValueStore):
    groups = await list_groups(store)

    expenses = 0
    payments = 0
    for group in groups:
        expenses += len(await store.get(group_key(group.id, "expenses"), []))
        payments += len(await store.get(group_key(group.id, "payments"), []))

    return {
        "groups": len(groups),
        "expenses": expenses,
        "payments": payments
    }
