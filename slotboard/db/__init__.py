from slotboard.db.core import close_pool, get_pool_stats, init_pool, ping
from slotboard.db.rooms import (
    participants_delete,
    participants_insert,
    participants_insert_booking,
    participants_list,
    rooms_create,
    rooms_delete,
    rooms_get,
)

__all__ = [
    "close_pool",
    "get_pool_stats",
    "init_pool",
    "participants_delete",
    "participants_insert",
    "participants_insert_booking",
    "participants_list",
    "ping",
    "rooms_create",
    "rooms_delete",
    "rooms_get",
]
