"""Awaitable wrappers around the category services and queries.

The ORM is synchronous, so each wrapper runs the underlying call in the
thread-sensitive executor provided by ``asgiref``.
"""
from __future__ import annotations

from asgiref.sync import sync_to_async

from . import queries, services

agraduate = sync_to_async(services.graduate)
awithdraw = sync_to_async(services.withdraw)
ablacklist = sync_to_async(services.blacklist)
aremove_from_blacklist = sync_to_async(services.remove_from_blacklist)
ais_blacklisted = sync_to_async(services.is_blacklisted)
acleanup = sync_to_async(services.cleanup)

alist_by_category = sync_to_async(queries.list_by_category)
acategory_stats = sync_to_async(queries.category_stats)
areport_data = sync_to_async(queries.report_data)
alist_active_scholars = sync_to_async(queries.list_active_scholars)
alist_trainees = sync_to_async(queries.list_trainees)


__all__ = [
    "ablacklist",
    "acategory_stats",
    "acleanup",
    "agraduate",
    "ais_blacklisted",
    "alist_active_scholars",
    "alist_by_category",
    "alist_trainees",
    "aremove_from_blacklist",
    "areport_data",
    "awithdraw",
]
