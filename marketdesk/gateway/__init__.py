"""Storage gateways -- the hosted store and a local JSON-file stand-in."""

from marketdesk.gateway.base import BanDuration, StorageGateway
from marketdesk.gateway.local import LocalGateway
from marketdesk.gateway.supabase import SupabaseGateway

__all__ = ["BanDuration", "LocalGateway", "StorageGateway", "SupabaseGateway"]
