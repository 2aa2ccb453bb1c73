"""Supabase Auth admin API client (team member sync)."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class SupabaseAdminClient:
    """
    Minimal async client for the Supabase Auth admin endpoints.

    Docs:
    - https://supabase.com/docs/reference/api/auth-admin-list-users
    """

    PER_PAGE = 1000

    def __init__(
        self,
        base_url: str,
        service_role_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.service_role_key = service_role_key.strip()
        self.timeout = timeout
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self.service_role_key,
            "Authorization": f"Bearer {self.service_role_key}",
            "Content-Type": "application/json",
        }

    async def list_users(self) -> List[Dict[str, Any]]:
        """All auth users, following pages until a short page is returned."""
        users: List[Dict[str, Any]] = []
        page = 1
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            while True:
                response = await client.get(
                    f"{self.base_url}/auth/v1/admin/users",
                    params={"page": page, "per_page": self.PER_PAGE},
                    headers=self._headers(),
                )
                response.raise_for_status()
                payload = response.json()
                batch = payload.get("users", []) if isinstance(payload, dict) else payload
                users.extend(batch)
                if len(batch) < self.PER_PAGE:
                    break
                page += 1
        logger.debug("Fetched %s users from Supabase Auth", len(users))
        return users
