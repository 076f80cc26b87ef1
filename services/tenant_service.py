import hmac
import json
import logging
import re
from types import MappingProxyType
from typing import Mapping, Optional

from error.error_handling import ConfigurationFatal, Unauthorized

logger = logging.getLogger(__name__)

_TENANT_ID = re.compile(r"^[A-Za-z0-9_-]+$")


def _reject_duplicates(pairs):
    result = {}
    for key, value in pairs:
        if key in result:
            raise ConfigurationFatal(f"Duplicate API key in tenant registry: {key[:4]}...")
        result[key] = value
    return result


class TenantRegistry:
    """
    Mapa inmutable API key -> tenant. Se construye una vez al arrancar y
    se comparte entre peticiones sin sincronización.
    """

    def __init__(self, entries: Mapping[str, str] = None):
        self._entries = MappingProxyType(dict(entries or {}))

    @classmethod
    def from_blob(cls, blob: str) -> "TenantRegistry":
        """
        Acepta dos formas de entrada:
            {"key-1": "acme", "key-2": {"tenant": "globex"}}
        Un blob mal formado es un error fatal de arranque.
        """
        if not blob or not blob.strip():
            return cls()

        try:
            raw = json.loads(blob, object_pairs_hook=_reject_duplicates)
        except json.JSONDecodeError as e:
            raise ConfigurationFatal(f"TENANT_KEYS is not valid JSON: {e}") from e

        if not isinstance(raw, dict):
            raise ConfigurationFatal("TENANT_KEYS must be a JSON object")
        # "{}" activaría multi-tenant sin ninguna key válida
        if not raw:
            raise ConfigurationFatal("TENANT_KEYS has no entries")

        entries = {}
        for key, value in raw.items():
            if not key:
                raise ConfigurationFatal("Empty API key in TENANT_KEYS")
            tenant = value.get("tenant") if isinstance(value, dict) else value
            if not isinstance(tenant, str) or not _TENANT_ID.match(tenant):
                raise ConfigurationFatal(f"Invalid tenant for key {key[:4]}...: {tenant!r}")
            entries[key] = tenant

        logger.info(f"Tenant registry loaded: {len(entries)} keys, {len(set(entries.values()))} tenants")
        return cls(entries)

    def resolve(self, api_key: Optional[str]) -> Optional[str]:
        if not api_key:
            return None
        return self._entries.get(api_key)

    @property
    def tenants(self) -> frozenset:
        return frozenset(self._entries.values())


class TenantResolver:
    """Traduce las credenciales de la petición a un tenant"""

    def __init__(self, registry: TenantRegistry, admin_token: str = "", multi_tenant: bool = False):
        self.registry = registry
        self.admin_token = admin_token or ""
        self.multi_tenant = multi_tenant

    def resolve_tenant(self, api_key: str = None, admin_token: str = None) -> str:
        """
        Multi-tenant: la API key debe existir en el registro.
        Un solo tenant: el token de admin hace de credencial y el tenant es "".
        """
        if self.multi_tenant:
            tenant = self.registry.resolve(api_key)
            if tenant is None:
                raise Unauthorized("Unknown or missing API key")
            return tenant

        self.require_admin(admin_token)
        return ""

    def require_admin(self, token: str = None) -> None:
        # Sin token configurado no se autoriza nada
        if not self.admin_token or not token:
            raise Unauthorized("Missing admin token")
        if not hmac.compare_digest(token.encode(), self.admin_token.encode()):
            raise Unauthorized("Invalid admin token")

    def is_known_tenant(self, tenant: str) -> bool:
        return tenant in self.registry.tenants
