from common.repositories.base import BaseRepository
from packages.tenants.models.database.tenant import TenantEntity
from packages.tenants.models.domain.tenant import Tenant


class TenantRepository(BaseRepository[TenantEntity, Tenant]):
    def __init__(self):
        super().__init__(TenantEntity, Tenant)
