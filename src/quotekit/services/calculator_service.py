"""Calculator instance management."""

import secrets
from datetime import datetime, timezone
from uuid import UUID, uuid4

from beartype import beartype

from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok, Result
from ..models.calculator import (
    CalculatorInstance,
    CalculatorInstanceCreate,
    CalculatorInstanceUpdate,
)
from ..models.catalog import OptionCatalog
from .catalog_store import CatalogStore

logger = get_logger(__name__)


class CalculatorService:
    """Create, look up and customise embeddable calculator instances."""

    def __init__(self, catalog_store: CatalogStore) -> None:
        """Initialize with the catalog store used to check verticals."""
        self._catalog_store = catalog_store
        self._instances: dict[UUID, CalculatorInstance] = {}
        self._by_embed_id: dict[str, UUID] = {}

    @beartype
    async def create_instance(
        self, instance_data: CalculatorInstanceCreate
    ) -> Result[CalculatorInstance, str]:
        """Create an instance of a vertical for an account."""
        overrides_check = self._catalog_store.effective_catalog(
            instance_data.vertical, instance_data.overrides
        )
        if isinstance(overrides_check, Err):
            return overrides_check

        embed_id = self._generate_embed_id()
        now = datetime.now(timezone.utc)
        instance = CalculatorInstance(
            id=uuid4(),
            owner_id=instance_data.owner_id,
            vertical=instance_data.vertical,
            embed_id=embed_id,
            theme=instance_data.theme,
            overrides=instance_data.overrides,
            created_at=now,
            updated_at=now,
        )
        self._instances[instance.id] = instance
        self._by_embed_id[embed_id] = instance.id
        logger.info(
            "Calculator %s (%s) created for owner %s",
            instance.id,
            instance.vertical,
            instance.owner_id,
        )
        return Ok(instance)

    @beartype
    async def get_instance(self, instance_id: UUID) -> Result[CalculatorInstance | None, str]:
        """Get instance by ID."""
        return Ok(self._instances.get(instance_id))

    @beartype
    async def get_by_embed_id(self, embed_id: str) -> Result[CalculatorInstance | None, str]:
        """Get an active instance by its public embed id."""
        instance_id = self._by_embed_id.get(embed_id)
        instance = self._instances.get(instance_id) if instance_id else None
        if instance is None or not instance.is_active:
            return Ok(None)
        return Ok(instance)

    @beartype
    async def list_for_owner(self, owner_id: UUID) -> Result[list[CalculatorInstance], str]:
        """Instances owned by an account, oldest first."""
        instances = [i for i in self._instances.values() if i.owner_id == owner_id]
        instances.sort(key=lambda i: i.created_at)
        return Ok(instances)

    @beartype
    async def update_instance(
        self, instance_id: UUID, update_data: CalculatorInstanceUpdate
    ) -> Result[CalculatorInstance, str]:
        """Change theme, price overrides or active flag."""
        instance = self._instances.get(instance_id)
        if instance is None:
            return Err("Calculator not found")

        changes = update_data.model_dump(exclude_none=True)
        if update_data.overrides is not None:
            check = self._catalog_store.effective_catalog(
                instance.vertical, update_data.overrides
            )
            if isinstance(check, Err):
                return check
            changes["overrides"] = update_data.overrides
        if update_data.theme is not None:
            changes["theme"] = update_data.theme

        updated = instance.model_copy(
            update={**changes, "updated_at": datetime.now(timezone.utc)}
        )
        self._instances[instance_id] = updated
        return Ok(updated)

    @beartype
    async def deactivate(self, instance_id: UUID) -> Result[CalculatorInstance, str]:
        """Stop serving an instance's embed."""
        return await self.update_instance(
            instance_id, CalculatorInstanceUpdate(is_active=False)
        )

    @beartype
    async def effective_catalog(
        self, instance: CalculatorInstance
    ) -> Result[OptionCatalog, str]:
        """The catalog an instance prices with."""
        return self._catalog_store.effective_catalog(instance.vertical, instance.overrides)

    def _generate_embed_id(self) -> str:
        while True:
            embed_id = secrets.token_urlsafe(12)
            if embed_id not in self._by_embed_id:
                return embed_id
