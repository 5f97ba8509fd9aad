"""SlaConfigurationResolver — effective SLA thresholds for the monitor and admin API."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ticket_dispatch.application.ports.unit_of_work import UnitOfWorkFactory
from ticket_dispatch.domain.entities.sla import SlaConfiguration
from ticket_dispatch.domain.errors import PersistenceError
from ticket_dispatch.domain.policies.sla_configuration import normalize_override, resolve_sla

logger = logging.getLogger(__name__)

SETTING_KEY = "support.sla"


class SlaConfigurationResolver:
    def __init__(self, uow_factory: UnitOfWorkFactory, defaults: Mapping[str, Any]):
        self._uow_factory = uow_factory
        self._defaults = defaults

    async def resolve(self) -> SlaConfiguration:
        """Defaults deep-merged with the stored override. Read-only.

        If the settings store cannot be read the defaults are used and the
        failure is listed in ``issues``.
        """
        try:
            overrides = await self.overrides()
        except PersistenceError as e:
            logger.warning("Could not load SLA override, using defaults: %s", e)
            config = resolve_sla(self._defaults)
            config.issues.append(f"SLA override unavailable: {e.message}")
            return config
        return resolve_sla(self._defaults, overrides)

    async def overrides(self) -> Any | None:
        async with self._uow_factory() as uow:
            return await uow.settings.get(SETTING_KEY)

    async def update(self, payload: Mapping[str, Any]) -> SlaConfiguration:
        """Validate and store an administrator override, replacing the previous one.

        Raises:
            ValidationError: the payload has unknown priorities or bad durations.
        """
        normalized = normalize_override(payload)
        async with self._uow_factory() as uow:
            await uow.settings.set(SETTING_KEY, normalized)
            await uow.commit()
        logger.info("SLA override updated: %s", normalized)
        return resolve_sla(self._defaults, normalized)
