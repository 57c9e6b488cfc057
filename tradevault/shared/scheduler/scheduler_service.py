# -*- coding: utf-8 -*-
"""
tradevault/shared/scheduler/scheduler_service.py

Servicio de programación de tareas periódicas usando APScheduler.

Cada proceso tiene su propio scheduler; la exclusión entre réplicas la
resuelve el lease de distributed_locks dentro de cada job.

Autor: TradeVault
Fecha: 2026-10-13
"""

import logging
from typing import Any, Callable, Optional

from apscheduler.executors.asyncio import AsyncIOExecutor
from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)


class SchedulerService:
    """Wrapper delgado sobre AsyncIOScheduler con defaults para sweeps."""

    def __init__(self, misfire_grace_time: int = 30):
        self._scheduler = AsyncIOScheduler(
            jobstores={"default": MemoryJobStore()},
            executors={"default": AsyncIOExecutor()},
            job_defaults={
                "coalesce": True,  # ejecuciones perdidas se combinan
                "max_instances": 1,
                "misfire_grace_time": misfire_grace_time,
            },
            timezone="UTC",
        )
        self._started = False

    def start(self) -> None:
        if not self._started:
            self._scheduler.start()
            self._started = True
            logger.info("scheduler_started jobs=%d", len(self._scheduler.get_jobs()))

    def shutdown(self, wait: bool = True) -> None:
        """
        Detiene el scheduler.

        Args:
            wait: Si True, espera a que terminen los jobs en ejecución
        """
        if self._started:
            self._scheduler.shutdown(wait=wait)
            self._started = False
            logger.info("scheduler_stopped")

    def add_interval_job(
        self,
        func: Callable[..., Any],
        job_id: str,
        *,
        seconds: int,
        **kwargs: Any,
    ) -> str:
        """
        Agrega (o reemplaza) un job que se ejecuta cada `seconds`.

        Returns:
            ID del job agregado
        """
        self._scheduler.add_job(
            func=func,
            trigger=IntervalTrigger(seconds=seconds),
            id=job_id,
            name=job_id,
            replace_existing=True,
            kwargs=kwargs,
        )
        logger.info("scheduler_job_added job=%s interval_s=%d", job_id, seconds)
        return job_id

    def remove_job(self, job_id: str) -> bool:
        try:
            self._scheduler.remove_job(job_id)
        except JobLookupError:
            logger.warning("scheduler_job_missing job=%s", job_id)
            return False
        logger.info("scheduler_job_removed job=%s", job_id)
        return True

    def get_jobs(self) -> list[dict[str, Any]]:
        return [
            {
                "id": job.id,
                "name": job.name,
                "next_run": getattr(job, "next_run_time", None),
                "trigger": str(job.trigger),
            }
            for job in self._scheduler.get_jobs()
        ]

    def get_job_status(self, job_id: str) -> Optional[dict[str, Any]]:
        job = self._scheduler.get_job(job_id)
        if job is None:
            return None
        return {
            "id": job.id,
            "name": job.name,
            "next_run": getattr(job, "next_run_time", None),
            "trigger": str(job.trigger),
        }

    @property
    def is_running(self) -> bool:
        return self._started and self._scheduler.running


__all__ = ["SchedulerService"]

# Fin del archivo tradevault/shared/scheduler/scheduler_service.py
