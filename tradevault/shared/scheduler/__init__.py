# -*- coding: utf-8 -*-
"""
tradevault/shared/scheduler/__init__.py

Sistema de jobs programados usando APScheduler.

Autor: TradeVault
Fecha: 2026-10-13
"""

from .scheduler_service import SchedulerService

__all__ = ["SchedulerService"]
