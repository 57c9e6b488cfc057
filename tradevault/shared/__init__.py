# -*- coding: utf-8 -*-
"""
tradevault/shared/__init__.py

Infraestructura compartida (config, base de datos, eventos, scheduler).

Autor: TradeVault
Fecha: 2026-10-05
"""
