# -*- coding: utf-8 -*-
"""
tradevault/modules/__init__.py

Módulos de dominio: ledger, escrow, orders, disputes.

Autor: TradeVault
Fecha: 2026-10-08
"""
