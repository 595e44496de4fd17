# -*- coding: utf-8 -*-
"""
app/__init__.py

Paquete principal 'app' del backend de CodeMarket.

Autor: CodeMarket
Fecha: 2026-10-05
"""

# Fin del archivo app/__init__.py
