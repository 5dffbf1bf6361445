# -*- coding: utf-8 -*-
"""Carbon impact REST API."""

from carbon_impact.api.router import create_router

__all__ = ["create_router"]
