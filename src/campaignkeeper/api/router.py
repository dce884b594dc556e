# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Campaignkeeper Contributors

from fastapi import APIRouter

from campaignkeeper.api.relationships import router as relationships_router

v1_router = APIRouter()
v1_router.include_router(relationships_router)
