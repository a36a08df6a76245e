"""
Timezone Service - API Layer

Structure:
- routes/     : Endpoint handlers
- services/   : Zone resolution and report building
- schemas/    : Pydantic response models
- middleware/ : Error handling, access log, write timeout
"""

from timezone_service.api.main import create_app

__all__ = ["create_app"]
