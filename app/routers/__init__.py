# app/routers/__init__.py

from app.routers import health
from app.routers import playground
from app.routers import rules
from app.routers import jobs
from app.routers import confidence

__all__ = ["health", "playground", "rules", "jobs", "confidence"]
