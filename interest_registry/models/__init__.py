from interest_registry.db.base import Base as Base

from .projects import Project as Project
