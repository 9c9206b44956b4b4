"""Database models"""

from jobportal.models.user import User
from jobportal.models.security import RefreshToken
from jobportal.models.job import Job, Application

__all__ = ["User", "RefreshToken", "Job", "Application"]
