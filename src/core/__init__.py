"""
Update Resolver - Core Package
"""

from core.models import ApplicationDescriptor, UpdateDecision
from core.resolver import UpdateResolver, create_resolver

__all__ = ["ApplicationDescriptor", "UpdateDecision", "UpdateResolver", "create_resolver"]
