"""Profile manifest models and catalog."""

from .catalog import ProfileCatalog
from .models import ProfileManifestEntry

__all__ = ["ProfileCatalog", "ProfileManifestEntry"]
