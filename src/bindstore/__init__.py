"""bindstore - versioned, cached persistence over a remote key-value store.

Objects declare how to serialize and deserialize themselves; a DataBinding
groups several of them under one master key and handles fetch-once caching,
periodic autosave, and the final flush at shutdown.

Usage:
    async with lifespan() as service:
        binding = await service.open_binding("Players", "P_42", {"Inventory": inventory})
        await binding.save()
"""

from bindstore.domain.codec import VERSION_FIELD, VersionedCodec
from bindstore.domain.models import CompliantObject, RetrievedState, VersionDispatch
from bindstore.domain.table_shape import is_well_formed
from bindstore.main import lifespan
from bindstore.usecase.binding_registry import BindingRegistry
from bindstore.usecase.binding_service import BindingService
from bindstore.usecase.data_binding import DataBinding

__all__ = [
    "VERSION_FIELD",
    "BindingRegistry",
    "BindingService",
    "CompliantObject",
    "DataBinding",
    "RetrievedState",
    "VersionDispatch",
    "VersionedCodec",
    "is_well_formed",
    "lifespan",
]
__version__ = "0.1.0"
