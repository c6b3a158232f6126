"""Host interfaces and their implementations."""

from diffmend.host.interfaces import Annotator, Marker, ProgressMonitor, Severity, Storage
from diffmend.host.markers import MarkerStore
from diffmend.host.progress import NullProgressMonitor, RichProgressMonitor
from diffmend.host.storage import DryRunStorage, FileSystemStorage, MemoryStorage

__all__ = [
    "Annotator",
    "DryRunStorage",
    "FileSystemStorage",
    "Marker",
    "MarkerStore",
    "MemoryStorage",
    "NullProgressMonitor",
    "ProgressMonitor",
    "RichProgressMonitor",
    "Severity",
    "Storage",
]
