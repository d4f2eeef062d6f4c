"""Workspace management for FrameworkLS."""
from .cache import ScanError, WorkspaceCache
from .modules_cache import ModuleDescriptor, ModuleRegistry

__all__ = ['WorkspaceCache', 'ScanError', 'ModuleDescriptor', 'ModuleRegistry']
