"""Core modules"""
from .config import ConfigManager
from .addresses import sort_ip_strings, sort_cidr_strings

__all__ = ['ConfigManager', 'sort_ip_strings', 'sort_cidr_strings']
