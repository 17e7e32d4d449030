"""Result file output"""
from .writer import ResultWriter, write_lines

__all__ = ['ResultWriter', 'write_lines']
