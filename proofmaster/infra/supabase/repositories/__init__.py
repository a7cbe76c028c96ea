"""Repository exports"""
from .base import BaseRepository
from .production_runs import ProductionRunRepository

__all__ = ['BaseRepository', 'ProductionRunRepository']
