"""Cacheline decoder implementations"""
from .base import CachelineDecoder
from .ccs import CCSDecoder
from .dcc import DCCDecoder

__all__ = [
    'CachelineDecoder',
    'CCSDecoder',
    'DCCDecoder',
]
