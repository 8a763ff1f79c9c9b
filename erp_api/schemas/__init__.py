from .base import RequestModel

__all__ = ['RequestModel']
