"""Sample data generation."""

from .generator import TemplateGenerator

__all__ = ['TemplateGenerator']
