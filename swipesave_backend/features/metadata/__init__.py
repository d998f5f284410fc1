"""Workflow metadata embedded in generated images."""

from .png_workflow import read_png_workflow

__all__ = ["read_png_workflow"]
