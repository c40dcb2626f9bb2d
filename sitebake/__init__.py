"""
Sitebake - A small static site generator.

Sitebake composes each page template with shared Jinja2 includes and layouts,
picks the layout the page asks for, and writes the rendered HTML to a mirrored
path in the output directory.
"""

__version__ = "1.0.0"

from .core import Sitebake, PageRenderer, make_build_context
from .settings import BuildConfig, SitebakeSettings
from .templates import TemplateSet, build_template_set

__all__ = ['Sitebake', 'PageRenderer', 'make_build_context', 'BuildConfig',
           'SitebakeSettings', 'TemplateSet', 'build_template_set']
