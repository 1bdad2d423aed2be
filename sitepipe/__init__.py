"""
sitepipe - static-site asset pipeline.

Vendor sync, SCSS and JS builds with license banners, distribution copy,
and a live-reloading dev server.
"""

__version__ = "0.1.0"
