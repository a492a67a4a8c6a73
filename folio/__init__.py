"""Folio static site generator.

Folio reads markdown content files with YAML front-matter, renders them
through a Jinja2 layout, bundles browser scripts with esbuild and writes a
directory of static files.

A build is a single pass: collect timestamps, load templates, discover
content, reset the output directory, bundle scripts, then render one page
per content file. The first error aborts the build.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
