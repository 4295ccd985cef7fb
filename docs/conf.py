# docs/conf.py
# Sphinx configuration for hairforge documentation build
# Exists so docs match current release metadata and extensions
# RELEVANT FILES:docs/index.rst,pyproject.toml,README.md
# Configuration file for the Sphinx documentation builder.

import sys
import os

# Add Python source to path for autodoc
sys.path.insert(0, os.path.abspath('../python'))

project = 'hairforge'
copyright = '2026, hairforge contributors'
author = 'hairforge contributors'

# The short X.Y version
version = '0.1'
# The full version, including alpha/beta/rc tags
release = '0.1.0'

extensions = [
    'sphinx.ext.autodoc',
    'sphinx.ext.autosummary',
    'sphinx.ext.viewcode',
    'sphinx.ext.napoleon',
    'sphinx.ext.intersphinx',
    'sphinx.ext.mathjax',
    'myst_parser',  # For Markdown support
]

source_suffix = {
    '.rst': None,
    '.md': None,
}

# Loader and LOD docstrings use the NumPy section style
napoleon_google_docstring = False
napoleon_numpy_docstring = True

autodoc_default_options = {
    'members': True,
    'member-order': 'bysource',
    'undoc-members': True,
}
autosummary_generate = True

intersphinx_mapping = {
    'python': ('https://docs.python.org/3', None),
    'numpy': ('https://numpy.org/doc/stable/', None),
}

exclude_patterns = ['_build', 'Thumbs.db', '.DS_Store', '__pycache__']

html_theme = 'sphinx_rtd_theme'
html_title = 'hairforge Documentation'
html_short_title = 'hairforge'

_HERE = os.path.dirname(__file__)
html_static_path = ['_static'] if os.path.isdir(os.path.join(_HERE, '_static')) else []
