# Configuration file for the Sphinx documentation builder.
#
# For a full list of configuration options, see the documentation:
# https://www.sphinx-doc.org/en/master/usage/configuration.html

import os
import sys

# Add the project root to sys.path so Sphinx can find torch_sqat
sys.path.insert(0, os.path.abspath('../..'))

# -- Project information -----------------------------------------------------
project = 'torch_sqat'
copyright = '2026, Stefano Giacomelli'
author = 'Stefano Giacomelli'
release = '0.1.0'
version = '0.1.0'

# -- General configuration ---------------------------------------------------
extensions = [
    'sphinx.ext.autodoc',           # API pages from docstrings
    'sphinx.ext.napoleon',          # NumPy-style docstrings
    'sphinx.ext.viewcode',
    'sphinx.ext.intersphinx',
    'sphinx.ext.mathjax',           # Interpolation and FIR design formulas
    'sphinx_autodoc_typehints',
    'myst_parser',                  # Markdown pages
]

napoleon_google_docstring = False
napoleon_numpy_docstring = True
napoleon_include_init_with_doc = True
napoleon_use_rtype = True
napoleon_attr_annotations = True

autodoc_default_options = {
    'members': True,
    'member-order': 'bysource',
    'undoc-members': False,
}
autodoc_typehints = 'description'
autodoc_typehints_description_target = 'documented'

templates_path = ['_templates']
exclude_patterns = []
source_suffix = {
    '.rst': 'restructuredtext',
    '.md': 'markdown',
}
master_doc = 'index'

# -- Options for HTML output -------------------------------------------------
html_theme = 'sphinx_rtd_theme'
html_theme_options = {
    'navigation_depth': 3,
    'collapse_navigation': False,
}
html_title = f'{project} v{version}'
html_short_title = project
html_show_sourcelink = True

# -- Options for LaTeX / man page output ---------------------------------------
latex_documents = [
    (master_doc, 'torch_sqat.tex', 'torch\\_sqat Documentation',
     author, 'manual'),
]
man_pages = [
    (master_doc, 'torch_sqat', 'torch_sqat Documentation',
     [author], 1)
]

# -- Extension configuration -------------------------------------------------
intersphinx_mapping = {
    'python': ('https://docs.python.org/3', None),
    'torch': ('https://pytorch.org/docs/stable/', None),
    'numpy': ('https://numpy.org/doc/stable/', None),
    'scipy': ('https://docs.scipy.org/doc/scipy/', None),
    'matplotlib': ('https://matplotlib.org/stable/', None),
}

always_document_param_types = True
typehints_fully_qualified = False
