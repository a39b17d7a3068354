import sys
import os.path

import decoprofile

sys.path.append(os.path.abspath('.'))
sys.path.append(os.path.abspath('doc'))

extensions = [
    'sphinx.ext.autodoc', 'sphinx.ext.autosummary', 'sphinx.ext.doctest',
    'sphinx.ext.todo', 'sphinx.ext.viewcode', 'sphinx.ext.mathjax'
]
project = 'decoprofile'
source_suffix = '.rst'
master_doc = 'index'

version = release = decoprofile.__version__
copyright = 'DecoProfile Team'

epub_basename = 'decoprofile - {}'.format(version)
epub_author = 'DecoProfile Team'

todo_include_todos = True

html_theme = 'sphinx_rtd_theme'


# vim: sw=4:et:ai
