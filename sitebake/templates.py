"""
Template set assembly for Sitebake.

A template set is every shared fragment (includes and layouts) plus exactly
one page, compiled together so a macro defined in any file can call a macro
defined in any other. Macros are the named blocks of the set: a layout is a
macro, and so is the page content it wraps.
"""

import glob
import logging
import os
from datetime import datetime

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateSyntaxError, nodes, select_autoescape

from .exceptions import BlockNotFoundError, TemplateParseError, TemplateReadError

logger = logging.getLogger('Sitebake.templates')


def now_rfc3339():
    """Current local time in RFC 3339 form, for templates."""
    return datetime.now().astimezone().isoformat(timespec='seconds')


def create_environment(src_dir=None):
    """Create the Jinja2 environment shared by every template set in a run."""
    env = Environment(
        loader=FileSystemLoader(src_dir) if src_dir else None,
        undefined=StrictUndefined,
        autoescape=select_autoescape(['html', 'htm', 'xml']),
        keep_trailing_newline=True
    )
    env.globals['now_rfc3339'] = now_rfc3339
    return env


def expand_globs(patterns):
    """
    Expand each pattern in order, sorting the matches of each one.

    Patterns that match nothing contribute no files.
    """
    files = []
    for pattern in patterns:
        matches = sorted(glob.glob(pattern, recursive=True))
        files.extend(path for path in matches if os.path.isfile(path))
    return files


def _read_source(path):
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()
    except OSError as e:
        raise TemplateReadError(path, e.strerror or str(e))
    except UnicodeDecodeError as e:
        raise TemplateReadError(path, f"not valid UTF-8: {e}")


def _parse_file(env, path):
    source = _read_source(path)
    try:
        return env.parse(source, name=path, filename=path)
    except TemplateSyntaxError as e:
        raise TemplateParseError(e.message, filename=e.filename or path, lineno=e.lineno)


def _statement_name(node):
    names = {
        nodes.Extends: 'extends',
        nodes.Assign: 'set',
        nodes.AssignBlock: 'set',
        nodes.Include: 'include',
        nodes.FilterBlock: 'filter',
        nodes.CallBlock: 'call',
        nodes.Block: 'block',
    }
    return names.get(type(node), type(node).__name__.lower())


class TemplateSet:
    """Compiled namespace of macros built from shared fragments and one page."""

    def __init__(self, template, files, names):
        self.template = template
        self.files = list(files)
        self.names = frozenset(names)

    @property
    def page(self):
        return self.files[-1]

    def has_block(self, name):
        return name in self.names

    def execute(self, name, data=None):
        """
        Render the macro ``name`` with ``data`` as template variables.

        Raises BlockNotFoundError if the set has no such macro. Errors raised
        by Jinja2 while rendering propagate unchanged.
        """
        if name not in self.names:
            raise BlockNotFoundError(name)
        module = self.template.make_module(vars=dict(data or {}))
        macro = getattr(module, name)
        return str(macro())


def build_template_set(shared_globs, page, env=None):
    """
    Build the template set for ``page``.

    Args:
        shared_globs: Glob patterns for shared fragments, in precedence order
        page: Path to the page template
        env: Jinja2 environment; a default one is created when omitted

    Returns:
        TemplateSet holding every top-level macro of the fragments and page
    """
    env = env or create_environment()
    files = expand_globs(shared_globs) + [page]

    body = []
    defined = {}
    for path in files:
        tree = _parse_file(env, path)
        for node in tree.body:
            # Text outside macro definitions is never rendered.
            if isinstance(node, nodes.Output):
                continue
            if isinstance(node, (nodes.Import, nodes.FromImport)):
                body.append(node)
                continue
            if not isinstance(node, nodes.Macro):
                raise TemplateParseError(
                    f"'{_statement_name(node)}' is not allowed outside a macro in a template set",
                    filename=path, lineno=node.lineno)
            if node.name in defined:
                raise TemplateParseError(
                    f"block {node.name!r} already defined in {defined[node.name]}",
                    filename=path, lineno=node.lineno)
            defined[node.name] = path
            body.append(node)

    combined = nodes.Template(body, lineno=1).set_environment(env)
    try:
        code = env.compile(combined, name=page, filename=page)
    except TemplateSyntaxError as e:
        raise TemplateParseError(e.message, filename=e.filename or page, lineno=e.lineno)
    template = env.template_class.from_code(env, code, env.make_globals(None))

    logger.debug(f"Built template set for {page} from {len(files)} file(s)")
    exported = [name for name in defined if not name.startswith('_')]
    return TemplateSet(template, files, exported)
