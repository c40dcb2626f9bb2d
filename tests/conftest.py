"""Test configuration and fixtures for Sitebake tests."""

import logging
import os
import shutil
import sys
import tempfile
from pathlib import Path

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from sitebake.settings import BuildConfig


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def write_files(temp_dir):
    """Write a {relative path: content} mapping under temp_dir/src."""
    def _write(files):
        src_dir = Path(temp_dir) / 'src'
        for relative_path, content in files.items():
            path = src_dir / relative_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding='utf-8')
        src_dir.mkdir(exist_ok=True)
        return str(src_dir)
    return _write


@pytest.fixture
def mock_src_dir(write_files):
    """Create a source tree with partials, two layouts and three pages."""
    return write_files({
        '_includes/partials.html': (
            '{% macro header() %}<header>{{ title() }}</header>{% endmacro %}\n'
            '{% macro footer() %}<footer>{{ year }} {{ build_timestamp }}</footer>{% endmacro %}\n'
        ),
        '_layouts/public.html': (
            '{% macro public() %}<html>{{ header() }}<main>{{ content() }}</main>{{ footer() }}</html>{% endmacro %}\n'
        ),
        '_layouts/dashboard.html': (
            '{% macro dashboard() %}<dash>{{ content() }}</dash>{% endmacro %}\n'
        ),
        'pages/index.template.html': (
            '{% macro title() %}Home{% endmacro %}\n'
            '{% macro content() %}<p>Welcome</p>{% endmacro %}\n'
        ),
        'pages/blog/post.template.html': (
            '{% macro title() %}Post{% endmacro %}\n'
            '{% macro content() %}<p>A post</p>{% endmacro %}\n'
        ),
        'pages/admin/index.template.html': (
            '{% macro layout_name() %}\n  dashboard\n{% endmacro %}\n'
            '{% macro title() %}Admin{% endmacro %}\n'
            '{% macro content() %}<p>Admin</p>{% endmacro %}\n'
        ),
    })


@pytest.fixture
def mock_output_dir(temp_dir):
    """Path for the generated site; not created up front."""
    return os.path.join(temp_dir, 'site')


@pytest.fixture
def build_config(mock_src_dir, mock_output_dir):
    """BuildConfig pointing at the mock source tree."""
    return BuildConfig(
        src_dir=mock_src_dir,
        out_dir=mock_output_dir,
        build_timestamp='2024-01-01 00:00:00 CST'
    )


@pytest.fixture(autouse=True)
def reset_sitebake_logger():
    """Drop handlers installed by setup_logging so tests stay isolated."""
    yield
    logger = logging.getLogger('Sitebake')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
