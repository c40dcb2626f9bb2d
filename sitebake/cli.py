#!/usr/bin/env python3
"""
Command-line interface for Sitebake - static site generator.
"""

import os
import sys
import argparse
import time
from typing import Dict, List, Optional

from . import __version__
from .core import Sitebake, setup_logging
from .exceptions import FilesystemError, SitebakeError, TemplateReadError
from .settings import SitebakeSettings, to_build_config

STARTER_FILES: Dict[str, str] = {
    os.path.join('_layouts', 'public.html'): """{% macro public() -%}
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{{ title() }}</title>
</head>
<body>
{{ header() }}
<main>
{{ content() }}
</main>
{{ footer() }}
</body>
</html>
{%- endmacro %}
""",
    os.path.join('_layouts', 'dashboard.html'): """{% macro dashboard() -%}
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Dashboard - {{ title() }}</title>
</head>
<body class="dashboard">
{{ header() }}
<aside>Built {{ build_timestamp }}</aside>
<main>
{{ content() }}
</main>
</body>
</html>
{%- endmacro %}
""",
    os.path.join('_includes', 'partials.html'): """{% macro header() -%}
<header><a href="/">Home</a></header>
{%- endmacro %}

{% macro footer() -%}
<footer>&copy; {{ year }} &middot; built {{ build_timestamp }}</footer>
{%- endmacro %}
""",
    os.path.join('pages', 'index.template.html'): """{% macro title() %}Welcome{% endmacro %}

{% macro content() -%}
<h1>Welcome to your new site</h1>
<p>Edit src/pages/index.template.html and run sitebake again.</p>
{%- endmacro %}
""",
    os.path.join('pages', 'admin', 'index.template.html'): """{% macro layout_name() %}dashboard{% endmacro %}

{% macro title() %}Admin{% endmacro %}

{% macro content() -%}
<h1>Admin</h1>
<p>This page renders with the dashboard layout.</p>
{%- endmacro %}
""",
}


def create_starter_structure(src_dir: str = 'src') -> List[str]:
    """Create a starter source tree with a layout, partials and two pages."""
    created = []
    for relative_path, content in STARTER_FILES.items():
        path = os.path.join(src_dir, relative_path)
        if os.path.exists(path):
            print(f"File already exists: {path}")
            continue
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)
        print(f"Created: {path}")
        created.append(path)
    return created


def format_error(error: Exception) -> str:
    """Format an error for the error stream, path first when there is one."""
    if isinstance(error, (FilesystemError, TemplateReadError)):
        return f"{error.path}: {error.reason}"
    if isinstance(error, OSError) and error.filename:
        return f"{error.filename}: {error.strerror}"
    return str(error)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='sitebake', description='Sitebake - Static Site Generator')
    parser.add_argument('--src', type=str,
                        help='Source directory (default: ./src)')
    parser.add_argument('--out', type=str,
                        help='Output directory (default: ./site)')
    parser.add_argument('--glob', type=str,
                        help='Glob for pages within the source directory (default: pages/**/*.template.html)')
    parser.add_argument('--timestamp', type=str,
                        help='Build timestamp (default: current time in --timezone)')
    parser.add_argument('--timezone', type=str,
                        help='Timezone for the default build timestamp (default: America/Chicago)')
    parser.add_argument('--layout', type=str,
                        help='Layout used when a page does not choose one (default: public)')
    parser.add_argument('--config', type=str,
                        help='Directory containing sitebake.yml/.yaml/.json (default: current directory)')
    parser.add_argument('--log-file', type=str,
                        help='Also write debug logs to this file')
    parser.add_argument('--verbose', action='store_true', default=None,
                        help='Show debug output')
    parser.add_argument('--init', type=str, choices=['yml', 'yaml', 'json'],
                        help='Create a sample configuration file and starter source tree')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    settings_loader = SitebakeSettings(args.config)

    # Handle init command
    if args.init:
        try:
            config_path = settings_loader.create_sample_config(args.init)
            print(f"Created sample configuration file: {config_path}")
            print("\nCreating starter source tree...")
            create_starter_structure(args.src or 'src')
        except (OSError, ValueError) as e:
            print(format_error(e), file=sys.stderr)
            sys.exit(1)
        print("\nRun 'sitebake' to build your site.")
        return

    # Load settings from configuration file
    settings_loader.load_settings()

    # Command line arguments take precedence
    args_dict = {k: v for k, v in vars(args).items() if k not in ('config', 'init')}
    final_settings = settings_loader.merge_with_args(args_dict)

    logger = setup_logging(verbose=bool(final_settings.get('verbose')), log_file=final_settings.get('log_file'))
    for warning in settings_loader.warnings:
        logger.warning(f"Warning: {warning}")
    if settings_loader.config_file_path and not settings_loader.warnings:
        logger.debug(f"Loaded configuration from: {os.path.relpath(settings_loader.config_file_path)}")

    start_time = time.time()
    try:
        config = to_build_config(final_settings)
        generator = Sitebake(config)
        generator.build()
    except (SitebakeError, OSError, ValueError) as e:
        print(format_error(e), file=sys.stderr)
        sys.exit(1)

    logger.debug(f"Site build completed in {time.time() - start_time:.6f} seconds.")
    logger.debug(f"Total pages generated: {generator.pages_generated}")


if __name__ == '__main__':
    main()
