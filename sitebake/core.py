import os
import logging
from datetime import datetime
from types import MappingProxyType

from .exceptions import DiscoveryError, FilesystemError, LayoutExecutionError, PathResolutionError
from .settings import BuildConfig
from .templates import build_template_set, create_environment, expand_globs


def setup_logging(verbose=False, log_file=None):
    """Set up logging configuration."""
    logger = logging.getLogger('Sitebake')
    logger.setLevel(logging.DEBUG)

    if not logger.handlers:
        # Console handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        console_handler.setFormatter(logging.Formatter('%(message)s'))
        logger.addHandler(console_handler)

        # File handler for all logs
        if log_file:
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(logging.DEBUG)
            file_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
            file_handler.setFormatter(file_formatter)
            logger.addHandler(file_handler)

    return logger


def make_build_context(config, now=None):
    """
    Build the read-only data passed to every rendered layout.

    Extra fields come from the ``data`` setting; ``year`` and
    ``build_timestamp`` always reflect the current run.
    """
    now = now or datetime.now()
    context = dict(config.data)
    context['year'] = now.year
    context['build_timestamp'] = config.build_timestamp
    return MappingProxyType(context)


class PageRenderer:
    """Render one page's template set to its mirrored output path."""

    def __init__(self, config: BuildConfig):
        self.config = config
        self.logger = logging.getLogger('Sitebake.render')

    def resolve_layout(self, template_set) -> str:
        """
        Pick the layout macro for a page.

        A page overrides the default by defining the layout block; a blank
        result or an error while rendering it means no override.
        """
        layout = self.config.default_layout
        block = self.config.layout_block
        if not template_set.has_block(block):
            return layout

        try:
            name = template_set.execute(block).strip()
        except Exception as e:
            self.logger.warning(f"{template_set.page}: ignoring {block!r} block, using {layout!r}: {e}")
            return layout

        if not name:
            self.logger.debug(f"{template_set.page}: {block!r} block is empty, using {layout!r}")
            return layout
        return name

    def output_path_for(self, page) -> str:
        """Map pages/foo/bar.template.html to <out>/foo/bar.html."""
        root = os.path.abspath(self.config.pages_root)
        target = os.path.abspath(page)
        try:
            rel = os.path.relpath(target, root)
        except ValueError:
            # Different drives on Windows
            raise PathResolutionError(page, self.config.pages_root)

        if rel == os.curdir or rel == os.pardir or rel.startswith(os.pardir + os.sep):
            raise PathResolutionError(page, self.config.pages_root)

        suffix = self.config.page_suffix
        if suffix and rel.endswith(suffix):
            rel = rel[:-len(suffix)]
        return os.path.join(self.config.out_dir, rel + self.config.output_suffix)

    def prepare_output_dir(self, out_path):
        parent = os.path.dirname(out_path)
        if not parent:
            return
        try:
            os.makedirs(parent, exist_ok=True)
        except OSError as e:
            raise FilesystemError.from_os_error(parent, e)

    def render(self, template_set, page, context) -> str:
        """
        Render ``page`` and write it under the output directory.

        Returns:
            Path of the written file
        """
        layout = self.resolve_layout(template_set)
        out_path = self.output_path_for(page)

        self.logger.info(f"Rendering {page} -> {out_path} (layout: {layout})")
        self.prepare_output_dir(out_path)

        try:
            with open(out_path, 'w', encoding='utf-8') as output_file:
                try:
                    html = template_set.execute(layout, context)
                except Exception as e:
                    raise LayoutExecutionError(page, layout, e) from e
                output_file.write(html)
        except OSError as e:
            raise FilesystemError.from_os_error(out_path, e)

        self.logger.info(f"Successfully wrote {out_path}")
        return out_path


class Sitebake:
    def __init__(self, config: BuildConfig, env=None):
        self.config = config
        self.env = env or create_environment(config.src_dir)
        self.renderer = PageRenderer(config)
        self.logger = logging.getLogger('Sitebake')
        self.pages_generated = 0

    def discover_pages(self):
        """Get all page templates matching the pages glob, in sorted order."""
        pattern = self.config.pages_pattern
        pages = expand_globs([pattern])
        if not pages:
            raise DiscoveryError(pattern)
        return pages

    def create_output_dir(self):
        try:
            os.makedirs(self.config.out_dir, exist_ok=True)
        except OSError as e:
            raise FilesystemError.from_os_error(self.config.out_dir, e)

    def render_page(self, page, context):
        """Build the template set for a single page and render it."""
        template_set = build_template_set(self.config.shared_globs, page, env=self.env)
        out_path = self.renderer.render(template_set, page, context)
        self.pages_generated += 1
        return out_path

    def build(self):
        """Main build process. Returns the paths written, in render order."""
        self.logger.info("Starting static site generation...")
        self.logger.info(f"Source directory: {self.config.src_dir}")
        self.logger.info(f"Output directory: {self.config.out_dir}")
        self.logger.info(f"Build timestamp: {self.config.build_timestamp}")

        pages = self.discover_pages()
        self.create_output_dir()
        self.logger.info(f"Found {len(pages)} page template(s) to render")

        context = make_build_context(self.config)
        written = [self.render_page(page, context) for page in pages]

        self.logger.info("Static site generation completed successfully")
        return written
