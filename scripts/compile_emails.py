#!/usr/bin/env python3
"""Compile email templates into self-contained, minified HTML.

Every source matching EMAIL_SOURCE_GLOB in the templates directory is run
through the template processor (layouts, includes, stylesheets, CSS
inlining, minification). Outputs whose inputs have not changed since the
last build are skipped.

Run this script after modifying email templates:
    python scripts/compile_emails.py

Force a full rebuild:
    python scripts/compile_emails.py --force
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from mailsmith.compiler.manifest import BuildManifest, ManifestEntry  # noqa: E402
from mailsmith.compiler.processor import TemplateProcessor  # noqa: E402
from mailsmith.core.exceptions import MailsmithError  # noqa: E402
from mailsmith.core.logging import configure_logging  # noqa: E402
from mailsmith.core.settings import Settings, get_settings  # noqa: E402

logger = logging.getLogger("mailsmith.scripts.compile_emails")


def compile_template(
    processor: TemplateProcessor,
    source: Path,
    output_dir: Path,
    manifest: BuildManifest,
) -> None:
    """Compile a single email template and record it in the manifest.

    Args:
        processor: Template processor
        source: Source template path
        output_dir: Directory to save the compiled template
        manifest: Build manifest to record dependencies in
    """
    output_name = source.name
    context = processor.process(source, output_dir / output_name)
    manifest.record(ManifestEntry.from_context(output_name, source, context))
    print(f"  ✓ {source.name} -> {output_name}")


def compile_all(settings: Settings, *, force: bool = False) -> int:
    """Compile all email templates.

    Returns:
        Number of sources that failed to compile
    """
    templates_dir = settings.templates_dir.absolute()
    output_dir = settings.compiled_dir.absolute()
    output_dir.mkdir(parents=True, exist_ok=True)

    processor = TemplateProcessor.from_settings(settings)
    manifest = BuildManifest.load(output_dir)

    print("Compiling email templates...")

    failures = 0
    for source in sorted(templates_dir.glob(settings.source_glob)):
        if not source.is_file():
            continue
        if not force and not manifest.is_stale(source.name, source, output_dir):
            print(f"  - {source.name} (up to date)")
            continue
        try:
            compile_template(processor, source, output_dir, manifest)
        except MailsmithError as exc:
            failures += 1
            logger.error(
                "Failed to compile %s: %s",
                source,
                exc.message,
                extra={"path": str(source), "error_type": exc.error_type},
            )
            print(f"  ✗ {source.name} ({exc.error_type})")

    manifest.save(output_dir)
    print(f"\nCompiled templates saved to: {output_dir}")
    return failures


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--force",
        action="store_true",
        help="recompile every template, even if it is up to date",
    )
    args = parser.parse_args(argv)

    configure_logging()
    failures = compile_all(get_settings(), force=args.force)
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
