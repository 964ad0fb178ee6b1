"""
darkroom command line interface

Inspect RAW files, extract thumbnails and batch-render with a stored
adjustment recipe.
"""

import json
import logging
import time
from pathlib import Path
from typing import Optional

import click
from tqdm import tqdm

from .. import __version__
from ..api import RawEditor
from ..config import load_config, get_config_value
from ..core.result import ProcessingError
from ..io.decoder import SUPPORTED_INPUT_FORMATS, is_supported_format
from ..processing.params import AdjustmentParams, ProcessingOptions
from ..utils.logging import RenderStats, setup_console_logging
from .recipe_commands import recipe

logger = logging.getLogger(__name__)

FORMAT_EXTENSIONS = {'jpeg': '.jpg', 'png': '.png', 'tiff': '.tiff'}


def _make_editor(ctx) -> RawEditor:
    editor = RawEditor(config=ctx.obj['config'])
    editor.initialize()
    return editor


@click.group()
@click.option('--config', '-c', type=click.Path(exists=True),
              help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.pass_context
def main(ctx, config: Optional[str] = None, verbose: bool = False, quiet: bool = False):
    """
    darkroom - non-destructive RAW adjustment engine

    Render RAW files through a fixed pipeline of tonal, color, detail, lens
    and geometric corrections without ever touching the source file.
    """
    if ctx.obj is None:
        ctx.obj = {}

    ctx.obj['config'] = load_config(config)

    level = get_config_value(ctx.obj['config'], 'logging.level', 'INFO')
    if verbose:
        level = 'DEBUG'
    elif quiet:
        level = 'ERROR'
    setup_console_logging(level, color=get_config_value(ctx.obj['config'], 'logging.color', True))

    ctx.obj['verbose'] = verbose
    ctx.obj['quiet'] = quiet


@main.command()
def version():
    """Show the darkroom version"""
    click.echo(f"darkroom {__version__}")


@main.command()
def formats():
    """List supported RAW input formats"""
    click.echo(" ".join(SUPPORTED_INPUT_FORMATS))


@main.command()
@click.argument('raw_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--json', 'as_json', is_flag=True, help='Print metadata as JSON')
@click.pass_context
def info(ctx, raw_file: Path, as_json: bool):
    """Show shooting metadata for a RAW file"""
    editor = _make_editor(ctx)
    handle = editor.create_session()
    try:
        loaded = editor.load(handle, raw_file)
        if loaded.is_error:
            click.echo(f"✗ {loaded.message}", err=True)
            ctx.exit(1)

        metadata = editor.extract_metadata(handle).unwrap()
        if as_json:
            click.echo(json.dumps(metadata.to_dict(), indent=2))
            return

        data = metadata.to_dict()
        click.echo(f"{raw_file.name}")
        click.echo("=" * 60)
        click.echo(f"  Camera:       {data['camera_make']} {data['camera_model']}".rstrip())
        if data['lens_model']:
            click.echo(f"  Lens:         {data['lens_model']}")
        click.echo(f"  Settings:     ISO {data['iso']}, f/{data['aperture']}, "
                   f"{data['shutter_speed'] or '?'}, {data['focal_length']}mm")
        click.echo(f"  Flash:        {'yes' if data['flash_used'] else 'no'}")
        click.echo(f"  Size:         {data['image_width']}x{data['image_height']}")
        if data['color_temperature']:
            click.echo(f"  Color temp:   {data['color_temperature']}K")
    finally:
        editor.destroy_session(handle)


@main.command()
@click.argument('raw_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument('output', type=click.Path(dir_okay=False, path_type=Path))
@click.option('--size', '-s', type=click.IntRange(1, None), help='Maximum long edge in pixels')
@click.pass_context
def thumbnail(ctx, raw_file: Path, output: Path, size: Optional[int]):
    """Write a thumbnail of RAW_FILE to OUTPUT"""
    editor = _make_editor(ctx)
    handle = editor.create_session()
    try:
        result = editor.load(handle, raw_file)
        if result.is_success:
            result = editor.generate_thumbnail(handle, size)
        if result.is_success:
            fmt = 'PNG' if output.suffix.lower() == '.png' else 'JPEG'
            image = result.value
            result = editor.save(handle, image, output, fmt)
        if result.is_error:
            click.echo(f"✗ {result.message}", err=True)
            ctx.exit(1)
        click.echo(f"✓ Thumbnail {image.width}x{image.height} saved to {output}")
    finally:
        editor.destroy_session(handle)


@main.command()
@click.argument('raw_files', nargs=-1, required=True,
                type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--recipe', '-r', 'recipe_path', type=click.Path(exists=True, path_type=Path),
              help='Adjustment recipe (YAML or JSON)')
@click.option('--output-dir', '-o', type=click.Path(file_okay=False, path_type=Path),
              default=Path('.'), show_default=True, help='Output directory')
@click.option('--format', '-f', 'fmt', type=click.Choice(['jpeg', 'png', 'tiff'], case_sensitive=False),
              help='Output format (default: export.format from config)')
@click.option('--quality', '-q', type=click.IntRange(1, 100), help='JPEG quality')
@click.option('--width', type=click.IntRange(0, None), default=0, help='Maximum output width')
@click.option('--height', type=click.IntRange(0, None), default=0, help='Maximum output height')
@click.option('--preview', is_flag=True, help='Render a bounded preview instead of full size')
@click.pass_context
def render(ctx, raw_files, recipe_path: Optional[Path], output_dir: Path, fmt: str,
           quality: Optional[int], width: int, height: int, preview: bool):
    """Render one or more RAW files with an adjustment recipe"""
    try:
        params = AdjustmentParams.load(recipe_path) if recipe_path else AdjustmentParams()
    except ProcessingError as e:
        click.echo(f"✗ Could not read recipe: {e.message}", err=True)
        ctx.exit(1)

    fmt = (fmt or str(get_config_value(ctx.obj['config'], 'export.format', 'JPEG'))).lower()
    if fmt not in FORMAT_EXTENSIONS:
        click.echo(f"✗ Unsupported output format: {fmt}", err=True)
        ctx.exit(1)

    editor = _make_editor(ctx)
    if preview:
        options = editor.preview_options()
        if width or height:
            options = ProcessingOptions(output_width=width, output_height=height,
                                        quality=options.quality, preview_mode=True)
    else:
        options = ProcessingOptions(
            output_width=width,
            output_height=height,
            quality=quality or int(get_config_value(ctx.obj['config'], 'export.quality', 95))
        )
    quality = quality or options.quality

    stats = RenderStats()
    stats.set_total(len(raw_files))
    output_dir.mkdir(parents=True, exist_ok=True)

    for raw_file in tqdm(raw_files, desc="Rendering", unit="file", disable=ctx.obj['quiet']):
        if not is_supported_format(raw_file):
            logger.warning(f"{raw_file.name} does not have a known RAW extension")

        start = time.time()
        handle = editor.create_session()
        try:
            result = editor.load(handle, raw_file)
            if result.is_success:
                if preview:
                    result = editor.generate_preview(handle, params, options)
                else:
                    result = editor.process_full_image(handle, params, options)
            if result.is_success:
                output = output_dir / f"{raw_file.stem}{FORMAT_EXTENSIONS[fmt]}"
                result = editor.save(handle, result.value, output, fmt.upper(), quality)
        finally:
            editor.destroy_session(handle)

        if result.is_success:
            stats.add_success(time.time() - start)
        else:
            stats.add_error(str(raw_file), result.message)

    editor.finalize()

    if not ctx.obj['quiet']:
        for line in stats.summary_lines():
            click.echo(line)
    if stats.failed_files:
        ctx.exit(1)


main.add_command(recipe)


if __name__ == '__main__':
    main()
