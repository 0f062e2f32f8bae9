"""
Command Line Interface for the detection visualization engine.
Renders artifacts, charts and the mission report from a detection JSON file.
"""

import click
import yaml
from pathlib import Path
from datetime import datetime

from ..utils import ConfigurationError, SpillScopeError, get_config, mission_context, setup_logging
from ..data import (
    load_detection, load_training_history, REFERENCE_MODEL_METRICS, REFERENCE_TRAINING_HISTORY
)
from ..raster import data_uri_to_bytes, file_to_data_uri, render_visual_artifacts_sync
from ..charts import InteractiveChartRenderer, SvgChartRenderer, chart_suite
from ..report import assemble_report, report_filename, save_report


ARTIFACT_FILES = {
    'ground_truth_mask': 'ground_truth_mask.png',
    'predicted_mask': 'predicted_mask.png',
    'overlay': 'overlay.png',
    'annotated_overlay': 'annotated_overlay.png'
}


@click.group()
@click.option('--config', '-c', type=click.Path(), default='config/config.yaml',
              help='Configuration file path')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              default='INFO', help='Logging level')
@click.option('--set', 'overrides', multiple=True, metavar='KEY=VALUE',
              help='Override a configuration value, e.g. raster.mask_variant=stylized')
@click.pass_context
def cli(ctx, config, log_level, overrides):
    """SpillScope detection visualization CLI"""
    ctx.ensure_object(dict)

    config_path = Path(config) if Path(config).exists() else None
    setup_logging(config_path, level=log_level)

    try:
        config_manager = get_config(config_path)
        for override in overrides:
            key, value = _parse_override(override)
            config_manager.set(key, value)
    except SpillScopeError as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        raise click.Abort()

    ctx.obj['config_manager'] = config_manager
    ctx.obj['style'] = config_manager.get_render_style()


def _parse_override(override):
    key, sep, raw = override.partition('=')
    if not sep or not key.strip():
        raise ConfigurationError(f"Override must look like KEY=VALUE: {override}")
    # Hex colors would otherwise read as YAML comments
    if raw.startswith('#'):
        return key.strip(), raw
    try:
        return key.strip(), yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Cannot parse override value: {e}", context={"key": key}) from e


def _load_history(history_path):
    if history_path:
        return load_training_history(history_path)
    return REFERENCE_TRAINING_HISTORY


@cli.command()
@click.argument('detection', type=click.Path(exists=True, dir_okay=False))
@click.option('--image', '-i', type=click.Path(exists=True, dir_okay=False),
              required=True, help='Source image the detection refers to')
@click.option('--ground-truth', '-g', type=click.Path(exists=True, dir_okay=False),
              help='Operator-supplied ground-truth mask image')
@click.option('--history', type=click.Path(exists=True, dir_okay=False),
              help='Alternative training history (YAML or JSON)')
@click.option('--output', '-o', type=click.Path(), help='Output directory')
@click.option('--report/--no-report', default=True, help='Export the HTML mission report')
@click.option('--charts/--no-charts', default=True, help='Write the static SVG charts')
@click.pass_context
def render(ctx, detection, image, ground_truth, history, output, report, charts):
    """Render raster artifacts, charts and the mission report"""
    config_manager = ctx.obj['config_manager']
    style = ctx.obj['style']
    output_dir = Path(output or config_manager.get('paths.output_dir', 'output'))

    with mission_context(Path(detection).stem):
        _render_mission(detection, image, ground_truth, history, output_dir, report, charts, style)


def _render_mission(detection, image, ground_truth, history, output_dir, report, charts, style):
    try:
        result = load_detection(detection)
        training_history = _load_history(history)

        click.echo(f"Rendering artifacts for {Path(image).name}...")
        image_uri = file_to_data_uri(image)
        reference_mask = file_to_data_uri(ground_truth) if ground_truth else None
        visuals = render_visual_artifacts_sync(image_uri, result, style, reference_mask)
        result = result.with_visuals(visuals)

        output_dir.mkdir(parents=True, exist_ok=True)
        for attr, filename in ARTIFACT_FILES.items():
            data_uri = getattr(visuals, attr)
            if not data_uri:
                click.echo(f"{filename}: unavailable", err=True)
                continue
            (output_dir / filename).write_bytes(data_uri_to_bytes(data_uri))
            click.echo(f"Saved {filename}")

        if charts:
            charts_dir = output_dir / 'charts'
            charts_dir.mkdir(parents=True, exist_ok=True)
            renderer = SvgChartRenderer()
            for name, layout in chart_suite(result, training_history, style).items():
                (charts_dir / f"{name}.svg").write_text(renderer.render(layout), encoding='utf-8')
            click.echo(f"Charts saved to: {charts_dir}")

        if report:
            generated_at = datetime.now()
            document = assemble_report(result, training_history, style, generated_at)
            report_path = save_report(
                document, output_dir / report_filename(generated_at, style.report.filename_prefix)
            )
            click.echo(f"Report saved to: {report_path}")

        status = "ANOMALY DETECTED" if result.spill_found else "CLEAR"
        click.echo(f"Mission status: {status} (confidence: {result.confidence:.2%}, IoU: {result.iou:.4f})")

    except (SpillScopeError, OSError) as e:
        click.echo(f"Rendering failed: {e}", err=True)
        raise click.Abort()


@cli.command()
@click.argument('detection', type=click.Path(exists=True, dir_okay=False))
@click.option('--history', type=click.Path(exists=True, dir_okay=False),
              help='Alternative training history (YAML or JSON)')
@click.option('--output', '-o', type=click.Path(), help='Directory for PNG snapshots')
@click.option('--show', is_flag=True, help='Open the interactive figures')
@click.pass_context
def charts(ctx, detection, history, output, show):
    """Render the charts with the interactive back-end"""
    style = ctx.obj['style']

    try:
        result = load_detection(detection)
        renderer = InteractiveChartRenderer(dpi=style.charts.dpi)
        rendered = [
            (name, renderer.render(layout))
            for name, layout in chart_suite(result, _load_history(history), style).items()
        ]

        if output:
            output_dir = Path(output)
            for name, chart in rendered:
                path = chart.save(output_dir / f"{name}.png")
                click.echo(f"Saved {path}")

        if show:
            rendered[0][1].show()

        for _, chart in rendered:
            chart.close()

    except SpillScopeError as e:
        click.echo(f"Chart rendering failed: {e}", err=True)
        raise click.Abort()


@cli.command()
@click.option('--save', 'save_path', type=click.Path(dir_okay=False),
              help='Write the effective configuration, overrides included, to this file')
@click.pass_context
def info(ctx, save_path):
    """Show configuration and palette"""
    config_manager = ctx.obj['config_manager']
    style = ctx.obj['style']

    click.echo("=== SpillScope Configuration ===")
    click.echo(f"Output directory: {config_manager.get('paths.output_dir')}")
    click.echo(f"Mask variant: {style.raster.mask_variant}")
    click.echo(f"Chart canvas: {style.charts.width}x{style.charts.height} @ {style.charts.dpi} dpi")
    click.echo("\nPalette:")
    for name, value in vars(style.palette).items():
        click.echo(f"  {name:<12} {value}")

    metrics = REFERENCE_MODEL_METRICS
    click.echo("\nReference model:")
    click.echo(f"  Best IoU: {metrics.best_iou:.3f}")
    click.echo(f"  Final accuracy: {metrics.final_accuracy:.2f}%")
    click.echo(f"  Train loss: {metrics.train_loss:.3f} (patience {metrics.patience}, {metrics.img_size}px input)")

    if save_path:
        try:
            config_manager.save(save_path)
        except OSError as e:
            click.echo(f"Cannot save configuration: {e}", err=True)
            raise click.Abort()
        click.echo(f"\nConfiguration saved to: {save_path}")


if __name__ == '__main__':
    cli()
