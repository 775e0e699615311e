"""
Command-line interface implementation
"""

import click

from config import ModelPaths, get_model_paths, get_settings
from core.exceptions import ShotTrackerError
from pipeline import VideoProcessor, ProcessorConfig
from utils import setup_logging
from video_io import load_json


@click.group()
@click.option('--log-level', default=None, help='Logging level (defaults to the configured level)')
@click.option('--log-file', default=None, help='Also write logs to this file')
def cli(log_level, log_file):
    """Basketball Shot Tracker CLI"""
    setup_logging(level=log_level or get_settings().log_level, log_file=log_file)


@cli.command()
@click.argument('video_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--target-fps', default=None, type=float, help='Sampling rate (1-60)')
@click.option('--no-sync', is_flag=True, help='Do not pace analysis to the video timeline')
@click.option('--output', default='shots.json', help='Shot events output path')
@click.option('--model', 'model_path', default=None, type=click.Path(), help='YOLO weights path')
@click.option('--device', default=None, help="Inference device ('auto', 'cuda', 'mps', 'cpu')")
def analyze(video_path, target_fps, no_sync, output, model_path, device):
    """Detect shot attempts in a basketball video"""

    click.echo(f"Analyzing video: {video_path}")

    # Create config
    config = ProcessorConfig(
        yolo_model_path=model_path,
        target_fps=target_fps,
        synchronize_to_timeline=False if no_sync else None,
        device=device,
        output_path=output
    )

    try:
        with VideoProcessor(config, settings=get_settings()) as processor:
            with click.progressbar(length=100, label='Analyzing') as bar:
                def progress_callback(p):
                    bar.update(int(p * 100) - bar.pos)

                result = processor.process_video(video_path, progress_callback)
    except ShotTrackerError as e:
        raise click.ClickException(str(e))

    # Summary
    click.echo(f"\nAnalysis complete!")
    click.echo(result.get_summary())
    for i, event in enumerate(result.events, start=1):
        click.echo(f"  #{i} t={event.timestamp:.2f}s {event.summary()}")

    if config.output_path:
        click.echo(f"\nShot events saved to: {config.output_path}")


@cli.command()
@click.argument('events_path', type=click.Path(exists=True))
@click.option('--format', type=click.Choice(['summary', 'events']),
              default='summary', help='What to show')
def show(events_path, format):
    """Show saved shot analysis results"""

    data = load_json(events_path)

    if format == 'summary':
        info = data['video_info']
        totals = data['totals']
        click.echo("=== Analysis Summary ===")
        click.echo(f"Video: {info['path']}")
        click.echo(f"Duration: {info['duration_seconds']:.1f}s")
        click.echo(f"Frames: {info['sampled_frames_processed']}/{info['total_frames_read']}")
        click.echo(f"\nShots: {totals['shots']}")
        click.echo(f"  Makes: {totals['makes']}")
        click.echo(f"  Misses: {totals['misses']}")

    elif format == 'events':
        click.echo("=== Shot Events ===")
        for i, event in enumerate(data.get('events', []), start=1):
            result = "Make" if event['is_make'] else "Miss"
            diagnostics = event.get('diagnostics', {})
            click.echo(
                f"#{i} t={event['timestamp']:.2f}s {result} "
                f"({event['confidence']:.0%}, {diagnostics.get('reason', '?')})"
            )


@cli.command()
def list_models():
    """List available models"""
    model_paths: ModelPaths = get_model_paths()
    models = model_paths.list_models()

    click.echo("=== Available Models ===")
    for model_type, versions in models.items():
        click.echo(f"\n{model_type}:")
        for version, info in versions.items():
            status = "✓" if info['exists'] else "✗"
            click.echo(f"  {status} {version}: {info['path']}")


if __name__ == '__main__':
    cli()
