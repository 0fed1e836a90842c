"""
random_art/cli.py - Command-line interface
"""
import logging
import time

import click

from . import __version__
from .config import ArtConfig
from .generators import make_generator, render_image, save_image

logger = logging.getLogger("random_art")


@click.command()
@click.version_option(version=__version__)
@click.option('--depth', '-d', default=10, type=click.IntRange(min=0),
              help='Maximal depth of the expression tree')
@click.option('--width', '-w', default=256, type=click.IntRange(min=1), help='Output image width')
@click.option('--height', '-h', default=256, type=click.IntRange(min=1), help='Output image height')
@click.option('--output', '-o', default='output.png', help='Output file name')
@click.option('--colored', '-c', is_flag=True, help='Produce colored image')
@click.option('--seed', '-s', type=int, default=None, help='Random seed for reproducible images')
@click.option('--workers', default=1, type=click.IntRange(min=1),
              help='Threads used to evaluate the pixel grid')
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
def cli(depth, width, height, output, colored, seed, workers, verbose):
    """Random Art - images from random expression trees"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    config = ArtConfig(depth=depth, width=width, height=height, output=output,
                       colored=colored, seed=seed, workers=workers)
    try:
        config.validate()
    except ValueError as e:
        raise click.UsageError(str(e))
    logger.info("Config: %s", config.to_dict())

    start_time = time.time()
    generator = make_generator(config.colored, config.depth, config.make_rng())

    if verbose:
        names = generator.channel_names
        for name, tree in zip(names, generator.trees):
            click.echo(f"{name}: {tree}")
            click.echo(f"   Nodes: {len(tree.get_all_nodes())}, Depth: {tree.get_depth()}")

    image = render_image(generator, size=config.size, workers=config.workers)

    try:
        save_image(image, config.output)
    except (OSError, ValueError) as e:
        raise click.ClickException(f"Can't save to {config.output}: {e}")

    click.echo(f"Image saved: {config.output}")
    if verbose:
        click.echo(f"Render time: {time.time() - start_time:.2f}s")


if __name__ == '__main__':
    cli()
