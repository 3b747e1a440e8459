import click

from cellgen.bus import ContactPolicy, ContactPosition
from cellgen.contact import ContactParams
from cellgen.errors import CellgenError
from cellgen.layout.geometry import Dir
from cellgen.logging import set_log_level
from cellgen.mos import MosDevice, MosParams, MosType
from cellgen.pdk import Pdk
from cellgen.tech import sky130
from cellgen.tech.config import TechConfig
from cellgen.utils import parse_length

POSITIONS = [p.value for p in ContactPosition]
LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'SILENT']


def _parse_device(text: str, units: str) -> MosDevice:
    """TYPE:WIDTH[:SKIPS], e.g. 'n:1000' or 'p:0.84um:0,2'."""
    parts = text.split(':')
    if len(parts) not in (2, 3):
        raise click.BadParameter(f"expected TYPE:WIDTH[:SKIPS], got '{text}'")
    try:
        mos_type = MosType(parts[0].lower())
    except ValueError:
        raise click.BadParameter(f"device type must be 'n' or 'p', got '{parts[0]}'") from None
    try:
        width = parse_length(parts[1], units)
        skips = [int(s) for s in parts[2].split(',') if s] if len(parts) == 3 else []
    except (CellgenError, ValueError) as err:
        raise click.BadParameter(str(err)) from err
    return MosDevice(mos_type, width, frozenset(skips))


def _report(err: CellgenError):
    raise click.ClickException(f"{type(err).__name__}: {err}") from err


@click.group()
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False),
              default=None, help='Design rule file (defaults to the bundled sky130 rules)')
@click.option('--log-level', type=click.Choice(LOG_LEVELS, case_sensitive=False),
              default='WARNING', show_default=True)
@click.pass_context
def cli(ctx, config_path, log_level):
    """ Layout primitive generator """
    set_log_level(log_level)
    try:
        if config_path:
            tc = TechConfig.from_file(config_path)
            ctx.obj = Pdk(tc.tech, tc)
        else:
            ctx.obj = sky130.pdk()
    except CellgenError as err:
        _report(err)


@cli.command()
@click.argument('stack', type=str)
@click.option('--rows', type=int, default=1, show_default=True)
@click.option('--cols', type=int, default=1, show_default=True)
@click.option('--dir', 'direction', type=click.Choice(['h', 'v']), default='h', show_default=True,
              help='Relaxed direction')
@click.option('-o', '--output', type=click.Path(dir_okay=False), default=None,
              help='GDS file to write')
@click.pass_obj
def contact(pdk, stack, rows, cols, direction, output):
    """ Draw a ROWS x COLS contact on STACK """
    try:
        lib = pdk.create_pdk_lib(stack)
        ct = lib.draw_contact(ContactParams(stack, rows=rows, cols=cols, dir=Dir(direction)))
        if output:
            lib.save_gds(output)
    except CellgenError as err:
        _report(err)

    click.echo(ct.name)
    for layer, rect in ct.bboxes.items():
        click.echo(f"  {layer.name:8s} {rect.width} x {rect.height}")


@cli.command()
@click.option('--length', 'length', required=True, type=str, help='Gate length')
@click.option('--fingers', required=True, type=int, help='Number of fingers')
@click.option('--device', 'devices', required=True, multiple=True,
              help='TYPE:WIDTH[:SKIPS], repeat for each device')
@click.option('-o', '--output', type=click.Path(dir_okay=False), default=None,
              help='GDS file to write')
@click.pass_obj
def mos(pdk, length, fingers, devices, output):
    """ Draw a multi-finger transistor group """
    try:
        params = MosParams(length=parse_length(length, pdk.units), fingers=fingers,
                           devices=tuple(_parse_device(d, pdk.units) for d in devices))
        lib = pdk.create_pdk_lib('ptx')
        ptx = lib.draw_mos(params)
        if output:
            lib.save_gds(output)
    except CellgenError as err:
        _report(err)

    click.echo(ptx.cell.cell_name)
    click.echo(f"  gates: {len(ptx.gate_pins)}")
    click.echo(f"  source/drain: {sum(len(p) for p in ptx.sd_pins)}")


@cli.command('bus-spacing')
@click.argument('metal', type=int)
@click.argument('width', type=str)
@click.option('--above', type=click.Choice(POSITIONS), default=None,
              help='Contacts landing from the layer above')
@click.option('--below', type=click.Choice(POSITIONS), default=None,
              help='Contacts landing from the layer below')
@click.pass_obj
def bus_spacing(pdk, metal, width, above, below):
    """ Minimum spacing between WIDTH-wide tracks on routing metal METAL """
    try:
        policy = ContactPolicy(above=above, below=below)
        space = pdk.bus_min_spacing(metal, parse_length(width, pdk.units), policy)
    except CellgenError as err:
        _report(err)
    click.echo(space)
