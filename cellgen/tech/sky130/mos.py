"""SKY130 multi-finger transistor layout.

Layout with horizontal poly orientation:
- Devices sit side by side; each device is one vertical strip of diff
- Poly fingers run horizontally across every device
- Source/drain contacts fill the gaps between fingers, gap 0 at the bottom
- Gate contacts sit in a column left of the poly
- Origin at lower-left corner of the leftmost diff
"""

from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, List, Optional

from cellgen.errors import InfeasibleContactError
from cellgen.contact import ContactParams
from cellgen.layout.cell import LayoutCell
from cellgen.layout.geometry import Dir, Rect, Span, bbox_union, round_down_to_grid
from cellgen.layout.port import Port
from cellgen.logging import logger
from cellgen.mos import LayoutTransistors, MosParams, MosType

if TYPE_CHECKING:
    from cellgen.pdk import Pdk
    from cellgen.tech.config import TechConfig

# Gate contacts are pulled this far left of the poly ends.
POLY_FUDGE_X = 60


# --- Derived rules ---

def finger_space(tc: 'TechConfig') -> int:
    """Vertical gap between neighbouring gate fingers."""
    return max(2 * tc.space('gate', 'licon') + tc.layer('li').width,
               tc.layer('poly').space)


def diff_edge_to_gate(tc: 'TechConfig') -> int:
    """Distance from the diff edge to the first (or last) gate finger."""
    licon = tc.layer('licon')
    return max(tc.layer('diff').extension('poly'),
               tc.space('gate', 'licon') + licon.width + licon.enclosure('diff'))


def diff_to_opposite_diff(tc: 'TechConfig') -> int:
    """Horizontal distance between an NMOS and a PMOS diff."""
    return tc.space('diff', 'nwell') + tc.layer('diff').enclosure('nwell')


# --- Generator ---

def draw_sky130_mos(pdk: 'Pdk', params: MosParams) -> LayoutTransistors:
    """
    Draw a group of transistors sharing gate length and finger count.

    Args:
        pdk: Technology context; contacts are drawn through its cache
        params: The transistor group

    Raises:
        InvalidSpecError: params can never be drawn
        InfeasibleContactError: a device is too narrow for a source/drain contact
    """
    tc = pdk.config
    params.validate(pdk.grid)

    name = params.name()
    nf = params.fingers
    length = params.length
    fspace = finger_space(tc)
    edge = diff_edge_to_gate(tc)
    pitch = length + fspace

    diff = pdk.layer('diff')
    poly = pdk.layer('poly')
    li = pdk.layer('li')

    cell = LayoutCell(name)

    # Diff length perpendicular to gates
    diff_perp = 2 * edge + nf * length + (nf - 1) * fspace

    x0, y0 = 0, 0
    cx = x0
    prev_type: Optional[MosType] = None
    prev_implant: Optional[Rect] = None
    diff_xs: List[int] = []

    for j, d in enumerate(params.devices):
        if prev_type is not None:
            if prev_type != d.mos_type:
                cx += diff_to_opposite_diff(tc)
                prev_implant = None
            else:
                cx += tc.layer('diff').space

        diff_xs.append(cx)
        rect = Rect(cx, y0, cx + d.width, y0 + diff_perp)

        implant_name = 'psdm' if d.mos_type is MosType.PMOS else 'nsdm'
        implant = pdk.layer(implant_name)
        implant_box = rect.expand(tc.layer('diff').enclosure(implant_name))
        cell.add_port(Port(f"{implant_name}_{j}").add_shape(implant, implant_box))

        # Same-type neighbours share one implant region
        if prev_implant is not None:
            implant_box = implant_box.union(prev_implant)
        cell.add_rect(implant, implant_box)
        prev_implant = implant_box

        if d.mos_type is MosType.PMOS:
            nwell = pdk.layer('nwell')
            well_box = rect.expand(tc.layer('diff').enclosure('nwell'))
            cell.add_port(Port(f"vpb_{j}").add_shape(nwell, well_box))
            cell.add_rect(nwell, well_box)

        cell.add_rect(diff, rect)

        cx += d.width
        prev_type = d.mos_type

    # Poly fingers
    gate_ct = pdk.get_contact(ContactParams('polyc', rows=1, cols=1, dir=Dir.HORIZ))
    gate_bbox = gate_ct.bbox(poly)
    gate_metal_bbox = gate_ct.bbox(li)
    npc_bbox = gate_ct.bbox(pdk.layer('npc'))

    poly_ext = tc.layer('poly').extension('diff')
    xpoly = x0 - poly_ext
    wpoly = cx - xpoly + poly_ext

    poly_rects = []
    ypoly = y0 + edge
    for _ in range(nf):
        rect = Rect(xpoly - POLY_FUDGE_X, ypoly, xpoly + wpoly, ypoly + length)
        poly_rects.append(rect)
        cell.add_rect(poly, rect)
        ypoly += pitch

    # Gate contacts, centered as a column on the fingers
    line = gate_bbox.height
    space = tc.layer('poly').space
    total_contact_len = nf * line + (nf - 1) * space
    gate_span = Span(poly_rects[0].y0, poly_rects[-1].y1)
    contact_span = Span.from_center_span_gridded(gate_span.center, total_contact_len, pdk.grid)

    gate_pins: List[Rect] = []
    npc_boxes = []
    for i, rect in enumerate(poly_rects):
        bot = contact_span.start + i * (line + space)
        ofsx = rect.x0 - gate_bbox.x1
        ofsy = bot - gate_bbox.y0

        ct_box = gate_metal_bbox.translate(ofsx, ofsy)
        cell.add_port(Port(f"gate_{i}").add_shape(li, ct_box))
        gate_pins.append(ct_box)
        npc_boxes.append(npc_bbox.translate(ofsx, ofsy))

        cell.add_instance(f"gate_contact_{i}", gate_ct.cell, (ofsx, ofsy))

    cell.add_rect(pdk.layer('npc'), bbox_union(npc_boxes))

    # Source/drain contacts
    sd_pins: List[Dict[int, Rect]] = [{} for _ in params.devices]
    sd_contacts = {}
    for j, d in enumerate(params.devices):
        if len(d.skip_sd_metal) == nf + 1:
            # Every gap skipped
            continue
        stack = d.mos_type.sd_stack
        ct = pdk.get_contact_sized(stack, Dir.HORIZ, diff, d.width)
        if ct is None:
            raise InfeasibleContactError(
                f"Device {j} of {name}: no {stack} contact fits in width {d.width}",
                stack=stack, width=d.width)
        sd_contacts[j] = ct

    cy = y0
    for i in range(nf + 1):
        for j, (d, x) in enumerate(zip(params.devices, diff_xs)):
            if i in d.skip_sd_metal:
                continue
            ct = sd_contacts[j]
            bbox = ct.bbox(diff)
            ofsx = round_down_to_grid((d.width - bbox.width) // 2, pdk.grid)
            loc = (x - bbox.x0 + ofsx, cy - bbox.y0)
            cell.add_instance(f"sd_contact_{i}_{j}", ct.cell, loc)

            sd_rect = ct.bbox(li).translate(*loc)
            cell.add_port(Port(f"sd_{j}_{i}").add_shape(li, sd_rect))
            sd_pins[j][i] = sd_rect
        cy += pitch

    logger.debug(f"Drew {name}: {nf} fingers, {len(params.devices)} devices")

    return LayoutTransistors(
        cell=cell,
        sd_metal=li,
        gate_metal=li,
        sd_pins=tuple(MappingProxyType(pins) for pins in sd_pins),
        gate_pins=tuple(gate_pins),
        num_fingers=nf,
        num_devices=len(params.devices),
    )
