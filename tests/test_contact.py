from concurrent.futures import ThreadPoolExecutor

import pytest

from cellgen import Pdk
from cellgen.contact import CONTACT_NET, ContactParams
from cellgen.errors import ConfigError, InvalidSpecError
from cellgen.layout import Dir, Rect


def test_cut_box_2x3(synth_pdk):
    ct = synth_pdk.get_contact(ContactParams('v0', rows=2, cols=3))
    cut = ct.bbox(synth_pdk.layer('ct'))
    assert (cut.width, cut.height) == (89, 53)
    assert cut == Rect(0, 0, 89, 53)
    assert (ct.rows, ct.cols) == (2, 3)


def test_cut_shapes(synth_pdk):
    ct = synth_pdk.get_contact(ContactParams('v0', rows=2, cols=3))
    cuts = ct.cell.shapes_on(synth_pdk.layer('ct'))
    assert len(cuts) == 1
    polys = cuts[0].polygons()
    assert len(polys) == 6
    assert sorted(p.bounds for p in polys)[0] == (0, 0, 17, 17)
    assert sorted(p.bounds for p in polys)[-1] == (72, 36, 89, 53)


def test_enclosures_1x1(synth_pdk):
    ct = synth_pdk.get_contact(ContactParams('v0', dir=Dir.HORIZ))
    # m0: enclosure 3, then 8 one-sided horizontally
    assert ct.bbox(synth_pdk.layer('m0')) == Rect(-8, -3, 25, 20)
    # m1: enclosure 5 gives 27, min width 30 gives 31, then 10 one-sided
    assert ct.bbox(synth_pdk.layer('m1')) == Rect(-10, -7, 27, 24)


def test_relaxed_direction(synth_pdk):
    h = synth_pdk.get_contact(ContactParams('v0', rows=1, cols=2, dir='h'))
    v = synth_pdk.get_contact(ContactParams('v0', rows=1, cols=2, dir='v'))
    m0 = synth_pdk.layer('m0')
    assert h.bbox(m0).width == 36 + 17 + 16
    assert h.bbox(m0).height == 23
    assert v.bbox(m0).width == 36 + 17 + 6
    assert v.bbox(m0).height == 17 + 16
    assert h is not v


def test_bottom_and_top_enclose_cuts(pdk):
    for stack in ('viali', 'via1', 'via2', 'ndiffc', 'polyc'):
        ct = pdk.get_contact(ContactParams(stack, rows=2, cols=2))
        st = pdk.config.stack(stack)
        cut = ct.bbox(pdk.layer(st.cut))
        for lay in (st.bottom, st.top):
            box = ct.bbox(pdk.layer(lay))
            assert box.x0 <= cut.x0 and box.y0 <= cut.y0
            assert box.x1 >= cut.x1 and box.y1 >= cut.y1
            assert box.width >= pdk.config.layer(lay).width
            assert box.height >= pdk.config.layer(lay).width


def test_port_and_outline(synth_pdk):
    ct = synth_pdk.get_contact(ContactParams('v0', rows=2, cols=2))
    port = ct.cell.get_port(CONTACT_NET)
    assert set(port.shapes) == {synth_pdk.layer('m0'), synth_pdk.layer('m1')}
    m0_box = ct.bbox(synth_pdk.layer('m0'))
    m1_box = ct.bbox(synth_pdk.layer('m1'))
    assert ct.cell.outline.bbox == m0_box.union(m1_box)


def test_device_stacks(pdk):
    nwell = pdk.layer('nwell')

    pct = pdk.get_contact(ContactParams('pdiffc'))
    diff_box = pct.bbox(pdk.layer('diff'))
    assert pct.bbox(pdk.layer('psdm')) == diff_box.expand(125)
    assert pct.bbox(nwell) == diff_box.expand(180)

    nct = pdk.get_contact(ContactParams('ndiffc'))
    assert nct.bbox(pdk.layer('nsdm')) == nct.bbox(pdk.layer('diff')).expand(125)
    with pytest.raises(ConfigError):
        nct.bbox(nwell)

    gct = pdk.get_contact(ContactParams('polyc'))
    assert gct.bbox(pdk.layer('npc')) == gct.bbox(pdk.layer('licon')).expand(100)
    assert gct.cell.blockages[pdk.layer('npc')] == [gct.bbox(pdk.layer('npc'))]


def test_determinism(pdk):
    other = Pdk('sky130', pdk.config)
    params = ContactParams('viali', rows=3, cols=2, dir=Dir.VERT)
    a = pdk.get_contact(params)
    b = other.get_contact(params)
    assert a is not b
    assert dict(a.bboxes) == dict(b.bboxes)
    assert [s.bounds for s in a.cell.shapes] == [s.bounds for s in b.cell.shapes]


def test_monotonic_in_cols(synth_pdk):
    m0 = synth_pdk.layer('m0')
    cut = synth_pdk.layer('ct')
    prev = None
    for cols in range(1, 8):
        ct = synth_pdk.get_contact(ContactParams('v0', rows=1, cols=cols))
        if prev is not None:
            assert ct.bbox(cut).width > prev.bbox(cut).width
            assert ct.bbox(m0).width >= prev.bbox(m0).width
        prev = ct


def test_cache_identity(synth_pdk):
    params = ContactParams('v0', rows=2, cols=3)
    assert synth_pdk.contacts.peek(params) is None
    a = synth_pdk.get_contact(params)
    b = synth_pdk.get_contact(ContactParams('v0', rows=2, cols=3))
    assert a is b
    assert synth_pdk.contacts.builds == 1
    assert params in synth_pdk.contacts

    # Transposed arrays are different contacts
    c = synth_pdk.get_contact(ContactParams('v0', rows=3, cols=2))
    assert c is not a
    assert len(synth_pdk.contacts) == 2


def test_cache_concurrent(synth_pdk):
    params = ContactParams('v0', rows=4, cols=4)
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: synth_pdk.get_contact(params), range(32)))
    assert all(r is results[0] for r in results)
    assert synth_pdk.contacts.builds == 1


def test_separate_pdks_do_not_share(synth_config):
    a = Pdk('synth', synth_config)
    b = Pdk('synth', synth_config)
    a.get_contact(ContactParams('v0'))
    assert len(b.contacts) == 0


@pytest.mark.parametrize('rows, cols', [(0, 1), (1, 0), (-2, 3)])
def test_invalid_size(synth_pdk, rows, cols):
    with pytest.raises(InvalidSpecError):
        synth_pdk.get_contact(ContactParams('v0', rows=rows, cols=cols))
    assert len(synth_pdk.contacts) == 0


def test_unknown_stack(synth_pdk):
    with pytest.raises(ConfigError):
        synth_pdk.get_contact(ContactParams('v9'))


def test_params_name():
    assert str(ContactParams('viali', rows=2, cols=3, dir=Dir.VERT)) == 'viali_2x3v'
    assert ContactParams('viali', dir='v') == ContactParams('viali', dir=Dir.VERT)


def test_cache_concurrent_distinct_params(synth_pdk):
    params = [ContactParams('v0', rows=r, cols=c) for r in range(1, 5) for c in range(1, 5)]
    with ThreadPoolExecutor(max_workers=8) as pool:
        first = list(pool.map(synth_pdk.get_contact, params * 3))
    assert synth_pdk.contacts.builds == len(params)
    assert len(synth_pdk.contacts) == len(params)
    for i, p in enumerate(params):
        assert first[i] is synth_pdk.contacts.peek(p)


def test_failed_build_not_cached(synth_pdk):
    with pytest.raises(ConfigError):
        synth_pdk.get_contact(ContactParams('v9'))
    assert synth_pdk.contacts.builds == 0
    assert ContactParams('v9') not in synth_pdk.contacts
