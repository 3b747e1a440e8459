import logging

import pytest

from cellgen.contact import MAX_UNITS, ContactParams
from cellgen.layout import Dir, Rect


def test_sized_horizontal(pdk):
    diff = pdk.layer('diff')
    ct = pdk.get_contact_sized('ndiffc', Dir.HORIZ, diff, 1000)
    # 340 per extra cut, 290 for the first
    assert (ct.rows, ct.cols) == (1, 3)
    assert ct.bbox(diff).width == 970

    bigger = pdk.get_contact(ContactParams('ndiffc', rows=1, cols=4, dir=Dir.HORIZ))
    assert bigger.bbox(diff).width > 1000


def test_sized_exact_fit(pdk):
    diff = pdk.layer('diff')
    ct = pdk.get_contact_sized('ndiffc', Dir.HORIZ, diff, 970)
    assert ct.cols == 3
    ct = pdk.get_contact_sized('ndiffc', Dir.HORIZ, diff, 969)
    assert ct.cols == 2


def test_sized_vertical(synth_pdk):
    m0 = synth_pdk.layer('m0')
    ct = synth_pdk.get_contact_sized('v0', Dir.VERT, m0, 200)
    assert ct.cols == 1
    assert ct.bbox(m0).height <= 200
    more = synth_pdk.get_contact(ContactParams('v0', rows=ct.rows + 1, cols=1, dir=Dir.VERT))
    assert more.bbox(m0).height > 200


def test_sized_returns_shared_contact(synth_pdk):
    m0 = synth_pdk.layer('m0')
    ct = synth_pdk.get_contact_sized('v0', Dir.HORIZ, m0, 200)
    assert ct is synth_pdk.get_contact(ContactParams('v0', rows=1, cols=ct.cols, dir=Dir.HORIZ))


def test_sized_none_when_single_cut_too_big(synth_pdk):
    w0 = synth_pdk.layer('w0')
    assert synth_pdk.get_contact(ContactParams('wide')).bbox(w0).width == 120
    assert synth_pdk.get_contact_sized('wide', Dir.HORIZ, w0, 100) is None
    assert synth_pdk.get_contact_sized('wide', Dir.HORIZ, w0, 120).cols == 1


def test_sized_saturates(synth_pdk, caplog):
    m0 = synth_pdk.layer('m0')
    with caplog.at_level(logging.WARNING, logger='cellgen'):
        ct = synth_pdk.get_contact_sized('v0', Dir.HORIZ, m0, 10**9)
    assert ct.cols == MAX_UNITS
    assert 'cut limit' in caplog.text


def test_within(synth_pdk):
    m0 = synth_pdk.layer('m0')
    bbox = Rect(0, 0, 200, 100)
    ct = synth_pdk.get_contact_within('v0', m0, bbox)
    # Width 36c - 3, height 36r - 13
    assert (ct.rows, ct.cols) == (3, 5)
    assert ct.bbox(m0).fits_within(bbox)

    direction = Dir.HORIZ
    wider = synth_pdk.get_contact(ContactParams('v0', rows=3, cols=6, dir=direction))
    taller = synth_pdk.get_contact(ContactParams('v0', rows=4, cols=5, dir=direction))
    assert not wider.bbox(m0).fits_within(bbox)
    assert not taller.bbox(m0).fits_within(bbox)


def test_within_tall_box_relaxes_vertically(synth_pdk):
    m0 = synth_pdk.layer('m0')
    ct = synth_pdk.get_contact_within('v0', m0, Rect(0, 0, 100, 200))
    assert (ct.rows, ct.cols) == (5, 3)
    assert ct.name.endswith('v')


@pytest.mark.parametrize('width, height', [(10, 100), (100, 10), (0, 0)])
def test_within_none(synth_pdk, width, height):
    m0 = synth_pdk.layer('m0')
    assert synth_pdk.get_contact_within('v0', m0, Rect(0, 0, width, height)) is None


def test_within_maximal_on_sky130(pdk):
    li = pdk.layer('li')
    bbox = Rect(0, 0, 1500, 900)
    ct = pdk.get_contact_within('viali', li, bbox)
    assert ct.bbox(li).fits_within(bbox)
    for rows, cols in ((ct.rows + 1, ct.cols), (ct.rows, ct.cols + 1)):
        bigger = pdk.get_contact(ContactParams('viali', rows=rows, cols=cols, dir=Dir.HORIZ))
        assert not bigger.bbox(li).fits_within(bbox)
