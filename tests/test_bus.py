import pytest

from cellgen.bus import ContactPolicy, ContactPosition
from cellgen.errors import InvalidSpecError

ADJ = ContactPosition.CENTERED_ADJACENT
NON_ADJ = ContactPosition.CENTERED_NON_ADJACENT


def test_no_contacts_is_layer_space(synth_pdk):
    assert synth_pdk.bus_min_spacing(1, 20, ContactPolicy()) == 24


def test_contacts_from_above(synth_pdk):
    # v1 on m1 is 30 wide; 10 wider than the track
    assert synth_pdk.bus_min_spacing(1, 20, ContactPolicy(above=ADJ)) == 34
    assert synth_pdk.bus_min_spacing(1, 20, ContactPolicy(above=NON_ADJ)) == 29
    # Contacts no wider than the track need nothing extra
    assert synth_pdk.bus_min_spacing(1, 30, ContactPolicy(above=ADJ)) == 24


def test_contacts_from_below(synth_pdk):
    # v0 on m1 is 31 x 37; the narrow side counts
    assert synth_pdk.bus_min_spacing(1, 20, ContactPolicy(below=ADJ)) == 35
    assert synth_pdk.bus_min_spacing(1, 20, ContactPolicy(below=NON_ADJ)) == 30


def test_both_sides_take_the_max(synth_pdk):
    policy = ContactPolicy(above=ADJ, below=ADJ)
    assert synth_pdk.bus_min_spacing(1, 20, policy) == 35


def test_policy_from_strings():
    policy = ContactPolicy(above='adjacent', below='nonadjacent')
    assert policy.above is ADJ
    assert policy.below is NON_ADJ


def test_below_lowest_metal(synth_pdk, pdk):
    with pytest.raises(InvalidSpecError):
        synth_pdk.bus_min_spacing(0, 20, ContactPolicy(below=ADJ))
    with pytest.raises(InvalidSpecError):
        pdk.bus_min_spacing(0, 170, ContactPolicy(below=NON_ADJ))


def test_above_top_metal(synth_pdk):
    with pytest.raises(InvalidSpecError):
        synth_pdk.bus_min_spacing(2, 40, ContactPolicy(above=ADJ))
    # Without contacts the top metal is fine
    assert synth_pdk.bus_min_spacing(2, 40, ContactPolicy()) == 40


def test_unknown_metal(pdk):
    with pytest.raises(InvalidSpecError):
        pdk.bus_min_spacing(6, 1600, ContactPolicy())


@pytest.mark.parametrize('metal', [1, 2, 3])
@pytest.mark.parametrize('position', [ADJ, NON_ADJ])
def test_spacing_shrinks_with_width(pdk, metal, position):
    policy = ContactPolicy(above=position, below=position)
    space = pdk.config.layer(pdk.metal_name(metal)).space
    widths = [pdk.config.layer(pdk.metal_name(metal)).width + 10 * i for i in range(40)]
    spacings = [pdk.bus_min_spacing(metal, w, policy) for w in widths]
    assert all(s >= space for s in spacings)
    assert all(a >= b for a, b in zip(spacings, spacings[1:]))


@pytest.mark.parametrize('width', [140, 170, 200, 260, 400])
def test_non_adjacent_never_worse(pdk, width):
    for above, below in ((ADJ, None), (None, ADJ), (ADJ, ADJ)):
        adjacent = ContactPolicy(above=above, below=below)
        staggered = ContactPolicy(above=above and NON_ADJ, below=below and NON_ADJ)
        assert pdk.bus_min_spacing(1, width, staggered) <= pdk.bus_min_spacing(1, width, adjacent)


def test_sky130_m1(pdk):
    # via1 on m1: 150 + 2 * 55 = 260
    assert pdk.bus_min_spacing(1, 140, ContactPolicy(above=ADJ)) == 260
    assert pdk.bus_min_spacing(1, 140, ContactPolicy(above=NON_ADJ)) == 200
    # viali on m1: 170 + 2 * 30 = 230
    assert pdk.bus_min_spacing(1, 140, ContactPolicy(below=ADJ)) == 230
    assert pdk.bus_min_spacing(1, 140, ContactPolicy(below=NON_ADJ)) == 185


def test_routing_names(pdk):
    assert pdk.metal_name(0) == 'li'
    assert pdk.metal(1) == pdk.layer('m1')
    assert pdk.stack_name(0) == 'viali'
    assert pdk.via_name(0) == 'mcon'
    assert pdk.via(1) == pdk.layer('via')
    with pytest.raises(InvalidSpecError):
        pdk.stack_name(5)
