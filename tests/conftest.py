from pathlib import Path

import pytest

from cellgen import Pdk
from cellgen.tech import TechConfig, sky130

# Small rule set with awkward numbers, grid 1:
#   v0 cut 17/19, m0 enclosure 3 (8 one-sided), m1 enclosure 5 (10 one-sided)
#   v1 cut 20/20 with no enclosure, so m1's min width decides
#   wide: one 100 cut enclosed by 10 on w0, i.e. 120 across
SYNTH_YAML = """
tech: synth
units: nm
grid: 1

layers:
  m0: {gds: [1, 0], width: 20, space: 20}
  ct:
    gds: [2, 0]
    width: 17
    space: 19
    enclosure: {m0: 3, m1: 5}
    one_side_enclosure: {m0: 8, m1: 10}
  m1: {gds: [3, 0], width: 30, space: 24}
  ct2:
    gds: [4, 0]
    width: 20
    space: 20
  m2: {gds: [5, 0], width: 40, space: 40}
  w0: {gds: [6, 0], width: 50, space: 50}
  wct:
    gds: [7, 0]
    width: 100
    space: 100
    enclosure: {w0: 10, m1: 10}

stacks:
  v0: [m0, ct, m1]
  v1: [m1, ct2, m2]
  wide: [w0, wct, m1]

spaces:
  - [m0, w0, 30]

routing:
  metals: [m0, m1, m2]
  stacks: [v0, v1]
"""


@pytest.fixture
def pdk() -> Pdk:
    return sky130.pdk()


@pytest.fixture
def synth_config() -> TechConfig:
    return TechConfig.from_yaml(SYNTH_YAML)


@pytest.fixture
def synth_pdk(synth_config: TechConfig) -> Pdk:
    return Pdk('synth', synth_config)


@pytest.fixture
def synth_config_file(tmp_path: Path) -> Path:
    path = tmp_path / 'synth.yaml'
    path.write_text(SYNTH_YAML)
    return path
