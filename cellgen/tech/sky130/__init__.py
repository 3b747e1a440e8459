"""
SKY130 technology.

The design rules ship with the package as drc_config.yaml.

Environment variables:
    CELLGEN_SKY130_CONFIG: Path to a replacement rule file

Usage:
    from cellgen.tech import sky130

    pdk = sky130.pdk()
    lib = pdk.create_pdk_lib('my_cells')
"""

import os
from pathlib import Path

from cellgen.pdk import Pdk
from cellgen.tech.config import TechConfig

CONFIG_PATH = Path(__file__).parent / 'drc_config.yaml'


def config_path() -> Path:
    return Path(os.environ.get('CELLGEN_SKY130_CONFIG', CONFIG_PATH))


def tech_config(path=None) -> TechConfig:
    """Load the SKY130 rules from *path*, or the configured default."""
    return TechConfig.from_file(path or config_path())


def pdk(path=None) -> Pdk:
    """A fresh SKY130 Pdk with its own contact cache."""
    return Pdk('sky130', tech_config(path))


def pdk_lib(name: str, path=None):
    return pdk(path).create_pdk_lib(name)


__all__ = ['CONFIG_PATH', 'config_path', 'tech_config', 'pdk', 'pdk_lib']
