"""Technology descriptions: rule loading plus one subpackage per process."""

from cellgen.tech.config import LayerConfig, Stack, TechConfig

__all__ = ['LayerConfig', 'Stack', 'TechConfig']
