"""TechConfig - Design rules for one technology, loaded from YAML.

Example:
    tc = TechConfig.from_file('drc_config.yaml')
    tc.layer('m1').space             # 140
    tc.layer('licon').enclosure('li')
    tc.stack('viali').layers         # ('li', 'mcon', 'm1')
    tc.space('gate', 'licon')        # 55
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

from cellgen import Q_
from cellgen.errors import ConfigError
from cellgen.layout.shape import LayerMap


@dataclass(frozen=True)
class LayerConfig:
    """
    Rules attached to one layer.

    Pairwise rules are keyed by the other layer's name and read as the
    distance *other* must keep relative to this layer: ``enclosure('li')``
    on the licon layer is how far li must extend beyond a licon cut.
    Missing pairs read as 0.

    Attributes:
        name: Layer name
        width: Minimum width
        space: Minimum spacing
        gds: (layer, datatype) used on export
    """
    name: str
    width: int = 0
    space: int = 0
    gds: Tuple[int, int] = (0, 0)
    connectivity: bool = False
    enclosures: Dict[str, int] = field(default_factory=dict)
    one_side_enclosures: Dict[str, int] = field(default_factory=dict)
    extensions: Dict[str, int] = field(default_factory=dict)

    def enclosure(self, other: str) -> int:
        return self.enclosures.get(other, 0)

    def one_side_enclosure(self, other: str) -> int:
        return self.one_side_enclosures.get(other, 0)

    def extension(self, other: str) -> int:
        return self.extensions.get(other, 0)


@dataclass(frozen=True)
class Stack:
    """Ordered [bottom, cut, top] layer names of a contact stack."""
    name: str
    layers: Tuple[str, ...]

    @property
    def bottom(self) -> str:
        return self.layers[0]

    @property
    def cut(self) -> str:
        return self.layers[1]

    @property
    def top(self) -> str:
        return self.layers[2]


class TechConfig:
    """Design rules for a technology. Immutable once loaded."""

    def __init__(self, tech: str, units: str, grid: int,
                 layers: Dict[str, LayerConfig],
                 stacks: Dict[str, Stack],
                 spaces: Dict[frozenset, int],
                 metals: List[str],
                 metal_stacks: List[str]):
        self.tech = tech
        self.units = units
        self.grid = grid
        self._layers = layers
        self._stacks = stacks
        self._spaces = spaces
        self.metals = list(metals)
        self.metal_stacks = list(metal_stacks)

    def __repr__(self):
        return f"TechConfig({self.tech}, layers={len(self._layers)}, stacks={len(self._stacks)})"

    # ------------------------------------------------------------------
    # Rule lookup
    # ------------------------------------------------------------------

    def layer(self, name: str) -> LayerConfig:
        try:
            return self._layers[name]
        except KeyError:
            raise ConfigError(f"{self.tech}: unknown layer '{name}'") from None

    def stack(self, name: str) -> Stack:
        try:
            return self._stacks[name]
        except KeyError:
            raise ConfigError(f"{self.tech}: unknown stack '{name}'") from None

    def space(self, layer_a: str, layer_b: str) -> int:
        """Minimum spacing between shapes on two different layers."""
        try:
            return self._spaces[frozenset((layer_a, layer_b))]
        except KeyError:
            raise ConfigError(
                f"{self.tech}: no spacing rule between '{layer_a}' and '{layer_b}'") from None

    @property
    def database_unit(self) -> float:
        """Database unit in meters."""
        return Q_(1, self.units).to('m').magnitude

    def get_layers(self) -> LayerMap:
        """LayerMap with a Layer and GDS numbers for every layer."""
        mapping = {
            name: {'gds': lc.gds, 'connectivity': lc.connectivity}
            for name, lc in self._layers.items()
        }
        return LayerMap(self.tech, mapping)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict) -> 'TechConfig':
        """Build from the parsed YAML structure, validating as we go."""
        if not isinstance(data, dict):
            raise ConfigError("Tech config must be a mapping")
        for key in ('tech', 'grid', 'layers', 'stacks'):
            if key not in data:
                raise ConfigError(f"Tech config is missing '{key}'")

        tech = str(data['tech'])
        grid = _distance(data['grid'], 'grid')
        if grid <= 0:
            raise ConfigError(f"{tech}: grid must be positive, got {grid}")
        units = str(data.get('units', 'nm'))
        try:
            Q_(1, units).to('m')
        except Exception as err:
            raise ConfigError(f"{tech}: invalid units '{units}': {err}") from err

        layers = {name: _layer_config(name, spec or {})
                  for name, spec in _mapping(data['layers'], f'{tech}: layers').items()}

        stacks = {}
        for name, names in _mapping(data['stacks'], f'{tech}: stacks').items():
            if not isinstance(names, (list, tuple)):
                raise ConfigError(f"{tech}: stack '{name}' must be a list of layers, got {names!r}")
            names = tuple(names)
            if len(names) != 3:
                raise ConfigError(
                    f"{tech}: stack '{name}' must have exactly 3 layers, got {len(names)}")
            for lay in names:
                if lay not in layers:
                    raise ConfigError(f"{tech}: stack '{name}' uses unknown layer '{lay}'")
            stacks[name] = Stack(name, names)

        spaces = {}
        space_rules = data.get('spaces') or []
        if not isinstance(space_rules, (list, tuple)):
            raise ConfigError(f"{tech}: spaces must be a list, got {space_rules!r}")
        for entry in space_rules:
            if not isinstance(entry, (list, tuple)) or len(entry) != 3:
                raise ConfigError(f"{tech}: space rule must be [layer_a, layer_b, distance]: {entry}")
            a, b, dist = entry
            spaces[frozenset((a, b))] = _distance(dist, f'space {a}/{b}')

        routing = _mapping(data.get('routing') or {}, f'{tech}: routing')
        metals = _list(routing.get('metals') or [], f'{tech}: routing metals')
        metal_stacks = _list(routing.get('stacks') or [], f'{tech}: routing stacks')
        if metals and len(metal_stacks) != len(metals) - 1:
            raise ConfigError(
                f"{tech}: {len(metals)} routing metals need {len(metals) - 1} stacks, "
                f"got {len(metal_stacks)}")
        for lay in metals:
            if lay not in layers:
                raise ConfigError(f"{tech}: routing metal '{lay}' is not a layer")
        for i, st in enumerate(metal_stacks):
            if st not in stacks:
                raise ConfigError(f"{tech}: routing stack '{st}' is not defined")
            if stacks[st].bottom != metals[i] or stacks[st].top != metals[i + 1]:
                raise ConfigError(
                    f"{tech}: routing stack '{st}' does not connect "
                    f"'{metals[i]}' to '{metals[i + 1]}'")

        return cls(tech, units, grid, layers, stacks, spaces, metals, metal_stacks)

    @classmethod
    def from_yaml(cls, text: str) -> 'TechConfig':
        """Load from a YAML string."""
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as err:
            raise ConfigError(f"Invalid tech config YAML: {err}") from err
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path) -> 'TechConfig':
        """Load from a YAML file."""
        with open(Path(path)) as f:
            return cls.from_yaml(f.read())


def _distance(value, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{what}: expected an integer distance, got {value!r}")
    if value < 0:
        raise ConfigError(f"{what}: distance must be non-negative, got {value}")
    return value


def _mapping(value, what: str) -> dict:
    if not isinstance(value, dict):
        raise ConfigError(f"{what}: expected a mapping, got {value!r}")
    return value


def _list(value, what: str) -> list:
    if not isinstance(value, (list, tuple)):
        raise ConfigError(f"{what}: expected a list, got {value!r}")
    return list(value)


def _rule_table(name: str, kind: str, table: Optional[dict]) -> Dict[str, int]:
    return {other: _distance(dist, f'{name}.{kind}.{other}')
            for other, dist in _mapping(table or {}, f'{name}.{kind}').items()}


def _layer_config(name: str, spec: dict) -> LayerConfig:
    spec = _mapping(spec, f'layer {name}')
    gds = spec.get('gds', [0, 0])
    if not isinstance(gds, (list, tuple)) or len(gds) != 2:
        raise ConfigError(f"{name}: gds must be [layer, datatype], got {gds!r}")
    return LayerConfig(
        name=name,
        width=_distance(spec.get('width', 0), f'{name}.width'),
        space=_distance(spec.get('space', 0), f'{name}.space'),
        gds=(_distance(gds[0], f'{name}.gds'), _distance(gds[1], f'{name}.gds')),
        connectivity=bool(spec.get('connectivity', False)),
        enclosures=_rule_table(name, 'enclosure', spec.get('enclosure')),
        one_side_enclosures=_rule_table(name, 'one_side_enclosure',
                                        spec.get('one_side_enclosure')),
        extensions=_rule_table(name, 'extension', spec.get('extension')),
    )
