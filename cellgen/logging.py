"""
cellgen logging.

Records emitted by the package:
    DEBUG    every contact drawn on a cache miss, and every sized or
             within search result (including failures)
    INFO     a transistor group drawn into a library, a GDS file written
    WARNING  a sized search that stopped at MAX_UNITS cuts

The default level is INFO. The command line starts at WARNING, see
``cellgen --log-level``.

Usage:
    from cellgen.logging import logger
    logger.debug(f"Drawing contact {params}")

To see every contact build:
    import cellgen
    cellgen.set_log_level('DEBUG')

To disable all logging:
    cellgen.set_log_level('SILENT')
"""

import logging

logger = logging.getLogger('cellgen')
logger.setLevel(logging.INFO)

# One handler, even if this module is reloaded
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG)
    formatter = logging.Formatter('[%(levelname)s] %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def set_log_level(level: str | int) -> None:
    """
    Set the cellgen logger level.

    *level* is a level name (case-insensitive), a numeric logging level, or
    'SILENT' to drop every record.
    """
    if isinstance(level, str):
        level = level.upper()
        if level == 'SILENT':
            logger.setLevel(logging.CRITICAL + 1)
        else:
            value = getattr(logging, level, None)
            if not isinstance(value, int):
                raise ValueError(f"Unknown log level '{level}'")
            logger.setLevel(value)
    else:
        logger.setLevel(level)
