"""Doctrine lookup keyed by :class:`DoctrineMode`.

Each concrete doctrine binds itself to one mode with
:func:`register_doctrine`; the trial orchestrator then asks for the
doctrine of its configuration and never branches on the mode itself.

Typical usage::

    @register_doctrine(DoctrineMode.BARRAGE)
    class BarrageDoctrine(EngagementDoctrine): ...

    doctrine = create_doctrine(config)   # resolves config.doctrine_mode
"""

from __future__ import annotations

from typing import Callable, TypeVar

from loguru import logger

from shield.core.config import DoctrineMode, SimulationConfig
from shield.engine.doctrine.base import EngagementDoctrine

T = TypeVar("T", bound=type[EngagementDoctrine])

# Filled at import time of the concrete doctrine modules.
_DOCTRINES: dict[DoctrineMode, type[EngagementDoctrine]] = {}


def register_doctrine(mode: DoctrineMode) -> Callable[[T], T]:
    """Class decorator binding a doctrine class to *mode*.

    Stamps ``mode.value`` onto the class as ``cls.name``.

    Raises:
        TypeError: If the decorated object is not an EngagementDoctrine
            subclass.
        ValueError: If *mode* already has a doctrine.
    """
    mode = DoctrineMode(mode)

    def decorator(cls: T) -> T:
        if not (isinstance(cls, type) and issubclass(cls, EngagementDoctrine)):
            raise TypeError(f"Expected an EngagementDoctrine subclass, got {cls!r}")
        if mode in _DOCTRINES:
            raise ValueError(
                f"Doctrine mode '{mode.value}' is already bound to "
                f"{_DOCTRINES[mode].__name__}"
            )
        cls.name = mode.value
        _DOCTRINES[mode] = cls
        logger.info("Doctrine '{}' bound to {}", mode.value, cls.__name__)
        return cls

    return decorator


def doctrine_class(mode: DoctrineMode) -> type[EngagementDoctrine]:
    """Return the class bound to *mode*.

    Raises:
        KeyError: If no doctrine is bound to *mode*.
    """
    try:
        return _DOCTRINES[mode]
    except KeyError:
        bound = ", ".join(m.value for m in registered_modes()) or "(none)"
        raise KeyError(
            f"No doctrine bound to mode '{mode.value}'. Bound modes: {bound}"
        ) from None


def create_doctrine(config: SimulationConfig) -> EngagementDoctrine:
    """Instantiate the doctrine selected by ``config.doctrine_mode``."""
    return doctrine_class(config.doctrine_mode)(config)


def registered_modes() -> list[DoctrineMode]:
    """Modes that currently have a doctrine, in declaration order."""
    return [mode for mode in DoctrineMode if mode in _DOCTRINES]
