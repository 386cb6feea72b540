"""Physics defaults and SETUP.CFG namelist composition."""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Dict, List, Optional

from hyjob.core.modes import Mode

# configMode -> INITD code (0 = 3D particle, 1 = Gaussian-horizontal top-hat-vertical puff)
CONFIG_MODE_CODES: Dict[str, int] = {
    "Particle": 0,
    "Puff": 1,
}

VERTICAL_MOTION_CODES = range(0, 9)


@dataclass(frozen=True)
class PhysicsDefaults:
    """Model defaults applied when physicsConfig omits an optional key.

    Values follow the HYSPLIT documentation for SETUP.CFG and CONTROL.
    """
    config_mode: str = "Particle"       # INITD 0
    max_particles: int = 10000          # Maximum particles in simulation
    vertical_motion_code: int = 0       # 0 = use meteorological model data
    top_of_model_m_agl: float = 10000.0 # Top of model domain (m AGL)


def set_defaults(**kwargs) -> PhysicsDefaults:
    """Create physics defaults with custom overrides.

    Example:
        defaults = set_defaults(max_particles=50000)
    """
    return PhysicsDefaults(**kwargs)


DEFAULTS = PhysicsDefaults()


@dataclass(frozen=True)
class SetupConfig:
    """Resolved SETUP.CFG keys for one job. None values are not written."""
    initd: int
    maxpar: int
    vmotion: int
    efile: Optional[str]
    ztop: float

    def to_lines(self) -> List[str]:
        lines = ["&SETUP"]
        for key, value in asdict(self).items():
            if value is None:
                continue
            if isinstance(value, str):
                formatted_value = f"'{value}'"
            else:
                formatted_value = str(value)
            lines.append(f"{key} = {formatted_value},")
        lines.append("/")
        return lines

    def to_text(self) -> str:
        return "\n".join(self.to_lines()) + "\n"


class SetupConfigComposer:
    """Serialize a validated job's physicsConfig into a SETUP.CFG namelist.

    Args:
        defaults: Values used for absent optional keys
    """

    def __init__(self, defaults: PhysicsDefaults = DEFAULTS):
        self.defaults = defaults

    def resolve(self, job) -> SetupConfig:
        phys = job.physics_config
        d = self.defaults

        config_mode = phys.config_mode if phys.config_mode is not None else d.config_mode

        # EFILE only exists for forward concentration runs
        efile = phys.emitimes_file_path if job.mode is Mode.CONC_FWD else None

        return SetupConfig(
            initd=CONFIG_MODE_CODES[config_mode],
            maxpar=phys.max_particles if phys.max_particles is not None else d.max_particles,
            vmotion=(phys.vertical_motion_code if phys.vertical_motion_code is not None
                     else d.vertical_motion_code),
            efile=efile,
            ztop=(phys.top_of_model_m_agl if phys.top_of_model_m_agl is not None
                  else d.top_of_model_m_agl),
        )

    def compose(self, job) -> str:
        """Return the SETUP.CFG text for a validated job."""
        return self.resolve(job).to_text()
