"""Text artifacts consumed by HYSPLIT: CONTROL and EMITIMES."""

from hyjob.io.control import ControlFileComposer, ControlFile, read_control
from hyjob.io.emitimes import EmitimesComposer

__all__ = ["ControlFileComposer", "ControlFile", "read_control", "EmitimesComposer"]
