"""Build procedure: declarative recipe (recipe), environment contract (bindings), interpreter (execute)."""

from .bindings import REQUIRED_VARS, BuildBindings
from .execute import StepExecutor, execute, license_files, license_name
from .recipe import BuildVariant, Probe, Step, configure_args, plan_build

__all__ = [
    "REQUIRED_VARS",
    "BuildBindings",
    "BuildVariant",
    "Probe",
    "Step",
    "StepExecutor",
    "configure_args",
    "execute",
    "license_files",
    "license_name",
    "plan_build",
]
