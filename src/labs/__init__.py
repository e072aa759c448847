"""Lab catalog: every step of the course labs, registered in order.

Importing this package registers Day 1 (Labs 1-5), Day 2 (Labs 6-9) and
Day 3 (Labs 10-13) steps on ``registry``.
"""

from . import day1, day2, day3  # noqa: F401 - registers steps
from .context import PREREQUISITES, LabContext, check_prerequisites, registry

__all__ = [
    "PREREQUISITES",
    "LabContext",
    "check_prerequisites",
    "registry",
]
