"""Request controllers for the site accounts panel."""

from . import assembly, panel
