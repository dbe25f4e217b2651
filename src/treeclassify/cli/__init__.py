"""CLI package.

The ``cli`` sub-package contains the Click application and all
command implementations. It works on stored trees only and never needs
the classes the trees were produced from.
"""
from __future__ import annotations
