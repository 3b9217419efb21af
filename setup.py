#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Setup script for PlanShift

This file is kept for legacy compatibility and pip editable installs.
The main package configuration is in pyproject.toml.
"""

from setuptools import setup

# Version is also exposed as planshift.__version__
VERSION = "0.3.0"

# All other configuration comes from pyproject.toml
setup(
    version=VERSION,
)
