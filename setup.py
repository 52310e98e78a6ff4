#!/usr/bin/env python3
"""
Shard-Ring Setup Script
=======================
Allows installation of the shard-ring package.

Usage:
    pip install -e .           # Development install
    pip install -e ".[test]"   # Development install with test tools
    pip install .              # Regular install
"""

from setuptools import setup, find_packages

setup(
    name="shard-ring",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*", "scripts"]),
    python_requires=">=3.10",
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "shard-ring=shard_ring.main:main",
        ],
    },
)
