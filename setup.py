#!/usr/bin/env python3
"""
resp-kv Setup Script
====================
Allows installation of the resp-kv package.

Usage:
    pip install -e .           # Development install
    pip install -e .[test]     # Development install with test tools
    pip install .              # Regular install
"""

from setuptools import setup, find_packages

setup(
    name="resp-kv",
    version="1.0.0",
    packages=find_packages(include=["respkv", "respkv.*"]),
    python_requires=">=3.10",
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "respkv=respkv.server:main",
        ],
    },
)
