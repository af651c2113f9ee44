#!/usr/bin/env python
"""Azure CLI wizard engine — multi-step prompt/execute wizards for extensions."""

from setuptools import find_packages, setup

VERSION = "0.1.0b1"
CLASSIFIERS = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3.9",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "License :: OSI Approved :: MIT License",
]

DEPENDENCIES = [
    # CLIError base for wizard errors
    "knack>=0.11.0",
    "pyyaml>=6.0",
    "rich>=13.0.0",
    "prompt_toolkit>=3.0.0",
]

setup(
    name="az-wizard",
    version=VERSION,
    description="Multi-step prompt/execute wizard engine for Azure CLI extensions",
    long_description="Sequences user prompts and side-effecting steps with sub-wizards, back-navigation, and cancellation.",
    license="MIT",
    author="Microsoft Innovation Factory",
    author_email="",
    classifiers=CLASSIFIERS,
    python_requires=">=3.9",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=DEPENDENCIES,
    extras_require={
        "test": ["pytest>=7.0"],
    },
)
