#!/usr/bin/env python3
"""Setup script for media rename tool."""

from setuptools import setup, find_packages
from pathlib import Path

# Read requirements
requirements_path = Path(__file__).parent / "requirements.txt"
with open(requirements_path) as f:
    requirements = [line.strip() for line in f if line.strip() and not line.startswith('#')]

# Use a static version to avoid import issues during build
__version__ = "0.2.0"

setup(
    name="media-renamer",
    version=__version__,
    description="Rename photos and videos by capture time, refusing to run on duplicates",
    author="Homelab Team",
    packages=find_packages(exclude=['tests', 'tests.*']),
    py_modules=['rename_media'],
    install_requires=requirements,
    extras_require={
        'test': ['pytest'],
    },
    python_requires=">=3.8",
    entry_points={
        'console_scripts': [
            'rename-media=rename_media:cli',
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
)
